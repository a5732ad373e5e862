"""Scripted oracle manifest."""

from suite_runner.oracles.manifest import OracleManifest
from suite_runner.oracles.scripted.config import ScriptedConfig
from suite_runner.oracles.scripted.oracle import ScriptedOracle

scripted_manifest = OracleManifest(
    config_cls=ScriptedConfig,
    oracle_factory=ScriptedOracle.from_config,
)
