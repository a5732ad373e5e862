"""Gemini oracle manifest."""

from suite_runner.oracles.gemini.config import GeminiConfig
from suite_runner.oracles.gemini.oracle import GeminiOracle
from suite_runner.oracles.manifest import OracleManifest

gemini_manifest = OracleManifest(
    config_cls=GeminiConfig,
    oracle_factory=GeminiOracle.from_config,
)
