"""Scripted oracle module."""

from suite_runner.oracles.scripted.config import ScriptedConfig
from suite_runner.oracles.scripted.manifest import scripted_manifest
from suite_runner.oracles.scripted.oracle import ScriptedOracle

__all__ = ["ScriptedConfig", "ScriptedOracle", "scripted_manifest"]
