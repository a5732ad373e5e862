"""Gemini oracle module."""

from suite_runner.oracles.gemini.config import GeminiConfig
from suite_runner.oracles.gemini.manifest import gemini_manifest
from suite_runner.oracles.gemini.oracle import GeminiOracle

__all__ = ["GeminiConfig", "GeminiOracle", "gemini_manifest"]
