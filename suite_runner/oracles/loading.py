"""Discovery of oracle plugins registered as entry points."""

from importlib.metadata import EntryPoint, entry_points
from typing import Any

from suite_runner.oracles.manifest import OracleManifest

ENTRY_POINT_GROUP = "suite_runner.oracles"


class OracleNotFoundError(Exception):
    """Raised when no oracle is registered under the requested key."""


class InvalidOracleError(Exception):
    """Raised when an oracle entry point does not provide an OracleManifest."""


def _registered() -> dict[str, EntryPoint]:
    return {entry.name: entry for entry in entry_points(group=ENTRY_POINT_GROUP)}


def available_oracles() -> list[str]:
    """Keys of all registered oracles, sorted."""
    return sorted(_registered())


def load_oracle_manifest(key: str) -> OracleManifest[Any]:
    """Load an oracle manifest by key.

    Args:
        key: The oracle key as registered in pyproject.toml
             (e.g., "gemini", "scripted")

    Returns:
        The oracle manifest instance

    Raises:
        OracleNotFoundError: If no oracle with the given key is found
        InvalidOracleError: If the entry point loads something other than
            an OracleManifest

    """
    registered = _registered()
    if key not in registered:
        raise OracleNotFoundError(
            f"Oracle '{key}' not found. Available oracles: {sorted(registered)}"
        )

    manifest = registered[key].load()
    if not isinstance(manifest, OracleManifest):
        raise InvalidOracleError(
            f"Oracle '{key}' does not provide an OracleManifest "
            f"(got {type(manifest).__name__})"
        )
    return manifest
