"""Oracle manifest definition for the plugin system."""

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel

from suite_runner.oracles.base import ExecutionOracle

ConfigT = TypeVar("ConfigT", bound=BaseModel)


@dataclass(frozen=True, kw_only=True)
class OracleManifest(Generic[ConfigT]):
    """Manifest describing an oracle plugin.

    The manifest references the configuration class and the oracle factory
    so that oracles are only constructed once selected by key.
    """

    config_cls: type[ConfigT]
    oracle_factory: Callable[[ConfigT], AbstractAsyncContextManager[ExecutionOracle]]
