"""Scripted oracle returning configured verdicts without external calls."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from suite_runner.models.suite import RunEnvironmentContext, TestCase
from suite_runner.oracles.base import ExecutionOracle, OracleResponseError, OracleVerdict
from suite_runner.oracles.scripted.config import ScriptedConfig

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class ScriptedOracle(ExecutionOracle):
    """Deterministic oracle for dry runs."""

    config: ScriptedConfig

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: ScriptedConfig
    ) -> AsyncGenerator["ScriptedOracle", None]:
        """Create oracle; nothing to open or close."""
        yield cls(config=config)

    async def simulate(
        self, case: TestCase, context: RunEnvironmentContext
    ) -> OracleVerdict:
        """Return the scripted verdict for the case."""
        if self.config.delay:
            await asyncio.sleep(self.config.delay)

        if case.id in self.config.unavailable_cases:
            raise OracleResponseError(f"Scripted outage for case {case.id}")

        status = self.config.verdicts.get(case.id, self.config.default_status)
        log.debug("Scripted verdict for %s: %s", case.id, status)

        lines = [f"[INFO] Scripted run: {case.title}"]
        lines.append(f"[INFO] Target environment: {context.describe().splitlines()[0]}")
        lines.extend(
            f"Step {i}: {step.action} ... {status}"
            for i, step in enumerate(case.steps, start=1)
        )
        lines.append(f"[RESULT] {status}")
        return OracleVerdict(status=status, log="\n".join(lines))
