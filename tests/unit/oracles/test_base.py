"""Tests for ExecutionOracle base class."""

import asyncio
from dataclasses import dataclass

import pytest

from suite_runner.models.suite import RunEnvironmentContext, TestCase
from suite_runner.oracles.base import ExecutionOracle, OracleVerdict
from suite_runner.testing.factories import (
    RunEnvironmentContextFactory,
    TestCaseFactory,
)


@dataclass(frozen=True, kw_only=True)
class SleepyOracle(ExecutionOracle):
    """Oracle answering after a delay."""

    delay: float

    async def simulate(
        self, case: TestCase, context: RunEnvironmentContext
    ) -> OracleVerdict:
        """Sleep, then pass."""
        await asyncio.sleep(self.delay)
        return OracleVerdict(status="PASSED", log=case.title)


class TestSimulateWithTimeout:
    """Tests for simulate_with_timeout method."""

    async def test_returns_verdict_within_timeout(self) -> None:
        """Returns the oracle verdict when it answers in time."""
        oracle = SleepyOracle(delay=0)
        case = TestCaseFactory.build(title="Checkout")

        verdict = await oracle.simulate_with_timeout(
            case, RunEnvironmentContextFactory.build(), timeout=1
        )

        assert verdict == OracleVerdict(status="PASSED", log="Checkout")

    async def test_raises_timeout_error(self) -> None:
        """Raises TimeoutError when the oracle is too slow."""
        oracle = SleepyOracle(delay=1)

        with pytest.raises(TimeoutError, match="did not answer within"):
            await oracle.simulate_with_timeout(
                TestCaseFactory.build(),
                RunEnvironmentContextFactory.build(),
                timeout=0.01,
            )
