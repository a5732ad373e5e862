"""Abstract base class for execution oracles."""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal

from suite_runner.models.suite import RunEnvironmentContext, TestCase


class OracleResponseError(Exception):
    """Raised when an oracle answers with something that is not a verdict."""


@dataclass(frozen=True, kw_only=True)
class OracleVerdict:
    """Verdict produced by an oracle for one case."""

    status: Literal["PASSED", "FAILED"]
    log: str


@dataclass(frozen=True, kw_only=True)
class ExecutionOracle(ABC):
    """Abstract base for external sources of automated verdicts.

    An oracle simulates the execution of a test case against the target
    environment and reports whether it passed. Oracles are unreliable by
    nature: any exception raised from ``simulate`` is treated by the run
    controller as the oracle being unavailable for that case.
    """

    @abstractmethod
    async def simulate(
        self,
        case: TestCase,
        context: RunEnvironmentContext,
    ) -> OracleVerdict:
        """Simulate a single test case.

        Args:
            case: Test case to execute
            context: Environment the case runs against

        Returns:
            Verdict with the execution log

        Raises:
            OracleResponseError: If the oracle response cannot be interpreted

        """

    async def simulate_with_timeout(
        self,
        case: TestCase,
        context: RunEnvironmentContext,
        timeout: float = 120,
    ) -> OracleVerdict:
        """Simulate a case, giving up after ``timeout`` seconds.

        Raises:
            TimeoutError: If the oracle does not answer within timeout

        """
        try:
            async with asyncio.timeout(timeout):
                return await self.simulate(case, context)
        except TimeoutError:
            raise TimeoutError(
                f"Oracle did not answer within {timeout} seconds"
            ) from None
