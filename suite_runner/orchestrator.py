"""Run orchestrator wiring controllers, summaries and notification fan-out."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from suite_runner.controller import RunController
from suite_runner.models.config import EngineConfig, SessionContext
from suite_runner.models.notification import Notification
from suite_runner.models.result import TestRun
from suite_runner.models.suite import TestSuite
from suite_runner.notifications import Membership, NotificationFanOut
from suite_runner.oracles.base import ExecutionOracle
from suite_runner.summary import RunSummary, summarize

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class RunOutcome:
    """Completed run together with its summary and notifications."""

    run: TestRun
    summary: RunSummary
    notifications: Sequence[Notification]


@dataclass(frozen=True, kw_only=True)
class RunOrchestrator:
    """Creates run controllers and fans completed runs out to recipients."""

    session: SessionContext
    membership: Membership
    fan_out: NotificationFanOut
    oracle: ExecutionOracle | None = None
    config: EngineConfig = field(default_factory=EngineConfig)

    def controller_for(self, suite: TestSuite) -> RunController:
        """Create a controller for a new run of the suite."""
        log.info(
            "Run of suite %s requested by %s", suite.id, self.session.acting_user_id
        )
        return RunController(
            suite, oracle=self.oracle, oracle_timeout=self.config.oracle_timeout
        )

    def complete(self, run: TestRun) -> RunOutcome:
        """Summarize a completed run and notify the interested parties."""
        summary = summarize(run, self.config.fan_out.success_threshold)
        log.info(
            "Run %s summary: total=%d passed=%d failed=%d skipped=%d pass_rate=%.1f",
            run.id,
            summary.total,
            summary.passed,
            summary.failed,
            summary.skipped,
            summary.pass_rate,
        )
        notifications = self.fan_out.fan_out(
            run, self.membership, self.session, summary=summary
        )
        return RunOutcome(run=run, summary=summary, notifications=notifications)

    async def run_automated(self, suite: TestSuite) -> RunOutcome | None:
        """Run an automated suite end to end.

        Returns:
            The outcome, or None when the run was cancelled

        """
        run = await self.controller_for(suite).run_automated()
        if run is None:
            log.info("Run of suite %s was cancelled, nothing to notify", suite.id)
            return None
        return self.complete(run)

    async def run_many(
        self, suites: Sequence[TestSuite]
    ) -> Sequence[RunOutcome | None]:
        """Run several automated suites concurrently.

        A suite whose run raises yields None in its position; the other
        runs are unaffected.
        """
        if not suites:
            log.info("No suites provided")
            return []

        log.info("Running %d suite(s)...", len(suites))
        results = await asyncio.gather(
            *(self.run_automated(suite) for suite in suites), return_exceptions=True
        )
        log.info("Suite execution completed")

        return self._process_results(suites, results)

    def _process_results(
        self,
        suites: Sequence[TestSuite],
        results: Sequence[RunOutcome | None | BaseException],
    ) -> Sequence[RunOutcome | None]:
        """Process results from concurrent runs, logging failed ones."""
        final_results: list[RunOutcome | None] = []

        for suite, result in zip(suites, results, strict=True):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                log.error("Run of suite %s failed: %s", suite.id, result, exc_info=result)
                final_results.append(None)
            else:
                final_results.append(result)

        return final_results
