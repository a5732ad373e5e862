"""State machine driving a single run of a test suite."""

import asyncio
import logging
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from enum import StrEnum
from types import MappingProxyType

from suite_runner.cursor import CaseCursor
from suite_runner.errors import InvalidStateError, ModeViolationError
from suite_runner.ledger import ResultLedger
from suite_runner.models.config import DEFAULT_ORACLE_TIMEOUT
from suite_runner.models.result import ResultStatus, RunStatus, TestResult, TestRun
from suite_runner.models.suite import ExecutionMode, TestCase, TestSuite
from suite_runner.oracles.base import ExecutionOracle, OracleResponseError

log = logging.getLogger(__name__)

ORACLE_UNAVAILABLE_PREFIX = "[ORACLE UNAVAILABLE]"
UNRESOLVED_NOTE = "Not executed before the run was finished"


class RunState(StrEnum):
    """States of the run controller."""

    INITIALIZING = "INITIALIZING"
    AWAITING_INPUT = "AWAITING_INPUT"
    SIMULATING = "SIMULATING"
    ADVANCING = "ADVANCING"
    COMPLETE = "COMPLETE"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is possible."""
        return self in (RunState.COMPLETE, RunState.CANCELLED)


class RunController:
    """Walks a suite through per-case execution and produces one TestRun.

    Manual runs wait for ``submit_verdict`` on each case and only close on
    an explicit ``finish``. Automated runs are driven by ``run_automated``,
    which asks the oracle for every case in order and completes on its own
    after the last one. Each case receives at most one verdict per run.

    The controller owns its ledger and cursor. Once the run is complete
    the finalized TestRun is handed off and the ledger is released.
    """

    def __init__(
        self,
        suite: TestSuite,
        *,
        oracle: ExecutionOracle | None = None,
        oracle_timeout: float = DEFAULT_ORACLE_TIMEOUT,
    ) -> None:
        if suite.execution_mode is ExecutionMode.AUTOMATED and oracle is None:
            raise ValueError("Automated runs require an execution oracle")

        self._suite = suite
        self._oracle = oracle
        self._oracle_timeout = oracle_timeout
        self._state = RunState.INITIALIZING
        self._ledger: ResultLedger | None = None
        self._cursor: CaseCursor | None = None
        self._start_time: datetime | None = None
        self._driving = False

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def mode(self) -> ExecutionMode:
        return self._suite.execution_mode

    @property
    def suite(self) -> TestSuite:
        return self._suite

    @property
    def current_index(self) -> int | None:
        """Position of the active case, None when no case is active."""
        if self._cursor is None or not len(self._cursor):
            return None
        return self._cursor.index

    @property
    def current_case(self) -> TestCase | None:
        if self._cursor is None or not len(self._cursor):
            return None
        return self._cursor.current

    @property
    def results(self) -> Mapping[str, TestResult]:
        """Read-only view of the results recorded so far."""
        if self._ledger is None:
            return MappingProxyType({})
        return self._ledger.snapshot()

    def progress(self) -> float:
        """Fraction of cases with a terminal verdict, 0.0 without cases."""
        if self._ledger is None or not len(self._ledger):
            return 0.0
        results = self._ledger.snapshot().values()
        resolved = sum(1 for r in results if r.status.is_terminal)
        return resolved / len(results)

    def start(self) -> TestRun | None:
        """Initialize the ledger and enter the first execution state.

        Returns:
            The finalized run when the suite has no cases, None otherwise

        """
        self._require_state(RunState.INITIALIZING, action="start")

        cases = self._suite.cases
        self._start_time = datetime.now(timezone.utc)
        self._ledger = ResultLedger.initialize(cases)
        self._cursor = CaseCursor(cases, self.mode)
        log.info(
            "Starting run: suite_id=%s, mode=%s, cases=%d",
            self._suite.id,
            self.mode,
            len(cases),
        )

        if not cases:
            log.info("Suite %s has no cases, completing immediately", self._suite.id)
            return self._complete()

        if self.mode is ExecutionMode.AUTOMATED:
            self._transition(RunState.SIMULATING)
        else:
            self._transition(RunState.AWAITING_INPUT)
        return None

    def submit_verdict(
        self, status: ResultStatus | str, notes: str | None = None
    ) -> TestResult:
        """Record the user's verdict for the current case (manual mode).

        Raises:
            InvalidStateError: If the controller is not awaiting input
            ValueError: If the status is not a terminal verdict

        """
        self._require_state(RunState.AWAITING_INPUT, action="submit a verdict")
        status = ResultStatus(status)
        if not status.is_terminal:
            raise ValueError(f"Verdict must be a terminal status, got {status}")

        ledger, cursor = self._owned()
        case = cursor.current
        result = ledger.record(case.id, status, notes)
        log.info("Verdict recorded: case_id=%s, status=%s", case.id, status)
        self._transition(RunState.ADVANCING)

        if cursor.is_last():
            log.info("Last case resolved, waiting for the run to be finished")
            return result

        cursor.advance()
        self._settle()
        return result

    def next_case(self) -> None:
        """Move to the following case (manual mode)."""
        self._require_navigable()
        self._owned()[1].advance()
        self._settle()

    def previous_case(self) -> None:
        """Move to the preceding case (manual mode)."""
        self._require_navigable()
        self._owned()[1].retreat()
        self._settle()

    def jump_to(self, index: int) -> None:
        """Move to an arbitrary case (manual mode).

        Raises:
            ModeViolationError: In automated mode
            IndexOutOfRangeError: If index is outside the suite

        """
        self._require_navigable()
        self._owned()[1].jump_to(index)
        self._settle()

    def finish(self) -> TestRun:
        """Close a manual run once its last case has a verdict.

        Cases left without a verdict through navigation are closed as
        SKIPPED so that the finalized run only holds terminal results.
        """
        if self.mode is ExecutionMode.AUTOMATED:
            raise InvalidStateError("Automated runs finish on their own")
        self._require_state(RunState.ADVANCING, action="finish")
        ledger, cursor = self._owned()
        if not cursor.is_last():
            raise InvalidStateError("Cannot finish before reaching the last case")

        for case_id, result in ledger.snapshot().items():
            if not result.status.is_terminal:
                ledger.record(case_id, ResultStatus.SKIPPED, UNRESOLVED_NOTE)
                log.info("Closing unresolved case %s as SKIPPED", case_id)

        return self._complete()

    def cancel(self) -> None:
        """Abandon the run; no TestRun is produced.

        An oracle call in flight is not interrupted, its verdict is discarded
        once it resolves.
        """
        if self._state.is_terminal:
            raise InvalidStateError(f"Cannot cancel a run in state {self._state}")
        log.info("Run for suite %s cancelled in state %s", self._suite.id, self._state)
        self._transition(RunState.CANCELLED)
        self._release()

    async def run_automated(self) -> TestRun | None:
        """Drive an automated run to completion.

        Returns:
            The finalized run, or None if the run was cancelled

        Raises:
            ModeViolationError: If the suite is configured for manual execution
            InvalidStateError: If the run is already complete or being driven

        """
        if self.mode is not ExecutionMode.AUTOMATED:
            raise ModeViolationError("Manual runs are driven by submitted verdicts")
        if self._state is RunState.INITIALIZING:
            if (run := self.start()) is not None:
                return run
        if self._state is RunState.CANCELLED:
            return None
        self._require_state(RunState.SIMULATING, action="drive the run")
        if self._driving:
            raise InvalidStateError("Run is already being driven")

        if self._oracle is None:
            raise InvalidStateError("Automated runs require an execution oracle")

        self._driving = True
        try:
            return await self._drive(self._oracle)
        except asyncio.CancelledError:
            if not self._state.is_terminal:
                self.cancel()
            raise
        finally:
            self._driving = False

    async def _drive(self, oracle: ExecutionOracle) -> TestRun | None:
        while True:
            case = self._owned()[1].current
            status, notes = await self._simulate(oracle, case)

            if self._state is RunState.CANCELLED:
                log.info("Discarding verdict for %s, run was cancelled", case.id)
                return None

            ledger, cursor = self._owned()
            self._transition(RunState.ADVANCING)
            ledger.record(case.id, status, notes)
            log.info("Oracle verdict recorded: case_id=%s, status=%s", case.id, status)

            if cursor.is_last():
                return self._complete()

            cursor.advance()
            self._transition(RunState.SIMULATING)

    async def _simulate(
        self, oracle: ExecutionOracle, case: TestCase
    ) -> tuple[ResultStatus, str]:
        """Ask the oracle for a verdict, degrading failures to SKIPPED."""
        try:
            verdict = await oracle.simulate_with_timeout(
                case, self._suite.environment, self._oracle_timeout
            )
            status = ResultStatus(verdict.status)
            if status not in (ResultStatus.PASSED, ResultStatus.FAILED):
                raise OracleResponseError(f"Unexpected oracle verdict {status}")
        except Exception as e:
            log.warning("Oracle unavailable for case %s: %s", case.id, e)
            return (
                ResultStatus.SKIPPED,
                f"{ORACLE_UNAVAILABLE_PREFIX} {type(e).__name__}: {e}",
            )
        return status, verdict.log

    def _complete(self) -> TestRun:
        ledger, _ = self._owned()
        if self._start_time is None:
            raise InvalidStateError(f"Run was never started, state {self._state}")
        self._transition(RunState.COMPLETE)
        run = TestRun(
            id=str(uuid.uuid4()),
            suite_id=self._suite.id,
            suite_name=self._suite.name,
            start_time=self._start_time,
            end_time=datetime.now(timezone.utc),
            status=RunStatus.COMPLETED,
            results=ledger.snapshot(),
        )
        self._release()
        log.info("Run %s completed for suite %s", run.id, run.suite_id)
        return run

    def _settle(self) -> None:
        """Pick the manual state matching the case under the cursor."""
        ledger, cursor = self._owned()
        if ledger.get(cursor.current.id).status.is_terminal:
            self._transition(RunState.ADVANCING)
        else:
            self._transition(RunState.AWAITING_INPUT)

    def _transition(self, state: RunState) -> None:
        if state is not self._state:
            log.debug("Run %s: %s -> %s", self._suite.id, self._state, state)
        self._state = state

    def _release(self) -> None:
        self._ledger = None
        self._cursor = None

    def _require_state(self, expected: RunState, *, action: str) -> None:
        if self._state is not expected:
            raise InvalidStateError(
                f"Cannot {action} in state {self._state} (expected {expected})"
            )

    def _require_navigable(self) -> None:
        if self.mode is ExecutionMode.AUTOMATED:
            raise ModeViolationError("Automated runs cannot be navigated")
        if self._state not in (RunState.AWAITING_INPUT, RunState.ADVANCING):
            raise InvalidStateError(f"Cannot navigate in state {self._state}")

    def _owned(self) -> tuple[ResultLedger, CaseCursor]:
        if self._ledger is None or self._cursor is None:
            raise InvalidStateError(f"Run has no active ledger in state {self._state}")
        return self._ledger, self._cursor
