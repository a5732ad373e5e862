"""Tests for automated runs of the run controller."""

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass, field

import pytest

from suite_runner.controller import ORACLE_UNAVAILABLE_PREFIX, RunController, RunState
from suite_runner.errors import InvalidStateError, ModeViolationError
from suite_runner.models.result import ResultStatus, RunStatus
from suite_runner.models.suite import (
    ExecutionMode,
    RunEnvironmentContext,
    TestCase,
    TestSuite,
)
from suite_runner.oracles.base import ExecutionOracle, OracleVerdict
from suite_runner.oracles.scripted import ScriptedConfig, ScriptedOracle
from suite_runner.testing.factories import TestCaseFactory, TestSuiteFactory


@dataclass(frozen=True, kw_only=True)
class RecordingOracle(ExecutionOracle):
    """Oracle returning configured outcomes and recording the cases it saw."""

    outcomes: Mapping[str, str | BaseException] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    async def simulate(
        self, case: TestCase, context: RunEnvironmentContext
    ) -> OracleVerdict:
        """Return or raise the configured outcome for the case."""
        self.calls.append(case.id)
        outcome = self.outcomes.get(case.id, "PASSED")
        if isinstance(outcome, BaseException):
            raise outcome
        return OracleVerdict(status=outcome, log=f"log for {case.id}")  # type: ignore[arg-type]


@dataclass(frozen=True, kw_only=True)
class GatedOracle(ExecutionOracle):
    """Oracle that blocks until released."""

    entered: asyncio.Event = field(default_factory=asyncio.Event)
    release: asyncio.Event = field(default_factory=asyncio.Event)
    calls: list[str] = field(default_factory=list)

    async def simulate(
        self, case: TestCase, context: RunEnvironmentContext
    ) -> OracleVerdict:
        """Wait for release, then pass."""
        self.calls.append(case.id)
        self.entered.set()
        await self.release.wait()
        return OracleVerdict(status="PASSED", log="released")


@pytest.fixture
def suite() -> TestSuite:
    """Create automated suite with three cases."""
    return TestSuiteFactory.build(
        id="suite-auto",
        execution_mode=ExecutionMode.AUTOMATED,
        cases=[TestCaseFactory.build(id=case_id) for case_id in ("c1", "c2", "c3")],
    )


async def test_runs_every_case_and_completes(suite: TestSuite) -> None:
    """Automated runs complete on their own with every case resolved."""
    oracle = RecordingOracle(outcomes={"c2": "FAILED"})
    controller = RunController(suite, oracle=oracle)

    run = await controller.run_automated()

    assert run is not None
    assert controller.state is RunState.COMPLETE
    assert run.status is RunStatus.COMPLETED
    assert oracle.calls == ["c1", "c2", "c3"]
    assert [r.status for r in run.results.values()] == [
        ResultStatus.PASSED,
        ResultStatus.FAILED,
        ResultStatus.PASSED,
    ]
    assert run.results["c1"].notes == "log for c1"


async def test_start_enters_simulating(suite: TestSuite) -> None:
    """Starting an automated run waits on the oracle for the first case."""
    controller = RunController(suite, oracle=RecordingOracle())

    assert controller.start() is None
    assert controller.state is RunState.SIMULATING

    run = await controller.run_automated()
    assert run is not None


async def test_oracle_failure_skips_case_and_continues(suite: TestSuite) -> None:
    """An oracle exception marks the case SKIPPED and the run goes on."""
    oracle = RecordingOracle(outcomes={"c1": ConnectionError("network down")})
    controller = RunController(suite, oracle=oracle)

    run = await controller.run_automated()

    assert run is not None
    assert oracle.calls == ["c1", "c2", "c3"]
    skipped = run.results["c1"]
    assert skipped.status is ResultStatus.SKIPPED
    assert skipped.notes is not None
    assert skipped.notes.startswith(ORACLE_UNAVAILABLE_PREFIX)
    assert "ConnectionError: network down" in skipped.notes
    assert run.results["c2"].status is ResultStatus.PASSED


async def test_unexpected_verdict_is_treated_as_oracle_failure(
    suite: TestSuite,
) -> None:
    """Verdicts other than PASSED/FAILED are not trusted."""
    oracle = RecordingOracle(outcomes={"c3": "SKIPPED"})
    controller = RunController(suite, oracle=oracle)

    run = await controller.run_automated()

    assert run is not None
    assert run.results["c3"].status is ResultStatus.SKIPPED
    assert run.results["c3"].notes is not None
    assert run.results["c3"].notes.startswith(ORACLE_UNAVAILABLE_PREFIX)


async def test_oracle_timeout_skips_case(suite: TestSuite) -> None:
    """An oracle exceeding the timeout is treated as unavailable."""
    oracle = ScriptedOracle(config=ScriptedConfig(delay=1.0))
    controller = RunController(suite, oracle=oracle, oracle_timeout=0.01)

    run = await controller.run_automated()

    assert run is not None
    assert {r.status for r in run.results.values()} == {ResultStatus.SKIPPED}
    assert all("TimeoutError" in (r.notes or "") for r in run.results.values())


async def test_empty_suite_completes_without_oracle_calls() -> None:
    """A suite without cases completes without asking the oracle."""
    oracle = RecordingOracle()
    controller = RunController(
        TestSuiteFactory.build(cases=[], execution_mode=ExecutionMode.AUTOMATED),
        oracle=oracle,
    )

    run = await controller.run_automated()

    assert run is not None
    assert dict(run.results) == {}
    assert oracle.calls == []


async def test_navigation_rejected(suite: TestSuite) -> None:
    """Users cannot steer an automated run."""
    controller = RunController(suite, oracle=RecordingOracle())
    controller.start()

    with pytest.raises(ModeViolationError):
        controller.jump_to(1)
    with pytest.raises(ModeViolationError):
        controller.next_case()
    with pytest.raises(ModeViolationError):
        controller.previous_case()

    assert controller.current_index == 0


async def test_manual_actions_rejected(suite: TestSuite) -> None:
    """Verdicts and finish are refused in automated mode."""
    controller = RunController(suite, oracle=RecordingOracle())
    controller.start()

    with pytest.raises(InvalidStateError):
        controller.submit_verdict(ResultStatus.PASSED)
    with pytest.raises(InvalidStateError):
        controller.finish()

    assert {r.status for r in controller.results.values()} == {ResultStatus.NOT_RUN}


async def test_cancel_during_simulation_discards_verdict(suite: TestSuite) -> None:
    """Cancellation is observed once the in-flight oracle call resolves."""
    oracle = GatedOracle()
    controller = RunController(suite, oracle=oracle)

    task = asyncio.create_task(controller.run_automated())
    await oracle.entered.wait()
    controller.cancel()
    oracle.release.set()

    assert await task is None
    assert controller.state is RunState.CANCELLED
    assert oracle.calls == ["c1"]


async def test_cancel_before_driving(suite: TestSuite) -> None:
    """A run cancelled before it is driven returns no record."""
    oracle = RecordingOracle()
    controller = RunController(suite, oracle=oracle)
    controller.start()
    controller.cancel()

    assert await controller.run_automated() is None
    assert oracle.calls == []


async def test_task_cancellation_cancels_run(suite: TestSuite) -> None:
    """Cancelling the driving task leaves the run cancelled."""
    oracle = GatedOracle()
    controller = RunController(suite, oracle=oracle)

    task = asyncio.create_task(controller.run_automated())
    await oracle.entered.wait()
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    assert controller.state is RunState.CANCELLED


async def test_concurrent_drive_rejected(suite: TestSuite) -> None:
    """Only one caller may drive a run."""
    oracle = GatedOracle()
    controller = RunController(suite, oracle=oracle)

    task = asyncio.create_task(controller.run_automated())
    await oracle.entered.wait()

    with pytest.raises(InvalidStateError):
        await controller.run_automated()

    oracle.release.set()
    run = await task
    assert run is not None


async def test_driving_completed_run_raises(suite: TestSuite) -> None:
    """A completed run cannot be driven again."""
    controller = RunController(suite, oracle=RecordingOracle())
    await controller.run_automated()

    with pytest.raises(InvalidStateError):
        await controller.run_automated()


def test_requires_oracle(suite: TestSuite) -> None:
    """Automated suites cannot run without an oracle."""
    with pytest.raises(ValueError, match="oracle"):
        RunController(suite)


async def test_independent_runs_share_nothing(suite: TestSuite) -> None:
    """Concurrent runs of the same suite produce separate records."""
    first = RunController(suite, oracle=RecordingOracle(outcomes={"c1": "FAILED"}))
    second = RunController(suite, oracle=RecordingOracle())

    run_a, run_b = await asyncio.gather(first.run_automated(), second.run_automated())

    assert run_a is not None and run_b is not None
    assert run_a.id != run_b.id
    assert run_a.results["c1"].status is ResultStatus.FAILED
    assert run_b.results["c1"].status is ResultStatus.PASSED
