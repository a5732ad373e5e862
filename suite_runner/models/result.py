"""Models for test execution results and finalized runs."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class ResultStatus(StrEnum):
    """Execution status of a single case within a run."""

    NOT_RUN = "NOT_RUN"
    PASSED = "PASSED"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"

    @property
    def is_terminal(self) -> bool:
        """Whether the status is a final verdict."""
        return self is not ResultStatus.NOT_RUN


class RunStatus(StrEnum):
    """Lifecycle status of a run record."""

    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Result of a single case execution.

    Contains only the execution outcome - the run knows the suite context.
    """

    __test__ = False

    case_id: str
    status: ResultStatus
    timestamp: datetime
    notes: str | None = None


@dataclass(frozen=True, kw_only=True)
class TestRun:
    """Finalized record of one pass through a suite."""

    __test__ = False

    id: str
    suite_id: str
    suite_name: str
    start_time: datetime
    end_time: datetime | None
    status: RunStatus
    results: Mapping[str, TestResult]
