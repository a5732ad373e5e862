"""Aggregation of a finalized run into pass/fail statistics."""

import math
from dataclasses import dataclass

from suite_runner.models.config import DEFAULT_SUCCESS_THRESHOLD
from suite_runner.models.result import ResultStatus, TestRun


@dataclass(frozen=True, kw_only=True)
class RunSummary:
    """Statistics of a finalized run."""

    total: int
    passed: int
    failed: int
    skipped: int
    not_run: int
    pass_rate: float
    is_success: bool

    @property
    def verdict(self) -> str:
        return "PASSED" if self.is_success else "FAILED"


def summarize(
    run: TestRun, success_threshold: float = DEFAULT_SUCCESS_THRESHOLD
) -> RunSummary:
    """Count the results of a run and compute its pass rate.

    The pass rate is the percentage of PASSED results; SKIPPED results
    count against it. A run without cases has a pass rate of 0.
    """
    statuses = [result.status for result in run.results.values()]
    total = len(statuses)
    passed = statuses.count(ResultStatus.PASSED)
    pass_rate = passed * 100 / total if total else 0.0

    return RunSummary(
        total=total,
        passed=passed,
        failed=statuses.count(ResultStatus.FAILED),
        skipped=statuses.count(ResultStatus.SKIPPED),
        not_run=statuses.count(ResultStatus.NOT_RUN),
        pass_rate=pass_rate,
        is_success=pass_rate >= success_threshold,
    )


def format_percentage(rate: float) -> str:
    """Format a percentage, keeping one decimal only when it is fractional.

    The rate is truncated to one decimal so the displayed value never reaches
    a threshold the rate itself is below.
    """
    # Inner round absorbs float noise left by the multiplication.
    truncated = math.floor(round(rate * 10, 6)) / 10
    if truncated == int(truncated):
        return f"{int(truncated)}%"
    return f"{truncated:.1f}%"
