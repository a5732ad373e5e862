"""Per-run mapping from case identifier to its current execution result."""

from collections.abc import Iterator, Mapping, Sequence
from datetime import datetime, timezone
from types import MappingProxyType

from suite_runner.errors import UnknownCaseError
from suite_runner.models.result import ResultStatus, TestResult
from suite_runner.models.suite import TestCase


class ResultLedger:
    """Pure store of results, one per case.

    Re-recording a case overwrites its result. Whether a case may be
    recorded more than once is decided by the owner of the ledger.
    """

    def __init__(self, results: Mapping[str, TestResult]) -> None:
        self._results: dict[str, TestResult] = dict(results)

    @classmethod
    def initialize(cls, cases: Sequence[TestCase]) -> "ResultLedger":
        """Create a ledger with every case NOT_RUN, stamped now."""
        now = datetime.now(timezone.utc)
        return cls(
            {
                case.id: TestResult(
                    case_id=case.id, status=ResultStatus.NOT_RUN, timestamp=now
                )
                for case in cases
            }
        )

    def record(
        self, case_id: str, status: ResultStatus, notes: str | None = None
    ) -> TestResult:
        """Replace the result of a case and return the new entry."""
        if case_id not in self._results:
            raise UnknownCaseError(case_id)

        result = TestResult(
            case_id=case_id,
            status=status,
            notes=notes,
            timestamp=datetime.now(timezone.utc),
        )
        self._results[case_id] = result
        return result

    def get(self, case_id: str) -> TestResult:
        """Return the current result of a case."""
        try:
            return self._results[case_id]
        except KeyError:
            raise UnknownCaseError(case_id) from None

    def snapshot(self) -> Mapping[str, TestResult]:
        """Return a read-only copy of all results."""
        return MappingProxyType(dict(self._results))

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[str]:
        return iter(self._results)
