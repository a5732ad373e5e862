"""CSV export of run results."""

import csv
import io
import re

from suite_runner.models.result import ResultStatus, TestRun
from suite_runner.models.suite import TestSuite

HEADERS = ("Test Case ID", "Title", "Priority", "Status", "Execution Notes/Logs")
BOM = "\ufeff"


def export_results_csv(suite: TestSuite, run: TestRun) -> str:
    """Render one CSV row per case of the suite, in suite order.

    The output starts with a byte order mark so spreadsheet tools detect
    UTF-8. Cases missing from the run are reported as SKIPPED.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(HEADERS)
    for case in suite.cases:
        result = run.results.get(case.id)
        status = result.status if result else ResultStatus.SKIPPED
        notes = result.notes if result and result.notes else ""
        writer.writerow((case.id, case.title, case.priority, status, notes))
    return BOM + buffer.getvalue()


def results_filename(suite: TestSuite) -> str:
    stem = re.sub(r"\s+", "_", suite.name)
    return f"{stem}_Results.csv"
