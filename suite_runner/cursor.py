"""Cursor over the ordered cases of a run."""

import logging
from collections.abc import Sequence

from suite_runner.errors import IndexOutOfRangeError, ModeViolationError
from suite_runner.models.suite import ExecutionMode, TestCase

log = logging.getLogger(__name__)


class CaseCursor:
    """Tracks the active case and the rules for moving between cases.

    Automated runs progress strictly in order, so arbitrary jumps are
    rejected in that mode. ``advance`` and ``retreat`` clamp at the ends.
    """

    def __init__(self, cases: Sequence[TestCase], mode: ExecutionMode) -> None:
        self._cases = tuple(cases)
        self._mode = mode
        self._index = 0

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> TestCase:
        """Case at the cursor position."""
        if not self._cases:
            raise IndexOutOfRangeError("Cursor has no cases")
        return self._cases[self._index]

    def __len__(self) -> int:
        return len(self._cases)

    def advance(self) -> None:
        if not self.is_last():
            self._index += 1

    def retreat(self) -> None:
        if self._index > 0:
            self._index -= 1

    def jump_to(self, index: int) -> None:
        """Move the cursor to an arbitrary case (manual mode only)."""
        if self._mode is ExecutionMode.AUTOMATED:
            raise ModeViolationError("Automated runs cannot jump between cases")
        if not 0 <= index < len(self._cases):
            raise IndexOutOfRangeError(
                f"Index {index} outside of 0..{len(self._cases) - 1}"
            )
        log.debug("Cursor jump %d -> %d", self._index, index)
        self._index = index

    def is_last(self) -> bool:
        return self._index >= len(self._cases) - 1
