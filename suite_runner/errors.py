"""Errors raised when the run engine is used against its contract."""


class RunContractError(Exception):
    """Base class for caller misuse of the ledger, cursor or controller."""


class UnknownCaseError(RunContractError, KeyError):
    """Raised when a case identifier is not part of the run."""

    def __init__(self, case_id: str) -> None:
        super().__init__(case_id)
        self.case_id = case_id

    def __str__(self) -> str:
        return f"Case '{self.case_id}' is not part of this run"


class ModeViolationError(RunContractError):
    """Raised when an operation is not allowed in the run's execution mode."""


class IndexOutOfRangeError(RunContractError, IndexError):
    """Raised when the cursor is pointed outside the case sequence."""


class InvalidStateError(RunContractError):
    """Raised when an operation is not valid in the controller's current state."""
