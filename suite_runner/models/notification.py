"""Models for notifications produced when a run completes."""

import dataclasses
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class NotificationType(StrEnum):
    """Kind of notification shown to the recipient."""

    ASSIGNMENT = "ASSIGNMENT"
    SYSTEM = "SYSTEM"


@dataclass(frozen=True, kw_only=True)
class Notification:
    """Message addressed to a single recipient."""

    id: str
    recipient_id: str
    message: str
    type: NotificationType
    timestamp: datetime
    read: bool = False

    def mark_read(self) -> "Notification":
        """Return a copy of the notification flagged as read."""
        return dataclasses.replace(self, read=True)
