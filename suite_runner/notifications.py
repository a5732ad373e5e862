"""Fan-out of completed runs into per-recipient notifications."""

import logging
import uuid
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol, TypeAlias

from suite_runner.models.config import FanOutPolicy, SessionContext
from suite_runner.models.notification import Notification, NotificationType
from suite_runner.models.result import TestRun
from suite_runner.models.suite import TestSuite
from suite_runner.summary import RunSummary, format_percentage, summarize

log = logging.getLogger(__name__)

ADMIN_PREFIX = "[Admin] "

Membership: TypeAlias = Mapping[str, Sequence[str]]


class NotificationSink(Protocol):
    """Destination of notifications produced by the fan-out."""

    def deliver(self, notifications: Sequence[Notification]) -> None:
        """Accept a batch of notifications."""


class InMemoryNotificationSink:
    """Keeps notifications in process, newest first."""

    def __init__(self) -> None:
        self._notifications: list[Notification] = []

    def deliver(self, notifications: Sequence[Notification]) -> None:
        for notification in notifications:
            self._notifications.insert(0, notification)

    @property
    def notifications(self) -> Sequence[Notification]:
        return tuple(self._notifications)

    def inbox(self, recipient_id: str) -> Sequence[Notification]:
        """Notifications addressed to a recipient, newest first."""
        return [n for n in self._notifications if n.recipient_id == recipient_id]

    def unread_count(self, recipient_id: str) -> int:
        return sum(1 for n in self.inbox(recipient_id) if not n.read)

    def mark_read(self, notification_id: str) -> Notification:
        """Flag a notification as read and return the updated copy.

        Raises:
            KeyError: If no notification has the given id

        """
        for i, notification in enumerate(self._notifications):
            if notification.id == notification_id:
                self._notifications[i] = notification.mark_read()
                return self._notifications[i]
        raise KeyError(notification_id)

    def clear(self, recipient_id: str) -> None:
        """Drop every notification addressed to a recipient."""
        self._notifications = [
            n for n in self._notifications if n.recipient_id != recipient_id
        ]


class LoggingNotificationSink:
    """Writes notifications to the log instead of storing them."""

    def __init__(self, logger: logging.Logger = log) -> None:
        self._log = logger

    def deliver(self, notifications: Sequence[Notification]) -> None:
        for notification in notifications:
            self._log.info(
                "Notification for %s (%s): %s",
                notification.recipient_id,
                notification.type,
                notification.message,
            )


def build_message(run: TestRun, summary: RunSummary) -> str:
    """Human-readable summary of a completed run."""
    failures = "failure" if summary.failed == 1 else "failures"
    return (
        f'Test run "{run.suite_name}" {summary.verdict} with a '
        f"{format_percentage(summary.pass_rate)} pass rate. "
        f"{summary.failed} {failures} recorded."
    )


def membership_from_suites(suites: Iterable[TestSuite]) -> Membership:
    """Build the membership mapping from the members declared on suites."""
    return {
        suite.id: tuple(member.user_id for member in suite.members)
        for suite in suites
    }


@dataclass(frozen=True, kw_only=True)
class NotificationFanOut:
    """Turns a completed run into one notification per interested party."""

    sink: NotificationSink
    policy: FanOutPolicy = field(default_factory=FanOutPolicy)

    def fan_out(
        self,
        run: TestRun,
        membership: Membership,
        session: SessionContext,
        summary: RunSummary | None = None,
    ) -> Sequence[Notification]:
        """Notify every suite member, then the administrator.

        Members are notified in the order of the membership mapping. The
        administrator receives its own copy even when also a member.

        Args:
            run: Completed run
            membership: Suite id to authorized recipient ids
            session: Session carrying the administrator id
            summary: Precomputed summary of the run, computed when omitted

        Returns:
            The notifications handed to the sink

        """
        if summary is None:
            summary = summarize(run, self.policy.success_threshold)
        message = build_message(run, summary)
        now = datetime.now(timezone.utc)

        members = membership.get(run.suite_id, ())
        if not members:
            log.info("Suite %s has no members to notify", run.suite_id)

        notifications = [
            Notification(
                id=str(uuid.uuid4()),
                recipient_id=recipient_id,
                message=message,
                type=NotificationType.ASSIGNMENT,
                timestamp=now,
            )
            for recipient_id in members
        ]
        if self.policy.notify_admin:
            notifications.append(
                Notification(
                    id=str(uuid.uuid4()),
                    recipient_id=session.admin_id,
                    message=ADMIN_PREFIX + message,
                    type=NotificationType.SYSTEM,
                    timestamp=now,
                )
            )

        log.info(
            "Dispatching %d notification(s) for run %s", len(notifications), run.id
        )
        self.sink.deliver(notifications)
        return notifications
