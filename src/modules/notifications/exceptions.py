"""Notification exceptions."""

from __future__ import annotations

from shared.domain.exceptions import DependencyFailure


class NotificationError(DependencyFailure):
    """The messaging provider rejected the message or could not be reached."""

    code = "notification_failed"
    default_message = "Message could not be delivered."
