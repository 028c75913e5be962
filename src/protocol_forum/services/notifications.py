"""Notification dispatch seam for vote and reply events.

Delivery (email, websocket, inbox rows) lives outside this service; the
default notifier only records the event in the application log.
"""
from __future__ import annotations

import logging
from typing import Protocol

from protocol_forum.models.vote import Polarity, VotableType

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """Receives discussion events addressed to a content author."""

    def notify_vote(
        self,
        *,
        recipient: str,
        actor: str,
        votable_type: VotableType,
        votable_id: str,
        polarity: Polarity,
    ) -> None: ...

    def notify_reply(
        self,
        *,
        recipient: str,
        actor: str,
        reply_id: str,
        comment_id: str,
    ) -> None: ...


class LoggingNotifier:
    """Notifier that writes events to the log and skips self-notification."""

    def notify_vote(
        self,
        *,
        recipient: str,
        actor: str,
        votable_type: VotableType,
        votable_id: str,
        polarity: Polarity,
    ) -> None:
        if recipient == actor:
            return
        logger.info(
            "Notify %s: %s %svoted %s %s",
            recipient,
            actor,
            polarity.value,
            votable_type.value,
            votable_id,
        )

    def notify_reply(
        self,
        *,
        recipient: str,
        actor: str,
        reply_id: str,
        comment_id: str,
    ) -> None:
        if recipient == actor:
            return
        logger.info("Notify %s: %s replied (%s) under comment %s", recipient, actor, reply_id, comment_id)


_notifier: Notifier = LoggingNotifier()


def get_notifier() -> Notifier:
    """Return the process-wide notifier."""
    return _notifier


__all__ = ["LoggingNotifier", "Notifier", "get_notifier"]
