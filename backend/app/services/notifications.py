"""Notification dispatch: best-effort, never on the critical path.

Services return ``Notice`` values describing who should hear about a committed
change; routers hand them to the dispatcher as background tasks after the
response is produced. A delivery failure is logged and dropped: it never
rolls back the state change that produced it.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from sqlalchemy.orm import Session, sessionmaker

from app.models.notification import Notification

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notice:
    account_id: str
    kind: str
    payload: dict[str, Any] = field(default_factory=dict)


class NotificationDispatcher(Protocol):
    def notify(self, account_id: str, kind: str, payload: dict[str, Any]) -> None: ...


class OutboxNotifier:
    """Writes notices to the ``notifications`` outbox table for the delivery worker."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def notify(self, account_id: str, kind: str, payload: dict[str, Any]) -> None:
        session: Session = self._session_factory()
        try:
            session.add(Notification(account_id=account_id, kind=kind, payload=payload))
            session.commit()
            logger.info("Queued '%s' notification for account %s", kind, account_id)
        finally:
            session.close()


def deliver(dispatcher: NotificationDispatcher, notices: list[Notice]) -> None:
    """Send each notice, logging (not raising) individual failures."""
    for notice in notices:
        try:
            dispatcher.notify(notice.account_id, notice.kind, notice.payload)
        except Exception:
            logger.exception("Failed to deliver '%s' notification to %s", notice.kind, notice.account_id)
