"""FastAPI providers for the workflow's external collaborators."""
from fastapi import Depends
from sqlalchemy.orm import sessionmaker

from app.config import settings
from app.database import get_session_factory
from app.services.ledger import AccountLedger, LedgerGateway
from app.services.notifications import NotificationDispatcher, OutboxNotifier
from app.services.storage import LocalObjectStorage, ObjectStorage


def get_ledger(session_factory: sessionmaker = Depends(get_session_factory)) -> LedgerGateway:
    return AccountLedger(session_factory)


def get_notifier(session_factory: sessionmaker = Depends(get_session_factory)) -> NotificationDispatcher:
    return OutboxNotifier(session_factory)


def get_storage() -> ObjectStorage:
    return LocalObjectStorage(settings.STORAGE_DIR, settings.STORAGE_BASE_URL)
