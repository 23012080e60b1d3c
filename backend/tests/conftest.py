"""Pytest fixtures: file-backed SQLite database for fast, isolated tests."""
from datetime import datetime, timezone, timedelta
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from app.database import Base, get_db, get_session_factory
from app.main import app

# Import all models so they register with Base.metadata
from app.models.account import Account                       # noqa: F401
from app.models.event_request import EventRequest            # noqa: F401
from app.models.proposal import Proposal                     # noqa: F401
from app.models.request_transition import RequestTransition  # noqa: F401
from app.models.ledger_entry import LedgerEntry              # noqa: F401
from app.models.notification import Notification             # noqa: F401

SQLITE_URL = "sqlite:///./test.db"

REQUEST_FIELDS = {
    "full_name": "Nimal Perera",
    "email": "nimal@example.com",
    "contact_number": "+94 77 123 4567",
    "event_type": "wedding",
    "number_of_guests": 120,
    "estimated_budget": "LKR 1,500,000",
    "activities": ["Catering", "Photography"],
    "special_requests": "Beach venue preferred",
}


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Yield a database session, closed after the test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    """FastAPI TestClient with the database dependencies overridden to use SQLite."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: drive the workflow through the API, return response JSON
# ---------------------------------------------------------------------------
def in_days(days: int) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def create_test_account(
    client: TestClient,
    name: str = "Test Account",
    balance: str = "100",
    partner_days: int | None = None,
    member_days: int | None = None,
) -> dict:
    """Helper: POST /api/accounts. ``*_days`` set an active (positive) or lapsed (negative) tier."""
    payload = {
        "display_name": name,
        "email": f"{name.lower().replace(' ', '.')}@example.com",
        "hsc_balance": balance,
    }
    if partner_days is not None:
        payload.update(is_partner=True, partner_expiration_date=in_days(partner_days))
    if member_days is not None:
        payload.update(is_member=True, membership_expiration_date=in_days(member_days))
    resp = client.post("/api/accounts/", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_request(client: TestClient, requester_id: str, **overrides) -> dict:
    """Helper: POST /api/event-requests and return the creation response."""
    resp = client.post("/api/event-requests/", json={
        "requester_id": requester_id,
        **REQUEST_FIELDS,
        **overrides,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def transition(client: TestClient, request_id: str, event: str, admin_id: str = "admin-1", note: str | None = None):
    return client.post(f"/api/event-requests/{request_id}/transition", json={
        "event": event,
        "admin_id": admin_id,
        "note": note,
    })


def open_to_providers(client: TestClient, request_id: str) -> None:
    """Helper: admin moves a pending request through review to show-partners-members."""
    assert transition(client, request_id, "review").status_code == 200
    resp = transition(client, request_id, "open-to-providers")
    assert resp.status_code == 200, resp.text
    assert resp.json()["status"] == "show-partners-members"


def submit(client: TestClient, request_id: str, provider_id: str, document_ref: str = "https://files/proposal.pdf"):
    return client.post(f"/api/event-requests/{request_id}/proposals", json={
        "provider_id": provider_id,
        "document_ref": document_ref,
    })


def accept(client: TestClient, request_id: str, proposal_id: str, requester_id: str):
    return client.post(
        f"/api/event-requests/{request_id}/proposals/{proposal_id}/accept",
        json={"requester_id": requester_id},
    )
