"""Request store: system of record for EventRequests.

Responsibilities:
- Field validation for new requests
- Charge-exactly-once: the ledger debit is confirmed before anything is
  persisted, and refunded if persisting then fails
- Administrative lifecycle transitions via the table in ``lifecycle``
- Audit row (RequestTransition) for every status change, same transaction
- Read-only projections for requesters
"""
import logging
import re
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.account import Account
from app.models.event_request import EventRequest, EventType, PaymentStatus, RequestStatus
from app.services.errors import (
    InsufficientBalance,
    InvalidState,
    InvalidTransition,
    NotFound,
    ValidationError,
    WorkflowError,
)
from app.services.ledger import ChargeResult, LedgerGateway
from app.services.lifecycle import (
    ADMIN_EVENTS,
    RequestEvent,
    compare_and_set_status,
    next_status,
    record_transition,
)
from app.services.notifications import Notice
from app.services.proposal_coordinator import close_pending_proposals

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")
REQUIRED_TEXT_FIELDS = ("full_name", "email", "contact_number", "estimated_budget")


def get_charge() -> Decimal:
    """HSC amount debited for each new request."""
    return Decimal(settings.EVENT_REQUEST_CHARGE)


def validate_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Check a request brief and return the normalized column values."""
    errors: dict[str, str] = {}

    for name in REQUIRED_TEXT_FIELDS:
        value = fields.get(name)
        if not isinstance(value, str) or not value.strip():
            errors[name] = "required"

    email = fields.get("email")
    if "email" not in errors and not EMAIL_PATTERN.fullmatch(email.strip()):
        errors["email"] = "invalid"

    event_type = None
    try:
        event_type = EventType(fields.get("event_type"))
    except ValueError:
        errors["event_type"] = "required" if not fields.get("event_type") else "invalid"

    event_type_other = (fields.get("event_type_other") or "").strip() or None
    if event_type is EventType.other and not event_type_other:
        errors["event_type_other"] = "required"

    guests = fields.get("number_of_guests")
    if isinstance(guests, bool) or not isinstance(guests, int) or guests < 1:
        errors["number_of_guests"] = "must be at least 1"

    activities: list[str] = []
    for activity in fields.get("activities") or []:
        if not isinstance(activity, str):
            errors["activities"] = "invalid"
            break
        activity = activity.strip()
        if activity and activity not in activities:
            activities.append(activity)

    if errors:
        raise ValidationError("Event request is missing or has invalid fields", errors)

    return {
        "full_name": fields["full_name"].strip(),
        "email": fields["email"].strip(),
        "contact_number": fields["contact_number"].strip(),
        "event_type": event_type,
        "event_type_other": event_type_other if event_type is EventType.other else None,
        "number_of_guests": guests,
        "estimated_budget": fields["estimated_budget"].strip(),
        "activities": activities,
        "special_requests": (fields.get("special_requests") or "").strip() or None,
    }


def create_request(
    db: Session,
    ledger: LedgerGateway,
    requester_id: str,
    fields: dict[str, Any],
) -> EventRequest:
    """Charge the requester and persist a new request in ``pending``."""
    values = validate_fields(fields)

    requester = db.query(Account).filter(Account.account_id == requester_id).first()
    if not requester:
        raise NotFound("Requester account not found")

    amount = get_charge()
    request_id = str(uuid.uuid4())
    if ledger.charge(requester_id, amount, f"event-request:{request_id}:charge") is not ChargeResult.ok:
        raise InsufficientBalance(f"Insufficient HSC balance. Required: {amount} HSC")

    request = EventRequest(
        request_id=request_id,
        requester_id=requester_id,
        status=RequestStatus.pending,
        hsc_charge=amount,
        payment_status=PaymentStatus.paid,
        proposal_count=0,
        version=1,
        **values,
    )
    db.add(request)
    record_transition(db, request_id, RequestEvent.create, None, RequestStatus.pending, actor_id=requester_id)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error("Persisting request %s failed after charge; refunding %s HSC", request_id, amount)
        ledger.refund(requester_id, amount, f"event-request:{request_id}:refund")
        raise
    db.refresh(request)
    logger.info("Created event request %s (%s) for requester %s", request_id, values["event_type"].value, requester_id)
    return request


def transition_request(
    db: Session,
    ledger: LedgerGateway,
    request_id: str,
    event: RequestEvent,
    admin_id: Optional[str] = None,
    note: Optional[str] = None,
) -> tuple[EventRequest, list[Notice]]:
    """Apply one administrative edge of the lifecycle table."""
    event = RequestEvent(event)
    request = get_request(db, request_id)
    if event not in ADMIN_EVENTS:
        raise InvalidTransition(f"'{event.value}' cannot be applied administratively")

    current = request.status
    target = next_status(current, event)
    if target is None:
        raise InvalidTransition(f"Cannot apply '{event.value}' to a request that is {current.value}")

    now = datetime.now(timezone.utc)
    extra = {"admin_note": note, "processed_by": admin_id, "processed_at": now}
    if not compare_and_set_status(db, request_id, current, target, extra):
        db.rollback()
        raise InvalidTransition(f"Request {request_id} changed status concurrently; re-fetch and retry")

    notices = [Notice(request.requester_id, "request_status_changed", {
        "request_id": request_id,
        "status": target.value,
        "note": note,
    })]
    if current is RequestStatus.show_partners_members and target is RequestStatus.rejected:
        if settings.ADMIN_REJECT_PENDING_PROPOSALS == "reject":
            for proposal_id, provider_id in close_pending_proposals(db, request_id, now):
                notices.append(Notice(provider_id, "proposal_rejected", {
                    "request_id": request_id,
                    "proposal_id": proposal_id,
                }))

    record_transition(db, request_id, event, current, target, actor_id=admin_id, note=note)
    db.commit()
    logger.info("Request %s moved %s -> %s by admin %s", request_id, current.value, target.value, admin_id)

    if target is RequestStatus.rejected and settings.REFUND_ON_REJECT:
        try:
            settle_refund(db, ledger, request_id)
        except WorkflowError:
            logger.exception("Refund for rejected request %s failed; retry via the refund endpoint", request_id)
    db.refresh(request)
    return request, notices


def get_request(db: Session, request_id: str) -> EventRequest:
    request = db.query(EventRequest).filter(EventRequest.request_id == request_id).first()
    if not request:
        raise NotFound("Event request not found")
    return request


def list_by_owner(
    db: Session,
    requester_id: str,
    status_filter: Optional[RequestStatus] = None,
) -> list[EventRequest]:
    """A requester's own requests, newest first."""
    query = db.query(EventRequest).filter(EventRequest.requester_id == requester_id)
    if status_filter:
        query = query.filter(EventRequest.status == RequestStatus(status_filter))
    return query.order_by(EventRequest.created_at.desc()).all()


def settle_refund(db: Session, ledger: LedgerGateway, request_id: str) -> EventRequest:
    """Return the charge of a rejected request to its requester.

    Safe to call again after a failure: the ledger applies a reference once,
    and a request already marked refunded is returned unchanged.
    """
    request = get_request(db, request_id)
    if request.status != RequestStatus.rejected:
        raise InvalidState("Only rejected requests can be refunded")
    if request.payment_status == PaymentStatus.refunded:
        return request

    ledger.refund(request.requester_id, Decimal(request.hsc_charge), f"event-request:{request_id}:refund")
    (
        db.query(EventRequest)
        .filter(EventRequest.request_id == request_id, EventRequest.payment_status == PaymentStatus.paid)
        .update(
            {EventRequest.payment_status: PaymentStatus.refunded, EventRequest.version: EventRequest.version + 1},
            synchronize_session=False,
        )
    )
    db.commit()
    db.refresh(request)
    logger.info("Refunded %s HSC for rejected request %s", request.hsc_charge, request_id)
    return request
