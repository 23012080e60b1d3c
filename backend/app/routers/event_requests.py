"""EventRequest API routes: requester, provider and admin surface of the workflow."""
import logging
from typing import Optional
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_ledger, get_notifier
from app.models.event_request import RequestStatus
from app.schemas.event_request import (
    ChargeOut,
    EventRequestCreate,
    EventRequestCreated,
    EventRequestOut,
    OpenRequestOut,
    TransitionIn,
    TransitionOut,
)
from app.services import eligibility, request_store
from app.services.errors import Forbidden, InvalidTransition, ValidationError, WorkflowError
from app.services.ledger import LedgerGateway
from app.services.lifecycle import RequestEvent
from app.services.notifications import NotificationDispatcher, deliver

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/charge", response_model=ChargeOut)
def get_charge():
    """HSC charged for submitting a customization request."""
    return ChargeOut(charge=request_store.get_charge())


@router.post("/", response_model=EventRequestCreated, status_code=status.HTTP_201_CREATED)
def create_event_request(
    payload: EventRequestCreate,
    db: Session = Depends(get_db),
    ledger: LedgerGateway = Depends(get_ledger),
):
    """Charge the requester and open a new request in ``pending``."""
    fields = payload.model_dump(exclude={"requester_id"})
    request = request_store.create_request(db, ledger, payload.requester_id, fields)
    # The request is already paid and saved; a failed balance read must not undo that.
    try:
        new_balance = ledger.balance(payload.requester_id)
    except WorkflowError:
        logger.exception("Balance read failed after creating request %s", request.request_id)
        new_balance = None
    return EventRequestCreated(
        request_id=request.request_id,
        status=request.status.value,
        hsc_charge=request.hsc_charge,
        new_balance=new_balance,
    )


@router.get("/mine", response_model=list[EventRequestOut])
def my_requests(
    requester_id: str = Query(...),
    status_filter: Optional[str] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    """The requester's own requests, optionally filtered by status."""
    parsed = None
    if status_filter and status_filter != "all":
        try:
            parsed = RequestStatus(status_filter)
        except ValueError:
            raise ValidationError(f"Unknown status filter: {status_filter}", {"status": "invalid"})
    return request_store.list_by_owner(db, requester_id, parsed)


@router.get("/open", response_model=list[OpenRequestOut])
def open_requests(actor_id: str = Query(...), db: Session = Depends(get_db)):
    """Requests open to providers; active partners and members only."""
    return eligibility.list_open_requests(db, actor_id)


@router.get("/{request_id}", response_model=None)
def get_event_request(
    request_id: str, actor_id: str = Query(...), db: Session = Depends(get_db)
) -> EventRequestOut | OpenRequestOut:
    """Request details for its owner, or for an eligible provider while it is open."""
    request = request_store.get_request(db, request_id)
    if request.requester_id != actor_id:
        if request.status != RequestStatus.show_partners_members:
            raise Forbidden("This request is not open to providers")
        eligibility.require_eligible(db, actor_id)
        return OpenRequestOut.model_validate(request)
    return EventRequestOut.model_validate(request)


@router.post("/{request_id}/transition", response_model=TransitionOut)
def admin_transition(
    request_id: str,
    payload: TransitionIn,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    ledger: LedgerGateway = Depends(get_ledger),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    """Apply an administrative lifecycle event (review, approve, reject, open-to-providers)."""
    try:
        event = RequestEvent(payload.event)
    except ValueError:
        raise InvalidTransition(f"Unknown lifecycle event: {payload.event}")
    request, notices = request_store.transition_request(
        db, ledger, request_id, event, admin_id=payload.admin_id, note=payload.note
    )
    background_tasks.add_task(deliver, notifier, notices)
    return TransitionOut(
        request_id=request.request_id,
        status=request.status.value,
        payment_status=request.payment_status.value,
    )


@router.post("/{request_id}/refund", response_model=TransitionOut)
def refund_rejected_request(
    request_id: str,
    db: Session = Depends(get_db),
    ledger: LedgerGateway = Depends(get_ledger),
):
    """Return the charge of a rejected request (admin; retry-safe)."""
    request = request_store.settle_refund(db, ledger, request_id)
    return TransitionOut(
        request_id=request.request_id,
        status=request.status.value,
        payment_status=request.payment_status.value,
    )
