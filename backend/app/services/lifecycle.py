"""EventRequest lifecycle: the transition table and its compare-and-swap.

``TRANSITIONS`` is the single authority on which status changes exist. Every
change is applied as ``UPDATE ... WHERE request_id = :id AND status = :expected``
so two actors racing on the same request cannot both succeed; the loser sees
zero affected rows. Requests never contend with each other.
"""
import enum
import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.models.event_request import EventRequest, RequestStatus
from app.models.request_transition import RequestTransition

logger = logging.getLogger(__name__)


class RequestEvent(str, enum.Enum):
    create = "create"
    review = "review"
    approve = "approve"
    reject = "reject"
    open_to_providers = "open-to-providers"
    proposal_accepted = "proposal-accepted"


# Events an administrator may apply directly; proposal-accepted only happens
# as part of accepting a proposal.
ADMIN_EVENTS = frozenset({
    RequestEvent.review,
    RequestEvent.approve,
    RequestEvent.reject,
    RequestEvent.open_to_providers,
})

TRANSITIONS: dict[tuple[RequestStatus, RequestEvent], RequestStatus] = {
    (RequestStatus.pending, RequestEvent.review): RequestStatus.under_review,
    (RequestStatus.under_review, RequestEvent.approve): RequestStatus.approved,
    (RequestStatus.under_review, RequestEvent.reject): RequestStatus.rejected,
    (RequestStatus.under_review, RequestEvent.open_to_providers): RequestStatus.show_partners_members,
    (RequestStatus.show_partners_members, RequestEvent.reject): RequestStatus.rejected,
    (RequestStatus.show_partners_members, RequestEvent.proposal_accepted): RequestStatus.proposal_accepted,
}

TERMINAL_STATUSES = frozenset({RequestStatus.rejected, RequestStatus.proposal_accepted})


def next_status(current: RequestStatus, event: RequestEvent) -> Optional[RequestStatus]:
    """Target status for ``event`` from ``current``, or None when no edge exists."""
    if RequestStatus(current) in TERMINAL_STATUSES:
        return None
    return TRANSITIONS.get((RequestStatus(current), RequestEvent(event)))


def compare_and_set_status(
    db: Session,
    request_id: str,
    expected: RequestStatus,
    target: RequestStatus,
    extra: Optional[dict[str, Any]] = None,
) -> bool:
    """Move ``request_id`` from ``expected`` to ``target`` inside the caller's transaction.

    Returns False when the row is no longer in ``expected``. The caller owns the
    commit/rollback.
    """
    values: dict[Any, Any] = {
        EventRequest.status: target,
        EventRequest.version: EventRequest.version + 1,
        EventRequest.updated_at: datetime.now(timezone.utc),
    }
    for column, value in (extra or {}).items():
        values[getattr(EventRequest, column)] = value

    updated = (
        db.query(EventRequest)
        .filter(EventRequest.request_id == request_id, EventRequest.status == expected)
        .update(values, synchronize_session=False)
    )
    if updated != 1:
        logger.warning(
            "Lost status race on request %s: expected %s, wanted %s", request_id, expected.value, target.value
        )
        return False
    return True


def record_transition(
    db: Session,
    request_id: str,
    event: RequestEvent,
    from_status: Optional[RequestStatus],
    to_status: RequestStatus,
    actor_id: Optional[str] = None,
    note: Optional[str] = None,
) -> RequestTransition:
    entry = RequestTransition(
        request_id=request_id,
        event=event.value,
        from_status=from_status.value if from_status else None,
        to_status=to_status.value,
        actor_id=actor_id,
        note=note,
    )
    db.add(entry)
    return entry
