"""Proposal coordinator: submissions and the accept-one-reject-rest protocol.

Responsibilities:
- One proposal per (request, provider), checked up front and backed by a
  unique constraint for submissions that race past the check
- Submissions serialized per request through a conditional bump of
  ``event_requests.proposal_count`` guarded on the open status
- Acceptance as one transaction: request CAS to proposal-accepted, the
  winner accepted, every other pending proposal rejected
- Eligibility re-checked at submission time, not only when listing
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models.event_request import EventRequest, RequestStatus
from app.models.proposal import Proposal, ProposalStatus
from app.services.eligibility import require_eligible
from app.services.errors import DuplicateSubmission, Forbidden, InvalidState, NotFound, ValidationError
from app.services.lifecycle import RequestEvent, compare_and_set_status, record_transition
from app.services.notifications import Notice

logger = logging.getLogger(__name__)


@dataclass
class AcceptOutcome:
    request_id: str
    status: RequestStatus
    accepted_proposal_id: str
    rejected_proposal_ids: list[str] = field(default_factory=list)
    notices: list[Notice] = field(default_factory=list)


def _get_request(db: Session, request_id: str) -> EventRequest:
    request = db.query(EventRequest).filter(EventRequest.request_id == request_id).first()
    if not request:
        raise NotFound("Event request not found")
    return request


def submit_proposal(
    db: Session,
    request_id: str,
    provider_id: str,
    document_ref: str,
    now: Optional[datetime] = None,
) -> Proposal:
    """Submit a provider's proposal to an open request."""
    if not document_ref or not document_ref.strip():
        raise ValidationError("A proposal document is required", {"document_ref": "required"})

    request = _get_request(db, request_id)
    if request.status != RequestStatus.show_partners_members:
        raise InvalidState(f"Event request is {request.status.value} and does not accept proposals")

    provider = require_eligible(db, provider_id, now)

    existing = (
        db.query(Proposal)
        .filter(Proposal.request_id == request_id, Proposal.provider_id == provider_id)
        .first()
    )
    if existing:
        raise DuplicateSubmission("You have already submitted a proposal for this request")

    # Serialization point: takes the request row and re-checks it is still open.
    touched = (
        db.query(EventRequest)
        .filter(
            EventRequest.request_id == request_id,
            EventRequest.status == RequestStatus.show_partners_members,
        )
        .update(
            {
                EventRequest.proposal_count: EventRequest.proposal_count + 1,
                EventRequest.version: EventRequest.version + 1,
            },
            synchronize_session=False,
        )
    )
    if touched != 1:
        db.rollback()
        raise InvalidState("Event request is no longer accepting proposals")

    position = (
        db.query(EventRequest.proposal_count).filter(EventRequest.request_id == request_id).scalar()
    )
    proposal = Proposal(
        request_id=request_id,
        provider_id=provider_id,
        provider_name=provider.display_name,
        provider_email=provider.email,
        document_ref=document_ref.strip(),
        status=ProposalStatus.pending,
        position=position,
        submitted_at=now or datetime.now(timezone.utc),
    )
    db.add(proposal)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateSubmission("You have already submitted a proposal for this request") from exc
    db.refresh(proposal)
    logger.info("Proposal %s submitted to request %s by provider %s", proposal.proposal_id, request_id, provider_id)
    return proposal


def list_proposals(db: Session, request_id: str, actor_id: str) -> list[Proposal]:
    """All proposals on a request in submission order; visible to its owner only."""
    request = _get_request(db, request_id)
    if request.requester_id != actor_id:
        raise Forbidden("Only the requester may view proposals for this request")
    return (
        db.query(Proposal)
        .filter(Proposal.request_id == request_id)
        .order_by(Proposal.position)
        .all()
    )


def accept_proposal(db: Session, request_id: str, proposal_id: str, requester_id: str) -> AcceptOutcome:
    """Accept one proposal and close out every competitor in the same transaction."""
    request = _get_request(db, request_id)
    if request.requester_id != requester_id:
        raise Forbidden("Only the requester may accept a proposal")
    if request.status != RequestStatus.show_partners_members:
        raise InvalidState(f"Event request is {request.status.value}; a proposal can no longer be accepted")

    proposal = (
        db.query(Proposal)
        .filter(Proposal.proposal_id == proposal_id, Proposal.request_id == request_id)
        .first()
    )
    if not proposal or proposal.status != ProposalStatus.pending:
        raise NotFound("No pending proposal with that id on this request")
    winner_provider_id = proposal.provider_id

    now = datetime.now(timezone.utc)
    if not compare_and_set_status(
        db, request_id, RequestStatus.show_partners_members, RequestStatus.proposal_accepted
    ):
        db.rollback()
        raise InvalidState("Another proposal was accepted or the request was closed")

    won = (
        db.query(Proposal)
        .filter(
            Proposal.proposal_id == proposal_id,
            Proposal.request_id == request_id,
            Proposal.status == ProposalStatus.pending,
        )
        .update({Proposal.status: ProposalStatus.accepted, Proposal.decided_at: now}, synchronize_session=False)
    )
    if won != 1:
        db.rollback()
        raise NotFound("No pending proposal with that id on this request")

    rejected = close_pending_proposals(db, request_id, now)
    record_transition(
        db,
        request_id,
        RequestEvent.proposal_accepted,
        RequestStatus.show_partners_members,
        RequestStatus.proposal_accepted,
        actor_id=requester_id,
        note=f"Accepted proposal {proposal_id}",
    )
    db.commit()
    logger.info(
        "Proposal %s accepted on request %s; %d competitor(s) rejected", proposal_id, request_id, len(rejected)
    )

    notices = [
        Notice(winner_provider_id, "proposal_accepted", {"request_id": request_id, "proposal_id": proposal_id}),
        Notice(requester_id, "proposal_accepted_confirmation", {"request_id": request_id, "proposal_id": proposal_id}),
    ]
    notices += [
        Notice(provider_id, "proposal_rejected", {"request_id": request_id, "proposal_id": rejected_id})
        for rejected_id, provider_id in rejected
    ]
    return AcceptOutcome(
        request_id=request_id,
        status=RequestStatus.proposal_accepted,
        accepted_proposal_id=proposal_id,
        rejected_proposal_ids=[rejected_id for rejected_id, _ in rejected],
        notices=notices,
    )


def close_pending_proposals(db: Session, request_id: str, now: datetime) -> list[tuple[str, str]]:
    """Reject every still-pending proposal on a request, within the caller's transaction.

    Returns ``(proposal_id, provider_id)`` pairs. Only safe once the request row
    has been moved off show-partners-members in the same transaction, since that
    is what stops new submissions from landing.
    """
    pending = (
        db.query(Proposal.proposal_id, Proposal.provider_id)
        .filter(Proposal.request_id == request_id, Proposal.status == ProposalStatus.pending)
        .all()
    )
    if pending:
        (
            db.query(Proposal)
            .filter(Proposal.request_id == request_id, Proposal.status == ProposalStatus.pending)
            .update({Proposal.status: ProposalStatus.rejected, Proposal.decided_at: now}, synchronize_session=False)
        )
    return [(row.proposal_id, row.provider_id) for row in pending]
