"""Proposal API routes: provider submissions and the requester's accept decision."""
import logging
from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_notifier
from app.schemas.proposal import AcceptIn, AcceptOut, ProposalOut, ProposalSubmit, ProposalSubmitted
from app.services import proposal_coordinator
from app.services.notifications import NotificationDispatcher, Notice, deliver

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/{request_id}/proposals",
    response_model=ProposalSubmitted,
    status_code=status.HTTP_201_CREATED,
)
def submit_proposal(
    request_id: str,
    payload: ProposalSubmit,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    """Submit a proposal to an open request (active partners/members, once per request)."""
    proposal = proposal_coordinator.submit_proposal(db, request_id, payload.provider_id, payload.document_ref)
    background_tasks.add_task(deliver, notifier, [
        Notice(proposal.request.requester_id, "proposal_received", {
            "request_id": request_id,
            "proposal_id": proposal.proposal_id,
            "provider_name": proposal.provider_name,
        }),
    ])
    return ProposalSubmitted(
        proposal_id=proposal.proposal_id,
        request_id=proposal.request_id,
        status=proposal.status.value,
    )


@router.get("/{request_id}/proposals", response_model=list[ProposalOut])
def list_proposals(request_id: str, actor_id: str = Query(...), db: Session = Depends(get_db)):
    """Proposals on a request in submission order; requester only."""
    return proposal_coordinator.list_proposals(db, request_id, actor_id)


@router.post("/{request_id}/proposals/{proposal_id}/accept", response_model=AcceptOut)
def accept_proposal(
    request_id: str,
    proposal_id: str,
    payload: AcceptIn,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: NotificationDispatcher = Depends(get_notifier),
):
    """Accept one proposal; every other pending proposal is rejected with it."""
    outcome = proposal_coordinator.accept_proposal(db, request_id, proposal_id, payload.requester_id)
    background_tasks.add_task(deliver, notifier, outcome.notices)
    return AcceptOut(
        request_id=outcome.request_id,
        status=outcome.status.value,
        accepted_proposal_id=outcome.accepted_proposal_id,
        rejected_proposal_ids=outcome.rejected_proposal_ids,
    )
