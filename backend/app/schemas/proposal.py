"""Pydantic schemas for Proposals and proposal documents."""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class ProposalSubmit(BaseModel):
    provider_id: str
    document_ref: str


class ProposalSubmitted(BaseModel):
    proposal_id: str
    request_id: str
    status: str


class ProposalOut(BaseModel):
    proposal_id: str
    request_id: str
    provider_id: str
    provider_name: str
    provider_email: str
    document_ref: str
    status: str
    position: int
    submitted_at: datetime
    decided_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AcceptIn(BaseModel):
    requester_id: str


class AcceptOut(BaseModel):
    request_id: str
    status: str
    accepted_proposal_id: str
    rejected_proposal_ids: list[str] = []


class DocumentUpload(BaseModel):
    filename: Optional[str] = None
    content_type: str
    content_base64: str


class DocumentOut(BaseModel):
    url: str
    size: int
