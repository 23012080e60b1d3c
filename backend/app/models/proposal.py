"""Proposal ORM model: a provider's competing response to an open EventRequest."""
import uuid
import enum
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, UniqueConstraint, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


class ProposalStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


class Proposal(Base):
    __tablename__ = "proposals"
    __table_args__ = (
        UniqueConstraint("request_id", "provider_id", name="uq_proposals_request_provider"),
    )

    proposal_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    request_id = Column(String(36), ForeignKey("event_requests.request_id"), nullable=False, index=True)
    provider_id = Column(String(36), nullable=False)
    # Snapshot of the provider profile at submission time
    provider_name = Column(String(100), nullable=False)
    provider_email = Column(String(255), nullable=False)
    document_ref = Column(String(1024), nullable=False)
    status = Column(
        SAEnum(ProposalStatus, values_callable=lambda e: [m.value for m in e], native_enum=False, length=16),
        nullable=False,
        default=ProposalStatus.pending,
    )
    position = Column(Integer, nullable=False)
    submitted_at = Column(DateTime(timezone=True), server_default=func.now())
    decided_at = Column(DateTime(timezone=True), nullable=True)

    request = relationship("EventRequest", back_populates="proposals")
