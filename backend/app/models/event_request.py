"""EventRequest ORM model: a paid event customization brief and its lifecycle."""
import uuid
import enum
from sqlalchemy import Column, String, Integer, DateTime, JSON, Numeric, Text, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base


def _values(enum_cls):
    return [member.value for member in enum_cls]


class RequestStatus(str, enum.Enum):
    pending = "pending"
    under_review = "under-review"
    approved = "approved"
    rejected = "rejected"
    show_partners_members = "show-partners-members"
    proposal_accepted = "proposal-accepted"


class EventType(str, enum.Enum):
    wedding = "wedding"
    corporate_party = "corporate-party"
    birthday = "birthday"
    conference = "conference"
    concert = "concert"
    other = "other"


class PaymentStatus(str, enum.Enum):
    paid = "paid"
    refunded = "refunded"


class EventRequest(Base):
    __tablename__ = "event_requests"

    request_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    requester_id = Column(String(36), ForeignKey("accounts.account_id"), nullable=False, index=True)

    full_name = Column(String(150), nullable=False)
    email = Column(String(255), nullable=False)
    contact_number = Column(String(50), nullable=False)

    event_type = Column(SAEnum(EventType, values_callable=_values, native_enum=False, length=32), nullable=False)
    event_type_other = Column(String(150), nullable=True)
    number_of_guests = Column(Integer, nullable=False)
    estimated_budget = Column(String(100), nullable=False)
    activities = Column(JSON, nullable=False, default=list)
    special_requests = Column(Text, nullable=True)

    status = Column(
        SAEnum(RequestStatus, values_callable=_values, native_enum=False, length=32),
        nullable=False,
        default=RequestStatus.pending,
        index=True,
    )
    hsc_charge = Column(Numeric(12, 2), nullable=False)
    payment_status = Column(
        SAEnum(PaymentStatus, values_callable=_values, native_enum=False, length=16),
        nullable=False,
        default=PaymentStatus.paid,
    )

    admin_note = Column(Text, nullable=True)
    processed_by = Column(String(36), nullable=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)

    proposal_count = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    proposals = relationship("Proposal", back_populates="request", order_by="Proposal.position")

    @property
    def proposal_ids(self) -> list[str]:
        """Proposal ids in submission order."""
        return [p.proposal_id for p in self.proposals]
