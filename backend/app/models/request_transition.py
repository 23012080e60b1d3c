"""RequestTransition ORM model: audit ledger of EventRequest lifecycle changes."""
import uuid
from sqlalchemy import Column, String, DateTime, Text, ForeignKey
from sqlalchemy.sql import func
from app.database import Base


class RequestTransition(Base):
    __tablename__ = "request_transitions"

    transition_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    request_id = Column(String(36), ForeignKey("event_requests.request_id"), nullable=False, index=True)
    event = Column(String(32), nullable=False)
    from_status = Column(String(32), nullable=True)  # None for create
    to_status = Column(String(32), nullable=False)
    actor_id = Column(String(36), nullable=True)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
