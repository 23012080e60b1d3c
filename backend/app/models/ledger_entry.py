"""LedgerEntry ORM model: charges and refunds applied by the bundled HSC ledger."""
import uuid
import enum
from sqlalchemy import Column, String, DateTime, Numeric, ForeignKey, Enum as SAEnum
from sqlalchemy.sql import func
from app.database import Base


class EntryKind(str, enum.Enum):
    charge = "charge"
    refund = "refund"


class LedgerEntry(Base):
    __tablename__ = "ledger_entries"

    entry_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    account_id = Column(String(36), ForeignKey("accounts.account_id"), nullable=False, index=True)
    kind = Column(SAEnum(EntryKind, native_enum=False, length=16), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    reference = Column(String(255), nullable=False, unique=True)  # idempotency key
    created_at = Column(DateTime(timezone=True), server_default=func.now())
