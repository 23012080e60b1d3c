"""Account ORM model: stand-in for the identity service's user record.

Carries the HSC wallet balance (written only by the ledger) and the
partner/member status the eligibility gate reads.
"""
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Numeric
from sqlalchemy.sql import func
from app.database import Base


class Account(Base):
    __tablename__ = "accounts"

    account_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    display_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False)
    hsc_balance = Column(Numeric(12, 2), nullable=False, default=0)
    is_partner = Column(Boolean, nullable=False, default=False)
    partner_expiration_date = Column(DateTime(timezone=True), nullable=True)
    is_member = Column(Boolean, nullable=False, default=False)
    membership_expiration_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
