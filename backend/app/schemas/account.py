"""Pydantic schemas for Accounts."""
from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel


class AccountCreate(BaseModel):
    display_name: str
    email: str
    hsc_balance: Decimal = Decimal("0")
    is_partner: bool = False
    partner_expiration_date: Optional[datetime] = None
    is_member: bool = False
    membership_expiration_date: Optional[datetime] = None


class ProviderStatusUpdate(BaseModel):
    display_name: Optional[str] = None
    email: Optional[str] = None
    is_partner: Optional[bool] = None
    partner_expiration_date: Optional[datetime] = None
    is_member: Optional[bool] = None
    membership_expiration_date: Optional[datetime] = None


class AccountOut(BaseModel):
    account_id: str
    display_name: str
    email: str
    hsc_balance: Decimal
    is_partner: bool
    partner_expiration_date: Optional[datetime] = None
    is_member: bool
    membership_expiration_date: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}
