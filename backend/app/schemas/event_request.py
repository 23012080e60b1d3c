"""Pydantic schemas for EventRequests.

Field checks beyond basic types live in ``request_store.validate_fields`` so
non-HTTP callers get the same rules.
"""
from __future__ import annotations
from datetime import datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel


class EventRequestCreate(BaseModel):
    requester_id: str
    full_name: str
    email: str
    contact_number: str
    event_type: str  # wedding, corporate-party, birthday, conference, concert, other
    event_type_other: Optional[str] = None
    number_of_guests: int = 1
    estimated_budget: str
    activities: list[str] = []
    special_requests: Optional[str] = None


class EventRequestCreated(BaseModel):
    request_id: str
    status: str
    hsc_charge: Decimal
    new_balance: Optional[Decimal] = None


class ChargeOut(BaseModel):
    charge: Decimal


class EventRequestOut(BaseModel):
    request_id: str
    requester_id: str
    full_name: str
    email: str
    contact_number: str
    event_type: str
    event_type_other: Optional[str] = None
    number_of_guests: int
    estimated_budget: str
    activities: list[str] = []
    special_requests: Optional[str] = None
    status: str
    hsc_charge: Decimal
    payment_status: str
    admin_note: Optional[str] = None
    processed_by: Optional[str] = None
    processed_at: Optional[datetime] = None
    proposal_ids: list[str] = []
    proposal_count: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OpenRequestOut(BaseModel):
    """What providers see: the brief and how many proposals exist, not the proposals."""

    request_id: str
    event_type: str
    event_type_other: Optional[str] = None
    number_of_guests: int
    estimated_budget: str
    activities: list[str] = []
    special_requests: Optional[str] = None
    status: str
    proposal_count: int
    created_at: datetime

    model_config = {"from_attributes": True}


class TransitionIn(BaseModel):
    event: str  # review, approve, reject, open-to-providers
    admin_id: Optional[str] = None
    note: Optional[str] = None


class TransitionOut(BaseModel):
    request_id: str
    status: str
    payment_status: str
