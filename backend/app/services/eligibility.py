"""Eligibility gate: who may see and act on the open-requests pool.

A provider is eligible while at least one of its tiers is active:
partner (``is_partner`` with a future partner expiration) or member
(``is_member`` with a future membership expiration). The check runs on every
state-changing call, so a membership that lapses between listing and
submitting is refused at submission.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from app.models.account import Account
from app.models.event_request import EventRequest, RequestStatus
from app.services.errors import Forbidden

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderStatus:
    is_partner: bool = False
    partner_expiration: Optional[datetime] = None
    is_member: bool = False
    membership_expiration: Optional[datetime] = None

    @classmethod
    def from_account(cls, account: Account) -> "ProviderStatus":
        return cls(
            is_partner=bool(account.is_partner),
            partner_expiration=account.partner_expiration_date,
            is_member=bool(account.is_member),
            membership_expiration=account.membership_expiration_date,
        )


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _tier_active(flag: bool, expiration: Optional[datetime], now: datetime) -> bool:
    return bool(flag) and expiration is not None and _as_utc(expiration) > now


def is_eligible(provider: ProviderStatus, now: Optional[datetime] = None) -> bool:
    now = _as_utc(now) if now else datetime.now(timezone.utc)
    return _tier_active(provider.is_partner, provider.partner_expiration, now) or _tier_active(
        provider.is_member, provider.membership_expiration, now
    )


def require_eligible(db: Session, actor_id: str, now: Optional[datetime] = None) -> Account:
    """Load the actor's account and fail ``Forbidden`` unless it is an active provider."""
    account = db.query(Account).filter(Account.account_id == actor_id).first()
    if account is None or not is_eligible(ProviderStatus.from_account(account), now):
        logger.info("Account %s refused: no active partner or member status", actor_id)
        raise Forbidden("Only active partners or members may access open event requests")
    return account


def list_open_requests(db: Session, actor_id: str, now: Optional[datetime] = None) -> list[EventRequest]:
    """Requests currently open to providers, oldest first.

    Callers project these through a schema that exposes ``proposal_count``
    but not competitors' proposals.
    """
    require_eligible(db, actor_id, now)
    return (
        db.query(EventRequest)
        .filter(EventRequest.status == RequestStatus.show_partners_members)
        .order_by(EventRequest.created_at)
        .all()
    )
