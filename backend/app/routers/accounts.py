"""Account API routes: stand-in for the identity service."""
import logging
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.account import Account
from app.schemas.account import AccountCreate, ProviderStatusUpdate, AccountOut
from app.services.errors import NotFound

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=AccountOut, status_code=status.HTTP_201_CREATED)
def create_account(payload: AccountCreate, db: Session = Depends(get_db)):
    """Create an account with an opening HSC balance and provider status."""
    account = Account(**payload.model_dump())
    db.add(account)
    db.commit()
    db.refresh(account)
    logger.info("Created account %s (%s)", account.account_id, account.display_name)
    return account


@router.get("/{account_id}", response_model=AccountOut)
def get_account(account_id: str, db: Session = Depends(get_db)):
    """Fetch a single account by ID."""
    account = db.query(Account).filter(Account.account_id == account_id).first()
    if not account:
        raise NotFound("Account not found")
    return account


@router.patch("/{account_id}", response_model=AccountOut)
def update_account(account_id: str, payload: ProviderStatusUpdate, db: Session = Depends(get_db)):
    """Update profile or partner/member status (partial update). The balance is ledger-owned."""
    account = db.query(Account).filter(Account.account_id == account_id).first()
    if not account:
        raise NotFound("Account not found")
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(account, field, value)
    db.commit()
    db.refresh(account)
    logger.info("Updated account %s", account_id)
    return account
