"""Ledger gateway: debits and credits the requester's HSC balance.

The wallet itself lives outside the workflow; the engine only issues charge
and refund calls and treats each one as an atomic black box. ``AccountLedger``
is the bundled implementation: it keeps balances on ``accounts`` and runs
every call in its own session, so the debit is committed (or not) before the
caller persists anything. Each call carries a ``reference`` which makes a
retried charge or refund apply at most once.
"""
import enum
import logging
from decimal import Decimal
from typing import Protocol

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.models.account import Account
from app.models.ledger_entry import LedgerEntry, EntryKind
from app.services.errors import LedgerUnavailable, NotFound

logger = logging.getLogger(__name__)


class ChargeResult(str, enum.Enum):
    ok = "ok"
    insufficient = "insufficient"


class LedgerGateway(Protocol):
    def charge(self, account_id: str, amount: Decimal, reference: str) -> ChargeResult: ...

    def refund(self, account_id: str, amount: Decimal, reference: str) -> None: ...

    def balance(self, account_id: str) -> Decimal: ...


class AccountLedger:
    """Ledger backed by the ``accounts.hsc_balance`` column."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def charge(self, account_id: str, amount: Decimal, reference: str) -> ChargeResult:
        session: Session = self._session_factory()
        try:
            if self._already_applied(session, reference):
                logger.info("Charge %s already applied, skipping", reference)
                return ChargeResult.ok

            debited = (
                session.query(Account)
                .filter(Account.account_id == account_id, Account.hsc_balance >= amount)
                .update({Account.hsc_balance: Account.hsc_balance - amount}, synchronize_session=False)
            )
            if not debited:
                session.rollback()
                if session.get(Account, account_id) is None:
                    raise NotFound(f"Account {account_id} not found")
                logger.warning("Charge of %s HSC declined for account %s", amount, account_id)
                return ChargeResult.insufficient

            session.add(LedgerEntry(account_id=account_id, kind=EntryKind.charge, amount=amount, reference=reference))
            session.commit()
            logger.info("Charged %s HSC to account %s (%s)", amount, account_id, reference)
            return ChargeResult.ok
        except IntegrityError:
            # A concurrent retry with the same reference won; its debit stands.
            session.rollback()
            return ChargeResult.ok
        except SQLAlchemyError as exc:
            session.rollback()
            raise LedgerUnavailable(f"Ledger charge failed: {exc}") from exc
        finally:
            session.close()

    def refund(self, account_id: str, amount: Decimal, reference: str) -> None:
        session: Session = self._session_factory()
        try:
            if self._already_applied(session, reference):
                logger.info("Refund %s already applied, skipping", reference)
                return
            credited = (
                session.query(Account)
                .filter(Account.account_id == account_id)
                .update({Account.hsc_balance: Account.hsc_balance + amount}, synchronize_session=False)
            )
            if not credited:
                session.rollback()
                raise NotFound(f"Account {account_id} not found")
            session.add(LedgerEntry(account_id=account_id, kind=EntryKind.refund, amount=amount, reference=reference))
            session.commit()
            logger.info("Refunded %s HSC to account %s (%s)", amount, account_id, reference)
        except IntegrityError:
            session.rollback()
        except SQLAlchemyError as exc:
            session.rollback()
            raise LedgerUnavailable(f"Ledger refund failed: {exc}") from exc
        finally:
            session.close()

    def balance(self, account_id: str) -> Decimal:
        session: Session = self._session_factory()
        try:
            account = session.get(Account, account_id)
            if account is None:
                raise NotFound(f"Account {account_id} not found")
            return Decimal(account.hsc_balance)
        finally:
            session.close()

    @staticmethod
    def _already_applied(session: Session, reference: str) -> bool:
        return session.query(LedgerEntry).filter(LedgerEntry.reference == reference).first() is not None
