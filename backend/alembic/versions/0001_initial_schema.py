"""initial_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for the event customization workflow:
accounts, event_requests, proposals, request_transitions,
ledger_entries, notifications.
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- accounts ---
    op.create_table(
        "accounts",
        sa.Column("account_id", sa.String(36), primary_key=True),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hsc_balance", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("is_partner", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("partner_expiration_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_member", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("membership_expiration_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # --- event_requests ---
    op.create_table(
        "event_requests",
        sa.Column("request_id", sa.String(36), primary_key=True),
        sa.Column("requester_id", sa.String(36), sa.ForeignKey("accounts.account_id"), nullable=False),
        sa.Column("full_name", sa.String(150), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("contact_number", sa.String(50), nullable=False),
        sa.Column("event_type", sa.String(32), nullable=False),
        sa.Column("event_type_other", sa.String(150), nullable=True),
        sa.Column("number_of_guests", sa.Integer, nullable=False),
        sa.Column("estimated_budget", sa.String(100), nullable=False),
        sa.Column("activities", sa.JSON, nullable=False),
        sa.Column("special_requests", sa.Text, nullable=True),
        sa.Column("status", sa.String(32), nullable=False, server_default="pending"),
        sa.Column("hsc_charge", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_status", sa.String(16), nullable=False, server_default="paid"),
        sa.Column("admin_note", sa.Text, nullable=True),
        sa.Column("processed_by", sa.String(36), nullable=True),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("proposal_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_event_requests_requester_id", "event_requests", ["requester_id"])
    op.create_index("ix_event_requests_status", "event_requests", ["status"])

    # --- proposals ---
    op.create_table(
        "proposals",
        sa.Column("proposal_id", sa.String(36), primary_key=True),
        sa.Column("request_id", sa.String(36), sa.ForeignKey("event_requests.request_id"), nullable=False),
        sa.Column("provider_id", sa.String(36), nullable=False),
        sa.Column("provider_name", sa.String(100), nullable=False),
        sa.Column("provider_email", sa.String(255), nullable=False),
        sa.Column("document_ref", sa.String(1024), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="pending"),
        sa.Column("position", sa.Integer, nullable=False),
        sa.Column("submitted_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("decided_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("request_id", "provider_id", name="uq_proposals_request_provider"),
    )
    op.create_index("ix_proposals_request_id", "proposals", ["request_id"])

    # --- request_transitions ---
    op.create_table(
        "request_transitions",
        sa.Column("transition_id", sa.String(36), primary_key=True),
        sa.Column("request_id", sa.String(36), sa.ForeignKey("event_requests.request_id"), nullable=False),
        sa.Column("event", sa.String(32), nullable=False),
        sa.Column("from_status", sa.String(32), nullable=True),
        sa.Column("to_status", sa.String(32), nullable=False),
        sa.Column("actor_id", sa.String(36), nullable=True),
        sa.Column("note", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_request_transitions_request_id", "request_transitions", ["request_id"])

    # --- ledger_entries ---
    op.create_table(
        "ledger_entries",
        sa.Column("entry_id", sa.String(36), primary_key=True),
        sa.Column("account_id", sa.String(36), sa.ForeignKey("accounts.account_id"), nullable=False),
        sa.Column("kind", sa.String(16), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("reference", sa.String(255), nullable=False, unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_ledger_entries_account_id", "ledger_entries", ["account_id"])

    # --- notifications ---
    op.create_table(
        "notifications",
        sa.Column("notification_id", sa.String(36), primary_key=True),
        sa.Column("account_id", sa.String(36), nullable=False),
        sa.Column("kind", sa.String(64), nullable=False),
        sa.Column("payload", sa.JSON, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_notifications_account_id", "notifications", ["account_id"])


def downgrade() -> None:
    op.drop_table("notifications")
    op.drop_table("ledger_entries")
    op.drop_table("request_transitions")
    op.drop_table("proposals")
    op.drop_table("event_requests")
    op.drop_table("accounts")
