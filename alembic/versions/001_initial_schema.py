"""Initial schema — registry state, tokens, totals, invoice index, ledger, roster, events.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

Amount columns are VARCHAR(78): base-10 text of a uint256 (see db/types.py).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "registry_state",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=False),
        sa.Column("next_token_id", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("base_locator", sa.String(2000), nullable=False, server_default=""),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "tokens",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=False),
        sa.Column("owner", sa.String(42), nullable=False),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("suffix", sa.String(1000), nullable=False),
        sa.Column("minted_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_tokens_owner", "tokens", ["owner"])

    op.create_table(
        "donor_totals",
        sa.Column("donor", sa.String(42), primary_key=True),
        sa.Column("total", sa.String(78), nullable=False, server_default="0"),
    )

    op.create_table(
        "invoice_tokens",
        sa.Column("donor", sa.String(42), primary_key=True),
        sa.Column("token_id", sa.BigInteger, sa.ForeignKey("tokens.id"), nullable=False),
    )

    op.create_table(
        "donation_records",
        sa.Column("donor", sa.String(42), primary_key=True),
        sa.Column("amount", sa.String(78), nullable=False, server_default="0"),
        sa.Column("verified", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("invoice_id", sa.String(200), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "donor_roster",
        sa.Column("position", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("donor", sa.String(42), nullable=False, unique=True),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "ledger_events",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("event_type", sa.String(20), nullable=False),
        sa.Column("donor", sa.String(42), nullable=False),
        sa.Column("token_id", sa.BigInteger, nullable=False),
        sa.Column("amount", sa.String(78), nullable=True),
        sa.Column("invoice_id", sa.String(200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_ledger_events_donor", "ledger_events", ["donor"])


def downgrade() -> None:
    op.drop_index("ix_ledger_events_donor", table_name="ledger_events")
    op.drop_table("ledger_events")
    op.drop_table("donor_roster")
    op.drop_table("donation_records")
    op.drop_table("invoice_tokens")
    op.drop_table("donor_totals")
    op.drop_index("ix_tokens_owner", table_name="tokens")
    op.drop_table("tokens")
    op.drop_table("registry_state")
