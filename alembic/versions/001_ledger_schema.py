"""Ledger schema — campaigns with funding columns, append-only contributions.

Revision ID: 001_ledger_schema
Revises: None
Create Date: 2026-10-19

Amounts are integer cents. The CHECK constraints back the ledger's guarded
update: even a buggy writer cannot push current_cents past goal_cents.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_ledger_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "campaigns",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("goal_cents", sa.BigInteger, nullable=False),
        sa.Column("current_cents", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("contribution_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("creator_id", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("last_contributed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_campaigns"),
        sa.CheckConstraint("goal_cents > 0", name="ck_campaigns_goal_positive"),
        sa.CheckConstraint(
            "current_cents >= 0 AND current_cents <= goal_cents",
            name="ck_campaigns_current_within_goal",
        ),
    )

    op.create_table(
        "contributions",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("campaign_id", UUID(as_uuid=True), sa.ForeignKey("campaigns.id", name="fk_contributions_campaign_id_campaigns"), nullable=False),
        sa.Column("contributor_id", sa.Text, nullable=False),
        sa.Column("amount_cents", sa.BigInteger, nullable=False),
        sa.Column("sequence", sa.Integer, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_contributions"),
        sa.UniqueConstraint("campaign_id", "sequence", name="uq_contributions_campaign_sequence"),
        sa.CheckConstraint("amount_cents > 0", name="ck_contributions_amount_positive"),
    )
    op.create_index(
        "ix_contributions_campaign_id", "contributions", ["campaign_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_contributions_campaign_id", table_name="contributions")
    op.drop_table("contributions")
    op.drop_table("campaigns")
