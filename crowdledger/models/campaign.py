"""Campaign ORM — persists funding state and directory metadata for one campaign.

Invariants:
    - id is UUID primary key
    - goal_cents > 0 and immutable after insert
    - 0 <= current_cents <= goal_cents (CHECK constraint backs the ledger's guarded update)
    - current_cents, contribution_count, last_contributed_at written only by the ledger store
    - contribution_count equals the number of rows in contributions for this campaign

Design Decisions:
    - Integer minor units (cents) over Numeric: guarded arithmetic in SQL is exact on
      every backend, including SQLite in tests
    - contribution_count doubles as the optimistic version for compare-and-swap
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger, CheckConstraint, DateTime, Integer, String, Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from crowdledger.db.base import Base


class Campaign(Base):
    """Campaign aggregate root — owns its contribution log."""
    __tablename__ = "campaigns"
    __table_args__ = (
        CheckConstraint("goal_cents > 0", name="ck_campaigns_goal_positive"),
        CheckConstraint(
            "current_cents >= 0 AND current_cents <= goal_cents",
            name="ck_campaigns_current_within_goal",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    goal_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    current_cents: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0,
    )
    contribution_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    creator_id: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    last_contributed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )

    contributions: Mapped[list["Contribution"]] = relationship(
        "Contribution", back_populates="campaign",
        order_by="Contribution.sequence", lazy="noload",
    )
