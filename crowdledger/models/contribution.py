"""Contribution ORM — one immutable entry in a campaign's append-only log.

Invariants:
    - Always belongs to a Campaign (campaign_id FK, no cascade: campaigns with
      contributions are never deleted)
    - amount_cents > 0
    - (campaign_id, sequence) unique; sequence is the 1-based insertion position
    - Rows are inserted once and never updated or deleted
    - contributor_id is the opaque caller id from the token, unbounded (Text)

Design Decisions:
    - sequence over created_at for ordering: clock ties cannot reorder the log
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger, CheckConstraint, DateTime, ForeignKey, Integer, Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from crowdledger.db.base import Base


class Contribution(Base):
    """Contribution entity — an accepted payment toward a campaign goal."""
    __tablename__ = "contributions"
    __table_args__ = (
        UniqueConstraint(
            "campaign_id", "sequence", name="uq_contributions_campaign_sequence",
        ),
        CheckConstraint("amount_cents > 0", name="ck_contributions_amount_positive"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    campaign_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("campaigns.id"),
        nullable=False, index=True,
    )
    contributor_id: Mapped[str] = mapped_column(Text, nullable=False)
    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    campaign: Mapped["Campaign"] = relationship(
        "Campaign", back_populates="contributions",
    )
