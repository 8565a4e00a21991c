"""Campaign Schemas — Pydantic models for campaign directory endpoints.

Invariants:
    - CampaignCreate.goal_amount: positive, at most 2 decimal places
    - CampaignUpdate accepts title/description only; goal_amount and current_amount
      are rejected as unknown fields (extra="forbid")
    - CampaignResponse.status is derived from amounts, never read from storage

Design Decisions:
    - field_validator for side-effect-free transforms (strip), keeping models pure
    - from_row() builds responses from ORM rows so routes stay one-liners
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from crowdledger.core.domain_types import CampaignStatus
from crowdledger.core.ledger_records import CampaignSnapshot
from crowdledger.core.money import MAX_AMOUNT, from_minor_units
from crowdledger.models.campaign import Campaign


def _strip_non_empty(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("cannot be empty or whitespace")
    return v


class CampaignCreate(BaseModel):
    """Campaign creation — creator comes from the bearer token, not the body."""
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=10_000)
    goal_amount: Decimal = Field(gt=0, le=MAX_AMOUNT, decimal_places=2)

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return _strip_non_empty(v)


class CampaignUpdate(BaseModel):
    """Metadata edit — funding fields are not part of this contract."""
    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1, max_length=10_000)

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str | None) -> str | None:
        return None if v is None else _strip_non_empty(v)

    @model_validator(mode="after")
    def require_some_field(self):
        if self.title is None and self.description is None:
            raise ValueError("provide title and/or description")
        return self


class CampaignResponse(BaseModel):
    """Public campaign data including funding progress."""
    id: UUID
    title: str
    description: str
    goal_amount: Decimal
    current_amount: Decimal
    remaining_amount: Decimal
    status: CampaignStatus
    creator_id: str
    contribution_count: int
    created_at: datetime

    @classmethod
    def from_row(cls, row: Campaign) -> "CampaignResponse":
        goal = from_minor_units(row.goal_cents)
        current = from_minor_units(row.current_cents)
        snapshot = CampaignSnapshot(
            id=row.id, goal_amount=goal, current_amount=current,
            creator_id=row.creator_id, contribution_count=row.contribution_count,
        )
        return cls(
            id=row.id,
            title=row.title,
            description=row.description,
            goal_amount=goal,
            current_amount=current,
            remaining_amount=snapshot.remaining_amount,
            status=snapshot.status,
            creator_id=row.creator_id,
            contribution_count=row.contribution_count,
            created_at=row.created_at,
        )


class CampaignListResponse(BaseModel):
    campaigns: list[CampaignResponse]
    limit: int
    offset: int


class LedgerAuditResponse(BaseModel):
    """Running total reconciled against the contribution log."""
    campaign_id: UUID
    current_amount: Decimal
    recorded_total: Decimal
    contribution_count: int
    recorded_count: int
    consistent: bool


class FundingResponse(BaseModel):
    """Funding progress only, read straight from the ledger store."""
    campaign_id: UUID
    goal_amount: Decimal
    current_amount: Decimal
    remaining_amount: Decimal
    status: CampaignStatus
    contribution_count: int

    @classmethod
    def from_snapshot(cls, snapshot: CampaignSnapshot) -> "FundingResponse":
        return cls(
            campaign_id=snapshot.id,
            goal_amount=snapshot.goal_amount,
            current_amount=snapshot.current_amount,
            remaining_amount=snapshot.remaining_amount,
            status=snapshot.status,
            contribution_count=snapshot.contribution_count,
        )
