"""Contribution Schemas — request/response models for the ledger endpoints.

Invariants:
    - ContributionCreate takes amount as raw JSON and leaves judging it to the ledger
      (INVALID_AMOUNT), never to schema validation
    - A missing amount is still a VALIDATION_ERROR; null, "abc", "NaN" or true are INVALID_AMOUNT
    - campaign_id is taken as a string: malformed ids resolve to CAMPAIGN_NOT_FOUND
    - Contributor identity never comes from the body, only from the bearer token

Design Decisions:
    - Decimal in responses: serialized as strings by Pydantic, no float rounding on the wire
"""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from crowdledger.core.domain_types import CampaignStatus
from crowdledger.core.ledger_records import ContributionReceipt, ContributionRecord


class ContributionCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    campaign_id: str = Field(
        min_length=1, max_length=64,
        validation_alias=AliasChoices("campaign_id", "campaignId"),
    )
    amount: Any


class ContributionReceiptResponse(BaseModel):
    """Returned on a successful contribution."""
    message: str = "Contribution successful"
    contribution_id: UUID
    campaign_id: UUID
    amount: Decimal
    created_at: datetime
    current_amount: Decimal
    goal_amount: Decimal
    status: CampaignStatus

    @classmethod
    def from_receipt(cls, receipt: ContributionReceipt) -> "ContributionReceiptResponse":
        return cls(
            contribution_id=receipt.contribution_id,
            campaign_id=receipt.campaign_id,
            amount=receipt.amount,
            created_at=receipt.created_at,
            current_amount=receipt.current_amount,
            goal_amount=receipt.goal_amount,
            status=receipt.status,
        )


class ContributionResponse(BaseModel):
    """One entry of a campaign's contribution log."""
    id: UUID
    campaign_id: UUID
    contributor_id: str
    amount: Decimal
    sequence: int
    created_at: datetime

    @classmethod
    def from_record(cls, record: ContributionRecord) -> "ContributionResponse":
        return cls(
            id=record.id,
            campaign_id=record.campaign_id,
            contributor_id=record.contributor_id,
            amount=record.amount,
            sequence=record.sequence,
            created_at=record.created_at,
        )
