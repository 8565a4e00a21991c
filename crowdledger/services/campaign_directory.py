"""Campaign Directory — campaign creation and descriptive metadata.

Invariants:
    - New campaigns start at current_amount = 0 with no contributions
    - Only title/description are editable, and only by the creator
    - Never writes current_cents / contribution_count (ledger store owns them)
    - Deletion is a single guarded DELETE: campaigns with any recorded contribution
      are never removed (CampaignHasContributionsError)

Design Decisions:
    - Works on the request-scoped AsyncSession (like the route handlers), commits per call
    - Guarded DELETE instead of read-then-delete: a contribution committing concurrently
      either lands first (delete refused) or finds the campaign gone (CampaignNotFound)
"""

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from crowdledger.core.domain_types import CampaignId, ContributorId
from crowdledger.core.errors import (
    CampaignHasContributionsError, CampaignNotFoundError, ErrorContext,
    ForbiddenError, InvalidAmountError,
)
from crowdledger.core.money import (
    from_minor_units, is_valid_amount, normalize_amount, to_minor_units,
)
from crowdledger.models.campaign import Campaign

logger = logging.getLogger(__name__)


class SqlCampaignDirectory:
    """CampaignDirectory backed by the campaigns table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        title: str,
        description: str,
        goal_amount: object,
        creator_id: ContributorId,
    ) -> Campaign:
        goal = normalize_amount(goal_amount)
        if not is_valid_amount(goal):
            raise InvalidAmountError(goal_amount)
        campaign = Campaign(
            title=title,
            description=description,
            goal_cents=to_minor_units(goal),
            current_cents=0,
            contribution_count=0,
            creator_id=creator_id,
        )
        self.db.add(campaign)
        await self.db.commit()
        await self.db.refresh(campaign)
        logger.info(
            f"Campaign created with goal {goal}",
            extra={"campaign_id": str(campaign.id), "contributor_id": creator_id},
        )
        return campaign

    async def get(self, campaign_id: CampaignId) -> Campaign:
        result = await self.db.execute(
            select(Campaign).where(Campaign.id == campaign_id),
        )
        campaign = result.scalar_one_or_none()
        if campaign is None:
            raise CampaignNotFoundError(campaign_id)
        return campaign

    async def list_campaigns(
        self, limit: int = 20, offset: int = 0,
    ) -> list[Campaign]:
        result = await self.db.execute(
            select(Campaign)
            .order_by(Campaign.created_at.desc(), Campaign.id)
            .limit(limit)
            .offset(offset),
        )
        return list(result.scalars().all())

    async def get_goal_amount(self, campaign_id: CampaignId) -> Decimal:
        goal_cents = await self.db.scalar(
            select(Campaign.goal_cents).where(Campaign.id == campaign_id),
        )
        if goal_cents is None:
            raise CampaignNotFoundError(campaign_id)
        return from_minor_units(goal_cents)

    async def update_details(
        self,
        campaign_id: CampaignId,
        caller_id: ContributorId,
        title: str | None = None,
        description: str | None = None,
    ) -> Campaign:
        campaign = await self.get(campaign_id)
        self._require_creator(campaign, caller_id)
        if title is not None:
            campaign.title = title
        if description is not None:
            campaign.description = description
        await self.db.commit()
        await self.db.refresh(campaign)
        return campaign

    async def delete(
        self, campaign_id: CampaignId, caller_id: ContributorId,
    ) -> Campaign:
        campaign = await self.get(campaign_id)
        self._require_creator(campaign, caller_id)

        result = await self.db.execute(
            delete(Campaign)
            .where(Campaign.id == campaign_id)
            .where(Campaign.contribution_count == 0)
            .where(Campaign.current_cents == 0)
            .execution_options(synchronize_session=False),
        )
        if result.rowcount != 1:
            await self.db.rollback()
            still_there = await self.db.scalar(
                select(Campaign.id).where(Campaign.id == campaign_id),
            )
            if still_there is None:
                raise CampaignNotFoundError(campaign_id)
            raise CampaignHasContributionsError(campaign_id)

        await self.db.commit()
        logger.info(
            "Campaign deleted", extra={"campaign_id": str(campaign_id)},
        )
        return campaign

    @staticmethod
    def _require_creator(campaign: Campaign, caller_id: ContributorId) -> None:
        if campaign.creator_id != caller_id:
            raise ForbiddenError(
                "Only the campaign creator can modify this campaign",
                ErrorContext(campaign_id=str(campaign.id), contributor_id=caller_id),
            )


def parse_campaign_id(value: str | UUID) -> CampaignId:
    """Coerce a raw id to CampaignId; malformed ids resolve to no campaign."""
    try:
        return CampaignId(value if isinstance(value, UUID) else UUID(str(value)))
    except ValueError:
        raise CampaignNotFoundError(value)
