"""Contribution Routes — create a contribution, read a campaign's contribution log.

Invariants:
    - POST requires a bearer token; contributor id comes from the token only
    - GET is public and returns the log in insertion order
    - Routes hold no business logic: every rule lives in FundingLedger / LedgerStore
    - Errors propagate as CrowdLedgerError and are shaped by the global handlers
"""

import logging

from fastapi import APIRouter, Depends, status

from crowdledger.api.dependencies import get_caller_id, get_funding_ledger
from crowdledger.core.domain_types import ContributorId
from crowdledger.schemas.contribution import (
    ContributionCreate, ContributionReceiptResponse, ContributionResponse,
)
from crowdledger.services.campaign_directory import parse_campaign_id
from crowdledger.services.funding_ledger import FundingLedger

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/contributions", tags=["contributions"])


@router.post(
    "", response_model=ContributionReceiptResponse,
    status_code=status.HTTP_200_OK,
)
async def create_contribution(
    body: ContributionCreate,
    caller_id: ContributorId = Depends(get_caller_id),
    ledger: FundingLedger = Depends(get_funding_ledger),
):
    """Contribute to a campaign on behalf of the authenticated caller."""
    receipt = await ledger.contribute(
        body.campaign_id, body.amount, caller_id,
    )
    return ContributionReceiptResponse.from_receipt(receipt)


@router.get("/{campaign_id}", response_model=list[ContributionResponse])
async def list_contributions(
    campaign_id: str,
    ledger: FundingLedger = Depends(get_funding_ledger),
):
    """Contribution log for one campaign, oldest first."""
    records = await ledger.list_contributions(parse_campaign_id(campaign_id))
    return [ContributionResponse.from_record(r) for r in records]
