"""Campaign Routes — directory CRUD plus the ledger audit view.

Invariants:
    - Create/update/delete require a bearer token; reads are public
    - Update (PATCH or PUT, same body) and delete allowed for the creator only
      (403 otherwise)
    - No route here writes funding columns; PATCH/PUT bodies with goal/current amounts
      are rejected by schema validation
    - Deleting a campaign with recorded contributions → 409
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from crowdledger.api.dependencies import (
    get_caller_id, get_campaign_directory, get_funding_ledger,
)
from crowdledger.core.domain_types import ContributorId
from crowdledger.core.repository_protocols import CampaignDirectory
from crowdledger.models.campaign import Campaign
from crowdledger.schemas.campaign import (
    CampaignCreate, CampaignListResponse, CampaignResponse, CampaignUpdate,
    FundingResponse, LedgerAuditResponse,
)
from crowdledger.services.campaign_directory import parse_campaign_id
from crowdledger.services.funding_ledger import FundingLedger

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/campaigns", tags=["campaigns"])


@router.post(
    "", response_model=CampaignResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_campaign(
    body: CampaignCreate,
    caller_id: ContributorId = Depends(get_caller_id),
    directory: CampaignDirectory[Campaign] = Depends(get_campaign_directory),
):
    """Create a campaign owned by the caller, starting at zero funding."""
    campaign = await directory.create(
        body.title, body.description, body.goal_amount, caller_id,
    )
    return CampaignResponse.from_row(campaign)


@router.get("", response_model=CampaignListResponse)
async def list_campaigns(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    directory: CampaignDirectory[Campaign] = Depends(get_campaign_directory),
):
    """List campaigns, newest first."""
    campaigns = await directory.list_campaigns(limit=limit, offset=offset)
    return CampaignListResponse(
        campaigns=[CampaignResponse.from_row(c) for c in campaigns],
        limit=limit,
        offset=offset,
    )


@router.get("/{campaign_id}", response_model=CampaignResponse)
async def get_campaign(
    campaign_id: str,
    directory: CampaignDirectory[Campaign] = Depends(get_campaign_directory),
):
    campaign = await directory.get(parse_campaign_id(campaign_id))
    return CampaignResponse.from_row(campaign)


@router.patch("/{campaign_id}", response_model=CampaignResponse)
@router.put("/{campaign_id}", response_model=CampaignResponse)
async def update_campaign(
    campaign_id: str,
    body: CampaignUpdate,
    caller_id: ContributorId = Depends(get_caller_id),
    directory: CampaignDirectory[Campaign] = Depends(get_campaign_directory),
):
    """Edit title/description. PUT takes the same partial body as PATCH.

    Funding fields are not editable.
    """
    campaign = await directory.update_details(
        parse_campaign_id(campaign_id), caller_id,
        title=body.title, description=body.description,
    )
    return CampaignResponse.from_row(campaign)


@router.delete("/{campaign_id}", response_model=CampaignResponse)
async def delete_campaign(
    campaign_id: str,
    caller_id: ContributorId = Depends(get_caller_id),
    directory: CampaignDirectory[Campaign] = Depends(get_campaign_directory),
):
    """Delete an unfunded campaign."""
    campaign = await directory.delete(parse_campaign_id(campaign_id), caller_id)
    return CampaignResponse.from_row(campaign)


@router.get("/{campaign_id}/funding", response_model=FundingResponse)
async def get_funding(
    campaign_id: str,
    ledger: FundingLedger = Depends(get_funding_ledger),
):
    """Goal, current and remaining amounts with the derived status."""
    snapshot = await ledger.get_funding(parse_campaign_id(campaign_id))
    return FundingResponse.from_snapshot(snapshot)


@router.get("/{campaign_id}/audit", response_model=LedgerAuditResponse)
async def audit_campaign(
    campaign_id: str,
    ledger: FundingLedger = Depends(get_funding_ledger),
):
    """Reconcile the running total against the contribution log."""
    audit = await ledger.audit(parse_campaign_id(campaign_id))
    return LedgerAuditResponse(
        campaign_id=audit.campaign_id,
        current_amount=audit.current_amount,
        recorded_total=audit.recorded_total,
        contribution_count=audit.contribution_count,
        recorded_count=audit.recorded_count,
        consistent=audit.consistent,
    )
