"""Funding Ledger — orchestrates contributions against campaign goals.

Invariants:
    - contribute() never reads-then-writes on its own: the check-and-apply happens
      entirely inside LedgerStore.apply_contribution
    - Invalid amounts and missing caller identity are rejected before touching the store
    - Amount rule is checked before the campaign id is even parsed: a bad amount is
      INVALID_AMOUNT whatever the id looks like
    - A timed-out contribute() is either fully applied or not applied at all
      (cancellation rolls back the store transaction); the caller gets LedgerTimeoutError
    - Every rejection is raised as its own typed error, never logged and dropped

Design Decisions:
    - Depends on the LedgerStore protocol, not the SQL implementation: the shell wires it
    - Amount rule checked up front so malformed input never opens a transaction; the
      store still re-runs every rule against fresh state
"""

import asyncio
import logging
from decimal import Decimal

from crowdledger.core.domain_types import CampaignId, ContributorId
from crowdledger.core.enforce_contribution import evaluate_amount, raise_for_verdict
from crowdledger.core.errors import (
    AuthFailureError, CrowdLedgerError, ErrorContext, LedgerTimeoutError,
)
from crowdledger.core.ledger_records import (
    CampaignSnapshot, ContributionReceipt, ContributionRecord, LedgerAudit,
)
from crowdledger.core.money import normalize_amount
from crowdledger.core.repository_protocols import LedgerStore
from crowdledger.services.campaign_directory import parse_campaign_id

logger = logging.getLogger(__name__)


class FundingLedger:
    """Public entry point for funding operations."""

    def __init__(self, store: LedgerStore, timeout_seconds: float | None = None):
        self.store = store
        self.timeout_seconds = timeout_seconds

    async def contribute(
        self,
        campaign_id: CampaignId | str,
        amount: object,
        contributor_id: ContributorId,
    ) -> ContributionReceipt:
        """Apply one contribution and return its receipt."""
        if not isinstance(contributor_id, str) or not contributor_id.strip():
            raise AuthFailureError(
                "Contributor identity is required",
                ErrorContext(campaign_id=str(campaign_id)),
            )
        raise_for_verdict(evaluate_amount(amount), campaign_id, amount)
        campaign_id = parse_campaign_id(campaign_id)
        normalized: Decimal = normalize_amount(amount)

        try:
            applied = await self._with_timeout(
                self.store.apply_contribution(
                    campaign_id, normalized, contributor_id,
                ),
            )
        except CrowdLedgerError as e:
            e.context.contributor_id = contributor_id
            logger.info(
                f"Contribution rejected: {e.message}",
                extra={
                    "campaign_id": str(campaign_id),
                    "contributor_id": contributor_id,
                    "error_code": e.code,
                },
            )
            raise

        contribution = applied.contribution
        return ContributionReceipt(
            contribution_id=contribution.id,
            campaign_id=contribution.campaign_id,
            amount=contribution.amount,
            created_at=contribution.created_at,
            current_amount=applied.campaign.current_amount,
            goal_amount=applied.campaign.goal_amount,
            status=applied.campaign.status,
        )

    async def list_contributions(
        self, campaign_id: CampaignId,
    ) -> list[ContributionRecord]:
        return await self.store.list_contributions(campaign_id)

    async def get_funding(self, campaign_id: CampaignId) -> CampaignSnapshot:
        return await self.store.get_campaign(campaign_id)

    async def audit(self, campaign_id: CampaignId) -> LedgerAudit:
        """Check the running total against the contribution log."""
        audit = await self.store.audit_campaign(campaign_id)
        if not audit.consistent:
            logger.error(
                f"Ledger drift: current={audit.current_amount} "
                f"recorded={audit.recorded_total}",
                extra={"campaign_id": str(campaign_id)},
            )
        return audit

    async def _with_timeout(self, operation):
        if self.timeout_seconds is None:
            return await operation
        try:
            return await asyncio.wait_for(operation, timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            raise LedgerTimeoutError(self.timeout_seconds)
