"""Ledger Records — immutable value objects passed between store, ledger, and API.

Invariants:
    - All records are frozen dataclasses: nothing downstream can mutate ledger state
    - CampaignSnapshot.status is derived from amounts (no stored flag)
    - ContributionRecord.sequence is the 1-based position in the campaign's log

Design Decisions:
    - Plain dataclasses over ORM objects: core stays free of SQLAlchemy and
      snapshots remain valid after the DB session closes
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from crowdledger.core.domain_types import (
    CampaignId, ContributionId, ContributorId, CampaignStatus,
)


@dataclass(frozen=True)
class CampaignSnapshot:
    """Funding state of one campaign at a single point in time."""
    id: CampaignId
    goal_amount: Decimal
    current_amount: Decimal
    creator_id: ContributorId
    contribution_count: int = 0

    @property
    def status(self) -> CampaignStatus:
        if self.current_amount == self.goal_amount:
            return CampaignStatus.FULFILLED
        return CampaignStatus.OPEN

    @property
    def remaining_amount(self) -> Decimal:
        return self.goal_amount - self.current_amount

    def with_contribution(self, amount: Decimal) -> "CampaignSnapshot":
        """Snapshot as it looks after `amount` has been applied."""
        return CampaignSnapshot(
            id=self.id,
            goal_amount=self.goal_amount,
            current_amount=self.current_amount + amount,
            creator_id=self.creator_id,
            contribution_count=self.contribution_count + 1,
        )


@dataclass(frozen=True)
class ContributionRecord:
    """One accepted contribution. Append-only."""
    id: ContributionId
    campaign_id: CampaignId
    contributor_id: ContributorId
    amount: Decimal
    sequence: int
    created_at: datetime


@dataclass(frozen=True)
class AppliedContribution:
    """Result of a successful atomic apply: the new record plus post-apply campaign state."""
    contribution: ContributionRecord
    campaign: CampaignSnapshot


@dataclass(frozen=True)
class ContributionReceipt:
    """What the caller gets back from a successful contribution."""
    contribution_id: ContributionId
    campaign_id: CampaignId
    amount: Decimal
    created_at: datetime
    current_amount: Decimal
    goal_amount: Decimal
    status: CampaignStatus


@dataclass(frozen=True)
class LedgerAudit:
    """Reconciliation of a campaign's running total against its contribution log."""
    campaign_id: CampaignId
    current_amount: Decimal
    recorded_total: Decimal
    contribution_count: int
    recorded_count: int

    @property
    def consistent(self) -> bool:
        return (
            self.current_amount == self.recorded_total
            and self.contribution_count == self.recorded_count
        )
