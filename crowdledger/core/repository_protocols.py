"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but the pure rules that run inside them are never async themselves
    - CampaignDirectory is generic over the campaign row type: the ORM class lives
      in the shell, so core only names it through CampaignT
    - runtime_checkable so the shell's implementations can be checked in tests
"""

from collections.abc import Sequence
from decimal import Decimal
from typing import Protocol, TypeVar, runtime_checkable

from crowdledger.core.domain_types import CampaignId, ContributorId
from crowdledger.core.ledger_records import (
    AppliedContribution, CampaignSnapshot, ContributionRecord, LedgerAudit,
)

CampaignT = TypeVar("CampaignT", covariant=True)


@runtime_checkable
class LedgerStore(Protocol):
    """Contract for funding-state persistence; the only writer of current_amount."""
    async def get_campaign(self, campaign_id: CampaignId) -> CampaignSnapshot: ...
    async def apply_contribution(
        self,
        campaign_id: CampaignId,
        amount: Decimal,
        contributor_id: ContributorId,
    ) -> AppliedContribution: ...
    async def list_contributions(
        self, campaign_id: CampaignId,
    ) -> list[ContributionRecord]: ...
    async def audit_campaign(self, campaign_id: CampaignId) -> LedgerAudit: ...


@runtime_checkable
class CampaignDirectory(Protocol[CampaignT]):
    """Contract for campaign metadata; never touches current_amount after creation."""
    async def create(
        self,
        title: str,
        description: str,
        goal_amount: object,
        creator_id: ContributorId,
    ) -> CampaignT: ...
    async def get(self, campaign_id: CampaignId) -> CampaignT: ...
    async def list_campaigns(
        self, limit: int = 20, offset: int = 0,
    ) -> Sequence[CampaignT]: ...
    async def get_goal_amount(self, campaign_id: CampaignId) -> Decimal: ...
    async def update_details(
        self,
        campaign_id: CampaignId,
        caller_id: ContributorId,
        title: str | None = None,
        description: str | None = None,
    ) -> CampaignT: ...
    async def delete(
        self, campaign_id: CampaignId, caller_id: ContributorId,
    ) -> CampaignT: ...


@runtime_checkable
class IdentityProvider(Protocol):
    """Contract for caller authentication; raises AuthFailureError on failure."""
    def authenticate(self, credential_token: str) -> ContributorId: ...
    def authenticate_header(self, authorization: str | None) -> ContributorId: ...
