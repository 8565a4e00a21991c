"""API Dependencies — wiring of ledger, directory, and caller identity for routes.

Invariants:
    - One KeyedLock registry per process: every FundingLedger built here shares it,
      so same-campaign applies serialize across requests
    - db_manager read at call time (tests and lifespan swap it after import)
    - Routes needing a caller depend on get_caller_id; missing/invalid tokens → 401

Design Decisions:
    - Module-level lock registry: deliberate exception to no-global-state rule, the
      locks must outlive any single request
    - FundingLedger built per request: cheap, holds no state besides the shared locks
    - Providers are typed against the core protocols; only this module names the
      concrete JWT, SQL store and SQL directory classes
"""

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

import crowdledger.infrastructure.database as database
from crowdledger.config import get_settings
from crowdledger.core.domain_types import ContributorId
from crowdledger.core.repository_protocols import CampaignDirectory, IdentityProvider
from crowdledger.infrastructure.jwt_identity import JwtIdentityProvider
from crowdledger.infrastructure.keyed_lock import KeyedLock
from crowdledger.infrastructure.ledger_store import SqlLedgerStore
from crowdledger.models.campaign import Campaign
from crowdledger.services.campaign_directory import SqlCampaignDirectory
from crowdledger.services.funding_ledger import FundingLedger

campaign_locks = KeyedLock()


def get_identity_provider() -> IdentityProvider:
    settings = get_settings()
    return JwtIdentityProvider(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        identity_claim=settings.jwt_identity_claim,
        leeway_seconds=settings.jwt_leeway_seconds,
    )


def get_caller_id(
    authorization: str | None = Header(None),
    identity: IdentityProvider = Depends(get_identity_provider),
) -> ContributorId:
    return identity.authenticate_header(authorization)


def get_funding_ledger() -> FundingLedger:
    settings = get_settings()
    store = SqlLedgerStore(
        database.get_db_manager(),
        campaign_locks,
        max_cas_attempts=settings.ledger_max_cas_attempts,
    )
    return FundingLedger(store, timeout_seconds=settings.contribution_timeout_seconds)


def get_campaign_directory(
    db: AsyncSession = Depends(database.get_db),
) -> CampaignDirectory[Campaign]:
    return SqlCampaignDirectory(db)
