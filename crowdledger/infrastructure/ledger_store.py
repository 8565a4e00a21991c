"""Ledger Store — durable campaign funding state and the append-only contribution log.

Invariants:
    - apply_contribution is all-or-nothing: the increment and the contribution row are
      written in one transaction, or neither is
    - Applies for the same campaign are serialized three ways:
        1. in-process KeyedLock on campaign_id (no global lock)
        2. SELECT ... FOR UPDATE row lock (PostgreSQL; ignored by SQLite)
        3. guarded UPDATE re-checking goal and contribution_count in its WHERE clause
    - Rules re-run against the freshest state read inside the transaction, never a
      snapshot taken by the caller
    - Contribution timestamps never decrease within one campaign
    - No internal retry on store failure: a StoreUnavailableError always means
      "nothing was written"

Design Decisions:
    - Optimistic retry only on version miss (another writer committed first, e.g. from a
      different process); bounded by max_cas_attempts, then ConcurrencyError
    - Readers take no lock and may observe a slightly stale total
"""

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from crowdledger.core.domain_types import (
    CampaignId, ContributionId, ContributorId,
)
from crowdledger.core.enforce_contribution import (
    evaluate_contribution, raise_for_verdict,
)
from crowdledger.core.errors import (
    CampaignNotFoundError, ConcurrencyError, ErrorContext,
)
from crowdledger.core.ledger_records import (
    AppliedContribution, CampaignSnapshot, ContributionRecord, LedgerAudit,
)
from crowdledger.core.money import (
    from_minor_units, normalize_amount, to_minor_units,
)
from crowdledger.infrastructure.database import DatabaseSessionManager
from crowdledger.infrastructure.keyed_lock import KeyedLock
from crowdledger.models.campaign import Campaign
from crowdledger.models.contribution import Contribution

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes for timezone-aware columns."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def campaign_snapshot(row: Campaign) -> CampaignSnapshot:
    return CampaignSnapshot(
        id=CampaignId(row.id),
        goal_amount=from_minor_units(row.goal_cents),
        current_amount=from_minor_units(row.current_cents),
        creator_id=ContributorId(row.creator_id),
        contribution_count=row.contribution_count,
    )


def _contribution_record(row: Contribution) -> ContributionRecord:
    return ContributionRecord(
        id=ContributionId(row.id),
        campaign_id=CampaignId(row.campaign_id),
        contributor_id=ContributorId(row.contributor_id),
        amount=from_minor_units(row.amount_cents),
        sequence=row.sequence,
        created_at=_as_utc(row.created_at),
    )


class SqlLedgerStore:
    """SQLAlchemy-backed LedgerStore."""

    def __init__(
        self,
        db: DatabaseSessionManager,
        locks: KeyedLock,
        max_cas_attempts: int = 3,
        clock: Callable[[], datetime] = _utc_now,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
    ):
        if max_cas_attempts < 1:
            raise ValueError("max_cas_attempts must be >= 1")
        self._db = db
        self._locks = locks
        self._max_cas_attempts = max_cas_attempts
        self._clock = clock
        self._id_factory = id_factory

    # ─── Reads ───────────────────────────────────────────────────

    async def get_campaign(self, campaign_id: CampaignId) -> CampaignSnapshot:
        async with self._db.session() as db:
            row = await self._load_campaign(db, campaign_id)
            if row is None:
                raise CampaignNotFoundError(campaign_id)
            return campaign_snapshot(row)

    async def list_contributions(
        self, campaign_id: CampaignId,
    ) -> list[ContributionRecord]:
        """Fresh read of the log in insertion order."""
        async with self._db.session() as db:
            await self._require_campaign(db, campaign_id)
            result = await db.execute(
                select(Contribution)
                .where(Contribution.campaign_id == campaign_id)
                .order_by(Contribution.sequence),
            )
            return [_contribution_record(r) for r in result.scalars().all()]

    async def audit_campaign(self, campaign_id: CampaignId) -> LedgerAudit:
        """Recompute the log total in the same read as the running total."""
        async with self._db.session() as db:
            row = await self._load_campaign(db, campaign_id)
            if row is None:
                raise CampaignNotFoundError(campaign_id)
            totals = await db.execute(
                select(
                    func.coalesce(func.sum(Contribution.amount_cents), 0),
                    func.count(Contribution.id),
                ).where(Contribution.campaign_id == campaign_id),
            )
            recorded_cents, recorded_count = totals.one()
            return LedgerAudit(
                campaign_id=CampaignId(row.id),
                current_amount=from_minor_units(row.current_cents),
                recorded_total=from_minor_units(int(recorded_cents)),
                contribution_count=row.contribution_count,
                recorded_count=int(recorded_count),
            )

    # ─── Atomic apply ────────────────────────────────────────────

    async def apply_contribution(
        self,
        campaign_id: CampaignId,
        amount: Decimal,
        contributor_id: ContributorId,
    ) -> AppliedContribution:
        async with self._locks.hold(campaign_id):
            async with self._db.session() as db:
                applied = await self._apply_in_transaction(
                    db, campaign_id, amount, contributor_id,
                )
                await db.commit()
        logger.info(
            f"Applied contribution #{applied.contribution.sequence} "
            f"of {applied.contribution.amount}",
            extra={
                "campaign_id": str(campaign_id),
                "contribution_id": str(applied.contribution.id),
            },
        )
        return applied

    async def _apply_in_transaction(
        self,
        db: AsyncSession,
        campaign_id: CampaignId,
        amount: Decimal,
        contributor_id: ContributorId,
    ) -> AppliedContribution:
        for attempt in range(1, self._max_cas_attempts + 1):
            row = await self._load_campaign(db, campaign_id, for_update=True)
            snapshot = campaign_snapshot(row) if row is not None else None
            verdict = evaluate_contribution(snapshot, amount)
            raise_for_verdict(verdict, campaign_id, amount, snapshot)

            normalized = normalize_amount(amount)
            amount_cents = to_minor_units(normalized)
            created_at = self._next_timestamp(row)

            result = await db.execute(
                update(Campaign)
                .where(Campaign.id == campaign_id)
                .where(Campaign.contribution_count == snapshot.contribution_count)
                .where(Campaign.current_cents + amount_cents <= Campaign.goal_cents)
                .values(
                    current_cents=Campaign.current_cents + amount_cents,
                    contribution_count=Campaign.contribution_count + 1,
                    last_contributed_at=created_at,
                )
                .execution_options(synchronize_session=False),
            )
            if result.rowcount == 1:
                contribution = Contribution(
                    id=self._id_factory(),
                    campaign_id=campaign_id,
                    contributor_id=contributor_id,
                    amount_cents=amount_cents,
                    sequence=snapshot.contribution_count + 1,
                    created_at=created_at,
                )
                db.add(contribution)
                await db.flush()
                return AppliedContribution(
                    contribution=_contribution_record(contribution),
                    campaign=snapshot.with_contribution(normalized),
                )

            # Version moved between our read and our write: re-read and re-validate
            logger.warning(
                "Campaign changed under guarded update, re-reading",
                extra={"campaign_id": str(campaign_id), "attempt": attempt},
            )

        raise ConcurrencyError(
            f"Campaign '{campaign_id}' kept changing during contribution; "
            f"gave up after {self._max_cas_attempts} attempt(s)",
            ErrorContext(campaign_id=str(campaign_id)),
        )

    # ─── Helpers ─────────────────────────────────────────────────

    async def _load_campaign(
        self,
        db: AsyncSession,
        campaign_id: CampaignId,
        for_update: bool = False,
    ) -> Campaign | None:
        query = (
            select(Campaign)
            .where(Campaign.id == campaign_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            query = query.with_for_update()
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def _require_campaign(
        self, db: AsyncSession, campaign_id: CampaignId,
    ) -> None:
        found = await db.scalar(
            select(Campaign.id).where(Campaign.id == campaign_id),
        )
        if found is None:
            raise CampaignNotFoundError(campaign_id)

    def _next_timestamp(self, row: Campaign) -> datetime:
        now = self._clock()
        if row.last_contributed_at is None:
            return now
        return max(now, _as_utc(row.last_contributed_at))
