"""Funding Ledger — contribution scenarios, concurrency, and timeouts.

Tests cover:
    - Goal 100: contribute 60 (ok), 50 (GOAL_EXCEEDED), 40 (ok → FULFILLED), 1 (GOAL_EXCEEDED)
    - Two simultaneous 30s against goal 50: exactly one succeeds
    - Many concurrent contributions never overshoot and always match the log
    - Negative amount and unknown campaign rejected with their own errors
    - Missing contributor identity rejected before the store is touched
    - Timeout while a transaction is open leaves nothing applied
    - Store-level checks with AsyncMock: rejected input never reaches the store
"""

import asyncio
import uuid
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from crowdledger.core.domain_types import CampaignStatus
from crowdledger.core.errors import (
    AuthFailureError, CampaignNotFoundError, GoalExceededError,
    InvalidAmountError, LedgerTimeoutError,
)
from crowdledger.infrastructure.keyed_lock import KeyedLock
from crowdledger.infrastructure.ledger_store import SqlLedgerStore
from crowdledger.services.funding_ledger import FundingLedger


# ─── Sequential scenarios ────────────────────────────────────────

async def test_contribution_within_goal_then_overshoot(ledger, make_campaign):
    campaign = await make_campaign(goal="100")

    receipt = await ledger.contribute(campaign.id, 60, "alice")
    assert receipt.current_amount == Decimal("60")
    assert receipt.status == CampaignStatus.OPEN

    with pytest.raises(GoalExceededError):
        await ledger.contribute(campaign.id, 50, "bob")
    assert (await ledger.get_funding(campaign.id)).current_amount == Decimal("60")


async def test_exact_remaining_fulfils_campaign(ledger, make_campaign):
    campaign = await make_campaign(goal="100")
    await ledger.contribute(campaign.id, 60, "alice")

    receipt = await ledger.contribute(campaign.id, 40, "bob")
    assert receipt.current_amount == Decimal("100")
    assert receipt.status == CampaignStatus.FULFILLED

    with pytest.raises(GoalExceededError):
        await ledger.contribute(campaign.id, 1, "carol")
    with pytest.raises(GoalExceededError):
        await ledger.contribute(campaign.id, Decimal("0.01"), "carol")


async def test_smallest_unit_over_remaining_rejected(ledger, make_campaign):
    campaign = await make_campaign(goal="100", current="0")
    await ledger.contribute(campaign.id, 60, "alice")
    with pytest.raises(GoalExceededError):
        await ledger.contribute(campaign.id, Decimal("40.01"), "bob")


async def test_negative_amount_rejected_without_record(ledger, make_campaign):
    campaign = await make_campaign()

    with pytest.raises(InvalidAmountError):
        await ledger.contribute(campaign.id, -5, "alice")

    assert await ledger.list_contributions(campaign.id) == []
    assert (await ledger.get_funding(campaign.id)).current_amount == Decimal("0")


async def test_unknown_campaign_rejected(ledger):
    with pytest.raises(CampaignNotFoundError):
        await ledger.contribute(uuid.uuid4(), 10, "alice")
    with pytest.raises(CampaignNotFoundError):
        await ledger.list_contributions(uuid.uuid4())


@pytest.mark.parametrize("contributor", ["", "   ", None])
async def test_contributor_identity_required(ledger, make_campaign, contributor):
    campaign = await make_campaign()
    with pytest.raises(AuthFailureError):
        await ledger.contribute(campaign.id, 10, contributor)


async def test_receipt_reflects_recorded_contribution(ledger, make_campaign):
    campaign = await make_campaign(goal="100")
    receipt = await ledger.contribute(campaign.id, "12.5", "alice")

    [record] = await ledger.list_contributions(campaign.id)
    assert record.id == receipt.contribution_id
    assert record.created_at == receipt.created_at
    assert record.amount == Decimal("12.50")
    assert receipt.goal_amount == Decimal("100.00")


# ─── Concurrency ─────────────────────────────────────────────────

async def test_two_simultaneous_contributions_only_one_fits(ledger, make_campaign):
    campaign = await make_campaign(goal="50")

    results = await asyncio.gather(
        ledger.contribute(campaign.id, 30, "alice"),
        ledger.contribute(campaign.id, 30, "bob"),
        return_exceptions=True,
    )

    accepted = [r for r in results if not isinstance(r, Exception)]
    rejected = [r for r in results if isinstance(r, Exception)]
    assert len(accepted) == 1
    assert len(rejected) == 1
    assert isinstance(rejected[0], GoalExceededError)
    assert (await ledger.get_funding(campaign.id)).current_amount == Decimal("30")


async def test_concurrent_burst_never_overshoots(ledger, make_campaign):
    campaign = await make_campaign(goal="100")

    results = await asyncio.gather(
        *[ledger.contribute(campaign.id, 7, f"user-{i}") for i in range(20)],
        return_exceptions=True,
    )

    accepted = [r for r in results if not isinstance(r, Exception)]
    assert len(accepted) == 14
    assert all(
        isinstance(r, GoalExceededError)
        for r in results if isinstance(r, Exception)
    )
    funding = await ledger.get_funding(campaign.id)
    assert funding.current_amount == Decimal("98")
    records = await ledger.list_contributions(campaign.id)
    assert sum(r.amount for r in records) == funding.current_amount
    assert [r.sequence for r in records] == list(range(1, 15))


async def test_audit_after_mixed_outcomes(ledger, make_campaign):
    campaign = await make_campaign(goal="50")
    await asyncio.gather(
        ledger.contribute(campaign.id, 20, "a"),
        ledger.contribute(campaign.id, 20, "b"),
        ledger.contribute(campaign.id, 20, "c"),
        ledger.contribute(campaign.id, -1, "d"),
        return_exceptions=True,
    )

    audit = await ledger.audit(campaign.id)
    assert audit.consistent
    assert audit.recorded_total == Decimal("40")


# ─── Timeouts ────────────────────────────────────────────────────

class _StallingStore(SqlLedgerStore):
    """Stalls after the update and insert are flushed but before commit."""

    async def _apply_in_transaction(self, db, campaign_id, amount, contributor_id):
        applied = await super()._apply_in_transaction(
            db, campaign_id, amount, contributor_id,
        )
        await asyncio.sleep(10)
        return applied


async def test_timeout_mid_transaction_applies_nothing(db_manager, make_campaign):
    campaign = await make_campaign(goal="100")
    stalling = FundingLedger(
        _StallingStore(db_manager, KeyedLock()), timeout_seconds=0.05,
    )

    with pytest.raises(LedgerTimeoutError):
        await stalling.contribute(campaign.id, 25, "alice")

    plain = FundingLedger(SqlLedgerStore(db_manager, KeyedLock()))
    assert (await plain.get_funding(campaign.id)).current_amount == Decimal("0")
    assert await plain.list_contributions(campaign.id) == []
    assert (await plain.audit(campaign.id)).consistent


async def test_slow_store_times_out():
    async def never_finishes(*args):
        await asyncio.sleep(10)

    store = AsyncMock()
    store.apply_contribution.side_effect = never_finishes
    ledger = FundingLedger(store, timeout_seconds=0.01)

    with pytest.raises(LedgerTimeoutError) as exc_info:
        await ledger.contribute(uuid.uuid4(), 5, "alice")
    assert exc_info.value.code == "LEDGER_TIMEOUT"


# ─── Input rejected before the store ─────────────────────────────

@pytest.mark.parametrize("amount", [0, -1, "abc", float("nan"), True, "0.001"])
async def test_invalid_amount_never_reaches_store(amount):
    store = AsyncMock()
    ledger = FundingLedger(store)

    with pytest.raises(InvalidAmountError):
        await ledger.contribute("not-a-uuid", amount, "alice")

    store.apply_contribution.assert_not_awaited()


async def test_store_receives_normalized_amount():
    store = AsyncMock()
    ledger = FundingLedger(store)
    campaign_id = uuid.uuid4()

    await ledger.contribute(str(campaign_id), 12.5, "alice")

    store.apply_contribution.assert_awaited_once_with(
        campaign_id, Decimal("12.5"), "alice",
    )
