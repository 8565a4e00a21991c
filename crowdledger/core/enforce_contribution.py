"""Contribution Enforcement — pure rules deciding whether a contribution may be applied.

Invariants:
    - evaluate_contribution is PURE: returns a verdict, never mutates the snapshot
    - Rules checked in order, first failure wins:
        1. amount is not a valid positive amount  → INVALID_AMOUNT
        2. campaign is missing                    → CAMPAIGN_NOT_FOUND
        3. current + amount > goal                → GOAL_EXCEEDED
    - An amount landing exactly on the goal is ACCEPTED
    - raise_for_verdict maps every rejection to its own typed error

Design Decisions:
    - Verdict enum instead of raising inside the rules: the store re-runs the same
      rules under its lock and decides itself when to abort the transaction
"""

from decimal import Decimal

from crowdledger.core.domain_types import ContributionVerdict
from crowdledger.core.errors import (
    CampaignNotFoundError, ErrorContext, GoalExceededError, InvalidAmountError,
)
from crowdledger.core.ledger_records import CampaignSnapshot
from crowdledger.core.money import is_valid_amount, normalize_amount


def evaluate_amount(amount: object) -> ContributionVerdict:
    """Rule 1 alone — usable before any campaign state is loaded."""
    if not is_valid_amount(normalize_amount(amount)):
        return ContributionVerdict.INVALID_AMOUNT
    return ContributionVerdict.ACCEPTED


def evaluate_contribution(
    campaign: CampaignSnapshot | None, amount: object,
) -> ContributionVerdict:
    """Apply all contribution rules against one campaign snapshot."""
    normalized = normalize_amount(amount)
    if not is_valid_amount(normalized):
        return ContributionVerdict.INVALID_AMOUNT

    if campaign is None:
        return ContributionVerdict.CAMPAIGN_NOT_FOUND

    if campaign.current_amount + normalized > campaign.goal_amount:
        return ContributionVerdict.GOAL_EXCEEDED

    return ContributionVerdict.ACCEPTED


def raise_for_verdict(
    verdict: ContributionVerdict,
    campaign_id: object,
    amount: object,
    campaign: CampaignSnapshot | None = None,
) -> None:
    """Raise the typed error matching a rejection. No-op for ACCEPTED."""
    if verdict is ContributionVerdict.ACCEPTED:
        return
    context = ErrorContext(campaign_id=str(campaign_id))
    if verdict is ContributionVerdict.INVALID_AMOUNT:
        raise InvalidAmountError(amount, context)
    if verdict is ContributionVerdict.CAMPAIGN_NOT_FOUND:
        raise CampaignNotFoundError(campaign_id, context)
    remaining = campaign.remaining_amount if campaign else Decimal("0")
    raise GoalExceededError(remaining, amount, context)
