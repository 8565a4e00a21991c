"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - CampaignId, ContributionId wrap UUIDs; never use bare UUID in domain logic
    - ContributorId is an opaque string supplied by the identity provider
    - All valid states encoded as Enums, no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

CampaignId = NewType("CampaignId", UUID)
ContributionId = NewType("ContributionId", UUID)
ContributorId = NewType("ContributorId", str)


# ─── Enums ───────────────────────────────────────────────────────

class CampaignStatus(str, Enum):
    """Derived funding state — computed from amounts, never stored."""
    OPEN = "open"
    FULFILLED = "fulfilled"


class ContributionVerdict(str, Enum):
    """Outcome of the contribution rules. Values double as error codes."""
    ACCEPTED = "ACCEPTED"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    CAMPAIGN_NOT_FOUND = "CAMPAIGN_NOT_FOUND"
    GOAL_EXCEEDED = "GOAL_EXCEEDED"
