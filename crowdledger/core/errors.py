"""Error Hierarchy — one typed exception per ledger failure mode.

Invariants:
    - Every error class pins its code, category, severity and HTTP status at class level
    - GOAL_EXCEEDED and CAMPAIGN_NOT_FOUND are distinct codes, never collapsed
    - Client errors (400-level) are final; CONCURRENCY_CONFLICT, STORE_UNAVAILABLE and
      LEDGER_TIMEOUT carry a retry hint and are safe to retry with backoff
    - to_response() is the REST envelope; messages never carry driver or SQL text

Design Decisions:
    - Single hierarchy rooted at CrowdLedgerError: one FastAPI handler shapes all of them
    - ErrorContext as dataclass: campaign/contributor ids travel with the error and feed
      structured log extras without the core importing logging
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ErrorSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    CONFLICT = "conflict"
    DATABASE = "database"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Which campaign and caller an error concerns."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    campaign_id: str | None = None
    contributor_id: str | None = None
    retry_after_ms: int | None = None

    def log_extra(self) -> dict:
        """Non-empty ids, shaped for logging's `extra=`."""
        return {
            key: value
            for key, value in (
                ("campaign_id", self.campaign_id),
                ("contributor_id", self.contributor_id),
            )
            if value is not None
        }


class CrowdLedgerError(Exception):
    """Base for every error the ledger raises on purpose."""

    code = "INTERNAL_ERROR"
    category = ErrorCategory.INTERNAL
    severity = ErrorSeverity.ERROR
    http_status = 500
    retry_after_ms: int | None = None

    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or ErrorContext()
        if self.context.retry_after_ms is None:
            self.context.retry_after_ms = self.retry_after_ms

    def to_response(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "campaign_id": self.context.campaign_id,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


def _for_campaign(campaign_id: object, context: ErrorContext | None) -> ErrorContext:
    context = context or ErrorContext()
    context.campaign_id = str(campaign_id)
    return context


# ─── Client Errors (400-level) ──────────────────────────────────

class InvalidAmountError(CrowdLedgerError):
    """Amount is not a finite positive value in whole cents."""
    code = "INVALID_AMOUNT"
    category = ErrorCategory.VALIDATION
    http_status = 400

    def __init__(self, amount: object, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid contribution amount: {amount!r}. "
            "Amount must be a positive number with at most 2 decimal places.",
            context,
        )
        self.amount = amount


class GoalExceededError(CrowdLedgerError):
    """Applying the contribution would push the campaign past its goal."""
    code = "GOAL_EXCEEDED"
    category = ErrorCategory.BUSINESS_RULE
    http_status = 400

    def __init__(
        self, remaining: object, amount: object, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Contribution of {amount} exceeds the remaining goal of {remaining}",
            context,
        )
        self.remaining = remaining
        self.amount = amount


class CampaignNotFoundError(CrowdLedgerError):
    code = "CAMPAIGN_NOT_FOUND"
    category = ErrorCategory.RESOURCE_NOT_FOUND
    http_status = 404

    def __init__(self, campaign_id: object, context: ErrorContext | None = None):
        super().__init__(
            f"Campaign '{campaign_id}' not found",
            _for_campaign(campaign_id, context),
        )
        self.campaign_id = campaign_id


class AuthFailureError(CrowdLedgerError):
    """No caller identity could be established."""
    code = "AUTH_FAILURE"
    category = ErrorCategory.AUTHENTICATION
    severity = ErrorSeverity.WARNING
    http_status = 401

    def __init__(
        self, message: str = "Authentication failed",
        context: ErrorContext | None = None,
    ):
        super().__init__(message, context)


class ForbiddenError(CrowdLedgerError):
    code = "FORBIDDEN"
    category = ErrorCategory.AUTHORIZATION
    severity = ErrorSeverity.WARNING
    http_status = 403


class ConcurrencyError(CrowdLedgerError):
    """Campaign kept changing under the guarded update; nothing was applied."""
    code = "CONCURRENCY_CONFLICT"
    category = ErrorCategory.CONFLICT
    http_status = 409
    retry_after_ms = 50


class CampaignHasContributionsError(CrowdLedgerError):
    code = "CAMPAIGN_HAS_CONTRIBUTIONS"
    category = ErrorCategory.CONFLICT
    http_status = 409

    def __init__(self, campaign_id: object, context: ErrorContext | None = None):
        super().__init__(
            f"Campaign '{campaign_id}' has recorded contributions and cannot be deleted",
            _for_campaign(campaign_id, context),
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StoreUnavailableError(CrowdLedgerError):
    """Ledger persistence failed. Nothing was partially applied."""
    code = "STORE_UNAVAILABLE"
    category = ErrorCategory.DATABASE
    severity = ErrorSeverity.CRITICAL
    http_status = 503
    retry_after_ms = 1000

    def __init__(
        self, message: str, operation: str, context: ErrorContext | None = None,
    ):
        super().__init__(f"Store {operation} failed: {message}", context)
        self.operation = operation


class LedgerTimeoutError(CrowdLedgerError):
    """Contribution did not finish in time; it was either fully applied or not at all."""
    code = "LEDGER_TIMEOUT"
    category = ErrorCategory.TIMEOUT
    severity = ErrorSeverity.CRITICAL
    http_status = 504
    retry_after_ms = 1000

    def __init__(self, timeout_seconds: float, context: ErrorContext | None = None):
        super().__init__(
            f"Contribution did not complete within {timeout_seconds}s", context,
        )
        self.timeout_seconds = timeout_seconds
