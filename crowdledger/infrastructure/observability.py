"""Structured Logging — JSON log lines carrying ledger context.

Invariants:
    - Every line has timestamp (from the record, UTC), level, logger and message
    - Ledger extras (campaign_id, contribution_id, contributor_id, error_code,
      attempt, path) appear only when the call site passed them
    - setup_logging() is idempotent: it replaces its own handler, never stacks a second

Design Decisions:
    - stdlib logging end to end: module loggers everywhere, one handler on root
    - SQLAlchemy engine chatter held at WARNING unless the app itself runs at DEBUG
"""

import json
import logging
from datetime import datetime, timezone

LEDGER_LOG_FIELDS = (
    "campaign_id", "contribution_id", "contributor_id",
    "error_code", "attempt", "path",
)

HANDLER_NAME = "crowdledger"
TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def __init__(self, fields: tuple[str, ...] = LEDGER_LOG_FIELDS):
        super().__init__()
        self.fields = fields

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (name, getattr(record, name))
            for name in self.fields
            if getattr(record, name, None) is not None
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    root = logging.getLogger()
    for existing in [h for h in root.handlers if h.get_name() == HANDLER_NAME]:
        root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(TEXT_FORMAT),
    )
    root.addHandler(handler)

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(numeric_level)
    logging.getLogger("sqlalchemy.engine").setLevel(
        numeric_level if numeric_level <= logging.DEBUG else logging.WARNING,
    )
    return handler
