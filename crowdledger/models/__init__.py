"""ORM Models — SQLAlchemy declarative models for the ledger's persisted state.

Invariants:
    - All models inherit from Base (db/base.py)
    - Campaign is the aggregate root; contributions scoped by campaign_id

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from crowdledger.models.campaign import Campaign  # noqa: F401
from crowdledger.models.contribution import Contribution  # noqa: F401
