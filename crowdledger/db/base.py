"""SQLAlchemy Declarative Base — metadata shared by the ledger tables.

Invariants:
    - Campaign and Contribution both inherit from Base
    - Unnamed indexes, unique and foreign-key constraints get deterministic names,
      so alembic migrations and create_all() agree on them
    - Explicitly named constraints (the CHECKs backing the guarded update) keep their names
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
