"""Persistence primitives — the declarative Base shared by models and alembic.

Engines and sessions live in crowdledger.infrastructure.database.
"""
