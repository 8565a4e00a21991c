"""Alembic environment — applies the ledger schema with an async engine.

The URL comes from DATABASE_URL (normalized by Settings, so a plain
postgresql:// works) and falls back to sqlalchemy.url in alembic.ini.
SQLite URLs are migrated in batch mode so ALTERs work there too.
"""

import asyncio
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from crowdledger.config import Settings
from crowdledger.db.base import Base
import crowdledger.models  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _database_url() -> str:
    if os.environ.get("DATABASE_URL"):
        return Settings().database_url
    return config.get_main_option("sqlalchemy.url")


def _configure(url: str, **kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
        **kwargs,
    )


def run_offline(url: str) -> None:
    """Emit SQL to stdout instead of connecting."""
    _configure(
        url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection, url: str) -> None:
    _configure(url, connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_online(url: str) -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = url
    engine = async_engine_from_config(
        section, prefix="sqlalchemy.", poolclass=pool.NullPool,
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate, url)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_offline(_database_url())
else:
    asyncio.run(run_online(_database_url()))
