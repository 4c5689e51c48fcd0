"""
Alembic environment for the PowerPulse store (async).

Notes:
  • The URL comes from powerpulse settings; `alembic -x db_url=...` overrides
    it for one run (e.g. migrating a local SQLite file).
  • Autogenerate only considers the five PowerPulse tables, so other
    tables sharing the database are never dropped by a generated revision.
  • SQLite cannot ALTER columns in place; batch mode is switched on for it.
  • compare_type catches JSON ↔ JSONB and other column type drift.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import async_engine_from_config

from powerpulse.core.config import settings
from powerpulse.core.database import Base

# Registers every table on Base.metadata
import powerpulse.models.insights  # noqa: F401
import powerpulse.models.profile  # noqa: F401
import powerpulse.models.rate_limit  # noqa: F401
import powerpulse.models.reading  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

database_url = context.get_x_argument(as_dictionary=True).get("db_url", settings.DATABASE_URL)
config.set_main_option("sqlalchemy.url", database_url)

POWERPULSE_TABLES = frozenset(Base.metadata.tables)


def include_object(obj, name, type_, reflected, compare_to) -> bool:  # type: ignore[no-untyped-def]
    """Skip reflected tables that PowerPulse does not own."""
    if type_ == "table" and reflected and compare_to is None:
        return name in POWERPULSE_TABLES
    return True


def _configure(**kwargs) -> None:  # type: ignore[no-untyped-def]
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        include_object=include_object,
        render_as_batch=make_url(database_url).get_backend_name() == "sqlite",
        **kwargs,
    )


# ── Offline: emit SQL ──────────────────────────────────────
def run_migrations_offline() -> None:
    _configure(url=database_url, literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


# ── Online: async engine ───────────────────────────────────
def _migrate(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
