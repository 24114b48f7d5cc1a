from __future__ import annotations

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection, make_url
from sqlalchemy.ext.asyncio import async_engine_from_config

from invoice_engine.config.settings import Settings
from invoice_engine.infrastructure.db import models  # noqa: F401  (registers invoice_counters / invoices)
from invoice_engine.infrastructure.db.base import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_database_url() -> str:
    """``alembic -x db_url=...`` wins over DATABASE_URL from env / .env."""
    url = context.get_x_argument(as_dictionary=True).get("db_url")
    if not url:
        url = Settings().DATABASE_URL
    if not url:
        raise RuntimeError("DATABASE_URL is not set")
    return url


def _configure(**kwargs) -> None:
    url = kwargs.pop("url", None)
    connection = kwargs.get("connection")
    dialect = connection.dialect.name if connection is not None else make_url(url).get_backend_name()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        compare_type=True,
        # SQLite cannot ALTER most constraints in place
        render_as_batch=dialect == "sqlite",
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL for the counter / invoice tables without connecting."""
    _configure(
        url=get_database_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section) or {}
    section["sqlalchemy.url"] = get_database_url()

    engine = async_engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
