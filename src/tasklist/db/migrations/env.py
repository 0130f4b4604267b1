"""Alembic environment configuration.

Learn: Alembic reads the target schema from db/models.py (users, tasks)
and the connection URL from TASKLIST_DATABASE_URL via Settings, never
from alembic.ini. Online mode drives the async engine through run_sync.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from tasklist.config import settings
from tasklist.db.models import Base

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure_and_run(**kwargs) -> None:
    context.configure(target_metadata=target_metadata, compare_type=True, **kwargs)
    with context.begin_transaction():
        context.run_migrations()


async def _run_online() -> None:
    engine = create_async_engine(settings.database_url, poolclass=pool.NullPool)
    async with engine.connect() as connection:
        await connection.run_sync(lambda conn: _configure_and_run(connection=conn))
    await engine.dispose()


if context.is_offline_mode():
    _configure_and_run(
        url=settings.database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
else:
    asyncio.run(_run_online())
