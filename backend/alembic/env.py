"""Alembic environment - migrations run on a sync psycopg2 engine.

The schema is written by hand in ``versions/`` (the booking exclusion
constraint has no ORM counterpart), so no model metadata is loaded here.
"""

import logging
from logging.config import fileConfig
import os
from pathlib import Path

# .env must be loaded before DATABASE_URL is read
from dotenv import load_dotenv
load_dotenv(Path(__file__).parent.parent / '.env')

from sqlalchemy import pool, create_engine
from sqlalchemy import MetaData
from sqlalchemy.engine import make_url

from alembic import context

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")

target_metadata = MetaData()


def get_url() -> str:
    """DATABASE_URL with the async driver swapped for the sync one."""
    url = os.getenv("DATABASE_URL", "")
    if not url:
        raise RuntimeError("DATABASE_URL is not set")
    url = url.replace("+asyncpg", "")
    logger.info(f"[MIGRATE] Target database: {make_url(url).render_as_string(hide_password=True)}")
    return url


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of connecting."""
    context.configure(
        url=get_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(get_url(), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
