# alembic/env.py
from __future__ import annotations

import os
import sys
from logging.config import fileConfig

from alembic import context
from dotenv import load_dotenv
from sqlalchemy import create_engine, pool

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# shell env wins over .env
load_dotenv(override=False)

from movierecs.core.settings import settings, to_sync_driver  # noqa: E402
from movierecs.db.models import Base  # noqa: E402

# ALEMBIC_SYNC_URL > DATABASE_URL_SYNC > DATABASE_URL > settings default
URL_VARS = ("ALEMBIC_SYNC_URL", "DATABASE_URL_SYNC", "DATABASE_URL")

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def migration_url() -> str:
    for key in URL_VARS:
        if os.getenv(key):
            print(f"ALEMBIC picked env var {key}")
            return to_sync_driver(os.environ[key])
    print("ALEMBIC fell back to settings.database_url")
    return to_sync_driver(settings.database_url)


def run_offline(url: str) -> None:
    context.configure(
        url=url,
        target_metadata=Base.metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online(url: str) -> None:
    engine = create_engine(url, poolclass=pool.NullPool)
    with engine.connect() as connection:
        context.configure(connection=connection, target_metadata=Base.metadata)
        with context.begin_transaction():
            context.run_migrations()


url = migration_url()
config.set_main_option("sqlalchemy.url", url)

if context.is_offline_mode():
    run_offline(url)
else:
    run_online(url)
