"""Alembic environment for the Taskflow schema."""

from logging.config import fileConfig

from sqlalchemy import pool
from sqlmodel import SQLModel, create_engine

from alembic import context

# Registers users, tasks and task_tags on SQLModel.metadata
from taskflow.models import Task, TaskTag, User  # noqa: F401
from taskflow.config import Settings, get_settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata


def migration_url(settings: Settings) -> str:
    """Synchronous URL for the configured store.

    psycopg v3 serves both modes; SQLite falls back to the stdlib driver.
    """
    return settings.async_database_url.replace("sqlite+aiosqlite://", "sqlite://", 1)


def run_offline(url: str) -> None:
    """Emit the migration SQL without connecting."""
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_online(url: str, settings: Settings) -> None:
    """Apply migrations over a live connection."""
    connect_args = {}
    if settings.DATABASE_SSLMODE and url.startswith("postgresql"):
        connect_args["sslmode"] = settings.DATABASE_SSLMODE

    engine = create_engine(url, poolclass=pool.NullPool, connect_args=connect_args)
    with engine.connect() as connection:
        # SQLite cannot ALTER most constraints in place
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


_settings = get_settings()
_url = migration_url(_settings)

if context.is_offline_mode():
    run_offline(_url)
else:
    run_online(_url, _settings)
