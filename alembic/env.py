"""Alembic environment configuration."""

from __future__ import annotations

from alembic import context
from sqlalchemy import pool
from sqlmodel import SQLModel, create_engine

from newsletter.config import resolve_configuration
from newsletter.domain import models  # noqa: F401  # Ensure models are imported

target_metadata = SQLModel.metadata


def _database_url() -> str:
    """Use the URL from alembic.ini when given, else the resolved settings."""
    configured = context.config.get_main_option("sqlalchemy.url")
    if configured:
        return configured
    settings = resolve_configuration()
    return settings.database.connection_url().render_as_string(hide_password=False)


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = create_engine(_database_url(), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
