"""Alembic environment configuration for vet-access package."""

import asyncio
from logging.config import fileConfig
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

# Import all models to ensure they are registered with SQLAlchemy
from vet_access.models import (
    Base,
    User, Pet, MedicalRecord, PetAccess
)
from vet_access.database import DatabaseConfig, get_database_url as build_database_url
from vet_access.utils.config import EnvironmentConfig

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# add your model's MetaData object here
# for 'autogenerate' support
target_metadata = Base.metadata


def get_database_url() -> str:
    """Get database URL from environment variables or config."""
    database_url = EnvironmentConfig.get_str("DATABASE_URL")

    if not database_url:
        database_url = config.get_main_option("sqlalchemy.url")

    if not database_url:
        # Build from individual components
        database_url = build_database_url(
            host=EnvironmentConfig.get_str("DB_HOST", "localhost"),
            port=EnvironmentConfig.get_int("DB_PORT", 5432),
            database=EnvironmentConfig.get_str("DB_NAME", "vetaccess"),
            username=EnvironmentConfig.get_str("DB_USER", "postgres"),
            password=EnvironmentConfig.get_str("DB_PASSWORD", ""),
        )

    return DatabaseConfig(database_url).get_async_url()


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    This configures the context with just a URL and not an Engine, so no
    DBAPI needs to be available. Calls to context.execute() emit the given
    string to the script output.
    """
    url = get_database_url()
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        compare_server_default=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        compare_type=True,
        compare_server_default=True,
        render_as_batch=connection.dialect.name == "sqlite",
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    """Create an async Engine and run migrations over one connection."""
    configuration = config.get_section(config.config_ini_section, {})
    configuration["sqlalchemy.url"] = get_database_url()

    connectable = async_engine_from_config(
        configuration,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""

    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
