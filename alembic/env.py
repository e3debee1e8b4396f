"""Alembic env for the users / code_sessions schema.

The app talks to the database through an async driver (aiosqlite by default);
migrations run over the matching sync driver.
"""
from logging.config import fileConfig
import os

from alembic import context
from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import make_url

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

from app.db.base import Base  # noqa: E402
from app.core.config import get_settings  # noqa: E402

target_metadata = Base.metadata

ASYNC_DRIVERS = {"aiosqlite", "asyncpg", "aiomysql", "asyncmy"}


def _to_sync_url(url: str) -> str:
    # sqlite+aiosqlite -> sqlite, postgresql+asyncpg -> postgresql
    parsed = make_url(url)
    if parsed.drivername.startswith("sqlite"):
        return parsed.set(drivername="sqlite").render_as_string(hide_password=False)
    backend, _, driver = parsed.drivername.partition("+")
    if driver in ASYNC_DRIVERS:
        return parsed.set(drivername=backend).render_as_string(hide_password=False)
    return url


def get_url() -> str:
    # ALEMBIC_DATABASE_URL wins, then DATABASE_URL from settings, then alembic.ini
    url = os.getenv("ALEMBIC_DATABASE_URL") or get_settings().database_url
    if url:
        return _to_sync_url(url)
    return config.get_main_option("sqlalchemy.url")


def _configure_kwargs(url: str) -> dict:
    # sqlite has no ALTER COLUMN; batch mode rebuilds the table instead
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    url = get_url()
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = get_url()
    configuration = config.get_section(config.config_ini_section) or {}
    configuration["sqlalchemy.url"] = url

    connectable = engine_from_config(configuration, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_kwargs(url))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
