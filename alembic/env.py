import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine
from alembic import context

from restaurant_pos.db.base import Base
from restaurant_pos.config import get_settings
import restaurant_pos.models  # noqa: F401  регистрирует таблицы в Base.metadata

config = context.config
settings = get_settings()

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# синхронные драйверы для offline-режима (генерация SQL без подключения)
SYNC_DRIVERS = {"postgresql": "psycopg2", "sqlite": "pysqlite"}


def _configure_kwargs(backend: str) -> dict:
    # render_as_batch влияет только на autogenerate: новые ревизии для SQLite пишутся через batch_alter_table
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": backend == "sqlite",
    }


def run_migrations_offline():
    """Offline mode: печатаем SQL для ручного применения."""
    url = make_url(settings.DATABASE_URL)
    backend = url.get_backend_name()
    url = url.set(drivername=f"{backend}+{SYNC_DRIVERS.get(backend, url.get_driver_name())}")

    context.configure(
        url=url.render_as_string(hide_password=False),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_kwargs(backend),
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    """Синхронный запуск миграций в online-режиме."""
    context.configure(connection=connection, **_configure_kwargs(connection.dialect.name))

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online():
    """Async → sync через run_sync, без пула: миграции одноразовые."""
    connectable = create_async_engine(settings.DATABASE_URL, poolclass=pool.NullPool)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
