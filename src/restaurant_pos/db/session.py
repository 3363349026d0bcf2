import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from restaurant_pos.config import Settings
from restaurant_pos.exceptions import StorageError

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Асинхронный движок с ограниченным пулом соединений.
    SQLite (тесты, локальный запуск) не принимает параметры пула и
    по умолчанию не проверяет внешние ключи, поэтому включаем их явно.
    """
    url = make_url(settings.DATABASE_URL)

    if url.get_backend_name() == "sqlite":
        engine = create_async_engine(url, echo=settings.DB_ECHO)
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_async_engine(
        url,
        echo=settings.DB_ECHO,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
    )


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Фабрика сессий
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@asynccontextmanager
async def storage_errors(action: str) -> AsyncIterator[None]:
    """
    Ошибки драйвера и SQLAlchemy внутри блока превращаются в StorageError.
    Для чтения, которое идёт без явной транзакции.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Storage failure, could not %s", action)
        raise StorageError(f"Could not {action}") from exc


@asynccontextmanager
async def transaction(db: AsyncSession, action: str) -> AsyncIterator[AsyncSession]:
    """
    Одна единица работы: begin -> запись -> commit.
    Любое исключение внутри блока откатывает транзакцию; ошибки драйвера
    и SQLAlchemy превращаются в StorageError.
    """
    async with storage_errors(action):
        async with db.begin():
            yield db
