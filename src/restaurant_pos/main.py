import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from restaurant_pos.api import health
from restaurant_pos.api.errors import register_exception_handlers
from restaurant_pos.api.routes.menu_items import router as menu_items_router
from restaurant_pos.api.routes.orders import router as orders_router
from restaurant_pos.config import Settings, get_settings
from restaurant_pos.db.session import build_engine, build_sessionmaker
from restaurant_pos.logging_config import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application started")
    yield
    await app.state.engine.dispose()
    logger.info("Application stopped, connection pool disposed")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Собирает приложение. Движок и фабрика сессий живут в app.state,
    так что тесты могут подставить свою базу через Settings.
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = build_engine(settings)
    app.state.sessionmaker = build_sessionmaker(app.state.engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # Подключаем роуты
    app.include_router(health.router)
    app.include_router(menu_items_router, prefix=settings.API_PREFIX)
    app.include_router(orders_router, prefix=settings.API_PREFIX)

    return app
