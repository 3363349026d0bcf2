"""
Настройка логирования сервиса.

Все сообщения пишутся в stdout в одном формате (удобно для Docker).
SQL-эхо управляется флагом DB_ECHO на движке, поэтому логгеры
sqlalchemy здесь приглушены до WARNING.
"""

import logging
import sys


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-28s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Один раз настраивает корневой логгер для всего приложения.
    Возвращает логгер пакета.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return logging.getLogger("restaurant_pos")
