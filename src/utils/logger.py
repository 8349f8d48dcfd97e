"""Логирование: консоль + ротируемый файл, и пошаговый лог действий пользователей."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from src.config import settings

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"


def setup_logger(
    name: str = "loan-funnel-bot", logs_dir: Path | None = None
) -> logging.Logger:
    """
    Настраивает логгер приложения.

    В консоль уходит всё начиная с LOG_LEVEL, в файл — только INFO и выше,
    чтобы DEBUG-шум (просроченные callback'и, неудалённые сообщения) не раздувал логи.

    Args:
        name: Имя логгера
        logs_dir: Каталог для bot.log (по умолчанию LOG_DIR из настроек)

    Returns:
        Настроенный логгер
    """
    logger: logging.Logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, settings.log_level.upper()))
    logger.handlers.clear()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler: logging.StreamHandler[Any] = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    target_dir = logs_dir or settings.log_dir
    target_dir.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        target_dir / "bot.log",
        maxBytes=10 * 1024 * 1024,  # 10 MB
        backupCount=5,
        encoding="utf-8",
    )
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger


def verbose(message: str) -> None:
    """Пошаговый лог действий пользователя (TG_VERBOSE_LOGS=true → INFO, иначе DEBUG)."""
    logger.log(logging.INFO if settings.verbose_logs else logging.DEBUG, message)


logger = setup_logger()
