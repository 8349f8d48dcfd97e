"""Database модуль - модели и конфигурация Tortoise ORM."""

from src.database.models import MAX_MESSAGE_STATUS, TelegramUser

__all__ = [
    "MAX_MESSAGE_STATUS",
    "TelegramUser",
]
