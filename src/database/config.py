"""Конфигурация Tortoise ORM для подключения к базе данных."""

from typing import Any

from src.config import settings


def tortoise_config(db_url: str, *, with_aerich: bool = True) -> dict[str, Any]:
    """
    Собирает конфиг Tortoise ORM.

    Args:
        db_url: Строка подключения (postgres://..., sqlite://...)
        with_aerich: Подключать ли служебную модель миграций aerich

    Returns:
        Конфиг для Tortoise.init(config=...)
    """
    models = ["src.database.models"]
    if with_aerich:
        models.append("aerich.models")

    # AICODE-NOTE: use_tz=True — created_at всегда aware UTC,
    # от этого считаются пороги отложенных сообщений
    return {
        "connections": {"default": db_url},
        "apps": {
            "models": {
                "models": models,
                "default_connection": "default",
            }
        },
        "use_tz": True,
        "timezone": "UTC",
    }


TORTOISE_ORM: dict[str, Any] = tortoise_config(settings.database_url)
