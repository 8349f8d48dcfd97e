"""Middleware для логирования входящих сообщений и нажатий кнопок."""

from collections.abc import Awaitable, Callable
from typing import Any

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject

from src.types import UserIdentity
from src.utils.logger import verbose


def describe_event(event: TelegramObject) -> str | None:
    """Короткое описание события для лога (None — не логируем)."""
    if isinstance(event, Message):
        who = UserIdentity.from_user(event.from_user).label if event.from_user else "unknown"
        text = event.text or "<non-text message>"
        return f"📨 Message from {who}: {text[:100]}"

    if isinstance(event, CallbackQuery):
        who = UserIdentity.from_user(event.from_user).label
        return f"🔘 Callback from {who}: {event.data}"

    return None


class LoggingMiddleware(BaseMiddleware):
    """Middleware для логирования сообщений и callback'ов."""

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        """
        Логирует входящее событие и передаёт его дальше.

        Args:
            handler: Следующий обработчик в цепочке
            event: Входящее событие (Message или CallbackQuery)
            data: Дополнительные данные

        Returns:
            Результат выполнения handler
        """
        description = describe_event(event)
        if description:
            verbose(description)

        return await handler(event, data)
