"""Telegram handlers - обработчики команд и кнопок."""

from aiogram import Dispatcher

from src.handlers import fallback, funnel, info, start


def register_all_handlers(dp: Dispatcher) -> None:
    """
    Регистрирует все handlers в диспетчер.

    Args:
        dp: Диспетчер aiogram
    """
    dp.include_router(start.router)
    dp.include_router(funnel.router)
    dp.include_router(info.router)
    # Последний, чтобы обрабатывал все остальные сообщения
    dp.include_router(fallback.router)

    # Ошибки из любого роутера
    dp.errors.register(fallback.handle_error)


__all__ = ["register_all_handlers"]
