"""Webhook режим: aiohttp сервер для приёма обновлений от Telegram."""

from aiogram import Bot, Dispatcher
from aiogram.webhook.aiohttp_server import SimpleRequestHandler, setup_application
from aiohttp import web

from src.utils.logger import logger


async def setup_webhook(
    bot: Bot,
    dp: Dispatcher,
    webhook_url: str,
    webhook_path: str,
    port: int,
    secret_token: str | None = None,
) -> web.AppRunner:
    """
    Регистрирует webhook в Telegram и поднимает aiohttp сервер.

    Args:
        bot: Aiogram Bot instance
        dp: Aiogram Dispatcher instance
        webhook_url: Полный публичный URL (https://domain.com/webhook)
        webhook_path: Путь, на котором слушаем (/webhook)
        port: Порт веб-сервера
        secret_token: Секрет для заголовка X-Telegram-Bot-Api-Secret-Token

    Returns:
        web.AppRunner для graceful shutdown
    """
    logger.info(f"🔗 Webhook: {webhook_url}")

    await bot.set_webhook(
        url=webhook_url,
        allowed_updates=dp.resolve_used_update_types(),
        drop_pending_updates=True,
        secret_token=secret_token,
    )

    app = web.Application()
    SimpleRequestHandler(dispatcher=dp, bot=bot, secret_token=secret_token).register(
        app, path=webhook_path
    )
    setup_application(app, dp, bot=bot)

    runner = web.AppRunner(app)
    await runner.setup()
    await web.TCPSite(runner, "0.0.0.0", port).start()

    logger.info(f"✅ Webhook сервер слушает :{port}{webhook_path}")
    return runner


async def remove_webhook(bot: Bot) -> None:
    """Снимает webhook при остановке."""
    await bot.delete_webhook(drop_pending_updates=True)
    logger.info("✅ Webhook удалён")
