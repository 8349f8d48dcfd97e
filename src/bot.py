"""Главный модуль запуска Telegram-бота."""

import asyncio

from aiogram import Bot, Dispatcher
from aiogram.fsm.storage.base import BaseStorage
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.fsm.storage.redis import RedisStorage
from aiogram.types import BotCommand
from redis.asyncio import Redis
from tortoise import Tortoise

from src.config import Settings, settings
from src.database.config import TORTOISE_ORM
from src.handlers import register_all_handlers
from src.keyboards import INFO_COMMANDS
from src.middlewares.logging import LoggingMiddleware
from src.services.background import BackgroundTasks
from src.services.container import BotServices
from src.services.content import ContentStore
from src.services.links import LinkBuilder
from src.services.messenger import Messenger
from src.services.scheduler import run_scheduler
from src.services.state_store import ConversationStateStore
from src.services.tracker import ClickTracker
from src.services.users import UserRegistry
from src.utils.logger import logger
from src.webhook import remove_webhook, setup_webhook

BOT_COMMANDS = [
    BotCommand(command="start", description="🖐 Начать работу с ботом"),
    *(BotCommand(command=command, description=label) for command, label in INFO_COMMANDS.items()),
]

# Сколько ждать отложенные отправки и трекинг при остановке
SHUTDOWN_DRAIN_SECONDS = 20.0


def build_services(
    bot: Bot, config: Settings, content: ContentStore, background: BackgroundTasks
) -> BotServices:
    """Собирает зависимости хендлеров."""
    states = ConversationStateStore(capacity=config.state_cache_size)
    links = LinkBuilder(
        source=config.binom_source,
        tracking_base_url=config.binom_url,
        user_base_url=config.offer_url,
    )
    return BotServices(
        content=content,
        states=states,
        links=links,
        tracker=ClickTracker(links, states, background, config.tracking_timeout_seconds),
        messenger=Messenger(bot, states, config.files_dir),
        registry=UserRegistry(),
        bot_name=config.bot_name,
    )


def build_storage(redis: Redis | None) -> BaseStorage:
    """Redis storage для персистентности FSM state между рестартами, иначе в памяти."""
    if redis is None:
        logger.warning("REDIS_URL не задан — шаги анкеты хранятся в памяти")
        return MemoryStorage()
    return RedisStorage(redis=redis)


async def on_startup() -> None:
    """Действия при запуске бота."""
    logger.info("🚀 Запуск бота...")
    logger.info(f"⚙️  Режим: {settings.mode}")

    await Tortoise.init(config=TORTOISE_ORM)
    logger.info("✅ База данных подключена")

    # AICODE-NOTE: Генерация схемы БД автоматически (только для разработки!)
    # В продакшене используйте миграции через Aerich.
    if settings.mode == "development":
        await Tortoise.generate_schemas()
        logger.info("✅ Схемы БД сгенерированы (dev mode)")


async def on_shutdown() -> None:
    """Действия при остановке бота."""
    logger.info("🛑 Остановка бота...")

    await Tortoise.close_connections()
    logger.info("✅ База данных отключена")


async def main() -> None:
    """Главная функция запуска бота."""

    # Без контента бот не стартует (ContentError)
    content = ContentStore(settings.content_path)
    content.load()

    bot = Bot(token=settings.telegram_bot_token)

    redis = Redis.from_url(settings.redis_url) if settings.redis_url else None
    dp = Dispatcher(storage=build_storage(redis))

    background = BackgroundTasks()
    services = build_services(bot, settings, content, background)
    dp["services"] = services

    # Регистрация middleware
    dp.message.middleware(LoggingMiddleware())
    dp.callback_query.middleware(LoggingMiddleware())

    register_all_handlers(dp)

    scheduler_task: asyncio.Task[None] | None = None
    webhook_runner = None

    try:
        await on_startup()

        await bot.set_my_commands(BOT_COMMANDS)
        logger.info("✅ Меню команд установлено")

        scheduler_task = asyncio.create_task(
            run_scheduler(
                services.messenger,
                services.registry,
                content,
                background,
                interval_seconds=settings.scheduler_interval_seconds,
                jitter_max_ms=settings.scheduled_jitter_max_ms,
            )
        )
        logger.info("✅ Планировщик отложенных сообщений запущен в фоне")

        if settings.bot_mode == "webhook":
            if not settings.webhook_url:
                raise ValueError("WEBHOOK_URL не установлен в .env для режима webhook")

            logger.info("🔗 Режим работы: WEBHOOK")
            webhook_runner = await setup_webhook(
                bot=bot,
                dp=dp,
                webhook_url=settings.webhook_url,
                webhook_path=settings.webhook_path,
                port=settings.webhook_port,
                secret_token=settings.webhook_secret,
            )
            logger.info("✅ Бот запущен и готов к работе!")

            # Сервер уже слушает — ждём, пока процесс не остановят
            await asyncio.Event().wait()

        else:
            logger.info("🔄 Режим работы: POLLING")
            logger.info("✅ Бот запущен и готов к работе!")
            await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())

    except KeyboardInterrupt:
        logger.info("⏸️  Прервано пользователем (Ctrl+C)")

    except Exception as e:
        logger.error(f"❌ Критическая ошибка: {e}", exc_info=True)

    finally:
        if scheduler_task and not scheduler_task.done():
            logger.info("⏹️  Останавливаем планировщик...")
            scheduler_task.cancel()
            try:
                await scheduler_task
            except asyncio.CancelledError:
                logger.info("✅ Планировщик остановлен")

        # Уже запланированные отправки не отменяем — даём им дойти
        await background.drain(SHUTDOWN_DRAIN_SECONDS)
        await services.tracker.close()

        if webhook_runner:
            logger.info("⏹️  Останавливаем webhook сервер...")
            await remove_webhook(bot)
            await webhook_runner.cleanup()
            logger.info("✅ Webhook сервер остановлен")

        await on_shutdown()
        await bot.session.close()

        if redis is not None:
            await redis.aclose()
            logger.info("✅ Redis соединение закрыто")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("👋 Бот остановлен")
