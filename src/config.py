"""Конфигурация приложения через .env файл."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Настройки приложения из переменных окружения."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Игнорируем лишние переменные из .env
    )

    # Telegram Bot
    telegram_bot_token: str = Field(validation_alias="BOT_TOKEN")
    bot_name: str = "ЗаймиБот"

    # Database
    database_url: str

    # Redis для FSM (если не задан — MemoryStorage)
    redis_url: str | None = None

    # Application
    mode: str = "development"
    log_level: str = "INFO"
    log_dir: Path = Path("logs")
    verbose_logs: bool = Field(default=False, validation_alias="TG_VERBOSE_LOGS")

    # Bot Mode
    bot_mode: str = "polling"  # polling | webhook

    # Webhook настройки (только для bot_mode=webhook)
    webhook_url: str | None = None  # https://yourdomain.com/webhook
    webhook_path: str = "/webhook"
    webhook_port: int = 8080
    webhook_secret: str | None = None

    # Контент бота (тексты, кнопки, ссылки офферов)
    content_path: Path = Path("data/content.json")
    files_dir: Path = Path("files")

    # Binom трекинг
    binom_url: str | None = None  # База трекера, может уже содержать query
    binom_source: str | None = None  # Константа source для этого деплоя
    offer_url: str | None = None  # Пользовательская база, если трекер не настроен
    tracking_timeout_seconds: float = 5.0

    # Планировщик отложенных сообщений
    scheduler_interval_seconds: int = 60
    scheduled_jitter_max_ms: int = 15000

    # Ёмкость in-memory хранилища состояний диалогов
    state_cache_size: int = 50_000


# Глобальный экземпляр настроек
# AICODE-NOTE: Без BOT_TOKEN и DATABASE_URL здесь падает ValidationError — бот не стартует
settings = Settings(_env_file=".env")  # type: ignore[call-arg]
