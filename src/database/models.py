"""Модели базы данных Tortoise ORM."""

from __future__ import annotations

from tortoise import Model, fields

# Сколько отложенных сообщений всего в цепочке (5min, 15min, 24h, 30h)
MAX_MESSAGE_STATUS = 4


class TelegramUser(Model):
    """Пользователь бота (все, кто хоть раз писал)."""

    # AICODE-NOTE: PK = Telegram User ID, не автоинкремент
    id = fields.BigIntField(pk=True, generated=False, description="Telegram User ID")
    # AICODE-NOTE: Tortoise ORM не поддерживает аннотации типов напрямую,
    # используем type: ignore для совместимости с MyPy
    alias: str | None = fields.CharField(
        max_length=32, null=True, description="@username в Telegram"
    )  # type: ignore[assignment]

    created_at = fields.DatetimeField(auto_now_add=True, description="Первое обращение")
    updated_at = fields.DatetimeField(auto_now=True, description="Последнее обращение")

    # Сколько отложенных сообщений уже отправлено (0..4), только растёт
    message_status_id = fields.SmallIntField(
        default=0, description="Количество отправленных отложенных сообщений"
    )

    class Meta:
        table = "tg_users"

    def __str__(self) -> str:
        name = self.alias or str(self.id)
        return f"TelegramUser({name}, status={self.message_status_id})"

