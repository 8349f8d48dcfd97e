"""Типы данных для типизации проекта."""

from dataclasses import dataclass
from typing import Literal

from aiogram.types import User

# Ключи отложенных сообщений в контенте
ScheduledKey = Literal["5min", "15min", "24h", "30h"]

# Алиасы типов для улучшения читаемости
TelegramID = int
Username = str | None


@dataclass(frozen=True)
class UserIdentity:
    """Кто пишет боту: ID, @username и имя (имя только для отображения, не сохраняется)."""

    id: TelegramID
    alias: Username = None
    first_name: str | None = None

    @property
    def handle(self) -> str:
        """@username или ID строкой — дефолтный sub2."""
        return self.alias or str(self.id)

    @property
    def label(self) -> str:
        """Идентификатор для логов: `id:alias` или просто `id`."""
        return f"{self.id}:{self.alias}" if self.alias else str(self.id)

    @classmethod
    def from_user(cls, user: User) -> "UserIdentity":
        return cls(id=user.id, alias=user.username, first_name=user.first_name)
