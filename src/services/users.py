"""Реестр пользователей бота (таблица tg_users)."""

from tortoise import timezone
from tortoise.exceptions import IntegrityError

from src.database.models import MAX_MESSAGE_STATUS, TelegramUser
from src.types import TelegramID, Username
from src.utils.logger import logger

# Ограничение колонки alias
ALIAS_MAX_LENGTH = 32


class UserRegistry:
    """Чтение/запись пользователей для воронки и планировщика."""

    async def upsert_seen(self, user_id: TelegramID, alias: Username = None) -> bool:
        """
        Отмечает, что пользователь был активен.

        Сначала UPDATE по id, если ни одна строка не задета — INSERT со статусом 0.

        Args:
            user_id: Telegram ID
            alias: @username (None — не трогаем сохранённый)

        Returns:
            True если пользователь создан
        """
        values: dict[str, object] = {"updated_at": timezone.now()}
        if alias is not None:
            values["alias"] = alias[:ALIAS_MAX_LENGTH]

        affected = await TelegramUser.filter(id=user_id).update(**values)
        if affected:
            return False

        try:
            await TelegramUser.create(
                id=user_id,
                alias=alias[:ALIAS_MAX_LENGTH] if alias else None,
                message_status_id=0,
            )
        except IntegrityError:
            # AICODE-NOTE: Параллельный апдейт уже создал строку — нас это устраивает
            logger.debug(f"Пользователь {user_id} уже создан параллельным запросом")
            return False

        logger.info(f"Новый пользователь {user_id} ({alias or '-'})")
        return True

    async def list_pending_scheduled(self) -> list[TelegramUser]:
        """Пользователи, которым отправлены ещё не все отложенные сообщения (старые первыми)."""
        return await TelegramUser.filter(message_status_id__lt=MAX_MESSAGE_STATUS).order_by(
            "created_at"
        )

    async def advance_status(self, user_id: TelegramID, new_status: int) -> bool:
        """
        Ставит message_status_id (вызывается только планировщиком, всегда текущий + 1).

        Returns:
            True если строка обновлена
        """
        affected = await TelegramUser.filter(id=user_id).update(
            message_status_id=new_status, updated_at=timezone.now()
        )
        return affected > 0
