"""Отправка ответов пользователю: удаление прошлого сообщения, картинки, документы."""

from pathlib import Path

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError, TelegramBadRequest
from aiogram.types import CallbackQuery, FSInputFile, InlineKeyboardMarkup, Message

from src.services.state_store import ConversationStateStore
from src.types import TelegramID
from src.utils.logger import logger

# Сигнатура ошибки просроченного callback (кнопка нажата после рестарта)
EXPIRED_QUERY_ERROR = "query is too old"


async def safe_answer(callback: CallbackQuery) -> None:
    """Отвечает на callback, игнорируя просроченные запросы."""
    try:
        await callback.answer()
    except TelegramBadRequest as e:
        if EXPIRED_QUERY_ERROR in e.message:
            logger.debug(f"Просроченный callback от {callback.from_user.id} проигнорирован")
            return
        logger.warning(f"Ошибка ответа на callback: {e.message}")


class Messenger:
    """
    Канал ответов бота.

    Каждый ответ: удалить предыдущее сообщение бота → отправить новое →
    запомнить его ID для следующего удаления.
    """

    def __init__(self, bot: Bot, states: ConversationStateStore, files_dir: Path) -> None:
        self.bot = bot
        self._states = states
        self._files_dir = files_dir

    async def reply(
        self,
        user_id: TelegramID,
        chat_id: int,
        text: str,
        keyboard: InlineKeyboardMarkup | None = None,
        image: str | None = None,
    ) -> Message:
        """
        Отправляет ответ (с картинкой, если она есть).

        Args:
            user_id: Кому отвечаем (ключ состояния)
            chat_id: Чат для отправки
            text: Текст / подпись к картинке
            keyboard: Inline клавиатура
            image: URL или путь к картинке относительно files_dir

        Returns:
            Отправленное сообщение
        """
        await self._delete_previous(user_id, chat_id)

        photo = self._resolve_image(image)
        if photo is not None:
            sent = await self.bot.send_photo(
                chat_id=chat_id, photo=photo, caption=text, reply_markup=keyboard
            )
        else:
            sent = await self.bot.send_message(chat_id=chat_id, text=text, reply_markup=keyboard)

        self._states.record_delivery(user_id, sent.message_id)
        return sent

    async def send_document(self, chat_id: int, file_name: str) -> bool:
        """Отправляет файл из files_dir. Нет файла — пишем в лог и возвращаем False."""
        path = self._files_dir / file_name
        if not path.is_file():
            logger.warning(f"Файл не найден: {path}")
            return False

        await self.bot.send_document(chat_id=chat_id, document=FSInputFile(path))
        return True

    async def send_text(self, user_id: TelegramID, text: str) -> None:
        """Простое сообщение без клавиатуры (для отложенных рассылок)."""
        await self.bot.send_message(chat_id=user_id, text=text)

    async def get_first_name(self, user_id: TelegramID) -> str:
        """Имя пользователя для обращения. Не получилось — пустая строка."""
        try:
            chat = await self.bot.get_chat(user_id)
        except TelegramAPIError as e:
            logger.debug(f"Не удалось получить имя пользователя {user_id}: {e}")
            return ""
        return chat.first_name or ""

    async def _delete_previous(self, user_id: TelegramID, chat_id: int) -> None:
        state = self._states.get(user_id)
        if state is None or state.last_delivered_message_id is None:
            return

        message_id = state.last_delivered_message_id
        state.last_delivered_message_id = None
        try:
            await self.bot.delete_message(chat_id=chat_id, message_id=message_id)
        except TelegramBadRequest as e:
            # "message to delete not found" / "message can't be deleted" (старше 48 часов)
            logger.debug(f"Не удалось удалить сообщение {message_id} у {user_id}: {e.message}")

    def _resolve_image(self, image: str | None) -> str | FSInputFile | None:
        if not image:
            return None
        if image.startswith(("http://", "https://")):
            return image

        path = self._files_dir / image
        if not path.is_file():
            logger.warning(f"Картинка {path} не найдена, отправляем только текст")
            return None
        return FSInputFile(path)
