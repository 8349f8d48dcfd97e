"""In-memory состояние диалогов: шаги воронки и атрибуция по каждому пользователю."""

from collections import OrderedDict
from dataclasses import dataclass

from src.types import TelegramID
from src.utils.logger import logger


@dataclass
class ConversationState:
    """Состояние одного пользователя (живёт только в памяти процесса)."""

    loan_amount: str | None = None
    credit_history: str | None = None

    # Атрибуция из deep link
    attribution_channel: str | None = None  # adid, "" — валидное значение
    attribution_subject: str | None = None  # sub2
    attribution_note: str | None = None  # addinfo

    # ID последнего отправленного сообщения — удаляем перед следующим
    last_delivered_message_id: int | None = None


class ConversationStateStore:
    """
    Хранилище состояний с ограниченной ёмкостью (LRU).

    AICODE-NOTE: Доступ только из одного event loop, блокировок нет.
    При переполнении вытесняется пользователь, который дольше всех молчал.
    """

    def __init__(self, capacity: int = 50_000) -> None:
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._items: OrderedDict[TelegramID, ConversationState] = OrderedDict()

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._items

    def get(self, user_id: TelegramID) -> ConversationState | None:
        """Возвращает состояние без создания (и освежает его в LRU)."""
        state = self._items.get(user_id)
        if state is not None:
            self._items.move_to_end(user_id)
        return state

    def get_or_create(self, user_id: TelegramID) -> ConversationState:
        """Возвращает существующее состояние или создаёт пустое."""
        state = self.get(user_id)
        if state is None:
            state = ConversationState()
            self._items[user_id] = state
            self._evict()
        return state

    def ensure_initialized(self, user_id: TelegramID, fallback_handle: str) -> ConversationState:
        """
        Заполняет дефолты атрибуции, не трогая уже заданные значения.

        Args:
            user_id: Telegram ID
            fallback_handle: @username или ID строкой — дефолт для sub2
        """
        state = self.get_or_create(user_id)
        if not state.attribution_subject:
            state.attribution_subject = fallback_handle
        if state.attribution_channel is None:
            state.attribution_channel = ""
        return state

    def record_delivery(self, user_id: TelegramID, message_id: int) -> None:
        """Запоминает последнее отправленное пользователю сообщение."""
        self.get_or_create(user_id).last_delivered_message_id = message_id

    def _evict(self) -> None:
        while len(self._items) > self.capacity:
            user_id, _ = self._items.popitem(last=False)
            logger.debug(f"Состояние пользователя {user_id} вытеснено из памяти")
