"""Pytest конфигурация и фикстуры."""

import json
import os
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiogram.types import InlineKeyboardMarkup, User
from tortoise import Tortoise

# Устанавливаем тестовые переменные окружения
os.environ["BOT_TOKEN"] = "test_token_123456"
os.environ["DATABASE_URL"] = "sqlite://:memory:"
os.environ["MODE"] = "test"
os.environ["BINOM_SOURCE"] = "tgbot"
os.environ["TG_VERBOSE_LOGS"] = "true"

from src.database.config import tortoise_config  # noqa: E402
from src.services.container import BotServices  # noqa: E402
from src.services.content import ContentStore  # noqa: E402
from src.services.links import LinkBuilder  # noqa: E402
from src.services.state_store import ConversationStateStore  # noqa: E402
from src.services.users import UserRegistry  # noqa: E402
from src.types import UserIdentity  # noqa: E402

FIXED_TS = 1_700_000_000
TRACKING_BASE = "https://binom.example.com/click.php?key=abc"

SAMPLE_CONTENT: dict[str, Any] = {
    "startMsg": "Привет, %username%! Я %namebot%.",
    "startButtonName": "Начнём",
    "startButtonNameEn": "start",
    "secondMsg": "Какая сумма нужна?",
    "sum": [
        {"buttonName": "5 000 ₽", "buttonNameEn": "sum_5000", "sum": 5000},
        {"buttonName": "30 000 ₽", "buttonNameEn": "sum_30000", "sum": "30000"},
    ],
    "thirdMsg": "Какая кредитная история?",
    "historyCredit": [
        {"buttonName": "Хорошая", "buttonNameEn": "history_good", "status": "good"},
        {"buttonName": "Плохая", "buttonNameEn": "history_bad", "status": "bad"},
    ],
    "fourthMsg": "Ваше предложение готово!",
    "fourthButton": "Получить деньги",
    "fourthButtonEn": "get_money",
    "startAnketa": "https://offers.example.com/anketa?lp=1",
    "day": {
        "text": "%username%, займ дня %sumuser%",
        "buttonName": "Займ дня",
        "link": "https://offers.example.com/day?lp=2",
        "amount": "30 000",
    },
    "week": {
        "text": "Займ недели %sumuser%",
        "buttonName": "Займ недели",
        "link": "https://offers.example.com/week?lp=3",
        "amount": "50 000",
    },
    "how": {
        "link": "https://offers.example.com/how",
        "textOne": "Заполните анкету:",
        "textSecond": "Деньги придут на карту.",
        "buttonName": "Анкета",
    },
    "all": [
        {"name": "Займер", "link": "https://offers.example.com/o/1"},
        {"name": "Екапуста", "link": "https://offers.example.com/o/2"},
    ],
    "textOneAll": "Все предложения:",
    "textSecondAll": "Подавайте в несколько МФО.",
    "insuranceText": "Как вернуть страховку.",
    "scheduled": {
        "5min": {"text": "%username%, вы не закончили анкету", "link": "https://s.example.com/5"},
        "15min": {"text": "15 минут, %username%", "link": "https://s.example.com/15"},
        "24h": {"text": "Сутки, %username%", "link": "https://s.example.com/24"},
        "30h": {"text": "Последний шанс, %username%", "link": "https://s.example.com/30"},
    },
}


@pytest.fixture(autouse=True)
async def initialize_db() -> AsyncGenerator[None, None]:
    """
    Инициализация тестовой БД перед каждым тестом.

    Используется in-memory SQLite для скорости.
    После каждого теста БД очищается.
    """
    await Tortoise.init(config=tortoise_config("sqlite://:memory:", with_aerich=False))
    await Tortoise.generate_schemas()

    yield

    await Tortoise.close_connections()


# =============================================================================
# КОНТЕНТ, СОСТОЯНИЯ, ССЫЛКИ
# =============================================================================


def write_content(path: Path, data: dict[str, Any]) -> Path:
    path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def content_path(tmp_path: Path) -> Path:
    return write_content(tmp_path / "content.json", SAMPLE_CONTENT)


@pytest.fixture
def content_store(content_path: Path) -> ContentStore:
    store = ContentStore(content_path)
    store.load()
    return store


@pytest.fixture
def states() -> ConversationStateStore:
    return ConversationStateStore(capacity=100)


@pytest.fixture
def links() -> LinkBuilder:
    return LinkBuilder(
        source="tgbot",
        tracking_base_url=TRACKING_BASE,
        clock=lambda: FIXED_TS,
    )


@pytest.fixture
def alice() -> UserIdentity:
    return UserIdentity(id=42, alias="alice", first_name="Алиса")


# =============================================================================
# ФЕЙКИ ДЛЯ ХЕНДЛЕРОВ
# =============================================================================


@dataclass
class SentReply:
    user_id: int
    chat_id: int
    text: str
    keyboard: InlineKeyboardMarkup | None
    image: str | None


@dataclass
class FakeMessenger:
    """Пишет всё отправленное в списки вместо Telegram."""

    states: ConversationStateStore
    replies: list[SentReply] = field(default_factory=list)
    documents: list[tuple[int, str]] = field(default_factory=list)
    texts: list[tuple[int, str]] = field(default_factory=list)
    first_names: dict[int, str] = field(default_factory=dict)
    fail_for: set[int] = field(default_factory=set)
    _next_message_id: int = 100

    async def reply(
        self,
        user_id: int,
        chat_id: int,
        text: str,
        keyboard: InlineKeyboardMarkup | None = None,
        image: str | None = None,
    ) -> SentReply:
        self._next_message_id += 1
        sent = SentReply(user_id, chat_id, text, keyboard, image)
        self.replies.append(sent)
        self.states.record_delivery(user_id, self._next_message_id)
        return sent

    async def send_document(self, chat_id: int, file_name: str) -> bool:
        self.documents.append((chat_id, file_name))
        return True

    async def send_text(self, user_id: int, text: str) -> None:
        if user_id in self.fail_for:
            raise RuntimeError("Forbidden: bot was blocked by the user")
        self.texts.append((user_id, text))

    async def get_first_name(self, user_id: int) -> str:
        return self.first_names.get(user_id, "")

    @property
    def last(self) -> SentReply:
        return self.replies[-1]


@dataclass
class FakeTracker:
    clicks: list[tuple[int, str]] = field(default_factory=list)

    def track(self, identity: UserIdentity, label: str) -> None:
        self.clicks.append((identity.id, label))

    @property
    def labels(self) -> list[str]:
        return [label for _, label in self.clicks]


@pytest.fixture
def messenger(states: ConversationStateStore) -> FakeMessenger:
    return FakeMessenger(states=states)


@pytest.fixture
def tracker() -> FakeTracker:
    return FakeTracker()


@pytest.fixture
def services(
    content_store: ContentStore,
    states: ConversationStateStore,
    links: LinkBuilder,
    tracker: FakeTracker,
    messenger: FakeMessenger,
) -> BotServices:
    return BotServices(
        content=content_store,
        states=states,
        links=links,
        tracker=tracker,  # type: ignore[arg-type]
        messenger=messenger,  # type: ignore[arg-type]
        registry=UserRegistry(),
        bot_name="ЗаймиБот",
    )


def make_user(user_id: int = 42, username: str | None = "alice", first_name: str = "Алиса") -> User:
    return User(id=user_id, is_bot=False, first_name=first_name, username=username)


def make_callback(data: str, user: User | None = None) -> MagicMock:
    """CallbackQuery-заглушка: кнопка нажата в личке, answer() — AsyncMock."""
    callback = MagicMock()
    callback.data = data
    callback.from_user = user or make_user()
    callback.message = None
    callback.answer = AsyncMock()
    return callback


def make_message(text: str, user: User | None = None) -> MagicMock:
    from_user = user or make_user()
    message = MagicMock()
    message.text = text
    message.from_user = from_user
    message.chat.id = from_user.id
    return message
