"""Тесты логирующего middleware."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

from aiogram.types import CallbackQuery, Chat, Message, Update
from conftest import make_user

from src.middlewares.logging import LoggingMiddleware, describe_event


def make_real_message(text: str | None) -> Message:
    return Message(
        message_id=1,
        date=datetime.now(tz=UTC),
        chat=Chat(id=42, type="private"),
        from_user=make_user(),
        text=text,
    )


def test_describe_message() -> None:
    assert describe_event(make_real_message("/day")) == "📨 Message from 42:alice: /day"
    assert describe_event(make_real_message(None)).endswith("<non-text message>")  # type: ignore[union-attr]


def test_describe_callback() -> None:
    callback = CallbackQuery(id="1", from_user=make_user(), chat_instance="1", data="amount_5000")

    assert describe_event(callback) == "🔘 Callback from 42:alice: amount_5000"


def test_describe_other_event() -> None:
    assert describe_event(Update(update_id=1)) is None


async def test_middleware_passes_event_through() -> None:
    handler = AsyncMock(return_value="handled")
    event = make_real_message("привет")

    result = await LoggingMiddleware()(handler, event, {})

    assert result == "handled"
    handler.assert_awaited_once_with(event, {})
