"""Планировщик отложенных сообщений: 5 минут, 15 минут, 24 часа и 30 часов после первого визита."""

import asyncio
import random
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from src.database.models import TelegramUser
from src.services.background import BackgroundTasks
from src.services.content import ContentStore
from src.services.users import UserRegistry
from src.types import ScheduledKey, TelegramID
from src.utils.logger import logger


class ScheduledSender(Protocol):
    async def send_text(self, user_id: TelegramID, text: str) -> None: ...

    async def get_first_name(self, user_id: TelegramID) -> str: ...


@dataclass(frozen=True)
class ScheduledStage:
    """Этап цепочки: ключ контента, порог от created_at и статус после отправки."""

    key: ScheduledKey
    threshold: timedelta
    next_status: int


# Индекс этапа = текущий message_status_id пользователя
SCHEDULED_STAGES: tuple[ScheduledStage, ...] = (
    ScheduledStage("5min", timedelta(minutes=5), 1),
    ScheduledStage("15min", timedelta(minutes=15), 2),
    ScheduledStage("24h", timedelta(hours=24), 3),
    ScheduledStage("30h", timedelta(hours=30), 4),
)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def due_stage(user: TelegramUser, now: datetime) -> ScheduledStage | None:
    """
    Какой этап пора отправить пользователю за эту проверку.

    AICODE-NOTE: За одну проверку пользователь продвигается максимум на один этап.
    Если прошло 40 часов при статусе 0 — сейчас уйдёт только 5min,
    следующие этапы догонят его на следующих минутных проверках.
    """
    status = user.message_status_id
    if status < 0 or status >= len(SCHEDULED_STAGES):
        return None

    stage = SCHEDULED_STAGES[status]
    if _as_utc(user.created_at) <= now - stage.threshold:
        return stage
    return None


# Отправки, которые уже запланированы, но ещё не завершились: (user_id, next_status)
InFlight = set[tuple[TelegramID, int]]


async def send_scheduled_message(
    user_id: TelegramID,
    stage: ScheduledStage,
    sender: ScheduledSender,
    registry: UserRegistry,
    content: ContentStore,
) -> None:
    """
    Отправляет отложенное сообщение и только потом повышает статус.

    Если отправка упала — статус не меняется (повторим на следующей проверке).
    """
    scheduled = content.get().scheduled.get(stage.key)
    if scheduled is None:
        # Предупреждение уже в логе при загрузке контента
        logger.debug(f"В контенте нет отложенного сообщения {stage.key}, пропускаем {user_id}")
        return

    first_name = await sender.get_first_name(user_id)
    text = scheduled.text.replace("%username%", first_name)
    message = f"{text}\n\n{scheduled.link}" if scheduled.link else text

    await sender.send_text(user_id, message)
    await registry.advance_status(user_id, stage.next_status)
    logger.info(f"Отправлено отложенное {stage.key} пользователю {user_id}, статус → {stage.next_status}")


async def _send_after_delay(
    delay: float,
    user_id: TelegramID,
    stage: ScheduledStage,
    sender: ScheduledSender,
    registry: UserRegistry,
    content: ContentStore,
    in_flight: InFlight,
) -> None:
    try:
        await asyncio.sleep(delay)
        await send_scheduled_message(user_id, stage, sender, registry, content)
    finally:
        in_flight.discard((user_id, stage.next_status))


async def check_scheduled_messages(
    sender: ScheduledSender,
    registry: UserRegistry,
    content: ContentStore,
    background: BackgroundTasks,
    in_flight: InFlight,
    jitter_max_ms: int = 15000,
    now: datetime | None = None,
) -> int:
    """
    Одна проверка: кому из пользователей пора следующее сообщение.

    Отправки не ждём — каждая уходит фоновой задачей со случайной
    задержкой 0..jitter_max_ms, чтобы не слать всем в одну секунду.
    Пока отправка этапа не завершилась, пользователь пропускается
    следующими проверками.

    Args:
        in_flight: Общий между проверками набор незавершённых отправок

    Returns:
        Сколько отправок запланировано
    """
    now = now or datetime.now(tz=UTC)
    users = await registry.list_pending_scheduled()

    scheduled = 0
    for user in users:
        stage = due_stage(user, now)
        if stage is None:
            continue

        key = (user.id, stage.next_status)
        if key in in_flight:
            logger.debug(f"Отложенное {stage.key} для {user.id} ещё отправляется, пропускаем")
            continue

        in_flight.add(key)
        delay = random.randint(0, jitter_max_ms) / 1000
        background.spawn(
            _send_after_delay(delay, user.id, stage, sender, registry, content, in_flight),
            name=f"scheduled:{stage.key}:{user.id}",
        )
        scheduled += 1

    if scheduled:
        logger.info(f"Отложенные сообщения: запланировано {scheduled} из {len(users)} ожидающих")
    return scheduled


async def run_scheduler(
    sender: ScheduledSender,
    registry: UserRegistry,
    content: ContentStore,
    background: BackgroundTasks,
    interval_seconds: int = 60,
    jitter_max_ms: int = 15000,
) -> None:
    """
    Запускает планировщик отложенных сообщений.

    Проверяет пользователей раз в interval_seconds, пока бот работает.
    """
    logger.info("Планировщик отложенных сообщений запущен")
    in_flight: InFlight = set()

    while True:
        try:
            await check_scheduled_messages(
                sender, registry, content, background, in_flight, jitter_max_ms
            )
        except Exception as e:
            logger.error(f"Ошибка в планировщике отложенных сообщений: {e}", exc_info=True)

        await asyncio.sleep(interval_seconds)
