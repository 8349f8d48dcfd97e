"""Фоновые fire-and-forget задачи: трекинг кликов и отложенные отправки."""

import asyncio
from collections.abc import Coroutine
from typing import Any

from src.utils.logger import logger


class BackgroundTasks:
    """
    Держит ссылки на отвязанные задачи, чтобы их не собрал GC.

    Ошибки задач уходят только в лог — вызывающий код их не видит.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    def __len__(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, Any], name: str) -> asyncio.Task[Any]:
        """Запускает корутину в фоне и сразу возвращает управление."""
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.debug(f"Фоновая задача {task.get_name()} отменена")
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(f"Фоновая задача {task.get_name()} упала: {exc}", exc_info=exc)

    async def drain(self, timeout: float) -> None:
        """Ждёт завершения текущих задач (при остановке бота)."""
        if not self._tasks:
            return
        logger.info(f"⏳ Ждём {len(self._tasks)} фоновых задач...")
        _, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        if pending:
            logger.warning(f"{len(pending)} фоновых задач не успели завершиться")
