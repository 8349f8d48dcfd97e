"""Трекинг нажатий кнопок в Binom (серверные GET-запросы, fire-and-forget)."""

import aiohttp

from src.services.background import BackgroundTasks
from src.services.links import LinkBuilder
from src.services.state_store import ConversationStateStore
from src.types import UserIdentity
from src.utils.logger import logger


class ClickTracker:
    """Отправляет событие клика в трекер, не задерживая ответ пользователю."""

    def __init__(
        self,
        links: LinkBuilder,
        states: ConversationStateStore,
        background: BackgroundTasks,
        timeout_seconds: float = 5.0,
    ) -> None:
        self._links = links
        self._states = states
        self._background = background
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session: aiohttp.ClientSession | None = None

    def track(self, identity: UserIdentity, label: str) -> None:
        """
        Фиксирует клик по кнопке.

        Трекаем только если знаем sub2 (adid может быть пустым).

        Args:
            identity: Кто нажал
            label: Латинская подпись кнопки (уходит в addinfo)
        """
        logger.info(f"Пользователь {identity.label} нажал кнопку: {label}")

        state = self._states.get(identity.id)
        if not state or not state.attribution_subject:
            return

        url = self._links.build_tracking_link(
            adid=state.attribution_channel or "",
            sub2=state.attribution_subject,
            addinfo=label,
            user_id=identity.id,
        )
        if not url:
            return

        self._background.spawn(self.call(url), name=f"track:{identity.id}:{label}")

    async def call(self, url: str) -> None:
        """GET на трекинговый URL. Ошибки и таймауты только логируются."""
        if not url:
            logger.warning("Пустой URL для трекинга")
            return

        try:
            session = self._get_session()
            async with session.get(url) as response:
                await response.read()
                logger.debug(f"Binom трекинг выполнен: {response.status}")
        except TimeoutError:
            logger.warning("Binom трекинг: таймаут")
        except aiohttp.ClientError as e:
            logger.error(f"Ошибка вызова Binom трекинга: {e}")

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
