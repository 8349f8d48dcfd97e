"""Сборка исходящих ссылок: офферы для пользователя и трекинговые ссылки Binom."""

import time
from collections.abc import Callable
from urllib.parse import quote, unquote_plus, urlencode, urlsplit, urlunsplit

from src.services.attribution import ADDINFO_PARAM, apply_attribution
from src.services.state_store import ConversationState
from src.types import UserIdentity
from src.utils.logger import logger


def _merge_query(base_url: str, params: dict[str, str]) -> str:
    """
    Дописывает `params` к query строке `base_url`.

    Чужие параметры базы остаются байт в байт (повторы, флаги без значения,
    исходное кодирование); одноимённые с `params` и `addinfo` вырезаются.
    Если URL не разбирается — дописываем параметры строкой через `?` или `&`.
    """
    encoded = urlencode(params, quote_via=quote)
    try:
        parts = urlsplit(base_url)
    except ValueError:
        logger.warning(f"Не удалось разобрать URL {base_url!r}, собираем ссылку строкой")
        separator = "&" if "?" in base_url else "?"
        return f"{base_url}{separator}{encoded}"

    # addinfo вычищается из базы, даже когда в params его нет
    replaced = set(params) | {ADDINFO_PARAM}
    kept = [
        segment
        for segment in parts.query.split("&")
        if segment and unquote_plus(segment.split("=", 1)[0]) not in replaced
    ]
    query = "&".join([*kept, encoded] if encoded else kept)
    return urlunsplit(parts._replace(query=query))


class LinkBuilder:
    """Собирает ссылки с данными пользователя и атрибуцией."""

    def __init__(
        self,
        source: str | None = None,
        tracking_base_url: str | None = None,
        user_base_url: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.source = source
        self.tracking_base_url = tracking_base_url
        self.user_base_url = user_base_url
        self._clock = clock

    def build_link(
        self,
        base_url: str,
        identity: UserIdentity | None,
        state: ConversationState | None,
        override_note: str | None = None,
    ) -> str:
        """
        Ссылка оффера для пользователя: uid/alias/name + атрибуция.

        Args:
            base_url: Ссылка оффера из контента
            identity: Пользователь (None — параметры будут пустыми)
            state: Состояние с атрибуцией (может ещё не существовать)
            override_note: addinfo вместо сохранённого в состоянии

        Returns:
            Готовая ссылка или "" если база не задана
        """
        if not base_url:
            logger.error("Базовая ссылка оффера не настроена, ссылку собрать нельзя")
            return ""

        user_id = identity.id if identity else None
        fallback_sub2 = identity.handle if identity else ""
        note = override_note if override_note is not None else (state.attribution_note if state else None)

        params = {
            "uid": str(user_id) if user_id else "",
            "alias": (identity.alias if identity else None) or "",
            "name": (identity.first_name if identity else None) or "",
        }
        apply_attribution(
            params,
            source=self.source,
            adid=state.attribution_channel if state else "",
            sub2=(state.attribution_subject if state else None) or fallback_sub2,
            addinfo=note,
            user_id=user_id,
            timestamp=int(self._clock()),
        )
        return _merge_query(base_url, params)

    def build_tracking_link(
        self,
        adid: str,
        sub2: str,
        addinfo: str | None = None,
        user_id: int | None = None,
    ) -> str:
        """
        Трекинговая ссылка Binom для серверного вызова (пользователю не показывается).

        Если база трекера не задана — берём пользовательскую базу.

        Returns:
            Ссылка или "" — тогда трекинг пропускаем
        """
        base_url = self.tracking_base_url or self.user_base_url
        if not base_url:
            logger.error("BINOM_URL не настроен, трекинговую ссылку собрать нельзя")
            return ""

        params: dict[str, str] = {}
        apply_attribution(
            params,
            source=self.source,
            adid=adid,
            sub2=sub2,
            addinfo=addinfo,
            user_id=user_id,
            timestamp=int(self._clock()),
        )
        return _merge_query(base_url, params)

    def build_offer_link(
        self,
        fallback_base_url: str,
        identity: UserIdentity,
        state: ConversationState | None,
        button_label: str,
    ) -> str:
        """
        Финальная ссылка после анкеты.

        С захваченным sub2 — трекинговая ссылка с addinfo = подпись кнопки,
        иначе (или если трекер не настроен) — обычная ссылка от `fallback_base_url`.
        """
        if state and state.attribution_subject:
            link = self.build_tracking_link(
            adid=state.attribution_channel or "",
            sub2=state.attribution_subject,
            addinfo=button_label,
            user_id=identity.id,
            )
            if link:
                return link
            logger.warning(f"Пользователь {identity.label}: трекинговая ссылка не собрана, отдаём обычную")

        return self.build_link(fallback_base_url, identity, state)
