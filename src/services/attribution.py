"""Атрибуция: разбор deep link payload и простановка трекинговых параметров."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.services.state_store import ConversationState

PAIR_SEPARATOR = "__"
KEY_VALUE_SEPARATOR = "_"

# Единственный параметр, который выкидывается из ссылки, если пуст
ADDINFO_PARAM = "addinfo"


def parse_deeplink_payload(payload: str | None, state: ConversationState) -> None:
    """
    Разбирает payload из `/start <payload>` прямо в состояние пользователя.

    Формат: `ch_channel__sub2_alice__addinfo_promo`. Пары разделены `__`,
    внутри пары `_` отделяет ключ от значения. Пара, которая не делится
    ровно на две части, молча отбрасывается; неизвестные ключи игнорируются.

    Args:
        payload: Текст после /start (может отсутствовать)
        state: Состояние пользователя, меняется на месте
    """
    if not payload:
        return

    for pair in payload.split(PAIR_SEPARATOR):
        parts = pair.split(KEY_VALUE_SEPARATOR)
        if len(parts) != 2:
            continue

        key, value = parts
        if key == "ch":
            state.attribution_channel = value
        elif key == "sub2":
            # Пустой sub2 не затирает уже известный
            if value:
                state.attribution_subject = value
        elif key == "addinfo":
            state.attribution_note = value


def apply_attribution(
    params: dict[str, str],
    *,
    source: str | None,
    adid: str | None,
    sub2: str | None,
    addinfo: str | None,
    user_id: int | None,
    timestamp: int,
) -> None:
    """
    Проставляет трекинговые параметры в query ссылки (перезаписывая одноимённые).

    `adid`, `sub2` и `ts` есть всегда (adid может быть пустым), `source` —
    только если задан для деплоя, `tgsubid` — если известен пользователь.
    `addinfo` выкидывается целиком, если после strip() он пустой.
    """
    if source:
        params["source"] = source
    params["adid"] = adid or ""
    params["sub2"] = sub2 or ""
    params["ts"] = str(timestamp)
    if user_id:
        params["tgsubid"] = str(user_id)

    if addinfo and addinfo.strip():
        params[ADDINFO_PARAM] = addinfo
    else:
        params.pop(ADDINFO_PARAM, None)
