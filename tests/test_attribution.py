"""Тесты разбора deep link payload и трекинговых параметров."""

from src.services.attribution import apply_attribution, parse_deeplink_payload
from src.services.state_store import ConversationState


class TestParseDeeplinkPayload:
    """Формат: key_value__key_value."""

    def test_all_known_keys(self) -> None:
        """ch, sub2 и addinfo раскладываются по полям атрибуции."""
        state = ConversationState()
        parse_deeplink_payload("ch_promo1__sub2_alice__addinfo_banner", state)

        assert state.attribution_channel == "promo1"
        assert state.attribution_subject == "alice"
        assert state.attribution_note == "banner"

    def test_pair_with_extra_underscore_is_dropped(self) -> None:
        """Пара из трёх частей выкидывается, остальные не страдают."""
        state = ConversationState()
        parse_deeplink_payload("ch_my_channel__sub2_bob", state)

        assert state.attribution_channel is None
        assert state.attribution_subject == "bob"

    def test_pair_without_separator_is_dropped(self) -> None:
        """Пара без `_` выкидывается."""
        state = ConversationState()
        parse_deeplink_payload("garbage__ch_tg", state)

        assert state.attribution_channel == "tg"

    def test_unknown_keys_ignored(self) -> None:
        state = ConversationState()
        parse_deeplink_payload("foo_bar__utm_x", state)

        assert state == ConversationState()

    def test_empty_payload_is_noop(self) -> None:
        state = ConversationState()
        parse_deeplink_payload("", state)
        parse_deeplink_payload(None, state)

        assert state == ConversationState()

    def test_malformed_payload_never_raises(self) -> None:
        state = ConversationState()
        parse_deeplink_payload("____ _ __ch___", state)

        assert state.attribution_subject is None

    def test_empty_channel_is_kept(self) -> None:
        """Пустой ch — валидное значение."""
        state = ConversationState(attribution_channel="old")
        parse_deeplink_payload("ch_", state)

        assert state.attribution_channel == ""

    def test_empty_sub2_does_not_blank_subject(self) -> None:
        state = ConversationState(attribution_subject="alice")
        parse_deeplink_payload("sub2_", state)

        assert state.attribution_subject == "alice"


class TestApplyAttribution:
    """Простановка source/adid/sub2/ts/tgsubid/addinfo."""

    def test_sets_all_params(self) -> None:
        params: dict[str, str] = {}
        apply_attribution(
            params,
            source="tgbot",
            adid="promo1",
            sub2="alice",
            addinfo="get_money",
            user_id=42,
            timestamp=1700000000,
        )

        assert params == {
            "source": "tgbot",
            "adid": "promo1",
            "sub2": "alice",
            "ts": "1700000000",
            "tgsubid": "42",
            "addinfo": "get_money",
        }

    def test_blank_addinfo_is_omitted(self) -> None:
        """addinfo из пробелов не попадает в ссылку, даже если был в базе."""
        params = {"addinfo": "stale"}
        apply_attribution(
            params, source=None, adid="", sub2="alice", addinfo="   ", user_id=None, timestamp=1
        )

        assert "addinfo" not in params
        assert "source" not in params
        assert "tgsubid" not in params
        assert params["adid"] == ""
