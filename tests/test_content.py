"""Тесты загрузки и горячей перезагрузки контента."""

import copy
import logging
from pathlib import Path

import pytest
from conftest import SAMPLE_CONTENT, write_content

from src.services.content import BotContent, ContentError, ContentStore, render


class FakeClock:
    """Управляемый mtime вместо реального stat()."""

    def __init__(self) -> None:
        self.value = 1.0

    def __call__(self, path: Path) -> float:
        if not path.exists():
            raise FileNotFoundError(path)
        return self.value


def test_load_parses_camel_case(content_store: ContentStore) -> None:
    content = content_store.get()

    assert content.start_button_name_en == "start"
    assert content.fourth_button_en == "get_money"
    assert [offer.name for offer in content.all_offers] == ["Займер", "Екапуста"]
    assert content.how.text_one == "Заполните анкету:"
    assert set(content.scheduled) == {"5min", "15min", "24h", "30h"}
    assert content.insurance_file == "insurance_return.pdf"


def test_amount_label_matches_numbers_and_strings(content_store: ContentStore) -> None:
    """Сумма в контенте бывает числом и строкой — из callback всегда строка."""
    content = content_store.get()

    assert content.amount_label("5000") == "sum_5000"
    assert content.amount_label("30000") == "sum_30000"
    assert content.amount_label("777") is None


def test_credit_label(content_store: ContentStore) -> None:
    content = content_store.get()

    assert content.credit_label("bad") == "history_bad"
    assert content.credit_label("unknown") is None


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ContentError):
        ContentStore(tmp_path / "nope.json").load()


def test_invalid_json_raises(tmp_path: Path) -> None:
    path = tmp_path / "content.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ContentError):
        ContentStore(path).load()


def test_missing_required_key_raises(tmp_path: Path) -> None:
    data = copy.deepcopy(SAMPLE_CONTENT)
    del data["startMsg"]

    with pytest.raises(ContentError):
        ContentStore(write_content(tmp_path / "content.json", data)).load()


def test_get_loads_lazily(content_path: Path) -> None:
    assert isinstance(ContentStore(content_path).get(), BotContent)


def test_reload_on_mtime_change(content_path: Path) -> None:
    clock = FakeClock()
    store = ContentStore(content_path, mtime_getter=clock)
    first = store.get()

    data = copy.deepcopy(SAMPLE_CONTENT)
    data["startMsg"] = "Новое приветствие"
    write_content(content_path, data)

    # mtime тот же — отдаём закешированный контент
    assert store.get() is first

    clock.value = 2.0
    assert store.get().start_msg == "Новое приветствие"


def test_broken_reload_keeps_previous_content(content_path: Path) -> None:
    clock = FakeClock()
    store = ContentStore(content_path, mtime_getter=clock)
    first = store.get()

    content_path.write_text("{broken", encoding="utf-8")
    clock.value = 2.0

    assert store.get() is first
    assert store.get() is first


def test_removed_file_keeps_previous_content(content_path: Path) -> None:
    store = ContentStore(content_path, mtime_getter=FakeClock())
    first = store.get()
    content_path.unlink()

    assert store.get() is first


class TestRender:
    def test_placeholders(self) -> None:
        text = render("Привет, %username%! Я %namebot%.", "Алиса", "ЗаймиБот")

        assert text == "Привет, Алиса! Я ЗаймиБот."

    def test_default_name(self) -> None:
        assert render("Привет, %username%!", None, "Бот") == "Привет, друг!"
        assert render("Привет, %username%!", "", "Бот") == "Привет, друг!"

    def test_extra_replacements(self) -> None:
        text = render("Займ %sumuser%", "Алиса", "Бот", {"%sumuser%": "до 30 000 ₽"})

        assert text == "Займ до 30 000 ₽"


def test_missing_scheduled_stage_warned_on_load(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    """Пропущенный этап цепочки виден в логе один раз при загрузке."""
    data = copy.deepcopy(SAMPLE_CONTENT)
    del data["scheduled"]["24h"]
    store = ContentStore(write_content(tmp_path / "content.json", data))

    with caplog.at_level(logging.WARNING):
        content = store.load()
        store.get()

    assert content.missing_scheduled() == ["24h"]
    warnings = [record for record in caplog.records if "24h" in record.getMessage()]
    assert len(warnings) == 1


def test_complete_content_has_no_missing_stages(content_store: ContentStore) -> None:
    assert content_store.get().missing_scheduled() == []
