"""Контент бота из JSON: тексты, кнопки, офферы, отложенные сообщения."""

from collections.abc import Callable
from pathlib import Path
from typing import get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from src.types import ScheduledKey
from src.utils.logger import logger

DEFAULT_USER_NAME = "друг"


class ContentError(Exception):
    """Контент не найден или не разбирается — без него бот не стартует."""


class _ContentModel(BaseModel):
    """База: ключи в JSON в camelCase (startMsg, buttonNameEn, ...)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AmountOption(_ContentModel):
    button_name: str
    button_name_en: str = ""
    # AICODE-NOTE: В контенте сумма бывает и числом, и строкой — сравниваем строками
    amount: int | str = Field(alias="sum")


class CreditOption(_ContentModel):
    button_name: str
    button_name_en: str = ""
    status: str | int


class Offer(_ContentModel):
    """Займ дня / недели."""

    text: str
    button_name: str
    button_name_en: str = ""
    link: str
    amount: str = ""
    offname: str = ""
    offnameru: str = ""
    offcat: str = ""
    offposition: str = ""


class HowOffer(_ContentModel):
    link: str
    text_one: str
    text_second: str
    button_name: str
    button_name_en: str = ""


class OfferLink(_ContentModel):
    name: str
    link: str


class ScheduledMessage(_ContentModel):
    text: str
    link: str = ""


class BotContent(_ContentModel):
    """Весь пользовательский контент бота."""

    start_msg: str
    start_msg_img: str = ""
    start_button_name: str
    start_button_name_en: str = ""

    second_msg: str
    second_msg_img: str = ""
    amounts: list[AmountOption] = Field(alias="sum")

    third_msg: str
    third_msg_img: str = ""
    history_credit: list[CreditOption]

    fourth_msg: str
    fourth_msg_img: str = ""
    fourth_button: str
    fourth_button_en: str = ""
    start_anketa: str

    day: Offer
    week: Offer
    how: HowOffer
    all_offers: list[OfferLink] = Field(alias="all")
    text_one_all: str = ""
    text_second_all: str = ""

    insurance_text: str
    insurance_file: str = "insurance_return.pdf"

    scheduled: dict[ScheduledKey, ScheduledMessage] = Field(default_factory=dict)

    def missing_scheduled(self) -> list[ScheduledKey]:
        """Этапы цепочки, для которых в контенте нет текста."""
        return [key for key in get_args(ScheduledKey) if key not in self.scheduled]

    def amount_label(self, value: str) -> str | None:
        """Латинская подпись кнопки суммы по значению из callback (или None)."""
        for option in self.amounts:
            if str(option.amount) == value:
                return option.button_name_en or None
        return None

    def credit_label(self, value: str) -> str | None:
        """Латинская подпись кнопки кредитной истории по значению из callback (или None)."""
        for option in self.history_credit:
            if str(option.status) == value:
                return option.button_name_en or None
        return None


def render(
    text: str,
    first_name: str | None,
    bot_name: str,
    extra: dict[str, str] | None = None,
) -> str:
    """
    Подставляет плейсхолдеры в текст из контента.

    Args:
        text: Шаблон с %username%, %namebot% и прочими
        first_name: Имя пользователя (по умолчанию «друг»)
        bot_name: Имя бота
        extra: Дополнительные замены, например {"%sumuser%": "до 30000 ₽"}

    Returns:
        Текст с подставленными значениями
    """
    result = text.replace("%username%", first_name or DEFAULT_USER_NAME)
    result = result.replace("%namebot%", bot_name)
    for key, value in (extra or {}).items():
        result = result.replace(key, value)
    return result


def _file_mtime(path: Path) -> float:
    return path.stat().st_mtime


class ContentStore:
    """
    Владеет контентом и перечитывает файл, когда меняется его mtime.

    Правки текстов подхватываются без рестарта бота.
    """

    def __init__(
        self,
        path: Path,
        mtime_getter: Callable[[Path], float] = _file_mtime,
    ) -> None:
        self.path = path
        self._mtime_getter = mtime_getter
        self._content: BotContent | None = None
        self._mtime: float | None = None

    def load(self) -> BotContent:
        """
        Читает контент с диска.

        Raises:
            ContentError: Файл отсутствует или невалиден
        """
        try:
            mtime = self._mtime_getter(self.path)
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise ContentError(f"Файл контента {self.path} недоступен: {e}") from e

        try:
            content = BotContent.model_validate_json(raw)
        except ValidationError as e:
            raise ContentError(f"Файл контента {self.path} невалиден: {e}") from e

        self._content = content
        self._mtime = mtime
        logger.info(f"📄 Контент загружен из {self.path}")

        missing = content.missing_scheduled()
        if missing:
            logger.warning(
                f"В контенте нет отложенных сообщений {', '.join(missing)}, "
                "пользователи на этих этапах ждут, пока их не добавят"
            )
        return content

    def get(self) -> BotContent:
        """Актуальный контент: перечитывает файл, если он изменился."""
        if self._content is None:
            return self.load()

        try:
            mtime = self._mtime_getter(self.path)
        except OSError as e:
            logger.error(f"Файл контента {self.path} пропал, работаем со старым: {e}")
            return self._content

        if mtime != self._mtime:
            try:
                return self.load()
            except ContentError as e:
                logger.error(f"Не удалось перечитать контент, работаем со старым: {e}")
                # Не пытаемся перечитывать тот же битый файл на каждом апдейте
                self._mtime = mtime
        return self._content
