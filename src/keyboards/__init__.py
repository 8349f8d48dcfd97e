"""Модуль для создания inline клавиатур воронки и информационных команд."""

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from src.services.content import BotContent

# callback_data кнопок воронки
START_QUESTIONNAIRE = "start_questionnaire"
BACK_TO_AMOUNT = "back_to_amount"
AMOUNT_PREFIX = "amount_"
CREDIT_PREFIX = "credit_"
NAV_PREFIX = "nav_"

BACK_BUTTON_TEXT = "« Назад"

# Информационные команды: команда → подпись в меню и в навигации
INFO_COMMANDS: dict[str, str] = {
    "day": "💚 Займ дня",
    "week": "💚 Займ недели",
    "how": "💡 Как получить деньги",
    "all": "📋 Все предложения",
    "insurance": "🛡 Отказ от страховки",
}


def get_welcome_keyboard(content: BotContent) -> InlineKeyboardMarkup:
    """Кнопка «Начнём» под приветствием."""
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(
                    text=content.start_button_name, callback_data=START_QUESTIONNAIRE
                )
            ],
        ]
    )


def get_amount_keyboard(content: BotContent) -> InlineKeyboardMarkup:
    """Клавиатура выбора суммы займа — по кнопке на вариант из контента."""
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(
                    text=option.button_name, callback_data=f"{AMOUNT_PREFIX}{option.amount}"
                )
            ]
            for option in content.amounts
        ]
    )


def get_credit_keyboard(content: BotContent) -> InlineKeyboardMarkup:
    """Клавиатура выбора кредитной истории + «Назад» к суммам."""
    buttons: list[list[InlineKeyboardButton]] = [
        [
            InlineKeyboardButton(
                text=option.button_name, callback_data=f"{CREDIT_PREFIX}{option.status}"
            )
        ]
        for option in content.history_credit
    ]
    buttons.append([InlineKeyboardButton(text=BACK_BUTTON_TEXT, callback_data=BACK_TO_AMOUNT)])
    return InlineKeyboardMarkup(inline_keyboard=buttons)


def get_offer_keyboard(content: BotContent, link: str) -> InlineKeyboardMarkup:
    """Финальная CTA-кнопка со ссылкой + «Назад» к суммам."""
    buttons: list[list[InlineKeyboardButton]] = []
    if link:
        buttons.append([InlineKeyboardButton(text=content.fourth_button, url=link)])
    buttons.append([InlineKeyboardButton(text=BACK_BUTTON_TEXT, callback_data=BACK_TO_AMOUNT)])
    return InlineKeyboardMarkup(inline_keyboard=buttons)


def get_nav_rows(current: str | None = None) -> list[list[InlineKeyboardButton]]:
    """Ряды навигации по информационным командам (кроме текущей), по две в ряд.

    Args:
        current: Команда, из которой строится ответ.
    """
    buttons = [
        InlineKeyboardButton(text=label, callback_data=f"{NAV_PREFIX}{command}")
        for command, label in INFO_COMMANDS.items()
        if command != current
    ]
    return [buttons[i : i + 2] for i in range(0, len(buttons), 2)]


def get_info_keyboard(
    links: list[tuple[str, str]], current: str | None = None
) -> InlineKeyboardMarkup:
    """Клавиатура информационного ответа: URL-кнопки офферов + навигация.

    Args:
        links: Пары (подпись, ссылка). Пустые ссылки пропускаются.
        current: Текущая команда (её нет в навигации).
    """
    buttons: list[list[InlineKeyboardButton]] = [
        [InlineKeyboardButton(text=text, url=url)] for text, url in links if url
    ]
    buttons.extend(get_nav_rows(current))
    return InlineKeyboardMarkup(inline_keyboard=buttons)


__all__ = [
    "AMOUNT_PREFIX",
    "BACK_TO_AMOUNT",
    "CREDIT_PREFIX",
    "INFO_COMMANDS",
    "NAV_PREFIX",
    "START_QUESTIONNAIRE",
    "get_amount_keyboard",
    "get_credit_keyboard",
    "get_info_keyboard",
    "get_nav_rows",
    "get_offer_keyboard",
    "get_welcome_keyboard",
]
