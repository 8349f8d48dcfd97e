"""Handler для воронки-анкеты: сумма займа → кредитная история → ссылка оффера."""

from aiogram import F, Router
from aiogram.fsm.context import FSMContext
from aiogram.types import CallbackQuery

from src.handlers.states import FunnelState
from src.keyboards import (
    AMOUNT_PREFIX,
    BACK_TO_AMOUNT,
    CREDIT_PREFIX,
    START_QUESTIONNAIRE,
    get_amount_keyboard,
    get_credit_keyboard,
    get_offer_keyboard,
)
from src.services.container import BotServices
from src.services.messenger import safe_answer
from src.types import UserIdentity
from src.utils.logger import logger, verbose

router = Router(name="funnel")


# =============================================================================
# ВСПОМОГАТЕЛЬНЫЕ ФУНКЦИИ
# =============================================================================


def _chat_id(callback: CallbackQuery) -> int:
    """Чат для ответа: чат сообщения с кнопкой, иначе личка пользователя."""
    if callback.message is not None:
        return callback.message.chat.id
    return callback.from_user.id


async def _show_amount_menu(
    callback: CallbackQuery, identity: UserIdentity, state: FSMContext, services: BotServices
) -> None:
    content = services.data
    await services.messenger.reply(
        identity.id,
        _chat_id(callback),
        content.second_msg,
        keyboard=get_amount_keyboard(content),
        image=content.second_msg_img,
    )
    await state.set_state(FunnelState.AWAITING_AMOUNT)


# =============================================================================
# CALLBACK HANDLERS для кнопок
# =============================================================================


@router.callback_query(F.data == START_QUESTIONNAIRE)
async def handle_start_questionnaire(
    callback: CallbackQuery, state: FSMContext, services: BotServices
) -> None:
    """Кнопка «Начнём» → меню сумм."""
    await safe_answer(callback)

    identity = UserIdentity.from_user(callback.from_user)
    verbose(f"Пользователь {identity.label} нажал start_questionnaire")

    # Первое касание может прийти кнопкой (например, после очистки БД)
    await services.registry.upsert_seen(identity.id, identity.alias)
    services.tracker.track(identity, services.data.start_button_name_en or START_QUESTIONNAIRE)
    await _show_amount_menu(callback, identity, state, services)


@router.callback_query(F.data.startswith(AMOUNT_PREFIX))
async def handle_amount_callback(
    callback: CallbackQuery, state: FSMContext, services: BotServices
) -> None:
    """Выбор суммы займа → меню кредитной истории."""
    await safe_answer(callback)
    if not callback.data:
        return

    identity = UserIdentity.from_user(callback.from_user)
    amount = callback.data.removeprefix(AMOUNT_PREFIX)
    verbose(f"Пользователь {identity.label} выбрал сумму {amount}")

    content = services.data
    # Латинская подпись — в addinfo без проблем с кодировкой
    label = content.amount_label(amount) or f"{AMOUNT_PREFIX}{amount}"
    services.tracker.track(identity, label)

    services.states.get_or_create(identity.id).loan_amount = amount

    await services.messenger.reply(
        identity.id,
        _chat_id(callback),
        content.third_msg,
        keyboard=get_credit_keyboard(content),
        image=content.third_msg_img,
    )
    await state.set_state(FunnelState.AWAITING_CREDIT_HISTORY)


@router.callback_query(F.data.startswith(CREDIT_PREFIX))
async def handle_credit_callback(
    callback: CallbackQuery, state: FSMContext, services: BotServices
) -> None:
    """Выбор кредитной истории → финальная ссылка оффера."""
    await safe_answer(callback)
    if not callback.data:
        return

    identity = UserIdentity.from_user(callback.from_user)
    credit_history = callback.data.removeprefix(CREDIT_PREFIX)
    verbose(f"Пользователь {identity.label} выбрал кредитную историю {credit_history}")

    content = services.data
    label = content.credit_label(credit_history) or f"{CREDIT_PREFIX}{credit_history}"
    services.tracker.track(identity, label)

    conversation = services.states.get_or_create(identity.id)
    conversation.credit_history = credit_history

    # addinfo финальной ссылки — подпись CTA-кнопки, а не выбранная история
    link = services.links.build_offer_link(
        content.start_anketa,
        identity,
        conversation,
        content.fourth_button_en or content.fourth_button,
    )
    logger.info(f"Пользователь {identity.label} получил оффер")
    verbose(f"Пользователь {identity.label} сгенерировал ссылку {link}")

    await services.messenger.reply(
        identity.id,
        _chat_id(callback),
        f"{content.fourth_msg}\n\n👉 {link}",
        keyboard=get_offer_keyboard(content, link),
        image=content.fourth_msg_img,
    )
    await state.set_state(FunnelState.COMPLETED)


@router.callback_query(F.data == BACK_TO_AMOUNT)
async def handle_back_to_amount(
    callback: CallbackQuery, state: FSMContext, services: BotServices
) -> None:
    """«Назад» → снова меню сумм."""
    await safe_answer(callback)

    identity = UserIdentity.from_user(callback.from_user)
    verbose(f"Пользователь {identity.label} нажал back_to_amount")

    await _show_amount_menu(callback, identity, state, services)
