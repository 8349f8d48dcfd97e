"""Handler для информационных команд: /day, /week, /how, /all, /insurance и навигации."""

from collections.abc import Awaitable, Callable

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import CallbackQuery, Message

from src.keyboards import NAV_PREFIX, get_info_keyboard
from src.services.container import BotServices
from src.services.content import Offer, render
from src.services.messenger import safe_answer
from src.types import UserIdentity
from src.utils.logger import logger, verbose

router = Router(name="info")

InfoSender = Callable[[UserIdentity, int, BotServices], Awaitable[None]]


# =============================================================================
# ОТВЕТЫ ИНФОРМАЦИОННЫХ КОМАНД
# =============================================================================


async def _send_offer(
    command: str, offer: Offer, identity: UserIdentity, chat_id: int, services: BotServices
) -> None:
    """Займ дня / недели: текст с суммой, ссылка и кнопка оффера."""
    conversation = services.states.get(identity.id)
    link = services.links.build_link(offer.link, identity, conversation)
    verbose(f"Пользователь {identity.label} получил ссылку /{command}: {link}")

    text = render(
        offer.text,
        identity.first_name,
        services.bot_name,
        {"%sumuser%": f"до {offer.amount} ₽"},
    )
    await services.messenger.reply(
        identity.id,
        chat_id,
        f"{text}\n\n👉 {link}",
        keyboard=get_info_keyboard([(offer.button_name, link)], current=command),
    )


async def send_day(identity: UserIdentity, chat_id: int, services: BotServices) -> None:
    await _send_offer("day", services.data.day, identity, chat_id, services)


async def send_week(identity: UserIdentity, chat_id: int, services: BotServices) -> None:
    await _send_offer("week", services.data.week, identity, chat_id, services)


async def send_how(identity: UserIdentity, chat_id: int, services: BotServices) -> None:
    how = services.data.how
    link = services.links.build_link(how.link, identity, services.states.get(identity.id))
    verbose(f"Пользователь {identity.label} получил ссылку /how: {link}")

    await services.messenger.reply(
        identity.id,
        chat_id,
        f"{how.text_one}\n\n👉 {link}\n\n{how.text_second}",
        keyboard=get_info_keyboard([(how.button_name, link)], current="how"),
    )


async def send_all(identity: UserIdentity, chat_id: int, services: BotServices) -> None:
    """Все офферы по рейтингу: нумерованный список + по кнопке на оффер."""
    content = services.data
    conversation = services.states.get(identity.id)

    buttons = [
        (f"💚 {offer.name}", services.links.build_link(offer.link, identity, conversation))
        for offer in content.all_offers
    ]
    lines = [f"{index}. {offer.name}" for index, offer in enumerate(content.all_offers, start=1)]
    text = f"{content.text_one_all}\n\n" + "\n".join(lines) + f"\n\n{content.text_second_all}"
    verbose(f"Пользователь {identity.label} смотрит все офферы ({len(buttons)} шт.)")

    await services.messenger.reply(
        identity.id, chat_id, text, keyboard=get_info_keyboard(buttons, current="all")
    )


async def send_insurance(identity: UserIdentity, chat_id: int, services: BotServices) -> None:
    """Инструкция по отказу от страховки + PDF с заявлением (если файл есть)."""
    content = services.data
    await services.messenger.reply(
        identity.id,
        chat_id,
        content.insurance_text,
        keyboard=get_info_keyboard([], current="insurance"),
    )
    if await services.messenger.send_document(chat_id, content.insurance_file):
        verbose(f"Пользователь {identity.label} получил PDF по страховке")


INFO_SENDERS: dict[str, InfoSender] = {
    "day": send_day,
    "week": send_week,
    "how": send_how,
    "all": send_all,
    "insurance": send_insurance,
}


# =============================================================================
# КОМАНДЫ И НАВИГАЦИЯ
# =============================================================================


@router.message(Command(*INFO_SENDERS))
async def cmd_info(message: Message, command: CommandObject, services: BotServices) -> None:
    """Любая информационная команда: отмечаем пользователя и отвечаем."""
    if not message.from_user:
        return

    identity = UserIdentity.from_user(message.from_user)
    verbose(f"Пользователь {identity.label} выполнил /{command.command}")

    await services.registry.upsert_seen(identity.id, identity.alias)
    await INFO_SENDERS[command.command](identity, message.chat.id, services)


@router.callback_query(F.data.startswith(NAV_PREFIX))
async def handle_nav_callback(callback: CallbackQuery, services: BotServices) -> None:
    """Кнопка навигации из информационного ответа."""
    await safe_answer(callback)
    if not callback.data:
        return

    identity = UserIdentity.from_user(callback.from_user)
    command = callback.data.removeprefix(NAV_PREFIX)
    sender = INFO_SENDERS.get(command)
    if sender is None:
        logger.warning(f"Неизвестная навигация {callback.data!r} от {identity.label}")
        return

    verbose(f"Пользователь {identity.label} перешёл в /{command}")
    chat_id = callback.message.chat.id if callback.message is not None else identity.id
    await services.registry.upsert_seen(identity.id, identity.alias)
    await sender(identity, chat_id, services)
