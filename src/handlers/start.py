"""Handler для команды /start (с deep link атрибуцией и без)."""

from aiogram import Router
from aiogram.filters import CommandObject, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.types import Message

from src.keyboards import get_welcome_keyboard
from src.services.attribution import parse_deeplink_payload
from src.services.container import BotServices
from src.services.content import render
from src.types import UserIdentity
from src.utils.logger import verbose

router = Router(name="start")


@router.message(CommandStart())
async def cmd_start(
    message: Message, command: CommandObject, state: FSMContext, services: BotServices
) -> None:
    """
    Обработка команды /start.

    Разбирает deep link (`/start ch_channel__sub2_alice`), дополняет
    атрибуцию дефолтами, отмечает пользователя в БД и показывает приветствие.
    """
    if not message.from_user:
        return

    identity = UserIdentity.from_user(message.from_user)
    payload = command.args

    conversation = services.states.get_or_create(identity.id)
    if payload:
        verbose(f"Пользователь {identity.label} выполнил /start с payload: {payload}")
        parse_deeplink_payload(payload, conversation)
    else:
        verbose(f"Пользователь {identity.label} выполнил /start")

    conversation = services.states.ensure_initialized(identity.id, identity.handle)
    verbose(
        f"Пользователь {identity.label}: adid={conversation.attribution_channel!r}, "
        f"sub2={conversation.attribution_subject!r}, addinfo={conversation.attribution_note!r}"
    )

    # Новый проход анкеты начинается с чистого листа
    await state.clear()
    conversation.loan_amount = None
    conversation.credit_history = None

    await services.registry.upsert_seen(identity.id, identity.alias)

    content = services.data
    await services.messenger.reply(
        identity.id,
        message.chat.id,
        render(content.start_msg, identity.first_name, services.bot_name),
        keyboard=get_welcome_keyboard(content),
        image=content.start_msg_img,
    )
