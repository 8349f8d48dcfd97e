"""Handler для всего остального текста и глобальный обработчик ошибок."""

from aiogram import Bot, F, Router
from aiogram.types import ErrorEvent, Message

from src.services.container import BotServices
from src.types import UserIdentity
from src.utils.logger import logger, verbose

router = Router(name="fallback")

COMMANDS_MENU_TEXT = (
    "Выберите команду из меню:\n\n"
    "💚 /day - Займ дня\n"
    "💚 /week - Займ недели\n"
    "💚 /how - Как получить деньги\n"
    "💚 /all - Все предложения\n"
    "💚 /insurance - Отказ от страховки\n"
    "💚 /start - Начать заново"
)

ERROR_TEXT = "Произошла ошибка при обработке вашего запроса. Пожалуйста, попробуйте снова."


@router.message(F.text)
async def handle_any_text(message: Message, services: BotServices) -> None:
    """Любой текст без команды — подсказка со списком команд, state не трогаем."""
    if not message.from_user or not message.text:
        return

    identity = UserIdentity.from_user(message.from_user)
    text = message.text
    preview = f"{text[:50]}..." if len(text) > 50 else text
    verbose(f"Пользователь {identity.label} написал текст {preview!r}")

    await services.messenger.reply(identity.id, message.chat.id, COMMANDS_MENU_TEXT)


async def handle_error(event: ErrorEvent, bot: Bot) -> bool:
    """
    Ловит любое необработанное исключение из хендлеров.

    Пользователю — вежливая просьба повторить, подробности только в лог.
    """
    update = event.update
    logger.error(
        f"Ошибка при обработке update {update.update_id}: {event.exception}",
        exc_info=event.exception,
    )

    chat_id: int | None = None
    if update.message is not None:
        chat_id = update.message.chat.id
    elif update.callback_query is not None:
        chat_id = update.callback_query.from_user.id

    if chat_id is not None:
        await bot.send_message(chat_id=chat_id, text=ERROR_TEXT)
    return True
