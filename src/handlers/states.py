"""FSM States воронки-анкеты."""

from aiogram.fsm.state import State, StatesGroup


class FunnelState(StatesGroup):
    """Шаги анкеты.

    Поток: (нет state) → AWAITING_AMOUNT → AWAITING_CREDIT_HISTORY → COMPLETED.
    «Назад» возвращает к AWAITING_AMOUNT, /start сбрасывает state.
    """

    # Показано меню сумм
    AWAITING_AMOUNT = State()

    # Сумма выбрана, показано меню кредитной истории
    AWAITING_CREDIT_HISTORY = State()

    # Выдана финальная ссылка оффера
    COMPLETED = State()
