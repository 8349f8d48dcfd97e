"""Зависимости хендлеров — собираются один раз в bot.py и передаются через Dispatcher."""

from dataclasses import dataclass

from src.services.content import BotContent, ContentStore
from src.services.links import LinkBuilder
from src.services.messenger import Messenger
from src.services.state_store import ConversationStateStore
from src.services.tracker import ClickTracker
from src.services.users import UserRegistry


@dataclass
class BotServices:
    """Всё, что нужно хендлерам воронки и информационных команд."""

    content: ContentStore
    states: ConversationStateStore
    links: LinkBuilder
    tracker: ClickTracker
    messenger: Messenger
    registry: UserRegistry
    bot_name: str

    @property
    def data(self) -> BotContent:
        """Актуальный контент (перечитывается при изменении файла)."""
        return self.content.get()
