import logging
from typing import List

from ...core.exceptions import AccountNotFound, MessageNotFound, NotAccepting
from ...domain.models import Account, Message
from ...domain.ports.persistence import PersistenceGateway

logger = logging.getLogger(__name__)


class MessageService:
    """Delivers anonymous messages and exposes them to the owning account."""

    def __init__(self, persistence: PersistenceGateway) -> None:
        self._persistence = persistence

    def submit(self, username: str, content: str) -> Message:
        account = self._persistence.get_account_by_username(username)
        if not account:
            raise AccountNotFound()
        if not account.is_accepting_messages:
            raise NotAccepting()
        message = self._persistence.append_message(account.id, content)
        logger.debug("Stored message %s for %s", message.id, username)
        return message

    def list_messages(self, account: Account) -> List[Message]:
        return self._persistence.get_messages_for_account(account.id)

    def delete_message(self, account: Account, message_id: str) -> None:
        if not self._persistence.delete_message(account.id, message_id):
            raise MessageNotFound()

    def get_acceptance(self, account: Account) -> bool:
        current = self._persistence.get_account_by_id(account.id)
        if not current:
            raise AccountNotFound()
        return current.is_accepting_messages

    def set_acceptance(self, account: Account, accepting: bool) -> Account:
        updated = self._persistence.set_accepting_messages(account.id, accepting)
        logger.info(
            "Account %s %s messages",
            account.username,
            "accepting" if accepting else "paused",
        )
        return updated
