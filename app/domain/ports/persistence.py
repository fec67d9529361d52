from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Protocol

from ..models import Account, Message


class AccountRepository(Protocol):
    """Persistence functions related to feedback accounts."""

    def create_account(
        self,
        username: str,
        email: str,
        password_hash: str,
    ) -> Account:
        ...

    def get_account_by_id(self, account_id: int) -> Optional[Account]:
        ...

    def get_account_by_username(self, username: str) -> Optional[Account]:
        ...

    def get_account_by_email(self, email: str) -> Optional[Account]:
        ...

    def update_pending_registration(
        self, account_id: int, username: str, password_hash: str
    ) -> Account:
        ...

    def delete_account(self, account_id: int) -> None:
        ...

    def set_verification_code(
        self,
        account_id: int,
        code: str,
        expires_at: datetime,
    ) -> Account:
        ...

    def mark_account_verified(self, account_id: int) -> Account:
        ...

    def set_accepting_messages(self, account_id: int, accepting: bool) -> Account:
        ...


class MessageRepository(Protocol):
    """Abstract storage for anonymous messages received by accounts."""

    def append_message(self, account_id: int, content: str) -> Message:
        ...

    def get_messages_for_account(self, account_id: int) -> List[Message]:
        ...

    def delete_message(self, account_id: int, message_id: str) -> bool:
        ...


class PersistenceGateway(
    AccountRepository,
    MessageRepository,
    Protocol,
):
    """Composite gateway combining every persistence concern used by the app."""

    pass
