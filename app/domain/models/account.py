"""Account domain model for feedback recipients."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(slots=True)
class Account:
    """
    Account entity owning a public feedback link.

    Attributes:
        id: Unique identifier
        username: Public handle used in the share link (unique, case-sensitive)
        email: Email address (unique, stored lower-cased)
        password_hash: bcrypt hash of the password
        is_verified: Whether the emailed code has been confirmed
        verify_code: Pending 6-digit verification code
        verify_code_expiry: Expiration timestamp for the pending code
        is_accepting_messages: Whether visitors may send new messages
        created_at: Account creation timestamp
        updated_at: Last update timestamp
    """

    id: int
    username: str
    email: str
    password_hash: str
    is_verified: bool
    verify_code: Optional[str]
    verify_code_expiry: Optional[datetime]
    is_accepting_messages: bool
    created_at: datetime
    updated_at: datetime

    def __repr__(self) -> str:
        return (
            f"<Account id={self.id} username={self.username} "
            f"verified={self.is_verified} accepting={self.is_accepting_messages}>"
        )
