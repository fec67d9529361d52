from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class Message:
    """Anonymous message delivered to an account. Never edited once stored."""

    id: str
    account_id: int
    content: str
    created_at: datetime
