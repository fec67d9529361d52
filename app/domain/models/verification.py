from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class VerificationIssue:
    """Outcome of issuing a verification code.

    The code is persisted before delivery is attempted, so it stays valid
    until ``expires_at`` even when ``email_sent`` is False.
    """

    code: str
    expires_at: datetime
    email_sent: bool
