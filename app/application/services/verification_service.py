from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from ...core.exceptions import AccountNotFound, AlreadyVerified, CodeMismatch, ExpiredCode
from ...domain.models import Account, VerificationIssue
from ...domain.ports.persistence import AccountRepository
from ...services.email_service import EmailService

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_verify_code() -> str:
    """Return a uniformly random code between 100000 and 999999."""
    return str(100000 + secrets.randbelow(900000))


class VerificationService:
    """Issues and checks the emailed one-time codes that activate accounts."""

    def __init__(
        self,
        accounts: AccountRepository,
        email_service: EmailService,
        code_ttl: timedelta = timedelta(hours=1),
        clock: Optional[Clock] = None,
        code_generator: Callable[[], str] = generate_verify_code,
    ) -> None:
        self._accounts = accounts
        self._email = email_service
        self._code_ttl = code_ttl
        self._clock = clock or _utcnow
        self._generate_code = code_generator

    # ------------------------------------------------------------------
    def issue(self, account: Account) -> VerificationIssue:
        code = self._generate_code()
        expires_at = self._clock() + self._code_ttl
        self._accounts.set_verification_code(account.id, code, expires_at)
        # Single attempt; the stored code stays valid whatever the outcome.
        email_sent = self._email.send_verification_email(account.email, account.username, code)
        if not email_sent:
            logger.warning("Verification code for %s stored but email delivery failed", account.username)
        return VerificationIssue(code=code, expires_at=expires_at, email_sent=email_sent)

    def resend(self, username: str) -> VerificationIssue:
        account = self._accounts.get_account_by_username(username)
        if not account:
            raise AccountNotFound()
        if account.is_verified:
            raise AlreadyVerified()
        return self.issue(account)

    def check(self, account: Account, submitted_code: str) -> Account:
        if account.is_verified:
            raise AlreadyVerified()
        stored = account.verify_code
        if not stored or not secrets.compare_digest(submitted_code.encode(), stored.encode()):
            raise CodeMismatch()
        if account.verify_code_expiry is None or self._clock() > account.verify_code_expiry:
            raise ExpiredCode()
        logger.info("Account %s verified", account.username)
        return self._accounts.mark_account_verified(account.id)

    def verify(self, username: str, code: str) -> Account:
        account = self._accounts.get_account_by_username(username)
        if not account:
            raise AccountNotFound()
        return self.check(account, code)
