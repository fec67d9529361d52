"""Service for account registration and session tokens."""

import logging
import re
from datetime import datetime, timedelta, timezone
import bcrypt
import jwt

from app.application.services.verification_service import VerificationService
from app.core.exceptions import (
    AccountNotVerified,
    AuthenticationFailed,
    ValidationError,
)
from app.domain.models import Account, VerificationIssue
from app.domain.ports.persistence import AccountRepository

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{2,20}$")
MIN_PASSWORD_LENGTH = 6
# bcrypt ignores (newer releases reject) anything past 72 bytes
_BCRYPT_MAX_BYTES = 72


class AccountService:
    """Service for managing account registration and authentication."""

    def __init__(
        self,
        account_repository: AccountRepository,
        verification_service: VerificationService,
        jwt_secret: str,
        jwt_algorithm: str = "HS256",
        jwt_expiration_hours: int = 24,
    ):
        if jwt_secret == "change-me":
            logger.warning("JWT_SECRET is using the default value. Set a strong secret in production.")
        self.account_repository = account_repository
        self.verification_service = verification_service
        self.jwt_secret = jwt_secret
        self.jwt_algorithm = jwt_algorithm
        self.jwt_expiration_hours = jwt_expiration_hours

    def register(self, username: str, email: str, password: str) -> tuple[Account, VerificationIssue]:
        """
        Register a new account, or refresh a pending one, and issue a code.

        Args:
            username: Requested public username
            email: Account email
            password: Plain text password

        Returns:
            Tuple of (Account, VerificationIssue)

        Raises:
            ValidationError: If the input is malformed or already taken
        """
        username = username.strip()
        if not USERNAME_PATTERN.match(username):
            raise ValidationError(
                "Username must be 2-20 characters and contain only letters, numbers and underscores"
            )
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        by_username = self.account_repository.get_account_by_username(username)
        if by_username and by_username.is_verified:
            raise ValidationError("Username is already taken")

        password_hash = self._hash_password(password)
        by_email = self.account_repository.get_account_by_email(email)

        if by_email and by_email.is_verified:
            raise ValidationError("User already exists with this email")

        # A pending holder of the username under another email gives it up
        if by_username and (not by_email or by_username.id != by_email.id):
            logger.info("Releasing unverified username %s", username)
            self.account_repository.delete_account(by_username.id)

        if by_email:
            # Unverified sign-up retried: take the new username and password
            try:
                account = self.account_repository.update_pending_registration(
                    by_email.id, username, password_hash
                )
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
        else:
            try:
                account = self.account_repository.create_account(
                    username=username,
                    email=email,
                    password_hash=password_hash,
                )
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
            logger.info("Registered account %s", username)

        issue = self.verification_service.issue(account)
        return account, issue

    def is_username_available(self, username: str) -> bool:
        """Check whether a username can be claimed by a new sign-up.

        Unverified accounts do not hold their username.
        """
        account = self.account_repository.get_account_by_username(username.strip())
        return account is None or not account.is_verified

    def authenticate(self, identifier: str, password: str) -> Account:
        """
        Authenticate with username or email plus password.

        Args:
            identifier: Username or email
            password: Plain text password

        Returns:
            The authenticated Account

        Raises:
            AuthenticationFailed: If the credentials do not match
            AccountNotVerified: If the account has not confirmed its code
        """
        identifier = identifier.strip()
        account = self.account_repository.get_account_by_username(identifier)
        if not account and "@" in identifier:
            account = self.account_repository.get_account_by_email(identifier)
        if not account or not self._check_password(password, account.password_hash):
            raise AuthenticationFailed("Incorrect username or password")
        if not account.is_verified:
            raise AccountNotVerified()
        return account

    def create_token(self, account: Account) -> str:
        """
        Create JWT token for account.

        Args:
            account: Account entity

        Returns:
            JWT token string
        """
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(account.id),
            "username": account.username,
            "exp": now + timedelta(hours=self.jwt_expiration_hours),
            "iat": now,
        }

        return jwt.encode(payload, self.jwt_secret, algorithm=self.jwt_algorithm)

    def resolve_token(self, token: str) -> Account:
        """
        Decode a JWT token and load the account it was issued for.

        Raises:
            AuthenticationFailed: If the token is invalid, expired or orphaned
        """
        try:
            payload = jwt.decode(token, self.jwt_secret, algorithms=[self.jwt_algorithm])
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationFailed("Session expired") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthenticationFailed("Invalid token") from exc

        try:
            account_id = int(payload.get("sub"))
        except (TypeError, ValueError) as exc:
            raise AuthenticationFailed("Invalid token") from exc

        account = self.account_repository.get_account_by_id(account_id)
        if not account:
            raise AuthenticationFailed("User not found")
        return account

    @staticmethod
    def _hash_password(password: str) -> str:
        secret = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
        return bcrypt.hashpw(secret, bcrypt.gensalt()).decode("utf-8")

    @staticmethod
    def _check_password(password: str, password_hash: str) -> bool:
        secret = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
        return bcrypt.checkpw(secret, password_hash.encode("utf-8"))
