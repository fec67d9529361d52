from dataclasses import dataclass

from ..application.services.message_service import MessageService
from ..application.services.verification_service import VerificationService
from .config import Settings
from ..domain.ports.persistence import PersistenceGateway
from ..services.account_service import AccountService
from ..services.email_service import EmailService


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    persistence: PersistenceGateway
    email_service: EmailService
    verification_service: VerificationService
    account_service: AccountService
    message_service: MessageService
