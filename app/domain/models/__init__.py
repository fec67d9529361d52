"""Domain models for the True Feedback application."""

from .account import Account
from .message import Message
from .verification import VerificationIssue

__all__ = [
    "Account",
    "Message",
    "VerificationIssue",
]
