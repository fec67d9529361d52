from typing import Optional

from fastapi import HTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_404_NOT_FOUND,
    HTTP_502_BAD_GATEWAY,
)


class FeedbackError(HTTPException):
    """Base class for errors reported to API callers as ``{success, message}``."""

    default_detail = "Request failed"
    default_status = HTTP_400_BAD_REQUEST

    def __init__(self, detail: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(
            status_code=status_code or self.default_status,
            detail=detail or self.default_detail,
        )


class NotFound(FeedbackError):
    default_detail = "Not found"
    default_status = HTTP_404_NOT_FOUND


class AccountNotFound(NotFound):
    default_detail = "User not found"


class MessageNotFound(NotFound):
    default_detail = "Message not found or already deleted"


class AlreadyVerified(FeedbackError):
    default_detail = "User is already verified"


class CodeMismatch(FeedbackError):
    default_detail = "Incorrect verification code"


class ExpiredCode(FeedbackError):
    default_detail = "Verification code has expired. Please request a new code"


class NotAccepting(FeedbackError):
    default_detail = "User is not accepting messages"
    default_status = HTTP_403_FORBIDDEN


class ValidationError(FeedbackError):
    default_detail = "Invalid request"


class UpstreamFailure(FeedbackError):
    default_detail = "Upstream service unavailable"
    default_status = HTTP_502_BAD_GATEWAY


class AuthenticationFailed(FeedbackError):
    default_detail = "Not authenticated"
    default_status = HTTP_401_UNAUTHORIZED


class AccountNotVerified(FeedbackError):
    default_detail = "Please verify your account before signing in"
    default_status = HTTP_403_FORBIDDEN
