"""API router for registration, sign-in and account verification."""

from fastapi import APIRouter, Depends, Query, status

from ....application.services.verification_service import VerificationService
from ....core.dependencies import get_account_service, get_verification_service
from ....core.exceptions import UpstreamFailure, ValidationError
from ....services.account_service import AccountService
from ...api.schemas.auth import (
    ResendVerificationRequest,
    SignInRequest,
    SignInResponse,
    SignUpRequest,
    VerifyCodeRequest,
)
from ...api.schemas.common import ApiResponse

router = APIRouter(prefix="/api", tags=["Authentication"])


@router.post("/sign-up", response_model=ApiResponse, status_code=status.HTTP_201_CREATED)
def sign_up(
    payload: SignUpRequest,
    account_service: AccountService = Depends(get_account_service),
) -> ApiResponse:
    """Register an account and email its verification code."""
    _, issue = account_service.register(
        username=payload.username,
        email=payload.email,
        password=payload.password,
    )
    if not issue.email_sent:
        raise UpstreamFailure(
            "Account registered, but the verification email could not be sent. "
            "Please request a new code."
        )
    return ApiResponse(message="User registered successfully. Please verify your account.")


@router.post("/sign-in", response_model=SignInResponse)
def sign_in(
    payload: SignInRequest,
    account_service: AccountService = Depends(get_account_service),
) -> SignInResponse:
    account = account_service.authenticate(payload.identifier, payload.password)
    return SignInResponse(
        message="Signed in successfully",
        access_token=account_service.create_token(account),
        username=account.username,
    )


@router.get("/check-username-unique", response_model=ApiResponse)
def check_username_unique(
    username: str = Query(min_length=1),
    account_service: AccountService = Depends(get_account_service),
) -> ApiResponse:
    if not account_service.is_username_available(username):
        raise ValidationError("Username is already taken")
    return ApiResponse(message="Username is available")


@router.post("/verify-code", response_model=ApiResponse)
def verify_code(
    payload: VerifyCodeRequest,
    verification_service: VerificationService = Depends(get_verification_service),
) -> ApiResponse:
    verification_service.verify(payload.username, payload.code.strip())
    return ApiResponse(message="Account verified successfully")


@router.post("/resend-verification", response_model=ApiResponse)
def resend_verification(
    payload: ResendVerificationRequest,
    verification_service: VerificationService = Depends(get_verification_service),
) -> ApiResponse:
    issue = verification_service.resend(payload.username)
    if not issue.email_sent:
        raise UpstreamFailure("Failed to send verification email")
    return ApiResponse(message="Verification email sent successfully")
