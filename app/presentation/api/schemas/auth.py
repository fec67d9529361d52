"""Pydantic schemas for sign-up, sign-in and verification endpoints."""

from pydantic import EmailStr, Field

from .common import ApiResponse, CamelModel


class SignUpRequest(CamelModel):
    """Request schema for account registration."""

    username: str = Field(min_length=2, max_length=20)
    email: EmailStr
    password: str = Field(min_length=6)


class SignInRequest(CamelModel):
    """Request schema for sign-in with username or email."""

    identifier: str = Field(min_length=1)
    password: str = Field(min_length=1)


class SignInResponse(ApiResponse):
    access_token: str
    token_type: str = "bearer"
    username: str


class VerifyCodeRequest(CamelModel):
    username: str = Field(min_length=1)
    code: str = Field(min_length=1, max_length=16)


class ResendVerificationRequest(CamelModel):
    username: str = Field(min_length=1)
