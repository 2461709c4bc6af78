from typing import Annotated

from fastapi import APIRouter, Depends, status

from kitflow.api.deps import DB, CurrentUser, get_email_service
from kitflow.config import settings
from kitflow.schemas.auth import (
    SignInCodeRequest,
    SignInCodeSent,
    SignInCodeVerify,
    TokenResponse,
    UserResponse,
)
from kitflow.services.auth_service import AuthService
from kitflow.services.email_service import EmailService

router = APIRouter(tags=["Authentication"])


@router.post(
    "/request-code",
    response_model=SignInCodeSent,
    status_code=status.HTTP_202_ACCEPTED,
)
async def request_code(
    data: SignInCodeRequest,
    db: DB,
    email_service: Annotated[EmailService, Depends(get_email_service)],
):
    """
    Email a one-time sign-in code.
    Fails with 502 when the email could not be sent.
    """
    await AuthService(db, email_service).request_code(data.email)
    return SignInCodeSent(
        email=data.email.lower(),
        expires_in_minutes=settings.OTP_EXPIRY_MINUTES,
    )


@router.post("/verify-code", response_model=TokenResponse)
async def verify_code(data: SignInCodeVerify, db: DB):
    """
    Exchange a sign-in code for an access token.
    The first user to sign in becomes the admin.
    """
    token, _ = await AuthService(db).verify_code(data.email, data.code)
    return TokenResponse(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: CurrentUser):
    """Get the signed-in user."""
    return current_user
