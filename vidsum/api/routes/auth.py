"""
Authentication endpoints.

Registration sends a six-digit code by email; the account can log in only
after that code is submitted to /verify-email. Password resets follow the
same pattern with a separate code type.
"""

import logging

from fastapi import APIRouter, status

from ..dependencies import AuthServiceDep, CurrentUserId
from ..schemas import (
    ApiResponse,
    ChangePasswordRequest,
    LoginData,
    LoginRequest,
    PasswordResetRequest,
    RegisterData,
    RegisterRequest,
    ResetPasswordRequest,
    UserPublic,
    VerifyEmailRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/register",
    response_model=ApiResponse[RegisterData],
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
)
async def register(body: RegisterRequest, auth: AuthServiceDep) -> ApiResponse[RegisterData]:
    """
    Create an unverified account and email a verification code.

    Re-registering an email that has not been verified yet resends the code.
    No token is issued until the email is verified and the user logs in.
    """
    result = await auth.register(
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return ApiResponse(
        data=RegisterData(user=UserPublic.from_domain(result.user)),
        message=result.message,
    )


@router.post(
    "/login",
    response_model=ApiResponse[LoginData],
    summary="Log in and receive a bearer token",
)
async def login(body: LoginRequest, auth: AuthServiceDep) -> ApiResponse[LoginData]:
    result = await auth.login(email=body.email, password=body.password)
    return ApiResponse(
        data=LoginData(token=result.token, user=UserPublic.from_domain(result.user)),
        message="Login successful",
    )


@router.post(
    "/verify-email",
    response_model=ApiResponse[UserPublic],
    summary="Verify an email address with the emailed code",
)
async def verify_email(body: VerifyEmailRequest, auth: AuthServiceDep) -> ApiResponse[UserPublic]:
    user = await auth.verify_email(email=body.email, otp=body.otp)
    return ApiResponse(
        data=UserPublic.from_domain(user),
        message="Email verified successfully",
    )


@router.post(
    "/request-password-reset",
    response_model=ApiResponse[None],
    summary="Email a password reset code",
)
async def request_password_reset(body: PasswordResetRequest, auth: AuthServiceDep) -> ApiResponse[None]:
    message = await auth.request_password_reset(email=body.email)
    return ApiResponse(message=message)


@router.post(
    "/reset-password",
    response_model=ApiResponse[None],
    summary="Set a new password using a reset code",
)
async def reset_password(body: ResetPasswordRequest, auth: AuthServiceDep) -> ApiResponse[None]:
    await auth.reset_password(email=body.email, otp=body.otp, new_password=body.new_password)
    return ApiResponse(message="Password reset successfully")


@router.post(
    "/change-password",
    response_model=ApiResponse[None],
    summary="Change the password of the logged-in user",
)
async def change_password(
    body: ChangePasswordRequest,
    user_id: CurrentUserId,
    auth: AuthServiceDep,
) -> ApiResponse[None]:
    await auth.change_password(
        user_id=user_id,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    return ApiResponse(message="Password changed successfully")
