"""Authentication endpoints."""

from fastapi import APIRouter, Query, status

from app.dependencies import AuthServiceDep, ProfileStoreDep
from app.schemas.auth import (
    CredentialCheck,
    CredentialValidation,
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    OtpRequest,
    OtpResponse,
    RegisterRequest,
    ResetPasswordRequest,
    SessionSyncRequest,
    SessionSyncResponse,
    UserExistsResponse,
)
from app.schemas.usage import EmailResponse
from app.services.profile_store import normalize_email

router = APIRouter()


@router.post(
    "/send-otp",
    response_model=OtpResponse,
    status_code=status.HTTP_200_OK,
    summary="Send email verification code",
)
async def send_otp(request: OtpRequest, auth_service: AuthServiceDep) -> OtpResponse:
    """
    Email a 6-digit verification code to a prospective user.

    The code is returned in the response and checked again on registration.
    """
    return await auth_service.send_otp(request.email, request.name)


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register with email and password",
)
async def register(request: RegisterRequest, auth_service: AuthServiceDep) -> dict[str, bool]:
    """
    Create an account after OTP verification.

    Raises:
        409 if the email already has an account, 400 on OTP mismatch
    """
    success = await auth_service.register(request)
    return {"success": success}


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Credential login by email or phone",
)
async def login(request: LoginRequest, auth_service: AuthServiceDep) -> LoginResponse:
    """Validate credentials. A bare phone number is resolved to its email first."""
    return await auth_service.login(request.identifier, request.password)


@router.post(
    "/validate",
    response_model=CredentialValidation,
    status_code=status.HTTP_200_OK,
    summary="Check credentials without failing",
)
async def validate_credentials(request: CredentialCheck, store: ProfileStoreDep) -> CredentialValidation:
    """Return the validation outcome instead of an error status."""
    return await store.validate_user_credentials(request.email, request.password)


@router.get(
    "/exists",
    response_model=UserExistsResponse,
    summary="Check whether an account exists",
)
async def user_exists(store: ProfileStoreDep, email: str = Query(..., min_length=1)) -> UserExistsResponse:
    """An account exists when it has a password or a profile."""
    exists = await store.check_user_exists(email)
    return UserExistsResponse(email=normalize_email(email), exists=exists)


@router.post(
    "/forgot-password",
    response_model=EmailResponse,
    summary="Email a password reset link",
)
async def forgot_password(request: ForgotPasswordRequest, auth_service: AuthServiceDep) -> EmailResponse:
    """Send a reset link to an existing account."""
    simulated = await auth_service.request_password_reset(request.email)
    return EmailResponse(success=True, simulated=simulated)


@router.post(
    "/reset-password",
    status_code=status.HTTP_200_OK,
    summary="Set a new password",
)
async def reset_password(request: ResetPasswordRequest, auth_service: AuthServiceDep) -> dict[str, bool]:
    """Overwrite the password for an email."""
    success = await auth_service.reset_password(request.email, request.password)
    return {"success": success}


@router.post(
    "/session",
    response_model=SessionSyncResponse,
    summary="Sync an OAuth session user",
)
async def sync_session(request: SessionSyncRequest, auth_service: AuthServiceDep) -> SessionSyncResponse:
    """
    Record the user returned by the OAuth provider.

    Creates or updates the profile and sends the welcome email on first sight.
    """
    return await auth_service.sync_session_user(request.email, request.name, request.image)
