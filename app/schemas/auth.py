"""Authentication schemas."""

from pydantic import BaseModel, EmailStr, Field

from app.schemas.users import UserProfile


class RegisterUser(BaseModel):
    """Credentials and names for a new account."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    first_name: str
    last_name: str
    role: str | None = None


class RegisterRequest(RegisterUser):
    """Registration request carrying the OTP round-trip."""

    email: EmailStr
    otp: str = Field(..., description="Code typed by the user")
    expected_otp: str = Field(..., description="Code returned by /auth/send-otp")


class OtpRequest(BaseModel):
    """Request for an email verification code."""

    email: EmailStr
    name: str | None = None


class OtpResponse(BaseModel):
    """Verification code response.

    The code is returned to the client, which checks it before registering.
    """

    success: bool = True
    otp: str
    simulated: bool = False


class LoginRequest(BaseModel):
    """Credential login by email or phone number."""

    identifier: str = Field(..., min_length=1, description="Email address or phone number")
    password: str


class LoginResponse(BaseModel):
    """Successful login."""

    email: str
    profile: UserProfile | None = None


class CredentialCheck(BaseModel):
    """Raw credential validation request."""

    email: str = Field(..., min_length=1)
    password: str


class CredentialValidation(BaseModel):
    """Outcome of a credential check."""

    is_valid: bool
    error: str | None = None


class UserExistsResponse(BaseModel):
    """Account existence check."""

    email: str
    exists: bool


class ForgotPasswordRequest(BaseModel):
    """Password reset link request."""

    email: str = Field(..., min_length=1)


class ResetPasswordRequest(BaseModel):
    """New password for an account."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class SessionSyncRequest(BaseModel):
    """User triple returned by the OAuth provider."""

    email: str = Field(..., min_length=1)
    name: str | None = None
    image: str | None = None


class SessionSyncResponse(BaseModel):
    """Profile after a session sync."""

    profile: UserProfile | None = None
    welcome_email_sent: bool
