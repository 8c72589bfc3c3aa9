"""Authentication flows built on the profile store."""

import secrets
import time
from urllib.parse import quote

import structlog

from app.config import Settings, settings
from app.core.exceptions import (
    AppException,
    BadRequestException,
    ConflictException,
    NotFoundException,
    UnauthorizedException,
)
from app.schemas.auth import (
    LoginResponse,
    OtpResponse,
    RegisterRequest,
    RegisterUser,
    SessionSyncResponse,
)
from app.schemas.users import UserProfileUpdate
from app.services.email_service import EmailService
from app.services.profile_store import ProfileStore, normalize_email

logger = structlog.get_logger(__name__)


def generate_otp() -> str:
    """Generate a 6-digit verification code."""
    return str(100000 + secrets.randbelow(900000))


class AuthService:
    """Registration, login, password reset and OAuth session sync.

    The server holds no session state. The OTP is returned to the client,
    which echoes it back on registration, and passwords are kept in plaintext.
    """

    def __init__(
        self,
        store: ProfileStore,
        email_service: EmailService,
        config: Settings | None = None,
    ):
        """Initialize auth service with its collaborators."""
        self.store = store
        self.email = email_service
        self.config = config or settings

    async def send_otp(self, email: str, name: str | None = None) -> OtpResponse:
        """
        Email a verification code to a prospective user.

        Args:
            email: Address to verify
            name: Display name for the greeting

        Returns:
            The code, for the client to compare against user input

        Raises:
            ConflictException: If the email already has an account
        """
        if await self.store.check_user_exists(email):
            raise ConflictException("User already exists")

        otp = generate_otp()
        result = await self.email.send_otp(email, otp, name)
        return OtpResponse(otp=otp, simulated=result.simulated)

    async def register(self, request: RegisterRequest) -> bool:
        """
        Register a user after the OTP round-trip.

        Raises:
            BadRequestException: If the typed code does not match
            UserAlreadyExistsException: If the email already has an account
        """
        if request.otp.strip() != request.expected_otp.strip():
            raise BadRequestException("Invalid OTP")

        user = RegisterUser(
            email=request.email,
            password=request.password,
            first_name=request.first_name,
            last_name=request.last_name,
            role=request.role,
        )
        return await self.store.register_user(user)

    async def login(self, identifier: str, password: str) -> LoginResponse:
        """
        Check credentials for an email or a phone number.

        Args:
            identifier: Email, or phone number linked through a profile
            password: Plaintext password

        Returns:
            The resolved email and profile

        Raises:
            UnauthorizedException: If the phone is unknown or credentials fail
        """
        email = identifier.strip()
        if "@" not in email:
            linked = await self.store.get_email_by_phone(email)
            if not linked:
                logger.info("login_failed", identifier=email, reason="unknown_phone")
                raise UnauthorizedException("No account found with this phone number")
            email = linked

        validation = await self.store.validate_user_credentials(email, password)
        if not validation.is_valid:
            logger.info("login_failed", email=normalize_email(email), reason=validation.error)
            raise UnauthorizedException(validation.error or "Invalid credentials")

        profile = await self.store.get_user_profile(email)
        logger.info("login_succeeded", email=normalize_email(email))
        return LoginResponse(email=normalize_email(email), profile=profile)

    def build_reset_link(self, email: str) -> str:
        """Build the reset-password URL sent by email."""
        base_url = self.config.base_url.rstrip("/")
        token = int(time.time() * 1000)
        return f"{base_url}/reset-password?email={quote(email, safe='')}&token={token}"

    async def request_password_reset(self, email: str) -> bool:
        """
        Email a password reset link.

        Raises:
            NotFoundException: If the email has no account
        """
        if not await self.store.check_user_exists(email):
            raise NotFoundException("User not found")

        result = await self.email.send_password_reset(email, self.build_reset_link(email))
        return result.simulated

    async def reset_password(self, email: str, password: str) -> bool:
        """Set a new password. Knowing the email is the only check."""
        return await self.store.update_user_password(email, password)

    async def sync_session_user(
        self, email: str, name: str | None = None, image: str | None = None
    ) -> SessionSyncResponse:
        """
        Record an OAuth sign-in and send the welcome email once.

        The welcome flag is set only after a successful send, so a failed
        send is retried on the next sync.
        """
        await self.store.save_user_profile(email, UserProfileUpdate(name=name, email=email, image=image))

        sent = await self.store.has_welcome_email_been_sent(email)
        if not sent:
            try:
                await self.email.send_welcome(email, name)
            except AppException as e:
                logger.warning("welcome_email_failed", email=normalize_email(email), error=e.message)
            else:
                await self.store.set_welcome_email_sent(email)
                sent = True

        profile = await self.store.get_user_profile(email)
        return SessionSyncResponse(profile=profile, welcome_email_sent=sent)
