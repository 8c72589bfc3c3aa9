"""Profile, credential, creative and usage persistence.

Every record lives in one flat key-value namespace, keyed by a prefix plus the
normalized email (or phone number for the phone index). Updates are
read-modify-write with no locking: two concurrent writers for the same email
can lose an update. The service assumes one active session per user.
"""

from datetime import UTC, date, datetime, timedelta
from typing import Any

import structlog

from app.core.exceptions import StorageException, UserAlreadyExistsException
from app.core.kv_store import KeyValueStore
from app.schemas.auth import CredentialValidation, RegisterUser
from app.schemas.creatives import AutosaveDraft, Creative
from app.schemas.usage import WeeklyUsage
from app.schemas.users import UserProfile, UserProfileUpdate

logger = structlog.get_logger(__name__)

AUTH_PREFIX = "user_auth_"
PROFILE_PREFIX = "user_profile_"
PHONE_PREFIX = "phone_map_"
CREATIVES_PREFIX = "myCreatives_"
AUTOSAVE_PREFIX = "dashboard_autosave_"
USAGE_PREFIX = "usage_stats_"
WELCOME_PREFIX = "welcome_email_sent_"

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

NO_PASSWORD_ERROR = "Please sign in with Google or reset your password."
USER_NOT_FOUND_ERROR = "User not found"
INVALID_PASSWORD_ERROR = "Invalid password"


def normalize_email(email: str | None) -> str:
    """Trim and lower-case an email for use as a storage key."""
    return (email or "").strip().lower()


def _today() -> date:
    return datetime.now(UTC).date()


class ProfileStore:
    """Async data access for user records."""

    def __init__(self, kv: KeyValueStore):
        """Initialize with the backing key-value store."""
        self.kv = kv

    # Profiles

    async def save_user_profile(self, email: str, update: UserProfileUpdate) -> None:
        """
        Merge provided fields over the stored profile.

        Store failures are logged and swallowed, so callers cannot tell a
        failed save from a successful one.

        Args:
            email: Account email
            update: Fields to overwrite; unset fields are kept
        """
        normalized = normalize_email(email)
        if not normalized:
            return
        try:
            await self._merge_profile(normalized, update)
        except StorageException as e:
            logger.error("profile_save_failed", email=normalized, error=e.message)

    async def _merge_profile(self, normalized: str, update: UserProfileUpdate) -> None:
        current = await self.kv.get_json(f"{PROFILE_PREFIX}{normalized}") or {}
        patch = update.model_dump(by_alias=True, exclude_none=True)
        await self.kv.set_json(f"{PROFILE_PREFIX}{normalized}", {**current, **patch})

        if update.phone_number:
            # Last writer wins; another email may already own this number
            await self.kv.set_json(f"{PHONE_PREFIX}{update.phone_number}", normalized)

    async def get_user_profile(self, email: str) -> UserProfile | None:
        """Get a profile, or None for empty input or a missing record."""
        normalized = normalize_email(email)
        if not normalized:
            return None
        data = await self.kv.get_json(f"{PROFILE_PREFIX}{normalized}")
        if data is None:
            return None
        return UserProfile.model_validate(data)

    async def get_email_by_phone(self, phone: str) -> str | None:
        """
        Resolve a phone number to the linked email.

        Tries the exact key first, then scans the phone index for the first
        entry where either number contains the other. This lets
        ``7569102138`` match a stored ``+917569102138``.

        Args:
            phone: Phone number as typed, with or without country code

        Returns:
            Linked email, or None when nothing matches
        """
        if not phone:
            return None

        exact = await self.kv.get_json(f"{PHONE_PREFIX}{phone}")
        if exact:
            return exact

        async for key, value in self.kv.iterate(PHONE_PREFIX):
            saved_phone = key[len(PHONE_PREFIX) :]
            if phone in saved_phone or saved_phone in phone:
                return value
        return None

    # Credentials

    async def register_user(self, user: RegisterUser) -> bool:
        """
        Create the auth record and profile for a new account.

        The two writes are not atomic.

        Raises:
            UserAlreadyExistsException: If an auth record or profile exists
        """
        normalized = normalize_email(user.email)
        if await self.check_user_exists(normalized):
            logger.info("registration_rejected", email=normalized, reason="exists")
            raise UserAlreadyExistsException()

        try:
            await self.kv.set_json(f"{AUTH_PREFIX}{normalized}", {"password": user.password})
            await self._merge_profile(
                normalized,
                UserProfileUpdate(name=f"{user.first_name} {user.last_name}", role=user.role),
            )
        except StorageException as e:
            logger.error("registration_failed", email=normalized, error=e.message)
            raise

        logger.info("user_registered", email=normalized)
        return True

    async def validate_user_credentials(self, email: str, password: str) -> CredentialValidation:
        """
        Check a password against the stored auth record.

        Passwords are stored and compared in plaintext.

        Returns:
            Validation result; ``error`` explains a failure
        """
        normalized = normalize_email(email)
        auth = await self.kv.get_json(f"{AUTH_PREFIX}{normalized}")

        if auth is None:
            if await self.kv.exists(f"{PROFILE_PREFIX}{normalized}"):
                # OAuth-only account
                return CredentialValidation(is_valid=False, error=NO_PASSWORD_ERROR)
            return CredentialValidation(is_valid=False, error=USER_NOT_FOUND_ERROR)

        if auth.get("password") != password:
            return CredentialValidation(is_valid=False, error=INVALID_PASSWORD_ERROR)

        return CredentialValidation(is_valid=True)

    async def check_user_exists(self, email: str) -> bool:
        """Check for an auth record or a profile."""
        normalized = normalize_email(email)
        if not normalized:
            return False
        if await self.kv.exists(f"{AUTH_PREFIX}{normalized}"):
            return True
        return await self.kv.exists(f"{PROFILE_PREFIX}{normalized}")

    async def update_user_password(self, email: str, password: str) -> bool:
        """Overwrite or create the auth record. The profile is untouched."""
        normalized = normalize_email(email)
        try:
            await self.kv.set_json(f"{AUTH_PREFIX}{normalized}", {"password": password})
        except StorageException as e:
            logger.error("password_update_failed", email=normalized, error=e.message)
            raise
        return True

    # Creatives

    async def save_creative(self, email: str, creative: Creative) -> bool:
        """
        Insert or replace a creative by id.

        Args:
            email: Owner email
            creative: Creative to save

        Returns:
            True when saved, False for an empty email
        """
        normalized = normalize_email(email)
        if not normalized:
            return False

        key = f"{CREATIVES_PREFIX}{normalized}"
        try:
            existing: list[dict[str, Any]] = await self.kv.get_json(key) or []
            data = creative.model_dump(by_alias=True, exclude_none=True)
            index = next((i for i, c in enumerate(existing) if c.get("id") == creative.id), None)
            if index is not None:
                existing[index] = data
            else:
                existing.append(data)
            await self.kv.set_json(key, existing)
        except StorageException as e:
            logger.error("creative_save_failed", email=normalized, creative_id=creative.id, error=e.message)
            raise
        return True

    async def get_creatives(self, email: str) -> list[Creative]:
        """Get all creatives for a user in saved order."""
        normalized = normalize_email(email)
        if not normalized:
            return []
        stored = await self.kv.get_json(f"{CREATIVES_PREFIX}{normalized}") or []
        return [Creative.model_validate(c) for c in stored]

    async def get_creative_by_id(self, email: str, creative_id: str) -> Creative | None:
        """Get one creative by id."""
        creatives = await self.get_creatives(email)
        return next((c for c in creatives if c.id == creative_id), None)

    async def delete_creative(self, email: str, creative_id: str) -> list[Creative]:
        """
        Remove a creative by id.

        Returns:
            The remaining creatives
        """
        normalized = normalize_email(email)
        creatives = await self.get_creatives(normalized)
        remaining = [c for c in creatives if c.id != creative_id]
        await self.kv.set_json(
            f"{CREATIVES_PREFIX}{normalized}",
            [c.model_dump(by_alias=True, exclude_none=True) for c in remaining],
        )
        return remaining

    # Autosave

    async def save_autosave(self, email: str, draft: AutosaveDraft) -> None:
        """Overwrite the autosave slot. Failures are logged only."""
        normalized = normalize_email(email)
        if not normalized:
            return
        try:
            await self.kv.set_json(f"{AUTOSAVE_PREFIX}{normalized}", draft)
        except StorageException as e:
            logger.warning("autosave_failed", email=normalized, error=e.message)

    async def get_autosave(self, email: str) -> AutosaveDraft | None:
        normalized = normalize_email(email)
        if not normalized:
            return None
        return await self.kv.get_json(f"{AUTOSAVE_PREFIX}{normalized}")

    # Usage tracking

    async def update_usage_time(self, email: str, today: date | None = None) -> None:
        """Add one minute to today's (UTC) usage counter."""
        normalized = normalize_email(email)
        if not normalized:
            return
        day = (today or _today()).isoformat()
        key = f"{USAGE_PREFIX}{normalized}"
        try:
            stats: dict[str, int] = await self.kv.get_json(key) or {}
            stats[day] = stats.get(day, 0) + 1
            await self.kv.set_json(key, stats)
        except StorageException as e:
            logger.warning("usage_update_failed", email=normalized, error=e.message)

    async def get_weekly_usage(self, email: str, today: date | None = None) -> WeeklyUsage:
        """
        Get minutes per day for the last seven days, oldest first.

        Days with no activity are zero. An empty email gives empty lists.
        """
        normalized = normalize_email(email)
        if not normalized:
            return WeeklyUsage()

        stats: dict[str, int] = await self.kv.get_json(f"{USAGE_PREFIX}{normalized}") or {}
        end = today or _today()

        usage = WeeklyUsage()
        for offset in range(6, -1, -1):
            day = end - timedelta(days=offset)
            day_str = day.isoformat()
            usage.labels.append(WEEKDAY_LABELS[day.weekday()])
            usage.data.append(stats.get(day_str, 0))
            usage.dates.append(day_str)
        return usage

    async def clear_usage_dates(self, email: str, dates: list[str]) -> None:
        """Delete the given date entries, typically after a report is sent."""
        normalized = normalize_email(email)
        if not normalized or not dates:
            return
        key = f"{USAGE_PREFIX}{normalized}"
        try:
            stats: dict[str, int] = await self.kv.get_json(key) or {}
            for day in dates:
                stats.pop(day, None)
            await self.kv.set_json(key, stats)
        except StorageException as e:
            logger.warning("usage_clear_failed", email=normalized, error=e.message)

    # Welcome email flag

    async def has_welcome_email_been_sent(self, email: str) -> bool:
        normalized = normalize_email(email)
        if not normalized:
            return False
        return await self.kv.get_json(f"{WELCOME_PREFIX}{normalized}") is True

    async def set_welcome_email_sent(self, email: str) -> None:
        normalized = normalize_email(email)
        if not normalized:
            return
        await self.kv.set_json(f"{WELCOME_PREFIX}{normalized}", True)
