"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends

from app.core.kv_store import KeyValueStore, get_kv_store
from app.services.auth_service import AuthService
from app.services.email_service import EmailService
from app.services.profile_store import ProfileStore
from app.services.usage_service import UsageService


def get_email_service() -> EmailService:
    """Get an email service bound to the global settings."""
    return EmailService()


def get_profile_store(kv: Annotated[KeyValueStore, Depends(get_kv_store)]) -> ProfileStore:
    """Get a profile store over the configured key-value store."""
    return ProfileStore(kv)


def get_auth_service(
    store: Annotated[ProfileStore, Depends(get_profile_store)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
) -> AuthService:
    """Get the authentication service."""
    return AuthService(store, email_service)


def get_usage_service(
    store: Annotated[ProfileStore, Depends(get_profile_store)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
) -> UsageService:
    """Get the usage report service."""
    return UsageService(store, email_service)


# Type aliases for dependency injection
ProfileStoreDep = Annotated[ProfileStore, Depends(get_profile_store)]
EmailServiceDep = Annotated[EmailService, Depends(get_email_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
UsageServiceDep = Annotated[UsageService, Depends(get_usage_service)]
