"""User profile endpoints."""

from fastapi import APIRouter, HTTPException, status

from app.dependencies import ProfileStoreDep
from app.schemas.users import (
    PhoneLookupResponse,
    UserProfile,
    UserProfileUpdate,
    WelcomeEmailStatus,
)
from app.services.profile_store import normalize_email

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/by-phone/{phone}", response_model=PhoneLookupResponse)
async def get_email_by_phone(phone: str, store: ProfileStoreDep):
    """Resolve a phone number, with or without country code, to its email."""
    email = await store.get_email_by_phone(phone)

    if not email:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No account found with this phone number",
        )

    return PhoneLookupResponse(phone=phone, email=email)


@router.get("/{email}/profile", response_model=UserProfile, response_model_exclude_none=True)
async def get_user_profile(email: str, store: ProfileStoreDep):
    """Get a user's profile."""
    profile = await store.get_user_profile(email)

    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    return profile


@router.patch("/{email}/profile", response_model=UserProfile, response_model_exclude_none=True)
async def update_user_profile(email: str, update: UserProfileUpdate, store: ProfileStoreDep):
    """
    Merge fields into a user's profile.

    The save itself never fails the request; the stored profile is returned.
    """
    await store.save_user_profile(email, update)
    profile = await store.get_user_profile(email)

    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )

    return profile


@router.get("/{email}/welcome-email", response_model=WelcomeEmailStatus)
async def get_welcome_email_status(email: str, store: ProfileStoreDep):
    """Check whether the welcome email went out."""
    sent = await store.has_welcome_email_been_sent(email)
    return WelcomeEmailStatus(email=normalize_email(email), sent=sent)


@router.post("/{email}/welcome-email", response_model=WelcomeEmailStatus)
async def mark_welcome_email_sent(email: str, store: ProfileStoreDep):
    """Mark the welcome email as sent."""
    await store.set_welcome_email_sent(email)
    return WelcomeEmailStatus(email=normalize_email(email), sent=True)
