"""User profile schemas.

Field aliases match the camelCase JSON the web client stores.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Theme = Literal["light", "dark", "dynamic"]


class UserProfile(BaseModel):
    """Profile record stored under ``user_profile_{email}``."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    email: str | None = None
    image: str | None = Field(None, description="Avatar as a data URI or URL")
    role: str | None = None
    phone_number: str | None = Field(None, alias="phoneNumber")
    theme: Theme | None = None


class UserProfileUpdate(BaseModel):
    """Fields a caller may set when saving a profile."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    email: str | None = None
    image: str | None = None
    role: str | None = None
    phone_number: str | None = Field(None, alias="phoneNumber", max_length=20)
    theme: Theme | None = None


class PhoneLookupResponse(BaseModel):
    """Email linked to a phone number."""

    phone: str
    email: str


class WelcomeEmailStatus(BaseModel):
    """Welcome email idempotence flag."""

    email: str
    sent: bool
