from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.config import settings
from app.core.kv_store import InMemoryKeyValueStore, get_kv_store
from app.dependencies import get_email_service
from app.main import app
from app.schemas.auth import RegisterUser
from app.services.email_service import EmailService
from app.services.profile_store import ProfileStore


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    """Fresh in-memory key-value store for each test."""
    return InMemoryKeyValueStore()


@pytest.fixture
def profile_store(kv_store: InMemoryKeyValueStore) -> ProfileStore:
    """Profile store over the in-memory store."""
    return ProfileStore(kv_store)


@pytest.fixture
def email_service() -> EmailService:
    """Email service that never opens an SMTP connection."""
    return EmailService(settings.model_copy(update={"smtp_user": None, "smtp_pass": None}))


@pytest_asyncio.fixture
async def client(
    kv_store: InMemoryKeyValueStore,
    email_service: EmailService,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""
    app.dependency_overrides[get_kv_store] = lambda: kv_store
    app.dependency_overrides[get_email_service] = lambda: email_service

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_user_data() -> dict:
    """Registration data as the web client posts it."""
    return {
        "email": "creator@retailmedia.ai",
        "password": "s3cret-pw",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "role": "Marketer",
    }


@pytest.fixture
async def registered_user(profile_store: ProfileStore, sample_user_data: dict) -> dict:
    """Register a user directly through the store."""
    await profile_store.register_user(RegisterUser(**sample_user_data))
    return sample_user_data


@pytest.fixture
def sample_creative() -> dict:
    """Creative payload in the stored camelCase shape."""
    return {
        "id": "1718000000000",
        "productName": "Cold Brew",
        "brandName": "Bean There",
        "imageData": "data:image/png;base64,iVBORw0KGgo=",
        "date": "2026-10-19T09:30:00.000Z",
        "platform": "Instagram",
        "brightness": 110,
        "contrast": 95,
        "saturation": 120,
        "adTemplate": "sale-banner",
    }
