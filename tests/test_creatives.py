"""Tests for profile, creative and autosave endpoints."""

import pytest
from httpx import AsyncClient

from app.core.kv_store import InMemoryKeyValueStore


@pytest.mark.asyncio
async def test_profile_endpoints(client: AsyncClient, registered_user: dict) -> None:
    """Profiles are readable under any email casing and patchable."""
    response = await client.get("/api/v1/users/CREATOR@retailmedia.ai/profile")
    assert response.status_code == 200
    assert response.json() == {"name": "Ada Lovelace", "role": "Marketer"}

    response = await client.patch(
        f"/api/v1/users/{registered_user['email']}/profile",
        json={"phoneNumber": "+917569102138", "theme": "dynamic"},
    )
    assert response.status_code == 200
    assert response.json() == {
        "name": "Ada Lovelace",
        "role": "Marketer",
        "phoneNumber": "+917569102138",
        "theme": "dynamic",
    }


@pytest.mark.asyncio
async def test_profile_not_found(client: AsyncClient) -> None:
    """Missing profiles are 404."""
    response = await client.get("/api/v1/users/nobody@x.com/profile")

    assert response.status_code == 404
    assert response.json()["message"] == "User not found"


@pytest.mark.asyncio
async def test_profile_rejects_unknown_theme(client: AsyncClient) -> None:
    """Theme must be light, dark or dynamic."""
    response = await client.patch("/api/v1/users/a@x.com/profile", json={"theme": "sepia"})

    assert response.status_code == 422
    assert response.json()["error"] == "ValidationError"


@pytest.mark.asyncio
async def test_lookup_by_phone(client: AsyncClient) -> None:
    """Phone lookups accept numbers without a country code."""
    await client.patch("/api/v1/users/a@x.com/profile", json={"phoneNumber": "+917569102138"})

    response = await client.get("/api/v1/users/by-phone/7569102138")
    assert response.status_code == 200
    assert response.json() == {"phone": "7569102138", "email": "a@x.com"}

    response = await client.get("/api/v1/users/by-phone/9999999999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_creative_crud(client: AsyncClient, sample_creative: dict) -> None:
    """Creatives are upserted by id and deleted individually."""
    base = "/api/v1/users/a@x.com/creatives"

    response = await client.put(base, json=sample_creative)
    assert response.status_code == 200
    assert response.json()["success"] is True

    second = {**sample_creative, "id": "2", "productName": "Iced Latte"}
    await client.put(base, json=second)
    await client.put(base, json={**sample_creative, "platform": "LinkedIn"})

    response = await client.get("/api/v1/users/A@X.com/creatives")
    creatives = response.json()
    assert [c["id"] for c in creatives] == [sample_creative["id"], "2"]
    assert creatives[0]["platform"] == "LinkedIn"

    response = await client.get(f"{base}/2")
    assert response.status_code == 200
    assert response.json()["productName"] == "Iced Latte"

    response = await client.delete(f"{base}/{sample_creative['id']}")
    assert response.status_code == 200
    assert [c["id"] for c in response.json()] == ["2"]

    response = await client.get(f"{base}/{sample_creative['id']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_creative_optional_fields_are_omitted(
    client: AsyncClient,
    kv_store: InMemoryKeyValueStore,
    sample_creative: dict,
) -> None:
    """Unset optional fields are not stored as null."""
    optional = {"brightness", "contrast", "saturation", "adTemplate"}
    minimal = {k: v for k, v in sample_creative.items() if k not in optional}

    await client.put("/api/v1/users/a@x.com/creatives", json=minimal)

    assert await kv_store.get_json("myCreatives_a@x.com") == [minimal]


@pytest.mark.asyncio
async def test_creative_requires_fields(client: AsyncClient) -> None:
    """Creatives without required fields are rejected."""
    response = await client.put("/api/v1/users/a@x.com/creatives", json={"id": "1"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_autosave_endpoints(client: AsyncClient) -> None:
    """The autosave slot is overwritten on every save."""
    response = await client.get("/api/v1/users/a@x.com/autosave")
    assert response.status_code == 200
    assert response.json() is None

    draft = {"productName": "Tea", "brandName": "Leaf", "brightness": 100}
    response = await client.put("/api/v1/users/a@x.com/autosave", json=draft)
    assert response.status_code == 204

    response = await client.get("/api/v1/users/A@x.com/autosave")
    assert response.json() == draft
