"""Creative and autosave endpoints."""

from typing import Any

from fastapi import APIRouter, HTTPException, status

from app.dependencies import ProfileStoreDep
from app.schemas.creatives import Creative, CreativeSaveResponse

router = APIRouter(prefix="/users/{email}", tags=["creatives"])


@router.get("/creatives", response_model=list[Creative], response_model_exclude_none=True)
async def list_creatives(email: str, store: ProfileStoreDep):
    """List a user's saved creatives."""
    return await store.get_creatives(email)


@router.put("/creatives", response_model=CreativeSaveResponse, response_model_exclude_none=True)
async def save_creative(email: str, creative: Creative, store: ProfileStoreDep):
    """Insert a creative, or replace the one with the same id."""
    success = await store.save_creative(email, creative)
    return CreativeSaveResponse(success=success, creative=creative)


@router.get("/creatives/{creative_id}", response_model=Creative, response_model_exclude_none=True)
async def get_creative(email: str, creative_id: str, store: ProfileStoreDep):
    """Get one creative."""
    creative = await store.get_creative_by_id(email, creative_id)

    if creative is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Creative not found",
        )

    return creative


@router.delete(
    "/creatives/{creative_id}",
    response_model=list[Creative],
    response_model_exclude_none=True,
)
async def delete_creative(email: str, creative_id: str, store: ProfileStoreDep):
    """Delete a creative and return the remaining ones."""
    return await store.delete_creative(email, creative_id)


@router.get("/autosave")
async def get_autosave(email: str, store: ProfileStoreDep) -> dict[str, Any] | None:
    """Get the autosave draft, or null when none exists."""
    return await store.get_autosave(email)


@router.put("/autosave", status_code=status.HTTP_204_NO_CONTENT)
async def save_autosave(email: str, draft: dict[str, Any], store: ProfileStoreDep) -> None:
    """Overwrite the autosave draft."""
    await store.save_autosave(email, draft)
