"""Creative schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Creative(BaseModel):
    """A saved ad creative, stored inside ``myCreatives_{email}``."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1)
    product_name: str = Field(..., alias="productName")
    brand_name: str = Field(..., alias="brandName")
    image_data: str = Field(..., alias="imageData", description="Image as a data URI")
    date: str = Field(..., description="ISO 8601 timestamp")
    platform: str
    brightness: int | float | None = None
    contrast: int | float | None = None
    saturation: int | float | None = None
    ad_template: str | None = Field(None, alias="adTemplate")


class CreativeSaveResponse(BaseModel):
    """Result of saving a creative."""

    success: bool
    creative: Creative


AutosaveDraft = dict[str, Any]
