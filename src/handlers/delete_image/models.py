"""Pydantic models for delete image request/response."""

from pydantic import BaseModel, ConfigDict, Field

from core.models.image import EntityKind
from core.models.storage import CleanupResult


class DeleteImageRequest(BaseModel):
    """Validation model for delete image request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    kind: EntityKind = Field(..., description="Entity that owns the image")
    entity_id: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Entity whose image is deleted",
    )


class DeleteImageResponse(BaseModel):
    """Response model for successful image deletion."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    previous_image_url: str = Field(..., alias="previousImageUrl")
    cleanup: list[CleanupResult] = Field(default_factory=list)

    def to_body(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
