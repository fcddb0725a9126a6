"""Pydantic models for image upload request/response."""

from pydantic import BaseModel, ConfigDict, Field

from core.models.image import EntityKind, OptimizationSummary


class ImageUploadRequest(BaseModel):
    """Routing parameters of an upload request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    kind: EntityKind = Field(..., description="Entity that will own the image")


class UploadResult(BaseModel):
    """What the pipeline produced for one upload."""

    success: bool = True
    image_url: str
    filename: str
    folder: str
    thumbnail_url: str | None = None
    optimization: OptimizationSummary | None = None


class ImageUploadResponse(BaseModel):
    """Response model for successful image upload."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    image_url: str = Field(..., alias="imageUrl")
    filename: str
    thumbnail_url: str | None = Field(None, alias="thumbnailUrl")
    optimization: OptimizationSummary | None = None

    @classmethod
    def from_result(cls, result: UploadResult) -> "ImageUploadResponse":
        return cls(
            success=result.success,
            image_url=result.image_url,
            filename=result.filename,
            thumbnail_url=result.thumbnail_url,
            optimization=result.optimization,
        )

    def to_body(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
