"""Pydantic models for replace image request/response and saga state."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from core.models.image import EntityKind
from core.models.storage import CleanupResult, CleanupStatus


class ReplaceState(str, Enum):
    """Steps of a replace, in the order they are reached.

    UPLOADING -> PERSISTED -> OLD_CLEANED_UP | OLD_ORPHANED. FAILED marks a
    replace aborted before the entity record pointed at the new image.
    """

    UPLOADING = "uploading"
    PERSISTED = "persisted"
    OLD_CLEANED_UP = "old_cleaned_up"
    OLD_ORPHANED = "old_orphaned"
    FAILED = "failed"


class ReplaceImageRequest(BaseModel):
    """Route parameters of a replace request."""

    model_config = ConfigDict(str_strip_whitespace=True)

    kind: EntityKind = Field(..., description="Entity that owns the image")
    entity_id: str = Field(..., min_length=1, max_length=128, description="Entity identifier")


class ReplaceOutcome(BaseModel):
    """Everything a replace did, including the states it passed through."""

    kind: EntityKind
    entity_id: str
    state: ReplaceState = ReplaceState.UPLOADING
    history: list[ReplaceState] = Field(default_factory=lambda: [ReplaceState.UPLOADING])
    image_url: str | None = None
    filename: str | None = None
    thumbnail_url: str | None = None
    previous_image_url: str | None = None
    cleanup: list[CleanupResult] = Field(default_factory=list)

    def advance(self, state: ReplaceState) -> None:
        self.state = state
        self.history.append(state)

    @property
    def old_image_orphaned(self) -> bool:
        return any(result.status is CleanupStatus.FAILED for result in self.cleanup)


class ReplaceImageResponse(BaseModel):
    """Response model for a completed replace."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    image_url: str = Field(..., alias="imageUrl")
    filename: str
    thumbnail_url: str | None = Field(None, alias="thumbnailUrl")
    previous_image_url: str | None = Field(None, alias="previousImageUrl")
    state: ReplaceState
    cleanup: list[CleanupResult] = Field(default_factory=list)

    @classmethod
    def from_outcome(cls, outcome: ReplaceOutcome) -> "ReplaceImageResponse":
        return cls(
            image_url=outcome.image_url or "",
            filename=outcome.filename or "",
            thumbnail_url=outcome.thumbnail_url,
            previous_image_url=outcome.previous_image_url,
            state=outcome.state,
            cleanup=outcome.cleanup,
        )

    def to_body(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
