"""Shared image models: upload candidates, transform profiles and variants."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, StrictBytes, StrictInt, StrictStr

from core.utils.constants import (
    ANIMAL_MAX_WIDTH,
    DEFAULT_EFFORT,
    DEFAULT_QUALITY,
    EXHIBIT_MAX_WIDTH,
    MAX_OPTIMIZED_UPLOAD_SIZE,
    MAX_PASSTHROUGH_UPLOAD_SIZE,
    THUMBNAIL_QUALITY,
    THUMBNAIL_SIZE,
    TRANSFORM_POLICY_OPTIMIZE,
    TRANSFORM_POLICY_PASSTHROUGH,
)


class EntityKind(str, Enum):
    """Zoo entity that owns an image."""

    ANIMAL = "animal"
    EXHIBIT = "exhibit"

    @property
    def folder(self) -> str:
        return f"{self.value}s"

    @property
    def file_prefix(self) -> str:
        return self.value

    @classmethod
    def _missing_(cls, value: object) -> "EntityKind | None":
        # Route parameters arrive as "Animal", "exhibits", ...
        if isinstance(value, str):
            normalized = value.strip().lower()
            for member in cls:
                if normalized in (member.value, member.folder):
                    return member
        return None

    @classmethod
    def from_folder(cls, folder: str) -> "EntityKind":
        return cls(folder.rstrip("s"))

    @classmethod
    def from_request_path(cls, path: str | None) -> "EntityKind":
        """Legacy routing: any path mentioning exhibits targets exhibits."""
        if path and "exhibits" in path:
            return cls.EXHIBIT
        return cls.ANIMAL


class OutputFormat(str, Enum):
    """Encodings the transform engine can produce."""

    WEBP = "webp"
    JPEG = "jpeg"
    PNG = "png"

    @classmethod
    def parse(cls, value: "str | OutputFormat | None") -> "OutputFormat":
        """Resolve a requested format, falling back to WebP for anything unknown."""
        if isinstance(value, OutputFormat):
            return value

        normalized = (value or "").strip().lower()
        if normalized == "jpg":
            return cls.JPEG

        try:
            return cls(normalized)
        except ValueError:
            return cls.WEBP


class TransformPolicy(str, Enum):
    """Whether uploads are re-encoded before storage or stored as received."""

    OPTIMIZE = TRANSFORM_POLICY_OPTIMIZE
    PASSTHROUGH = TRANSFORM_POLICY_PASSTHROUGH

    @property
    def max_upload_size(self) -> int:
        if self is TransformPolicy.OPTIMIZE:
            return MAX_OPTIMIZED_UPLOAD_SIZE
        return MAX_PASSTHROUGH_UPLOAD_SIZE


class UploadCandidate(BaseModel):
    """Raw bytes submitted by a client together with what the client claims they are."""

    model_config = ConfigDict(frozen=True)

    data: StrictBytes = Field(..., repr=False, description="Raw uploaded bytes")
    file_name: StrictStr = Field(..., description="Declared original file name")
    content_type: StrictStr = Field(..., description="Declared MIME type")

    @property
    def size(self) -> int:
        return len(self.data)


class ImageMetadata(BaseModel):
    """Facts decoded from an image header. Used to gate acceptance only."""

    model_config = ConfigDict(frozen=True)

    format: StrictStr = Field(..., description="Decoder format name, lower-cased")
    width: StrictInt = Field(..., description="Pixel width")
    height: StrictInt = Field(..., description="Pixel height")


class TransformProfile(BaseModel):
    """How to process an image for one consumer."""

    model_config = ConfigDict(frozen=True)

    max_width: StrictInt = Field(..., gt=0)
    output_format: OutputFormat = OutputFormat.WEBP
    quality: StrictInt = Field(DEFAULT_QUALITY, ge=1, le=100)
    effort: StrictInt = Field(DEFAULT_EFFORT, ge=0, le=6)
    square_crop: bool = False


ANIMAL_PROFILE = TransformProfile(max_width=ANIMAL_MAX_WIDTH)
EXHIBIT_PROFILE = TransformProfile(max_width=EXHIBIT_MAX_WIDTH)
THUMBNAIL_PROFILE = TransformProfile(
    max_width=THUMBNAIL_SIZE,
    quality=THUMBNAIL_QUALITY,
    square_crop=True,
)

PROFILE_BY_KIND: dict[EntityKind, TransformProfile] = {
    EntityKind.ANIMAL: ANIMAL_PROFILE,
    EntityKind.EXHIBIT: EXHIBIT_PROFILE,
}


class ImageVariant(BaseModel):
    """One re-encoded rendition of an uploaded image."""

    data: StrictBytes = Field(..., repr=False)
    original_size: StrictInt
    optimized_size: StrictInt
    compression_ratio: float = Field(..., description="Percent saved, may be negative")
    width: StrictInt
    height: StrictInt
    format: OutputFormat
    source_width: StrictInt | None = Field(None, description="Width of the decoded input")
    source_height: StrictInt | None = Field(None, description="Height of the decoded input")


class ThumbnailVariant(BaseModel):
    """Fixed-size square rendition."""

    data: StrictBytes = Field(..., repr=False)
    size: StrictInt
    width: StrictInt
    format: OutputFormat = OutputFormat.WEBP


class ImageVariants(BaseModel):
    """Main and thumbnail renditions produced together."""

    main: ImageVariant
    thumbnail: ThumbnailVariant
    original_size: StrictInt
    compression_ratio: float


class OptimizationSummary(BaseModel):
    """Size report attached to a processed upload."""

    model_config = ConfigDict(populate_by_name=True)

    original_size: StrictInt = Field(..., alias="originalSize")
    optimized_size: StrictInt = Field(..., alias="optimizedSize")
    compression_ratio: float = Field(..., alias="compressionRatio")

    @classmethod
    def from_variant(cls, variant: ImageVariant) -> "OptimizationSummary":
        return cls(
            original_size=variant.original_size,
            optimized_size=variant.optimized_size,
            compression_ratio=variant.compression_ratio,
        )
