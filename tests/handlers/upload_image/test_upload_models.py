import pytest
from pydantic import ValidationError

from core.models.image import EntityKind, OptimizationSummary
from handlers.upload_image.models import ImageUploadRequest, ImageUploadResponse, UploadResult


class TestImageUploadRequest:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("animal", EntityKind.ANIMAL),
            (" Exhibit ", EntityKind.EXHIBIT),
            ("animals", EntityKind.ANIMAL),
            ("exhibits", EntityKind.EXHIBIT),
        ],
    )
    def test_kind_aliases(self, value, expected) -> None:
        assert ImageUploadRequest(kind=value).kind is expected

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ImageUploadRequest(kind="reptile")


class TestImageUploadResponse:
    def test_optimized_body(self) -> None:
        result = UploadResult(
            image_url="https://host/bucket/animals/animals-1-2.webp",
            filename="animals-1-2.webp",
            folder="animals",
            thumbnail_url="https://host/bucket/animals/animals-1-2-thumb.webp",
            optimization=OptimizationSummary(
                original_size=1000, optimized_size=250, compression_ratio=75.0
            ),
        )

        body = ImageUploadResponse.from_result(result).to_body()

        assert body == {
            "success": True,
            "imageUrl": "https://host/bucket/animals/animals-1-2.webp",
            "filename": "animals-1-2.webp",
            "thumbnailUrl": "https://host/bucket/animals/animals-1-2-thumb.webp",
            "optimization": {
                "originalSize": 1000,
                "optimizedSize": 250,
                "compressionRatio": 75.0,
            },
        }

    def test_passthrough_body_omits_optional_fields(self) -> None:
        result = UploadResult(
            image_url="animal-1-2.png", filename="animal-1-2.png", folder="animals"
        )

        body = ImageUploadResponse.from_result(result).to_body()

        assert body == {
            "success": True,
            "imageUrl": "animal-1-2.png",
            "filename": "animal-1-2.png",
        }
