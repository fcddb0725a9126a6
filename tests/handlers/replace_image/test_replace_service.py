from unittest.mock import MagicMock

import pytest

from core.infrastructure.aws.dynamodb_entity_images import DynamoDBEntityImages
from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.models.errors import EntityRecordError, InvalidFileTypeError
from core.models.image import EntityKind, TransformPolicy, UploadCandidate
from core.models.storage import CleanupResult, CleanupStatus
from handlers.replace_image.models import ReplaceState
from handlers.replace_image.service import ReplaceImageService
from handlers.upload_image.models import UploadResult
from handlers.upload_image.service import UploadPipeline

OLD_URL = "https://s3.us-east-1.amazonaws.com/zoo-images-test/animals/animals-1-2.webp"


@pytest.fixture
def service(s3_bucket, entity_images_table) -> ReplaceImageService:
    pipeline = UploadPipeline(S3ImageStorage(), TransformPolicy.OPTIMIZE)
    return ReplaceImageService(pipeline, DynamoDBEntityImages())


@pytest.fixture
def candidate(jpeg_bytes) -> UploadCandidate:
    return UploadCandidate(data=jpeg_bytes, file_name="lion.jpg", content_type="image/jpeg")


def _stub_pipeline(image_url: str = "https://host/bucket/animals/animals-9-9.webp") -> MagicMock:
    pipeline = MagicMock()
    pipeline.process.return_value = UploadResult(
        image_url=image_url,
        filename=image_url.rsplit("/", 1)[-1],
        folder="animals",
    )
    return pipeline


class TestReplaceImageService:
    def test_replace_cleans_up_previous_image(
        self, service, candidate, s3_put_object, s3_keys, entity_image_put, entity_image_get
    ) -> None:
        s3_put_object("animals/animals-1-2.webp", b"old", "image/webp")
        s3_put_object("animals/animals-1-2-thumb.webp", b"old-thumb", "image/webp")
        entity_image_put("animal", "42", OLD_URL)

        outcome = service.replace(EntityKind.ANIMAL, "42", candidate)

        assert outcome.state is ReplaceState.OLD_CLEANED_UP
        assert outcome.history == [
            ReplaceState.UPLOADING,
            ReplaceState.PERSISTED,
            ReplaceState.OLD_CLEANED_UP,
        ]
        assert outcome.previous_image_url == OLD_URL
        assert entity_image_get("animal", "42")["image_url"] == outcome.image_url
        assert [r.status for r in outcome.cleanup] == [
            CleanupStatus.DELETED,
            CleanupStatus.DELETED,
        ]

        stem = outcome.filename.rsplit(".", 1)[0]
        assert s3_keys() == sorted(
            [f"animals/{outcome.filename}", f"animals/{stem}-thumb.webp"]
        )

    def test_replace_without_previous_image(
        self, service, candidate, entity_image_get
    ) -> None:
        outcome = service.replace(EntityKind.EXHIBIT, "7", candidate)

        assert outcome.state is ReplaceState.PERSISTED
        assert outcome.history == [ReplaceState.UPLOADING, ReplaceState.PERSISTED]
        assert outcome.previous_image_url is None
        assert outcome.cleanup == []
        assert entity_image_get("exhibit", "7")["image_url"] == outcome.image_url
        assert "/exhibits/exhibits-" in outcome.image_url

    def test_previous_blob_already_gone(
        self, service, candidate, entity_image_put
    ) -> None:
        entity_image_put("animal", "42", OLD_URL)

        outcome = service.replace(EntityKind.ANIMAL, "42", candidate)

        assert outcome.state is ReplaceState.OLD_CLEANED_UP
        assert [r.status for r in outcome.cleanup] == [CleanupStatus.NOT_FOUND]

    def test_rejected_upload_leaves_entity_untouched(
        self, service, s3_keys, entity_image_put, entity_image_get
    ) -> None:
        entity_image_put("animal", "42", OLD_URL)
        bad = UploadCandidate(data=b"MZ", file_name="photo.exe", content_type="application/octet-stream")

        with pytest.raises(InvalidFileTypeError):
            service.replace(EntityKind.ANIMAL, "42", bad)

        assert entity_image_get("animal", "42")["image_url"] == OLD_URL
        assert s3_keys() == []

    def test_record_failure_orphans_new_blob(self, candidate) -> None:
        storage = MagicMock()
        records = MagicMock()
        records.fetch_image_url.return_value = OLD_URL
        records.save_image_url.side_effect = EntityRecordError(message="Unable to save the image reference")
        pipeline = _stub_pipeline()
        pipeline.storage = storage

        with pytest.raises(EntityRecordError):
            ReplaceImageService(pipeline, records).replace(EntityKind.ANIMAL, "42", candidate)

        storage.delete.assert_not_called()
        storage.delete_with_thumbnail.assert_not_called()

    def test_cleanup_failure_is_reported_not_raised(self, candidate) -> None:
        storage = MagicMock()
        storage.delete_with_thumbnail.return_value = [
            CleanupResult.failed("animals/animals-1-2.webp", "connection refused")
        ]
        records = MagicMock()
        records.fetch_image_url.return_value = OLD_URL
        pipeline = _stub_pipeline()
        pipeline.storage = storage

        outcome = ReplaceImageService(pipeline, records).replace(
            EntityKind.ANIMAL, "42", candidate
        )

        assert outcome.state is ReplaceState.OLD_ORPHANED
        assert outcome.old_image_orphaned
        assert outcome.history[-2:] == [ReplaceState.PERSISTED, ReplaceState.OLD_ORPHANED]
        records.save_image_url.assert_called_once_with(
            kind=EntityKind.ANIMAL,
            entity_id="42",
            image_url="https://host/bucket/animals/animals-9-9.webp",
        )

    def test_same_url_is_not_deleted(self, candidate) -> None:
        storage = MagicMock()
        records = MagicMock()
        records.fetch_image_url.return_value = OLD_URL
        pipeline = _stub_pipeline(OLD_URL)
        pipeline.storage = storage

        outcome = ReplaceImageService(pipeline, records).replace(
            EntityKind.ANIMAL, "42", candidate
        )

        assert outcome.state is ReplaceState.PERSISTED
        storage.delete_with_thumbnail.assert_not_called()

    def test_record_read_failure_aborts_before_upload(self, candidate) -> None:
        records = MagicMock()
        records.fetch_image_url.side_effect = EntityRecordError(message="Unable to read the current image")
        pipeline = _stub_pipeline()

        with pytest.raises(EntityRecordError):
            ReplaceImageService(pipeline, records).replace(EntityKind.ANIMAL, "42", candidate)

        pipeline.process.assert_not_called()
