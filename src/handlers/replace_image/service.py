"""Business logic for replacing an entity's image.

A replace is a saga of three non-atomic steps: upload the new image, point
the entity record at it, then remove the old one. Nothing is compensated:

- an upload failure leaves the entity untouched;
- a record write failure leaves the new blob orphaned (its URL is logged);
- a cleanup failure leaves the old blob orphaned, but the replace succeeds.

`ReplaceOutcome.history` records every state reached.
"""

from aws_lambda_powertools import Logger

from core.infrastructure.aws.dynamodb_entity_images import DynamoDBEntityImages
from core.models.errors import EntityRecordError, ImageServiceError
from core.models.image import EntityKind, UploadCandidate
from core.repositories.entity_image_repository import EntityImageRepository
from core.repositories.storage_repository import ImageStorageRepository
from handlers.upload_image.service import UploadPipeline

from .models import ReplaceOutcome, ReplaceState

logger = Logger(UTC=True)


class ReplaceImageService:
    """Application service that swaps the image referenced by one entity."""

    def __init__(
        self,
        pipeline: UploadPipeline,
        records: EntityImageRepository,
    ) -> None:
        self.pipeline = pipeline
        self.records = records

    @classmethod
    def from_environment(cls) -> "ReplaceImageService":
        return cls(UploadPipeline.from_environment(), DynamoDBEntityImages())

    @property
    def storage(self) -> ImageStorageRepository:
        return self.pipeline.storage

    def replace(
        self,
        kind: EntityKind,
        entity_id: str,
        candidate: UploadCandidate | None,
    ) -> ReplaceOutcome:
        """Run the replace saga for one entity.

        Raises:
            ValidationError: If the new image is rejected (nothing changed)
            StorageNotConfiguredError: If storage is not set up (nothing changed)
            ImageOptimizationError, StorageError: If the new image could not
                be stored (nothing changed)
            EntityRecordError: If the entity record could not be read or
                written; after a failed write the new blob is orphaned
        """
        outcome = ReplaceOutcome(kind=kind, entity_id=entity_id)
        log_extra = {"kind": kind.value, "entity_id": entity_id}

        outcome.previous_image_url = self.records.fetch_image_url(kind=kind, entity_id=entity_id)

        try:
            upload = self.pipeline.process(candidate, kind)
        except ImageServiceError:
            outcome.advance(ReplaceState.FAILED)
            logger.info("Replace aborted before upload completed", extra=log_extra)
            raise

        outcome.image_url = upload.image_url
        outcome.filename = upload.filename
        outcome.thumbnail_url = upload.thumbnail_url

        try:
            self.records.save_image_url(kind=kind, entity_id=entity_id, image_url=upload.image_url)
        except EntityRecordError:
            outcome.advance(ReplaceState.FAILED)
            logger.error(
                "Entity record not updated; new image is orphaned",
                extra={
                    **log_extra,
                    "orphaned_image_url": upload.image_url,
                    "orphaned_thumbnail_url": upload.thumbnail_url,
                    "history": [state.value for state in outcome.history],
                },
            )
            raise

        outcome.advance(ReplaceState.PERSISTED)

        previous = outcome.previous_image_url
        if not previous or previous == upload.image_url:
            logger.info("Image replaced; no previous image to clean up", extra=log_extra)
            return outcome

        outcome.cleanup = self.storage.delete_with_thumbnail(previous)

        if outcome.old_image_orphaned:
            outcome.advance(ReplaceState.OLD_ORPHANED)
            logger.warning(
                "Image replaced; previous image left orphaned",
                extra={**log_extra, "previous_image_url": previous},
            )
        else:
            outcome.advance(ReplaceState.OLD_CLEANED_UP)
            logger.info(
                "Image replaced",
                extra={**log_extra, "image_url": upload.image_url, "previous_image_url": previous},
            )

        return outcome
