"""Business logic for image deletion.

The entity record is cleared first; removing the blob afterwards is best
effort. A failed blob delete leaves an orphaned object in storage but never
fails the request, because the entity no longer references it.
"""

from aws_lambda_powertools import Logger

from core.infrastructure.aws.dynamodb_entity_images import DynamoDBEntityImages
from core.infrastructure.factory import create_image_storage
from core.models.errors import NotFoundError
from core.models.image import EntityKind
from core.repositories.entity_image_repository import EntityImageRepository
from core.repositories.storage_repository import ImageStorageRepository
from core.utils.constants import MESSAGE_IMAGE_NOT_FOUND

from .models import DeleteImageResponse

logger = Logger(UTC=True)


class DeleteImageService:
    """Application service responsible for removing an entity's image.

    This service orchestrates:
    - Looking up the entity's current image reference
    - Clearing the reference from the entity record
    - Best-effort removal of the image and its thumbnail from storage
    """

    def __init__(
        self,
        storage: ImageStorageRepository,
        records: EntityImageRepository,
    ) -> None:
        self.storage = storage
        self.records = records

    @classmethod
    def from_environment(cls) -> "DeleteImageService":
        return cls(create_image_storage(), DynamoDBEntityImages())

    def delete(self, kind: EntityKind, entity_id: str) -> DeleteImageResponse:
        """Delete the image referenced by one entity.

        Args:
            kind: Entity kind
            entity_id: Entity identifier

        Returns:
            The previous reference and the cleanup results

        Raises:
            NotFoundError: If the entity has no image
            EntityRecordError: If the record cannot be read or cleared
        """
        log_extra = {"kind": kind.value, "entity_id": entity_id}
        logger.debug("Starting image deletion", extra=log_extra)

        image_url = self.records.fetch_image_url(kind=kind, entity_id=entity_id)
        if not image_url:
            logger.warning("Entity has no image", extra=log_extra)
            raise NotFoundError(
                message=MESSAGE_IMAGE_NOT_FOUND,
                details={"kind": kind.value, "entity_id": entity_id},
            )

        self.records.clear_image_url(kind=kind, entity_id=entity_id)

        cleanup = self.storage.delete_with_thumbnail(image_url)

        logger.info(
            "Image deleted",
            extra={
                **log_extra,
                "image_url": image_url,
                "cleanup": [result.status.value for result in cleanup],
            },
        )
        return DeleteImageResponse(previous_image_url=image_url, cleanup=cleanup)
