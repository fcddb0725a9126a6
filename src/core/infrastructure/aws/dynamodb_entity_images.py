"""DynamoDB-backed implementation of EntityImageRepository."""

from typing import Any

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from core.infrastructure.adapters.dynamodb_adapter import DynamoDBAdapter, DynamoDBAdapterProtocol
from core.models.errors import EntityRecordError
from core.models.image import EntityKind
from core.repositories.entity_image_repository import EntityImageRepository
from core.utils.constants import (
    ERROR_CODE_ENTITY_RECORD_CLEAR_FAILED,
    ERROR_CODE_ENTITY_RECORD_FETCH_FAILED,
    ERROR_CODE_ENTITY_RECORD_SAVE_FAILED,
)
from core.utils.time import utc_now_iso

logger = Logger(UTC=True)


def _entity_key(kind: EntityKind, entity_id: str) -> dict[str, Any]:
    return {"entity_type": kind.value, "entity_id": entity_id}


class DynamoDBEntityImages(EntityImageRepository):
    """Entity image references stored in DynamoDB.

    Table layout: hash key `entity_type`, range key `entity_id`, attribute
    `image_url`. All boto3 errors are translated into EntityRecordError.
    """

    def __init__(self, adapter: DynamoDBAdapterProtocol | None = None) -> None:
        """Initialize with DynamoDB adapter."""
        self._db: DynamoDBAdapterProtocol = adapter or DynamoDBAdapter()

    def fetch_image_url(self, *, kind: EntityKind, entity_id: str) -> str | None:
        logger.debug("Fetching image reference", extra={"kind": kind.value, "entity_id": entity_id})

        try:
            response = self._db.get_item(key=_entity_key(kind, entity_id))
        except ClientError as exc:
            logger.error(
                "DynamoDB get_item failed",
                extra={"kind": kind.value, "entity_id": entity_id},
            )
            raise EntityRecordError(
                message="Unable to read the current image",
                error_code=ERROR_CODE_ENTITY_RECORD_FETCH_FAILED,
                details={"entity_id": entity_id},
            ) from exc

        item = response.get("Item") or {}
        image_url = item.get("image_url")

        if image_url is not None and not isinstance(image_url, str):
            raise EntityRecordError(
                message="Invalid image reference format",
                error_code=ERROR_CODE_ENTITY_RECORD_FETCH_FAILED,
                details={"entity_id": entity_id},
            )

        return image_url or None

    def save_image_url(self, *, kind: EntityKind, entity_id: str, image_url: str) -> None:
        try:
            self._db.update_item(
                key=_entity_key(kind, entity_id),
                update_expression="SET image_url = :image_url, updated_at = :updated_at",
                expression_values={
                    ":image_url": image_url,
                    ":updated_at": utc_now_iso(),
                },
            )
            logger.info(
                "Image reference saved",
                extra={"kind": kind.value, "entity_id": entity_id, "image_url": image_url},
            )

        except ClientError as exc:
            logger.error(
                "DynamoDB update_item failed",
                extra={"kind": kind.value, "entity_id": entity_id},
            )
            raise EntityRecordError(
                message="Unable to save the image reference",
                error_code=ERROR_CODE_ENTITY_RECORD_SAVE_FAILED,
                details={"entity_id": entity_id},
            ) from exc

    def clear_image_url(self, *, kind: EntityKind, entity_id: str) -> None:
        try:
            self._db.update_item(
                key=_entity_key(kind, entity_id),
                update_expression="REMOVE image_url SET updated_at = :updated_at",
                expression_values={":updated_at": utc_now_iso()},
            )
            logger.info(
                "Image reference cleared",
                extra={"kind": kind.value, "entity_id": entity_id},
            )

        except ClientError as exc:
            logger.error(
                "DynamoDB update_item failed",
                extra={"kind": kind.value, "entity_id": entity_id},
            )
            raise EntityRecordError(
                message="Unable to clear the image reference",
                error_code=ERROR_CODE_ENTITY_RECORD_CLEAR_FAILED,
                details={"entity_id": entity_id},
            ) from exc
