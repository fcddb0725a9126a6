"""Stand-in storage for deployments whose storage backend is not set up."""

from aws_lambda_powertools import Logger

from core.models.errors import StorageNotConfiguredError
from core.models.image import EntityKind
from core.models.storage import CleanupResult, StoredBlobReference
from core.repositories.storage_repository import ImageStorageRepository
from core.utils.constants import MESSAGE_STORAGE_NOT_CONFIGURED

logger = Logger(UTC=True)


class UnconfiguredImageStorage(ImageStorageRepository):
    """Carries the configuration error instead of a client.

    Uploads fail with StorageNotConfiguredError; deletes have nothing to do.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason

    def is_configured(self) -> bool:
        return False

    def upload(
        self,
        *,
        data: bytes,
        file_name: str,
        content_type: str,
        kind: EntityKind,
        extension: str | None = None,
        filename: str | None = None,
    ) -> StoredBlobReference:
        logger.error("Upload attempted without storage configuration", extra={"reason": self.reason})
        raise StorageNotConfiguredError(
            message=MESSAGE_STORAGE_NOT_CONFIGURED,
            technical_details=self.reason,
        )

    def delete(self, reference: str | None) -> CleanupResult:
        return CleanupResult.not_found(reference)
