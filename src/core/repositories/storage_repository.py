"""Abstract contract for image blob storage."""

from abc import ABC, abstractmethod

from aws_lambda_powertools import Logger

from core.models.image import EntityKind
from core.models.storage import (
    CleanupResult,
    CleanupStatus,
    StoredBlobReference,
    thumbnail_reference_for,
)

logger = Logger(UTC=True)


class ImageStorageRepository(ABC):
    """Contract for storing and removing image files.

    Implementations could be S3, local disk, etc. A deployment selects
    exactly one; services depend on this interface, not the implementation.
    """

    @abstractmethod
    def is_configured(self) -> bool:
        """Report whether the backend has the configuration it needs to upload."""

    @abstractmethod
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
        """Store image bytes under a freshly generated name.

        Args:
            data: Bytes to store, already validated (and optimized, if the
                transform policy asks for it)
            file_name: Original client file name, recorded as metadata
            content_type: MIME type of `data`
            kind: Owning entity kind; selects the folder
            extension: Extension for the stored name; defaults to the
                extension of `file_name`
            filename: Exact stored name inside the kind's folder; a fresh
                randomized name is generated when omitted

        Returns:
            Reference to the stored blob

        Raises:
            StorageNotConfiguredError: If the backend is not configured
            ImageUploadFailedError: If the write fails
        """

    @abstractmethod
    def delete(self, reference: str | None) -> CleanupResult:
        """Best-effort removal of a stored blob.

        Args:
            reference: URL, container-relative key or file name as returned
                by `upload`

        Returns:
            CleanupResult; failures are reported, never raised
        """

    def delete_with_thumbnail(self, reference: str) -> list[CleanupResult]:
        """Remove an image and the thumbnail stored beside it.

        The thumbnail result is only included when a thumbnail was found.
        """
        results = [self.delete(reference)]

        thumbnail = self.delete(thumbnail_reference_for(reference))
        if thumbnail.status is not CleanupStatus.NOT_FOUND:
            results.append(thumbnail)

        for result in results:
            if not result.succeeded:
                logger.warning(
                    "Image cleanup failed",
                    extra={"reference": result.reference, "reason": result.reason},
                )

        return results
