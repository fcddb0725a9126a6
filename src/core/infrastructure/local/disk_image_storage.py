"""Local-disk implementation of ImageStorageRepository.

Used where no object storage is available. Files land in
``<root>/animals`` or ``<root>/exhibits`` under randomized names, and the
returned reference is the bare file name.
"""

import os
import secrets
from pathlib import Path

from aws_lambda_powertools import Logger

from core.models.errors import ImageUploadFailedError
from core.models.image import EntityKind
from core.models.storage import CleanupResult, StoredBlobReference
from core.repositories.storage_repository import ImageStorageRepository
from core.utils.constants import DEFAULT_UPLOAD_DIR, ENV_IMAGE_UPLOAD_DIR, RANDOM_SUFFIX_MAX
from core.utils.mime import file_extension
from core.utils.time import current_time_millis

logger = Logger(UTC=True)


def generate_filename(kind: EntityKind, extension: str) -> str:
    """``{animal|exhibit}-{millis}-{random}{ext}``."""
    suffix = f"{current_time_millis()}-{secrets.randbelow(RANDOM_SUFFIX_MAX + 1)}"
    return f"{kind.file_prefix}-{suffix}{extension}"


def _kind_for(folder: str, filename: str) -> EntityKind:
    if folder:
        return EntityKind.from_folder(folder.rsplit("/", 1)[-1])
    if filename.startswith(f"{EntityKind.EXHIBIT.file_prefix}-"):
        return EntityKind.EXHIBIT
    return EntityKind.ANIMAL


class DiskImageStorage(ImageStorageRepository):
    """Image storage on the local filesystem."""

    def __init__(self, root: str | Path | None = None) -> None:
        self._root = Path(root or os.getenv(ENV_IMAGE_UPLOAD_DIR) or DEFAULT_UPLOAD_DIR)

        for kind in EntityKind:
            self.directory_for(kind).mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def directory_for(self, kind: EntityKind) -> Path:
        return self._root / kind.folder

    def is_configured(self) -> bool:
        return True

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
        if not filename:
            filename = generate_filename(kind, (extension or file_extension(file_name)).lower())
        path = self.directory_for(kind) / filename

        try:
            path.write_bytes(data)
        except OSError as exc:
            logger.exception("Error writing image to disk", extra={"path": str(path)})
            raise ImageUploadFailedError(
                message=f"Failed to upload image to storage: {exc}",
                details={"filename": filename},
            ) from exc

        logger.info(
            "Image stored on disk",
            extra={"path": str(path), "size": len(data), "original_name": file_name},
        )
        return StoredBlobReference(url=filename, folder=kind.folder, key=filename)

    def delete_image_file(self, kind: EntityKind, filename: str | None) -> bool:
        """Remove a stored file. Empty names and missing files are ignored.

        Returns:
            True when a file was removed
        """
        if not filename:
            return False

        path = self.directory_for(kind) / Path(filename).name
        if not path.exists():
            return False

        path.unlink()
        return True

    def delete(self, reference: str | None) -> CleanupResult:
        """Accepts ``filename`` or ``folder/filename``; the folder is inferred from the prefix otherwise."""
        if not reference:
            return CleanupResult.not_found(reference)

        folder, _, filename = reference.rpartition("/")

        try:
            kind = _kind_for(folder, filename)
            removed = self.delete_image_file(kind, filename)
        except (OSError, ValueError) as exc:
            logger.exception("Error deleting image file", extra={"reference": reference})
            return CleanupResult.failed(reference, str(exc))

        if not removed:
            return CleanupResult.not_found(reference)

        logger.info("Deleted image file", extra={"kind": kind.value, "file_name": filename})
        return CleanupResult.deleted(reference)
