"""S3-backed implementation of ImageStorageRepository."""

import secrets
from urllib.parse import unquote, urlsplit

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

from core.infrastructure.adapters.s3_adapter import S3Adapter, S3AdapterProtocol
from core.models.errors import ImageUploadFailedError
from core.models.image import EntityKind
from core.models.storage import CleanupResult, StoredBlobReference
from core.repositories.storage_repository import ImageStorageRepository
from core.utils.constants import CACHE_CONTROL_IMMUTABLE, RANDOM_SUFFIX_MAX
from core.utils.mime import file_extension
from core.utils.time import current_time_millis, utc_now_iso

logger = Logger(UTC=True)


def generate_object_key(folder: str, extension: str) -> str:
    """``{folder}/{folder}-{millis}-{random}{ext}``; collisions are improbable, not impossible."""
    suffix = f"{current_time_millis()}-{secrets.randbelow(RANDOM_SUFFIX_MAX + 1)}"
    return f"{folder}/{folder}-{suffix}{extension}"


def extract_object_key(reference: str, prefix: str | None = None) -> str:
    """Container-relative key from a full URL or a bare key.

    ``https://host/bucket/exhibits/exhibits-1-2.webp`` -> ``exhibits/exhibits-1-2.webp``

    When `prefix` (``{base}/{bucket}/``) matches, everything after it is the
    key, so a base URL with its own path is handled.
    """
    if prefix and reference.startswith(prefix):
        return unquote(reference[len(prefix):])

    if reference.startswith(("http://", "https://")):
        path_parts = urlsplit(reference).path.split("/")
        # Drop the empty leading segment and the bucket name.
        return unquote("/".join(path_parts[2:]))

    return reference


class S3ImageStorage(ImageStorageRepository):
    """Image storage implementation backed by Amazon S3."""

    def __init__(self, adapter: S3AdapterProtocol | None = None) -> None:
        """Create storage using the provided S3 adapter."""
        self._s3: S3AdapterProtocol = adapter or S3Adapter()

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
        """Upload image bytes to S3 and return the public URL reference."""
        folder = kind.folder
        if filename:
            key = f"{folder}/{filename}"
        else:
            key = generate_object_key(folder, (extension or file_extension(file_name)).lower())

        logger.debug(
            "Uploading image",
            extra={
                "bucket": self._s3.bucket,
                "key": key,
                "size": len(data),
                "content_type": content_type,
            },
        )

        try:
            self._s3.ensure_bucket()
            # Bytes are already optimized, so no ContentEncoding is set.
            self._s3.put_object(
                key=key,
                body=data,
                content_type=content_type,
                cache_control=CACHE_CONTROL_IMMUTABLE,
                metadata={
                    "originalname": file_name,
                    "uploadedat": utc_now_iso(),
                },
            )

        except ClientError as exc:
            error = exc.response.get("Error", {})
            logger.error(
                "S3 upload failed",
                extra={"key": key, "code": error.get("Code"), "error": str(exc)},
            )
            raise ImageUploadFailedError(
                message=f"Failed to upload image to storage: {error.get('Message') or exc}",
                details={"key": key},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error uploading image", extra={"key": key})
            raise ImageUploadFailedError(
                message=f"Failed to upload image to storage: {exc}",
                details={"key": key},
            ) from exc

        url = self._s3.object_url(key)
        logger.info("Image uploaded successfully", extra={"key": key, "url": url})
        return StoredBlobReference(url=url, folder=folder, key=key)

    def delete(self, reference: str | None) -> CleanupResult:
        """Delete an image object; every failure is logged and reported, not raised."""
        if not reference:
            return CleanupResult.not_found(reference)

        key = extract_object_key(reference, self._s3.object_url_prefix())
        if not key:
            logger.warning("Delete skipped: no object key in reference", extra={"reference": reference})
            return CleanupResult.not_found(reference)

        try:
            self._s3.head_object(key=key)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in ("404", "NoSuchKey", "NotFound"):
                logger.info("Image already absent", extra={"key": key})
                return CleanupResult.not_found(key)
            logger.error("S3 lookup before delete failed", extra={"key": key, "code": code})
            return CleanupResult.failed(key, str(exc))
        except Exception as exc:
            logger.exception("Unexpected error looking up image", extra={"key": key})
            return CleanupResult.failed(key, str(exc))

        try:
            self._s3.delete_object(key=key)
        except Exception as exc:
            logger.exception("Error deleting image from storage", extra={"key": key})
            return CleanupResult.failed(key, str(exc))

        logger.info("Deleted blob", extra={"key": key})
        return CleanupResult.deleted(key)
