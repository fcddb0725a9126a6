"""Resolve storage backend and transform policy from the environment, once.

The returned objects are passed explicitly to the services that need them.
A storage backend that cannot be configured becomes an
`UnconfiguredImageStorage` holding the reason, so the problem is reported on
the first upload instead of crashing the cold start.
"""

import os

from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError

from core.infrastructure.adapters.s3_adapter import S3Adapter
from core.infrastructure.aws.s3_image_storage import S3ImageStorage
from core.infrastructure.local.disk_image_storage import DiskImageStorage
from core.infrastructure.unconfigured_storage import UnconfiguredImageStorage
from core.models.image import TransformPolicy
from core.repositories.storage_repository import ImageStorageRepository
from core.utils.constants import (
    ENV_IMAGE_STORAGE_BACKEND,
    ENV_IMAGE_TRANSFORM_POLICY,
    STORAGE_BACKEND_DISK,
    STORAGE_BACKEND_S3,
)

logger = Logger(UTC=True)


def storage_backend_name() -> str:
    return (os.getenv(ENV_IMAGE_STORAGE_BACKEND) or STORAGE_BACKEND_S3).strip().lower()


def create_image_storage(backend: str | None = None) -> ImageStorageRepository:
    """Build the storage backend named by `backend` or IMAGE_STORAGE_BACKEND."""
    backend = (backend or storage_backend_name()).strip().lower()

    if backend == STORAGE_BACKEND_DISK:
        try:
            return DiskImageStorage()
        except OSError as exc:
            logger.error("Disk image storage unavailable", extra={"error": str(exc)})
            return UnconfiguredImageStorage(f"Upload directory is not usable: {exc}")

    if backend != STORAGE_BACKEND_S3:
        reason = f"Unknown {ENV_IMAGE_STORAGE_BACKEND} value: {backend!r}"
        logger.error("Image storage not configured", extra={"reason": reason})
        return UnconfiguredImageStorage(reason)

    try:
        storage = S3ImageStorage(S3Adapter())
    except (RuntimeError, ValueError, BotoCoreError) as exc:
        logger.error("Image storage not configured", extra={"reason": str(exc)})
        return UnconfiguredImageStorage(str(exc))

    logger.info("S3 image storage initialized")
    return storage


def resolve_transform_policy(backend: str | None = None) -> TransformPolicy:
    """IMAGE_TRANSFORM_POLICY if set, else optimize for S3 and passthrough for disk."""
    configured = os.getenv(ENV_IMAGE_TRANSFORM_POLICY)
    if configured:
        try:
            return TransformPolicy(configured.strip().lower())
        except ValueError:
            logger.warning(
                "Ignoring unknown transform policy",
                extra={"value": configured},
            )

    backend = (backend or storage_backend_name()).strip().lower()
    if backend == STORAGE_BACKEND_DISK:
        return TransformPolicy.PASSTHROUGH
    return TransformPolicy.OPTIMIZE
