"""Business logic for image uploads.

This module composes Intake -> Transform -> Store for a single upload. The
pipeline is parameterized by a storage backend and a transform policy, so
whether images are optimized is configuration rather than a side effect of
which backend is wired up.
"""

from aws_lambda_powertools import Logger

from core.imaging.intake import ensure_accepted, ensure_valid_image
from core.imaging.optimizer import generate_thumbnail, optimize_for_profile
from core.infrastructure.factory import create_image_storage, resolve_transform_policy
from core.models.errors import MissingFileError, StorageNotConfiguredError
from core.models.image import (
    PROFILE_BY_KIND,
    EntityKind,
    OptimizationSummary,
    TransformPolicy,
    UploadCandidate,
)
from core.models.storage import StoredBlobReference, thumbnail_reference_for
from core.repositories.storage_repository import ImageStorageRepository
from core.utils.constants import (
    MESSAGE_MISSING_FILE,
    MESSAGE_STORAGE_NOT_CONFIGURED,
    THUMBNAIL_SIZE,
)
from core.utils.mime import extension_for_format

from .models import UploadResult

logger = Logger(UTC=True)


class UploadPipeline:
    """Application service responsible for turning one upload into a stored blob.

    Flow:
    1. Intake: extension, MIME type and size (before anything else)
    2. Storage configuration check (before any transform)
    3. Optimize policy: content validation, main variant, thumbnail
       Passthrough policy: the original bytes
    4. Upload to the storage backend

    Nothing is written to an entity record here; callers persist the URL
    only after `process` returns.
    """

    def __init__(
        self,
        storage: ImageStorageRepository,
        policy: TransformPolicy = TransformPolicy.OPTIMIZE,
        *,
        with_thumbnail: bool = True,
    ) -> None:
        self.storage = storage
        self.policy = policy
        self.with_thumbnail = with_thumbnail

    @classmethod
    def from_environment(cls) -> "UploadPipeline":
        storage = create_image_storage()
        return cls(storage, resolve_transform_policy())

    @property
    def max_upload_size(self) -> int:
        return self.policy.max_upload_size

    def process(self, candidate: UploadCandidate | None, kind: EntityKind) -> UploadResult:
        """Run the pipeline for one candidate.

        Raises:
            ValidationError: For a missing file, bad type or size, or bad content
            StorageNotConfiguredError: If the storage backend is not configured
            ImageOptimizationError: If the codec fails on validated content
            ImageUploadFailedError: If the storage write fails
        """
        if candidate is None:
            raise MissingFileError(message=MESSAGE_MISSING_FILE)

        ensure_accepted(
            candidate.data,
            candidate.file_name,
            candidate.content_type,
            max_size=self.max_upload_size,
        )

        if not self.storage.is_configured():
            raise StorageNotConfiguredError(
                message=MESSAGE_STORAGE_NOT_CONFIGURED,
                technical_details=getattr(self.storage, "reason", None),
            )

        logger.info(
            "Processing file upload",
            extra={
                "file_name": candidate.file_name,
                "size": candidate.size,
                "kind": kind.value,
                "policy": self.policy.value,
            },
        )

        if self.policy is TransformPolicy.PASSTHROUGH:
            reference = self.storage.upload(
                data=candidate.data,
                file_name=candidate.file_name,
                content_type=candidate.content_type,
                kind=kind,
            )
            return self._result(reference)

        return self._optimize_and_store(candidate, kind)

    def _optimize_and_store(self, candidate: UploadCandidate, kind: EntityKind) -> UploadResult:
        ensure_valid_image(candidate.data)

        profile = PROFILE_BY_KIND[kind]
        variant = optimize_for_profile(candidate.data, profile)
        thumbnail = generate_thumbnail(candidate.data, THUMBNAIL_SIZE) if self.with_thumbnail else None

        extension = extension_for_format(variant.format.value)
        content_type = f"image/{variant.format.value}"

        reference = self.storage.upload(
            data=variant.data,
            file_name=candidate.file_name,
            content_type=content_type,
            kind=kind,
            extension=extension,
        )

        thumbnail_reference: StoredBlobReference | None = None
        if thumbnail is not None:
            thumbnail_reference = self.storage.upload(
                data=thumbnail,
                file_name=candidate.file_name,
                content_type="image/webp",
                kind=kind,
                filename=thumbnail_reference_for(reference.filename),
            )

        optimization = OptimizationSummary.from_variant(variant)
        logger.info(
            "Image optimized and stored",
            extra={
                "url": reference.url,
                "original_size": optimization.original_size,
                "optimized_size": optimization.optimized_size,
                "compression_ratio": optimization.compression_ratio,
            },
        )

        return self._result(reference, thumbnail_reference, optimization)

    @staticmethod
    def _result(
        reference: StoredBlobReference,
        thumbnail: StoredBlobReference | None = None,
        optimization: OptimizationSummary | None = None,
    ) -> UploadResult:
        return UploadResult(
            image_url=reference.url,
            filename=reference.filename,
            folder=reference.folder,
            thumbnail_url=thumbnail.url if thumbnail else None,
            optimization=optimization,
        )
