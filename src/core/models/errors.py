"""Custom exception classes for the image ingestion service."""

from typing import Any

from core.utils.constants import (
    ERROR_CODE_ENTITY_RECORD_FAILED,
    ERROR_CODE_FILE_SIZE_EXCEEDED,
    ERROR_CODE_IMAGE_OPTIMIZATION_FAILED,
    ERROR_CODE_IMAGE_UPLOAD_FAILED,
    ERROR_CODE_IMAGE_VARIANTS_FAILED,
    ERROR_CODE_INVALID_FILE_TYPE,
    ERROR_CODE_INVALID_IMAGE_CONTENT,
    ERROR_CODE_MISSING_FILE,
    ERROR_CODE_RESOURCE_NOT_FOUND,
    ERROR_CODE_STORAGE,
    ERROR_CODE_STORAGE_NOT_CONFIGURED,
    ERROR_CODE_THUMBNAIL_GENERATION_FAILED,
    ERROR_CODE_VALIDATION_FAILED,
)


class ImageServiceError(Exception):
    """
    Base exception for all image service errors.

    All custom errors must inherit from this class.
    Callers must explicitly provide a message and error code.
    Optional contextual information can be supplied via `details`.
    """

    message: str
    error_code: str
    details: dict[str, Any]

    def __init__(
        self,
        *,
        message: str,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        super().__init__(self.message)


class ValidationError(ImageServiceError):
    """Raised when an upload is rejected before any processing starts."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_VALIDATION_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class InvalidFileTypeError(ValidationError):
    """Raised when the declared extension or MIME type is not an allowed image type."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_INVALID_FILE_TYPE,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class FileSizeError(ValidationError):
    """Raised when file size exceeds the allowed limit."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_FILE_SIZE_EXCEEDED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class MissingFileError(ValidationError):
    """Raised when the request carries no file."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_MISSING_FILE,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class InvalidImageContentError(ValidationError):
    """Raised when the bytes are not a decodable image or exceed dimension limits."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_INVALID_IMAGE_CONTENT,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class NotFoundError(ImageServiceError):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_RESOURCE_NOT_FOUND,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class StorageNotConfiguredError(ImageServiceError):
    """Raised when the storage backend has no usable configuration.

    Distinct from a failed upload: this is an operator problem, surfaced with
    `technical_details` so deployments can be diagnosed.
    """

    technical_details: str | None

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_STORAGE_NOT_CONFIGURED,
        technical_details: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.technical_details = technical_details
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class ImageOptimizationError(ImageServiceError):
    """Raised when an image cannot be decoded or re-encoded."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_IMAGE_OPTIMIZATION_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class ThumbnailGenerationError(ImageOptimizationError):
    """Raised when a thumbnail cannot be produced."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_THUMBNAIL_GENERATION_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class ImageVariantsError(ImageOptimizationError):
    """Raised when the main/thumbnail variant set cannot be produced."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_IMAGE_VARIANTS_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class StorageError(ImageServiceError):
    """Raised when an image storage operation fails."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_STORAGE,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )


class ImageUploadFailedError(StorageError):
    """Raised when image bytes could not be written to storage."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_IMAGE_UPLOAD_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message=message, error_code=error_code, details=details)


class EntityRecordError(ImageServiceError):
    """Raised when an entity's image reference cannot be read or written."""

    def __init__(
        self,
        *,
        message: str,
        error_code: str = ERROR_CODE_ENTITY_RECORD_FAILED,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code=error_code,
            details=details,
        )
