"""Intake gate for uploaded images.

Two independent layers decide whether bytes may proceed to transformation:

1. Declared attributes (file extension, MIME type, raw size), checked by
   `accept_upload` without looking at the content.
2. Decoded content (format and pixel dimensions), checked by
   `validate_image` through the image header only.

Neither layer has side effects, and both run before any transform or
network call.
"""

import io
import warnings

from aws_lambda_powertools import Logger
from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel

from core.models.errors import (
    FileSizeError,
    InvalidFileTypeError,
    InvalidImageContentError,
    MissingFileError,
)
from core.models.image import ImageMetadata
from core.utils.constants import (
    ERROR_CODE_FILE_SIZE_EXCEEDED,
    ERROR_CODE_INVALID_FILE_TYPE,
    ERROR_CODE_MISSING_FILE,
    MAX_IMAGE_DIMENSION,
    MESSAGE_IMAGE_TOO_LARGE,
    MESSAGE_INVALID_FILE_TYPE,
    MESSAGE_INVALID_IMAGE,
    MESSAGE_MISSING_FILE,
    format_file_size,
    get_max_file_size_mb,
)
from core.utils.mime import file_extension, is_allowed_extension, is_allowed_mime_type

logger = Logger(UTC=True)


class IntakeDecision(BaseModel):
    """Result of the declared-attribute check."""

    accepted: bool
    reason: str | None = None
    error_code: str | None = None

    @classmethod
    def accept(cls) -> "IntakeDecision":
        return cls(accepted=True)

    @classmethod
    def reject(cls, *, reason: str, error_code: str) -> "IntakeDecision":
        return cls(accepted=False, reason=reason, error_code=error_code)


def accept_upload(
    data: bytes | None,
    file_name: str,
    content_type: str,
    *,
    max_size: int,
) -> IntakeDecision:
    """Check extension, MIME type and size of an upload.

    Args:
        data: Raw uploaded bytes
        file_name: File name declared by the client
        content_type: MIME type declared by the client
        max_size: Largest accepted size in bytes (inclusive)

    Returns:
        IntakeDecision; rejected decisions carry a client-facing reason
    """
    if not data:
        return IntakeDecision.reject(
            reason=MESSAGE_MISSING_FILE,
            error_code=ERROR_CODE_MISSING_FILE,
        )

    if not (is_allowed_extension(file_name) and is_allowed_mime_type(content_type)):
        logger.info(
            "Upload rejected: file type",
            extra={
                "extension": file_extension(file_name),
                "content_type": content_type,
            },
        )
        return IntakeDecision.reject(
            reason=MESSAGE_INVALID_FILE_TYPE,
            error_code=ERROR_CODE_INVALID_FILE_TYPE,
        )

    if len(data) > max_size:
        logger.info(
            "Upload rejected: size",
            extra={"size": format_file_size(len(data)), "max_size": format_file_size(max_size)},
        )
        return IntakeDecision.reject(
            reason=f"File too large (max {get_max_file_size_mb(max_size)}MB)",
            error_code=ERROR_CODE_FILE_SIZE_EXCEEDED,
        )

    return IntakeDecision.accept()


def ensure_accepted(
    data: bytes | None,
    file_name: str,
    content_type: str,
    *,
    max_size: int,
) -> None:
    """Raise the matching ValidationError when `accept_upload` rejects."""
    decision = accept_upload(data, file_name, content_type, max_size=max_size)
    if decision.accepted:
        return

    message = decision.reason or MESSAGE_INVALID_FILE_TYPE
    details = {"file_name": file_name, "content_type": content_type}

    if decision.error_code == ERROR_CODE_MISSING_FILE:
        raise MissingFileError(message=message)
    if decision.error_code == ERROR_CODE_FILE_SIZE_EXCEEDED:
        raise FileSizeError(
            message=message,
            details={**details, "size": len(data or b""), "max_size": max_size},
        )
    raise InvalidFileTypeError(message=message, details=details)


def read_image_metadata(data: bytes) -> ImageMetadata | None:
    """Decode format and dimensions from the image header.

    Returns None when the bytes are not an image Pillow recognizes.
    """
    try:
        # Dimension limits are enforced here, not by Pillow's bomb guard.
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", Image.DecompressionBombWarning)
            with Image.open(io.BytesIO(data)) as image:
                if not image.format:
                    return None
                width, height = image.size
                return ImageMetadata(
                    format=image.format.lower(),
                    width=width,
                    height=height,
                )
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError):
        logger.debug("Image header could not be decoded", extra={"size": len(data)})
        return None


def exceeds_dimension_limit(metadata: ImageMetadata) -> bool:
    return metadata.width > MAX_IMAGE_DIMENSION or metadata.height > MAX_IMAGE_DIMENSION


def ensure_valid_image(data: bytes) -> ImageMetadata:
    """Content check that explains itself.

    Raises:
        InvalidImageContentError: "Invalid image file" when the bytes do not
            decode, or the dimension message when a side exceeds 8000px
    """
    metadata = read_image_metadata(data)

    if metadata is None:
        raise InvalidImageContentError(message=MESSAGE_INVALID_IMAGE)

    if exceeds_dimension_limit(metadata):
        raise InvalidImageContentError(
            message=MESSAGE_IMAGE_TOO_LARGE,
            details={"width": metadata.width, "height": metadata.height},
        )

    return metadata


def validate_image(data: bytes) -> bool:
    """Content check: decodable, recognized format, at most 8000px per side.

    Never raises.
    """
    try:
        ensure_valid_image(data)
    except InvalidImageContentError as exc:
        logger.warning(
            "Image validation failed",
            extra={"reason": exc.message, **exc.details},
        )
        return False

    return True
