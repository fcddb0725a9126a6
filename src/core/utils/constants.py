"""Global constants used throughout the application.

This module centralizes all magic numbers, string literals, and configuration
values that are used across multiple modules. Using constants prevents hardcoding
values and makes it easy to change them globally.
"""

from typing import Final

# ============================================================================
# Error Codes
# ============================================================================


# Validation Errors
ERROR_CODE_VALIDATION_FAILED = "VALIDATION_FAILED"
ERROR_CODE_INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
ERROR_CODE_FILE_SIZE_EXCEEDED = "FILE_SIZE_EXCEEDED"
ERROR_CODE_MISSING_FILE = "MISSING_FILE"
ERROR_CODE_INVALID_IMAGE_CONTENT = "INVALID_IMAGE_CONTENT"

# Not Found Errors
ERROR_CODE_RESOURCE_NOT_FOUND = "NOT_FOUND"

# Configuration Errors
ERROR_CODE_STORAGE_NOT_CONFIGURED = "STORAGE_NOT_CONFIGURED"

# Processing Errors
ERROR_CODE_IMAGE_OPTIMIZATION_FAILED = "IMAGE_OPTIMIZATION_FAILED"
ERROR_CODE_THUMBNAIL_GENERATION_FAILED = "THUMBNAIL_GENERATION_FAILED"
ERROR_CODE_IMAGE_VARIANTS_FAILED = "IMAGE_VARIANTS_FAILED"

# Storage Errors
ERROR_CODE_STORAGE = "STORAGE_ERROR"
ERROR_CODE_IMAGE_UPLOAD_FAILED = "IMAGE_UPLOAD_FAILED"

# Entity record / DynamoDB Errors
ERROR_CODE_ENTITY_RECORD_FAILED = "ENTITY_RECORD_FAILED"
ERROR_CODE_ENTITY_RECORD_FETCH_FAILED = "ENTITY_RECORD_FETCH_FAILED"
ERROR_CODE_ENTITY_RECORD_SAVE_FAILED = "ENTITY_RECORD_SAVE_FAILED"
ERROR_CODE_ENTITY_RECORD_CLEAR_FAILED = "ENTITY_RECORD_CLEAR_FAILED"

# Internal / Unexpected
ERROR_CODE_INTERNAL_ERROR = "INTERNAL_ERROR"


# ============================================================================
# File Upload Constraints
# ============================================================================

MAX_OPTIMIZED_UPLOAD_SIZE = 10 * 1024 * 1024  # 10MB, re-encoded before storage
MAX_PASSTHROUGH_UPLOAD_SIZE = 5 * 1024 * 1024  # 5MB, stored as-is

MAX_IMAGE_DIMENSION = 8000

ALLOWED_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {"jpeg", "jpg", "png", "gif", "webp"}
)

# Searched for anywhere in the declared MIME type, case-sensitive.
ALLOWED_TYPE_PATTERN: Final[str] = r"jpeg|jpg|png|gif|webp"

MIME_TYPE_BY_EXTENSION: Final[dict[str, str]] = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}

UPLOAD_FIELD_NAME = "image"

# ============================================================================
# Rejection Messages
# ============================================================================

MESSAGE_INVALID_FILE_TYPE = "Only image files are allowed (jpeg, jpg, png, gif, webp)"
MESSAGE_MISSING_FILE = "No image file provided"
MESSAGE_INVALID_IMAGE = "Invalid image file"
MESSAGE_IMAGE_TOO_LARGE = (
    f"Image dimensions too large (max {MAX_IMAGE_DIMENSION}x{MAX_IMAGE_DIMENSION})"
)
MESSAGE_STORAGE_NOT_CONFIGURED = "Image upload service is not configured"
MESSAGE_STORAGE_NOT_CONFIGURED_DETAILS = (
    "Object storage is required for image uploads. Please contact the administrator."
)
MESSAGE_UPLOAD_FAILED = "Failed to upload image to storage"
MESSAGE_REPLACE_FAILED = "Failed to replace image"
MESSAGE_DELETE_FAILED = "Failed to delete image"
MESSAGE_IMAGE_NOT_FOUND = "No image stored for this entity"

# ============================================================================
# Transform Profiles
# ============================================================================

DEFAULT_MAX_WIDTH = 1200
ANIMAL_MAX_WIDTH = 800
EXHIBIT_MAX_WIDTH = 1200
THUMBNAIL_SIZE = 300

DEFAULT_QUALITY = 85
DEFAULT_EFFORT = 4  # 0 (fast) .. 6 (smallest)
THUMBNAIL_QUALITY = 80

WEBP_ALPHA_QUALITY = 100
PNG_COMPRESS_LEVEL = 8

MAX_WIDTH_BY_IMAGE_TYPE: Final[dict[str, int]] = {
    "animal": ANIMAL_MAX_WIDTH,
    "exhibit": EXHIBIT_MAX_WIDTH,
    "thumbnail": THUMBNAIL_SIZE,
}

# ============================================================================
# Storage
# ============================================================================

CACHE_CONTROL_IMMUTABLE = "public, max-age=31536000, immutable"  # 1 year
RANDOM_SUFFIX_MAX = 1_000_000_000
THUMBNAIL_SUFFIX = "-thumb"
DEFAULT_UPLOAD_DIR = "uploads"

STORAGE_BACKEND_S3 = "s3"
STORAGE_BACKEND_DISK = "disk"

TRANSFORM_POLICY_OPTIMIZE = "optimize"
TRANSFORM_POLICY_PASSTHROUGH = "passthrough"

# ============================================================================
# API Gateway Configuration
# ============================================================================

CORS_ORIGIN = "*"
CORS_METHODS = "GET,POST,PUT,DELETE,OPTIONS"
CORS_HEADERS = "Content-Type,Authorization,X-Api-Key"
DEFAULT_CONTENT_TYPE = "application/json"

# ============================================================================
# Environment Variable Names
# ============================================================================

ENV_AWS_ENDPOINT_URL = "AWS_ENDPOINT_URL"
ENV_AWS_REGION = "AWS_REGION"
ENV_IMAGE_S3_BUCKET_NAME = "IMAGE_S3_BUCKET_NAME"
ENV_IMAGE_PUBLIC_BASE_URL = "IMAGE_PUBLIC_BASE_URL"
ENV_IMAGE_STORAGE_BACKEND = "IMAGE_STORAGE_BACKEND"
ENV_IMAGE_TRANSFORM_POLICY = "IMAGE_TRANSFORM_POLICY"
ENV_IMAGE_UPLOAD_DIR = "IMAGE_UPLOAD_DIR"
ENV_ENTITY_IMAGE_TABLE_NAME = "ENTITY_IMAGE_TABLE_NAME"

DEFAULT_AWS_REGION = "us-east-1"

# ============================================================================
# Helper Functions
# ============================================================================


def get_max_file_size_mb(max_size: int) -> int:
    """Get a size ceiling in whole megabytes."""
    return max_size // (1024 * 1024)


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted file size string
    """
    size: float = float(size_bytes)

    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0

    return f"{size:.1f} TB"
