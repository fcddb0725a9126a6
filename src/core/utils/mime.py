import re
from collections.abc import Mapping
from pathlib import PurePath

from core.utils.constants import (
    ALLOWED_EXTENSIONS,
    ALLOWED_TYPE_PATTERN,
    MIME_TYPE_BY_EXTENSION,
)

MAGIC_BYTES: Mapping[bytes, str] = {
    b"\xff\xd8\xff": "image/jpeg",
    b"\x89PNG\r\n\x1a\n": "image/png",
    b"GIF87a": "image/gif",
    b"GIF89a": "image/gif",
}

EXTENSION_BY_FORMAT: Mapping[str, str] = {
    "webp": ".webp",
    "jpeg": ".jpg",
    "png": ".png",
}

_ALLOWED_TYPE_RE = re.compile(ALLOWED_TYPE_PATTERN)


def file_extension(file_name: str) -> str:
    """Return the extension of ``file_name`` including the dot, as given."""
    return PurePath(file_name).suffix


def is_allowed_extension(file_name: str) -> bool:
    suffix = file_extension(file_name).lower().lstrip(".")
    return suffix in ALLOWED_EXTENSIONS


def is_allowed_mime_type(content_type: str) -> bool:
    return bool(content_type) and _ALLOWED_TYPE_RE.search(content_type) is not None


def content_type_for_extension(extension: str) -> str:
    return MIME_TYPE_BY_EXTENSION.get(
        extension.lower().lstrip("."), "application/octet-stream"
    )


def extension_for_format(output_format: str) -> str:
    return EXTENSION_BY_FORMAT.get(output_format, ".webp")


def sniff_mime_type(file_data: bytes) -> str | None:
    """Best guess at the MIME type from leading bytes, or None."""
    for signature, mime in MAGIC_BYTES.items():
        if file_data.startswith(signature):
            return mime

    if file_data[:4] == b"RIFF" and file_data[8:12] == b"WEBP":
        return "image/webp"

    return None
