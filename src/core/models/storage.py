"""Stored blob references and cleanup results."""

from enum import Enum

from pydantic import BaseModel, Field, StrictStr

from core.utils.constants import THUMBNAIL_SUFFIX


class StoredBlobReference(BaseModel):
    """Durable identity of an uploaded image."""

    url: StrictStr = Field(..., description="Public URL (cloud) or file name (disk)")
    folder: StrictStr = Field(..., description="Logical folder, e.g. animals or exhibits")
    key: StrictStr = Field(..., description="Container-relative key or file name")

    @property
    def filename(self) -> str:
        return self.key.rsplit("/", 1)[-1]


class CleanupStatus(str, Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"
    FAILED = "failed"


class CleanupResult(BaseModel):
    """Outcome of a best-effort delete. Never raised, only reported."""

    status: CleanupStatus
    reference: StrictStr | None = None
    reason: StrictStr | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is not CleanupStatus.FAILED

    @classmethod
    def deleted(cls, reference: str) -> "CleanupResult":
        return cls(status=CleanupStatus.DELETED, reference=reference)

    @classmethod
    def not_found(cls, reference: str | None) -> "CleanupResult":
        return cls(status=CleanupStatus.NOT_FOUND, reference=reference)

    @classmethod
    def failed(cls, reference: str | None, reason: str) -> "CleanupResult":
        return cls(status=CleanupStatus.FAILED, reference=reference, reason=reason)


def thumbnail_reference_for(reference: str) -> str:
    """Reference of the thumbnail stored beside a main image.

    ``.../animals/animals-1-2.webp`` -> ``.../animals/animals-1-2-thumb.webp``
    """
    head, _, name = reference.rpartition("/")
    stem = name.rsplit(".", 1)[0] if "." in name else name
    thumbnail = f"{stem}{THUMBNAIL_SUFFIX}.webp"
    return f"{head}/{thumbnail}" if head else thumbnail
