"""Abstract contract for the image reference held by an entity record."""

from abc import ABC, abstractmethod

from core.models.image import EntityKind


class EntityImageRepository(ABC):
    """Contract for reading and writing an entity's image URL.

    The entity tables themselves belong to the zoo backend; this is the
    narrow slice the image flows need. Implementations could be DynamoDB,
    MySQL, etc.
    """

    @abstractmethod
    def fetch_image_url(self, *, kind: EntityKind, entity_id: str) -> str | None:
        """Return the stored image reference, or None when the entity has none.

        Raises:
            EntityRecordError: If the lookup fails
        """

    @abstractmethod
    def save_image_url(self, *, kind: EntityKind, entity_id: str, image_url: str) -> None:
        """Point the entity at a new image reference.

        Raises:
            EntityRecordError: If the write fails
        """

    @abstractmethod
    def clear_image_url(self, *, kind: EntityKind, entity_id: str) -> None:
        """Remove the entity's image reference.

        Raises:
            EntityRecordError: If the write fails
        """
