from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from core.infrastructure.aws.dynamodb_entity_images import DynamoDBEntityImages
from core.models.errors import EntityRecordError
from core.models.image import EntityKind


def _client_error(operation: str) -> ClientError:
    return ClientError({"Error": {"Code": "InternalServerError"}}, operation)


class TestDynamoDBEntityImages:
    def test_fetch_existing_url(self, entity_image_put) -> None:
        entity_image_put("animal", "42", "https://host/bucket/animals/animals-1-2.webp")

        url = DynamoDBEntityImages().fetch_image_url(kind=EntityKind.ANIMAL, entity_id="42")

        assert url == "https://host/bucket/animals/animals-1-2.webp"

    def test_fetch_unknown_entity_returns_none(self, entity_images_table) -> None:
        assert (
            DynamoDBEntityImages().fetch_image_url(kind=EntityKind.EXHIBIT, entity_id="7")
            is None
        )

    def test_kinds_do_not_share_records(self, entity_image_put) -> None:
        entity_image_put("animal", "1", "animal-1-2.png")

        assert DynamoDBEntityImages().fetch_image_url(kind=EntityKind.EXHIBIT, entity_id="1") is None

    def test_fetch_invalid_type_raises(self, entity_images_table) -> None:
        entity_images_table.put_item(
            Item={"entity_type": "animal", "entity_id": "9", "image_url": 123}
        )

        with pytest.raises(EntityRecordError) as exc:
            DynamoDBEntityImages().fetch_image_url(kind=EntityKind.ANIMAL, entity_id="9")

        assert exc.value.error_code == "ENTITY_RECORD_FETCH_FAILED"

    def test_save_sets_url_and_timestamp(self, entity_images_table, entity_image_get) -> None:
        DynamoDBEntityImages().save_image_url(
            kind=EntityKind.EXHIBIT, entity_id="3", image_url="exhibits/exhibits-1-2.webp"
        )

        item = entity_image_get("exhibit", "3")
        assert item["image_url"] == "exhibits/exhibits-1-2.webp"
        assert item["updated_at"]

    def test_save_overwrites_previous_url(self, entity_image_put, entity_image_get) -> None:
        entity_image_put("animal", "42", "old.webp")

        DynamoDBEntityImages().save_image_url(
            kind=EntityKind.ANIMAL, entity_id="42", image_url="new.webp"
        )

        assert entity_image_get("animal", "42")["image_url"] == "new.webp"

    def test_clear_removes_url(self, entity_image_put, entity_image_get) -> None:
        entity_image_put("animal", "42", "old.webp")
        records = DynamoDBEntityImages()

        records.clear_image_url(kind=EntityKind.ANIMAL, entity_id="42")

        assert "image_url" not in entity_image_get("animal", "42")
        assert records.fetch_image_url(kind=EntityKind.ANIMAL, entity_id="42") is None

    @pytest.mark.parametrize(
        "operation, error_code",
        [
            ("fetch", "ENTITY_RECORD_FETCH_FAILED"),
            ("save", "ENTITY_RECORD_SAVE_FAILED"),
            ("clear", "ENTITY_RECORD_CLEAR_FAILED"),
        ],
    )
    def test_client_errors_are_translated(self, operation, error_code) -> None:
        adapter = MagicMock()
        adapter.get_item.side_effect = _client_error("GetItem")
        adapter.update_item.side_effect = _client_error("UpdateItem")
        records = DynamoDBEntityImages(adapter)

        with pytest.raises(EntityRecordError) as exc:
            if operation == "fetch":
                records.fetch_image_url(kind=EntityKind.ANIMAL, entity_id="1")
            elif operation == "save":
                records.save_image_url(kind=EntityKind.ANIMAL, entity_id="1", image_url="x.webp")
            else:
                records.clear_image_url(kind=EntityKind.ANIMAL, entity_id="1")

        assert exc.value.error_code == error_code
        assert exc.value.details == {"entity_id": "1"}
        assert isinstance(exc.value.__cause__, ClientError)
