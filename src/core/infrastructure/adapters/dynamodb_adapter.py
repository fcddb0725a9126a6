"""Thin DynamoDB adapter wrapping boto3 table operations."""

import os
from typing import Any, Protocol, cast

import boto3

from core.utils.constants import (
    DEFAULT_AWS_REGION,
    ENV_AWS_ENDPOINT_URL,
    ENV_AWS_REGION,
    ENV_ENTITY_IMAGE_TABLE_NAME,
)


class DynamoDBTable(Protocol):
    """Minimal DynamoDB Table protocol."""

    def get_item(self, *, Key: dict[str, Any]) -> dict[str, Any]: ...
    def update_item(self, **kwargs: Any) -> dict[str, Any]: ...


class DynamoDBAdapterProtocol(Protocol):
    """Minimal DynamoDB adapter protocol (repository-facing)."""

    def get_item(self, *, key: dict[str, Any]) -> dict[str, Any]: ...

    def update_item(
        self,
        *,
        key: dict[str, Any],
        update_expression: str,
        expression_values: dict[str, Any] | None = None,
    ) -> dict[str, Any]: ...


class DynamoDBAdapter:
    """Low-level DynamoDB operations (mechanical, no error handling).

    This adapter:
    - Wraps boto3 DynamoDB resource
    - Does NOT handle errors (lets them bubble up)
    - Domain implementations catch and translate errors
    """

    def __init__(self, table_name: str | None = None) -> None:
        """Initialize DynamoDB table from environment."""
        table_name = table_name or os.getenv(ENV_ENTITY_IMAGE_TABLE_NAME)
        if not table_name:
            raise RuntimeError(
                f"{ENV_ENTITY_IMAGE_TABLE_NAME} environment variable is not set"
            )

        dynamodb = boto3.resource(
            "dynamodb",
            endpoint_url=os.getenv(ENV_AWS_ENDPOINT_URL),
            region_name=os.getenv(ENV_AWS_REGION) or DEFAULT_AWS_REGION,
        )

        self.table: DynamoDBTable = cast(
            DynamoDBTable,
            dynamodb.Table(table_name),
        )

    def get_item(self, *, key: dict[str, Any]) -> dict[str, Any]:
        """Retrieve item by key.

        Raises boto3 exceptions - caught by domain implementation.
        """
        return self.table.get_item(Key=key)

    def update_item(
        self,
        *,
        key: dict[str, Any],
        update_expression: str,
        expression_values: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Apply an update expression to one item, creating it if needed.

        Raises boto3 exceptions - caught by domain implementation.
        """
        kwargs: dict[str, Any] = {
            "Key": key,
            "UpdateExpression": update_expression,
        }

        if expression_values:
            kwargs["ExpressionAttributeValues"] = expression_values

        return self.table.update_item(**kwargs)
