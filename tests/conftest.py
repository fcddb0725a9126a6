"""
Pytest configuration and fixtures for zoo image service tests.
Provides AWS mocking, S3 and DynamoDB fixtures with proper cleanup, and
in-memory images generated with Pillow.
"""

import io
import os
from collections.abc import Callable
from typing import Any

# Defaults must exist before any boto3 client or powertools object is built.
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_SECURITY_TOKEN", "testing")
os.environ.setdefault("AWS_SESSION_TOKEN", "testing")
os.environ.setdefault("IMAGE_S3_BUCKET_NAME", "zoo-images-test")
os.environ.setdefault("ENTITY_IMAGE_TABLE_NAME", "zoo-entity-images-test")
os.environ.setdefault("POWERTOOLS_SERVICE_NAME", "zoo-image-service")
os.environ.setdefault("POWERTOOLS_METRICS_NAMESPACE", "ZooImages")
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "true")
os.environ.pop("AWS_ENDPOINT_URL", None)
os.environ.pop("IMAGE_PUBLIC_BASE_URL", None)

import boto3  # noqa: E402
import pytest  # noqa: E402
from botocore.exceptions import ClientError  # noqa: E402
from moto import mock_aws  # noqa: E402
from PIL import Image, ImageDraw  # noqa: E402


@pytest.fixture(autouse=True)
def storage_env(monkeypatch):
    """Every test starts from the S3 backend with the optimize policy."""
    monkeypatch.delenv("IMAGE_STORAGE_BACKEND", raising=False)
    monkeypatch.delenv("IMAGE_TRANSFORM_POLICY", raising=False)
    monkeypatch.delenv("IMAGE_UPLOAD_DIR", raising=False)


@pytest.fixture(scope="function")
def aws_mock():
    with mock_aws():
        yield


@pytest.fixture(scope="function")
def s3_client(aws_mock):
    """S3 client for bucket operations."""
    return boto3.client("s3", region_name=os.getenv("AWS_REGION"))


def _cleanup_s3_objects(s3_client, bucket_name):
    """Helper to delete all objects from S3 bucket efficiently."""
    try:
        paginator = s3_client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=bucket_name):
            objects = page.get("Contents", [])
            if objects:
                delete_keys = [{"Key": obj["Key"]} for obj in objects]
                s3_client.delete_objects(
                    Bucket=bucket_name, Delete={"Objects": delete_keys}
                )
    except ClientError as e:
        if e.response["Error"]["Code"] != "NoSuchBucket":
            raise


@pytest.fixture(scope="function")
def s3_bucket(s3_client):
    """
    Create and manage S3 bucket for testing.

    Cleanup Strategy:
    - Objects are deleted after each test (teardown)
    - Bucket is NOT deleted (moto cleans up on context exit)
    """
    bucket_name = os.getenv("IMAGE_S3_BUCKET_NAME")

    try:
        s3_client.head_bucket(Bucket=bucket_name)
    except ClientError:
        s3_client.create_bucket(Bucket=bucket_name)

    yield s3_client

    _cleanup_s3_objects(s3_client, bucket_name)


@pytest.fixture
def s3_put_object(s3_client) -> Callable[..., dict[str, Any]]:
    """
    Helper to upload an object to S3.

    Usage:
        s3_put_object("animals/animals-1-2.webp", image_bytes, "image/webp")
    """

    def _put(key: str, body: bytes, content_type: str = "application/octet-stream"):
        bucket_name = os.getenv("IMAGE_S3_BUCKET_NAME")
        return s3_client.put_object(
            Bucket=bucket_name, Key=key, Body=body, ContentType=content_type
        )

    return _put


@pytest.fixture
def s3_get_object(s3_client) -> Callable[[str], dict[str, Any]]:
    """
    Helper to fetch an object (body read into ``Body``) from S3.

    Usage:
        obj = s3_get_object("animals/animals-1-2.webp")
    """

    def _get(key: str) -> dict[str, Any]:
        bucket_name = os.getenv("IMAGE_S3_BUCKET_NAME")
        response: dict[str, Any] = s3_client.get_object(Bucket=bucket_name, Key=key)
        response["Body"] = response["Body"].read()
        return response

    return _get


@pytest.fixture
def s3_object_exists(s3_client) -> Callable[[str], bool]:
    def _exists(key: str) -> bool:
        bucket_name = os.getenv("IMAGE_S3_BUCKET_NAME")
        try:
            s3_client.head_object(Bucket=bucket_name, Key=key)
        except ClientError:
            return False
        return True

    return _exists


@pytest.fixture
def s3_keys(s3_client) -> Callable[[], list[str]]:
    def _keys() -> list[str]:
        bucket_name = os.getenv("IMAGE_S3_BUCKET_NAME")
        response = s3_client.list_objects_v2(Bucket=bucket_name)
        return sorted(obj["Key"] for obj in response.get("Contents", []))

    return _keys


@pytest.fixture(scope="function")
def dynamodb_resource(aws_mock):
    return boto3.resource("dynamodb", region_name=os.getenv("AWS_REGION"))


@pytest.fixture(scope="function")
def entity_images_table(dynamodb_resource):
    """DynamoDB table holding entity image references (moto-backed)."""
    table = dynamodb_resource.create_table(
        TableName=os.getenv("ENTITY_IMAGE_TABLE_NAME"),
        BillingMode="PAY_PER_REQUEST",
        KeySchema=[
            {"AttributeName": "entity_type", "KeyType": "HASH"},
            {"AttributeName": "entity_id", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "entity_type", "AttributeType": "S"},
            {"AttributeName": "entity_id", "AttributeType": "S"},
        ],
    )
    table.wait_until_exists()
    return table


@pytest.fixture
def entity_image_put(entity_images_table) -> Callable[[str, str, str], dict[str, Any]]:
    """
    Helper to point an entity at an image.

    Usage:
        entity_image_put("animal", "42", "https://.../animals/animals-1-2.webp")
    """

    def _put(entity_type: str, entity_id: str, image_url: str) -> dict[str, Any]:
        item = {"entity_type": entity_type, "entity_id": entity_id, "image_url": image_url}
        entity_images_table.put_item(Item=item)
        return item

    return _put


@pytest.fixture
def entity_image_get(entity_images_table) -> Callable[[str, str], dict[str, Any] | None]:
    def _get(entity_type: str, entity_id: str) -> dict[str, Any] | None:
        response = entity_images_table.get_item(
            Key={"entity_type": entity_type, "entity_id": entity_id}
        )
        return response.get("Item")

    return _get


def build_image(
    width: int,
    height: int,
    fmt: str = "JPEG",
    mode: str = "RGB",
    **save_options: Any,
) -> bytes:
    """Encode a simple synthetic picture (background plus a few shapes)."""
    color: Any = (34, 139, 34) if mode in ("RGB", "RGBA") else 96
    if mode == "RGBA":
        color = (34, 139, 34, 128)

    image = Image.new(mode, (width, height), color)
    draw = ImageDraw.Draw(image)
    accent: Any = (210, 180, 140) if mode in ("RGB", "RGBA") else 200
    draw.rectangle((width // 4, height // 4, width // 2, height // 2), fill=accent)
    draw.ellipse((width // 2, height // 3, width - 1, height - 1), fill=accent)

    buffer = io.BytesIO()
    image.save(buffer, format=fmt, **save_options)
    return buffer.getvalue()


@pytest.fixture
def image_factory() -> Callable[..., bytes]:
    """
    Build encoded images on demand.

    Usage:
        data = image_factory(1920, 1080, "JPEG")
    """
    return build_image


@pytest.fixture
def jpeg_bytes() -> bytes:
    return build_image(640, 480, "JPEG", quality=95)


@pytest.fixture
def png_bytes() -> bytes:
    return build_image(200, 200, "PNG")
