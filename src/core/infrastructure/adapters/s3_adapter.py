"""Thin adapter for interacting with Amazon S3 (or an S3-compatible endpoint)."""

from collections.abc import Mapping
import os
from typing import Any, Protocol
from urllib.parse import quote

import boto3
from botocore.exceptions import ClientError

from core.utils.constants import (
    DEFAULT_AWS_REGION,
    ENV_AWS_ENDPOINT_URL,
    ENV_AWS_REGION,
    ENV_IMAGE_PUBLIC_BASE_URL,
    ENV_IMAGE_S3_BUCKET_NAME,
)


class _Boto3S3Client(Protocol):
    """Internal typing for boto3 S3 client (AWS-facing only)."""

    def put_object(self, **kwargs: Any) -> Any: ...

    def head_object(self, *, Bucket: str, Key: str) -> Mapping[str, Any]: ...

    def delete_object(self, *, Bucket: str, Key: str) -> Any: ...

    def head_bucket(self, *, Bucket: str) -> Any: ...

    def create_bucket(self, **kwargs: Any) -> Any: ...


class S3AdapterProtocol(Protocol):
    """Minimal S3 adapter protocol (storage-facing)."""

    @property
    def bucket(self) -> str: ...

    def ensure_bucket(self) -> None: ...

    def put_object(
        self,
        *,
        key: str,
        body: bytes,
        content_type: str,
        cache_control: str,
        metadata: dict[str, str],
    ) -> None: ...

    def head_object(self, *, key: str) -> Mapping[str, Any]: ...

    def delete_object(self, *, key: str) -> None: ...

    def object_url(self, key: str) -> str: ...

    def object_url_prefix(self) -> str: ...


class S3Adapter:
    """Low-level S3 operations (mechanical, no error handling).

    This adapter:
    - Wraps boto3 S3 client
    - Does NOT handle errors (lets them bubble up)
    - Domain implementations catch and translate errors
    """

    def __init__(self, bucket_name: str | None = None) -> None:
        """Create S3 client from environment configuration."""
        bucket_name = bucket_name or os.getenv(ENV_IMAGE_S3_BUCKET_NAME)
        if not bucket_name:
            raise RuntimeError(f"{ENV_IMAGE_S3_BUCKET_NAME} environment variable is not set")

        self._bucket = bucket_name
        self._region = os.getenv(ENV_AWS_REGION) or DEFAULT_AWS_REGION
        self._endpoint_url = os.getenv(ENV_AWS_ENDPOINT_URL)
        self._public_base_url = os.getenv(ENV_IMAGE_PUBLIC_BASE_URL)
        self._bucket_ready = False
        self._client: _Boto3S3Client = boto3.client(
            "s3",
            endpoint_url=self._endpoint_url,
            region_name=self._region,
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    def ensure_bucket(self) -> None:
        """Create the bucket unless it already exists. Safe to call concurrently."""
        if self._bucket_ready:
            return

        try:
            self._client.head_bucket(Bucket=self._bucket)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code not in ("404", "NoSuchBucket", "NotFound"):
                raise
            self._create_bucket()

        self._bucket_ready = True

    def _create_bucket(self) -> None:
        kwargs: dict[str, Any] = {"Bucket": self._bucket}
        if self._region != DEFAULT_AWS_REGION:
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": self._region}

        try:
            self._client.create_bucket(**kwargs)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") != "BucketAlreadyOwnedByYou":
                raise

    def put_object(
        self,
        *,
        key: str,
        body: bytes,
        content_type: str,
        cache_control: str,
        metadata: dict[str, str],
    ) -> None:
        """Store object in S3.
        Raises boto3 exceptions - caught by domain implementation.
        """
        self._client.put_object(
            Bucket=self._bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
            CacheControl=cache_control,
            Metadata=metadata,
        )

    def head_object(self, *, key: str) -> Mapping[str, Any]:
        """Fetch object headers from S3.
        Raises boto3 exceptions - caught by domain implementation.
        """
        return self._client.head_object(
            Bucket=self._bucket,
            Key=key,
        )

    def delete_object(self, *, key: str) -> None:
        """Delete object from S3.
        Raises boto3 exceptions - caught by domain implementation.
        """
        self._client.delete_object(
            Bucket=self._bucket,
            Key=key,
        )

    def object_url_prefix(self) -> str:
        """``{base}/{bucket}/``; the base may carry a path of its own."""
        base = (
            self._public_base_url
            or self._endpoint_url
            or f"https://s3.{self._region}.amazonaws.com"
        )
        return f"{base.rstrip('/')}/{self._bucket}/"

    def object_url(self, key: str) -> str:
        """Public, path-style URL of an object: ``{base}/{bucket}/{key}``."""
        return f"{self.object_url_prefix()}{quote(key)}"
