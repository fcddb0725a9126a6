import base64
import json
from collections.abc import Callable
from types import SimpleNamespace
from typing import Any

import pytest
from requests_toolbelt.multipart.encoder import MultipartEncoder


@pytest.fixture
def lambda_context(monkeypatch):
    context = SimpleNamespace(
        aws_request_id="test-request-id",
        function_name="test-function",
        memory_limit_in_mb=256,
        invoked_function_arn="arn:aws:lambda:us-east-1:000000000000:function:test",
        log_group_name="/aws/lambda/test-function",
        log_stream_name="2024/01/01/[$LATEST]test",
    )

    monkeypatch.setattr(
        "aws_lambda_powertools.utilities.typing.LambdaContext",
        lambda: context,
        raising=False,
    )

    return context


def multipart_event(
    data: bytes,
    file_name: str,
    content_type: str,
    *,
    path: str = "/animals/image",
    path_parameters: dict[str, str] | None = None,
    field_name: str = "image",
    http_method: str = "POST",
) -> dict[str, Any]:
    """API Gateway proxy event carrying one file as multipart/form-data."""
    encoder = MultipartEncoder(fields={field_name: (file_name, data, content_type)})

    return {
        "httpMethod": http_method,
        "path": path,
        "pathParameters": path_parameters,
        "queryStringParameters": None,
        "headers": {"Content-Type": encoder.content_type},
        "body": base64.b64encode(encoder.to_string()).decode("ascii"),
        "isBase64Encoded": True,
    }


def json_event(
    data: bytes,
    file_name: str,
    content_type: str | None = None,
    *,
    path: str = "/animals/image",
    path_parameters: dict[str, str] | None = None,
    http_method: str = "POST",
) -> dict[str, Any]:
    """API Gateway proxy event carrying one file as base64 JSON."""
    payload: dict[str, Any] = {
        "file": base64.b64encode(data).decode("ascii"),
        "file_name": file_name,
    }
    if content_type:
        payload["content_type"] = content_type

    return {
        "httpMethod": http_method,
        "path": path,
        "pathParameters": path_parameters,
        "queryStringParameters": None,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload),
        "isBase64Encoded": False,
    }


@pytest.fixture
def make_multipart_event() -> Callable[..., dict[str, Any]]:
    return multipart_event


@pytest.fixture
def make_json_event() -> Callable[..., dict[str, Any]]:
    return json_event


@pytest.fixture
def delete_image_event() -> dict[str, Any]:
    return {
        "httpMethod": "DELETE",
        "path": "/animals/42/image",
        "pathParameters": {"kind": "animal", "entity_id": "42"},
        "queryStringParameters": None,
        "headers": {},
    }
