"""Extract the uploaded file from an API Gateway event.

Two request shapes are accepted:

- ``multipart/form-data`` with the file in the ``image`` field (API Gateway
  delivers the body base64-encoded when binary media types are enabled);
- ``application/json`` with a base64 ``file``, its ``file_name`` and,
  optionally, its ``content_type``.
"""

import base64
import binascii
import json
import re
from typing import Any

from aws_lambda_powertools import Logger
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from requests_toolbelt.multipart.decoder import (
    ImproperBodyPartContentException,
    MultipartDecoder,
    NonMultipartContentTypeException,
)

from core.models.errors import ValidationError
from core.models.image import EntityKind, UploadCandidate
from core.utils.constants import UPLOAD_FIELD_NAME
from core.utils.mime import content_type_for_extension, file_extension, sniff_mime_type
from core.utils.validators import sanitize_validation_errors

logger = Logger(UTC=True)

_DISPOSITION_PARAM = re.compile(r'(?P<key>[\w*-]+)\s*=\s*(?:"(?P<quoted>[^"]*)"|(?P<token>[^;\s]+))')


class Base64UploadPayload(BaseModel):
    """JSON upload body."""

    model_config = ConfigDict(str_strip_whitespace=True)

    file: str = Field(..., description="Base64 encoded image file")
    file_name: str = Field(..., min_length=1, max_length=255, description="Original file name")
    content_type: str | None = Field(None, description="Declared MIME type")

    @field_validator("file")
    @classmethod
    def validate_file(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("Invalid base64 encoded file") from exc
        return value

    def to_candidate(self) -> UploadCandidate:
        data = base64.b64decode(self.file)
        content_type = (
            self.content_type
            or sniff_mime_type(data)
            or content_type_for_extension(file_extension(self.file_name))
        )
        return UploadCandidate(data=data, file_name=self.file_name, content_type=content_type)


def _header(event: dict[str, Any], name: str) -> str | None:
    headers = event.get("headers") or {}
    for key, value in headers.items():
        if key.lower() == name.lower():
            return value
    return None


def _raw_body(event: dict[str, Any]) -> bytes:
    body = event.get("body") or ""

    if event.get("isBase64Encoded"):
        try:
            return base64.b64decode(body)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError(message="Invalid request body encoding") from exc

    return body.encode("utf-8") if isinstance(body, str) else body


def _disposition_params(value: str) -> dict[str, str]:
    return {
        match.group("key").lower(): match.group("quoted")
        if match.group("quoted") is not None
        else match.group("token")
        for match in _DISPOSITION_PARAM.finditer(value)
    }


def _from_multipart(body: bytes, content_type: str, field_name: str) -> UploadCandidate | None:
    if "boundary=" not in content_type.lower():
        raise ValidationError(message="Invalid multipart request body")

    try:
        decoder = MultipartDecoder(body, content_type)
    except (NonMultipartContentTypeException, ImproperBodyPartContentException) as exc:
        raise ValidationError(message="Invalid multipart request body") from exc

    for part in decoder.parts:
        disposition = part.headers.get(b"Content-Disposition", b"").decode("utf-8", "replace")
        params = _disposition_params(disposition)

        if params.get("name") != field_name:
            continue

        file_name = params.get("filename") or ""
        if not part.content and not file_name:
            return None

        part_type = part.headers.get(b"Content-Type", b"application/octet-stream")
        return UploadCandidate(
            data=part.content,
            file_name=file_name,
            content_type=part_type.decode("utf-8", "replace").strip(),
        )

    return None


def _from_json(body: bytes) -> UploadCandidate | None:
    try:
        payload = json.loads(body or b"{}")
    except json.JSONDecodeError as exc:
        raise ValidationError(message="Invalid JSON body") from exc

    if not isinstance(payload, dict) or not payload.get("file"):
        return None

    try:
        return Base64UploadPayload(**payload).to_candidate()
    except PydanticValidationError as exc:
        raise ValidationError(
            message="Invalid request params",
            details={"errors": sanitize_validation_errors(exc.errors())},
        ) from exc


def parse_upload_event(
    event: dict[str, Any],
    field_name: str = UPLOAD_FIELD_NAME,
) -> UploadCandidate | None:
    """Return the uploaded file, or None when the request carries no file.

    Raises:
        ValidationError: If the body cannot be decoded
    """
    content_type = _header(event, "content-type") or ""
    body = _raw_body(event)

    if content_type.lower().startswith("multipart/form-data"):
        candidate = _from_multipart(body, content_type, field_name)
    else:
        candidate = _from_json(body)

    logger.debug(
        "Parsed upload request",
        extra={
            "content_type": content_type,
            "has_file": candidate is not None,
            "file_name": candidate.file_name if candidate else None,
            "size": candidate.size if candidate else 0,
        },
    )
    return candidate


def route_params(event: dict[str, Any]) -> dict[str, Any]:
    """Path and query parameters merged, with ``kind`` always present.

    Path parameters win over query parameters. Without an explicit ``kind``
    the request path decides: any path mentioning exhibits targets exhibits.
    """
    params: dict[str, Any] = {
        **(event.get("queryStringParameters") or {}),
        **(event.get("pathParameters") or {}),
    }
    if not params.get("kind"):
        params["kind"] = EntityKind.from_request_path(event.get("path")).value
    return params
