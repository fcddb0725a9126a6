"""
Lambda handler responsible for image upload.
"""

from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.models.errors import (
    ImageOptimizationError,
    StorageError,
    StorageNotConfiguredError,
    ValidationError,
)
from core.utils.constants import MESSAGE_UPLOAD_FAILED
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.upload_event import parse_upload_event, route_params
from core.utils.validators import validate_request

from .models import ImageUploadRequest, ImageUploadResponse
from .service import UploadPipeline

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle image upload requests.

    The handler extracts the file from a multipart/form-data body (field
    ``image``) or a JSON body with a base64 ``file``, runs it through the
    upload pipeline for the requested entity kind, and returns the stored
    image URL. Persisting the URL on the entity is left to the caller.

    Expected API Gateway event structure:
    {
        "path": "/animals/image",
        "pathParameters": {"kind": "animal"},      # optional
        "headers": {"Content-Type": "multipart/form-data; boundary=..."},
        "body": "...",
        "isBase64Encoded": true
    }

    Args:
        event: API Gateway Lambda proxy event containing the upload
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response
    """
    request_id = getattr(context, "aws_request_id", None)

    logger.info(
        "Received image upload request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "query_params": event.get("queryStringParameters"),
            "request_id": request_id,
            "function_name": getattr(context, "function_name", None),
            "remaining_time_ms": context.get_remaining_time_in_millis()
            if hasattr(context, "get_remaining_time_in_millis")
            else None,
        },
    )

    ok, result = validate_request(
        ImageUploadRequest,
        {"kind": route_params(event).get("kind")},
        request_id=request_id,
    )
    if not ok:
        logger.error("Request validation failed", extra={"response": result})
        return result

    request: ImageUploadRequest = result

    try:
        candidate = parse_upload_event(event)
        upload = UploadPipeline.from_environment().process(candidate, request.kind)

    except ValidationError as exc:
        logger.warning(
            "Upload rejected",
            extra={"kind": request.kind.value, "reason": exc.message, "code": exc.error_code},
        )
        return ResponseBuilder.bad_request(
            exc.message,
            details=exc.details,
            error_code=exc.error_code,
            request_id=request_id,
        )

    except StorageNotConfiguredError as exc:
        logger.exception(
            "Image storage not configured",
            extra={"technical_details": exc.technical_details},
        )
        return ResponseBuilder.not_configured(exc, request_id=request_id)

    except (ImageOptimizationError, StorageError) as exc:
        logger.exception(
            "Error processing image upload",
            extra={"kind": request.kind.value},
        )
        return ResponseBuilder.from_service_error(
            exc,
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            error=MESSAGE_UPLOAD_FAILED,
            request_id=request_id,
        )

    response = ImageUploadResponse.from_result(upload)
    return ResponseBuilder.created(response.to_body(), request_id=request_id)
