"""
Lambda handler responsible for replacing an entity's image.
"""

from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.models.errors import (
    EntityRecordError,
    ImageOptimizationError,
    StorageError,
    StorageNotConfiguredError,
    ValidationError,
)
from core.utils.constants import MESSAGE_REPLACE_FAILED, MESSAGE_UPLOAD_FAILED
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.upload_event import parse_upload_event, route_params
from core.utils.validators import validate_request

from .models import ReplaceImageRequest, ReplaceImageResponse
from .service import ReplaceImageService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle image replace requests.

    This function:
    - Resolves the entity kind and id from the route
    - Extracts the new image from the request body
    - Runs the replace saga (upload new, update record, clean up old)
    - Translates domain errors into HTTP responses

    Cleanup of the previous image never fails the request; its result is
    reported in the ``cleanup`` field of the response.

    Args:
        event: API Gateway Lambda proxy event
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response
    """
    request_id = getattr(context, "aws_request_id", None)

    logger.info(
        "Received image replace request",
        extra={
            "http_method": event.get("httpMethod"),
            "path": event.get("path"),
            "path_params": event.get("pathParameters"),
            "request_id": request_id,
            "function_name": getattr(context, "function_name", None),
        },
    )

    params = route_params(event)
    ok, result = validate_request(
        ReplaceImageRequest,
        {"kind": params.get("kind"), "entity_id": params.get("entity_id")},
        request_id=request_id,
    )
    if not ok:
        logger.error("Request validation failed", extra={"response": result})
        return result

    request: ReplaceImageRequest = result
    log_extra = {"kind": request.kind.value, "entity_id": request.entity_id}

    try:
        candidate = parse_upload_event(event)
        outcome = ReplaceImageService.from_environment().replace(
            request.kind,
            request.entity_id,
            candidate,
        )

    except ValidationError as exc:
        logger.warning("Replacement image rejected", extra={**log_extra, "reason": exc.message})
        return ResponseBuilder.bad_request(
            exc.message,
            details=exc.details,
            error_code=exc.error_code,
            request_id=request_id,
        )

    except StorageNotConfiguredError as exc:
        logger.exception("Image storage not configured", extra=log_extra)
        return ResponseBuilder.not_configured(exc, request_id=request_id)

    except (ImageOptimizationError, StorageError) as exc:
        logger.exception("Error storing replacement image", extra=log_extra)
        return ResponseBuilder.from_service_error(
            exc,
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            error=MESSAGE_UPLOAD_FAILED,
            request_id=request_id,
        )

    except EntityRecordError as exc:
        logger.exception("Error updating entity image record", extra=log_extra)
        return ResponseBuilder.from_service_error(
            exc,
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            error=MESSAGE_REPLACE_FAILED,
            request_id=request_id,
        )

    response = ReplaceImageResponse.from_outcome(outcome)
    return ResponseBuilder.ok(response.to_body(), request_id=request_id)
