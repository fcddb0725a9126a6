"""
Lambda handler responsible for deleting an entity's image.
"""

from http import HTTPStatus
from typing import Any

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from core.models.errors import EntityRecordError, NotFoundError
from core.utils.constants import MESSAGE_DELETE_FAILED
from core.utils.decorators import api_gateway_handler
from core.utils.response import ResponseBuilder
from core.utils.upload_event import route_params
from core.utils.validators import validate_request

from .models import DeleteImageRequest
from .service import DeleteImageService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics()


@api_gateway_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle image deletion requests.

    This function:
    - Extracts the entity kind and id from the route
    - Validates the request parameters
    - Delegates deletion to the service layer
    - Translates domain errors into HTTP responses

    Args:
        event: API Gateway Lambda proxy event
        context: AWS Lambda execution context

    Returns:
        API Gateway-compatible HTTP response
    """
    request_id = getattr(context, "aws_request_id", None)

    logger.info(
        "Received image delete request",
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
        DeleteImageRequest,
        {"kind": params.get("kind"), "entity_id": params.get("entity_id")},
        request_id=request_id,
    )
    if not ok:
        logger.error("Request validation failed", extra={"response": result})
        return result

    request: DeleteImageRequest = result

    try:
        response = DeleteImageService.from_environment().delete(request.kind, request.entity_id)

    except NotFoundError as exc:
        logger.warning(
            "Image not found during delete",
            extra={"kind": request.kind.value, "entity_id": request.entity_id},
        )
        return ResponseBuilder.not_found(exc.message, details=exc.details, request_id=request_id)

    except EntityRecordError as exc:
        logger.exception(
            "Deletion failed",
            extra={"kind": request.kind.value, "entity_id": request.entity_id},
        )
        return ResponseBuilder.from_service_error(
            exc,
            status=HTTPStatus.INTERNAL_SERVER_ERROR,
            error=MESSAGE_DELETE_FAILED,
            request_id=request_id,
        )

    return ResponseBuilder.ok(response.to_body(), request_id=request_id)
