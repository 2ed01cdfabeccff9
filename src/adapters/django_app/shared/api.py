"""
Shared helpers of the JSON API views.

Format:
- Input: JSON body
- Output: {success, data/error, meta}

Error mapping:
- ValidationError        -> 400
- NotFoundError          -> 404
- ConflictError          -> 409 (CircularReferenceError included)
- InvalidTransitionError -> 422, meta carries the allowed statuses
- anything else          -> 500, logged with the traceback
"""

import json
import logging
from typing import Any, Dict, Optional

from django.http import HttpRequest, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from src.core.shared.exceptions import (
    ConflictError,
    DomainException,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from src.config.container import get_container

logger = logging.getLogger(__name__)


def json_response(success: bool, data: Any = None, error: str = None,
                  status: int = 200, meta: Dict = None) -> JsonResponse:
    """
    Build a standard JSON response.

    Args:
        success: Whether the operation succeeded
        data: Response payload
        error: Error message, if any
        status: HTTP status code
        meta: Extra metadata (pagination, error details)
    """
    response = {'success': success}

    if data is not None:
        response['data'] = data

    if error is not None:
        response['error'] = error

    if meta is not None:
        response['meta'] = meta

    return JsonResponse(response, status=status)


def parse_json_body(request: HttpRequest) -> Dict:
    """
    Raises:
        ValueError: If the body is not a JSON object
    """
    if not request.body:
        return {}

    try:
        data = json.loads(request.body)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e}")

    if not isinstance(data, dict):
        raise ValueError("JSON body must be an object")
    return data


def get_actor_id(request: HttpRequest) -> Optional[str]:
    """Id of the authenticated user, None for anonymous requests."""
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return str(user.pk)
    return None


STATUS_BY_EXCEPTION = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (InvalidTransitionError, 422),
    (ConflictError, 409),
    (DomainException, 400),
)


@method_decorator(csrf_exempt, name='dispatch')
class BaseAPIView(View):
    """
    Base of the JSON API views.

    Provides:
    - JSON parsing
    - Access to the DI container
    - Uniform error handling
    """

    def get_container(self):
        return get_container()

    def get_service(self, service_name: str):
        """Build a use case from the container, e.g. get_service('create_ticket_service')."""
        return getattr(self.get_container(), service_name)()

    def parse_body(self, request: HttpRequest) -> Dict:
        return parse_json_body(request)

    def handle_exception(self, e: Exception) -> JsonResponse:
        """Translate an exception into an error response."""
        if isinstance(e, DomainException):
            for exception_type, status in STATUS_BY_EXCEPTION:
                if isinstance(e, exception_type):
                    logger.info(f"API: {e}")
                    return json_response(
                        success=False,
                        error=e.message,
                        status=status,
                        meta=e.to_dict(),
                    )

        if isinstance(e, ValueError):
            return json_response(success=False, error=str(e), status=400)

        logger.exception(f"Unexpected API error: {e}")
        return json_response(
            success=False,
            error="Internal server error",
            status=500,
        )
