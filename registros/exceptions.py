"""
Error kinds raised by the registry service and the handler that renders them.

Every error reaches the client as ``{"error": "<message>"}``; validation
errors also carry ``"errors": {"<field>": [...]}``.
"""

import logging
import math

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.settings import api_settings
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = (
    "Has enviado demasiadas propuestas. Por favor, espera 15 minutos antes de registrar más."
)


class RateLimitExceeded(APIException):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_detail = RATE_LIMIT_MESSAGE
    default_code = "rate_limited"

    def __init__(self, wait=None, detail=None, code=None):
        super().__init__(detail, code)
        # Picked up by DRF's handler to emit a Retry-After header.
        self.wait = math.ceil(wait) if wait else None


class StoreUnavailable(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "No se pudo completar la operación."
    default_code = "store_unavailable"


def _first_message(errors):
    if isinstance(errors, dict):
        for value in errors.values():
            return _first_message(value)
    if isinstance(errors, (list, tuple)):
        for value in errors:
            return _first_message(value)
    return str(errors)


def registry_exception_handler(exc, context):
    """Render errors using the registry's ``{"error": ...}`` body."""
    if isinstance(exc, DatabaseError):
        logger.error("Unhandled store failure: %s", exc, exc_info=exc)
        exc = StoreUnavailable()

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, ValidationError):
        errors = response.data
        if not isinstance(errors, dict):
            errors = {api_settings.NON_FIELD_ERRORS_KEY: errors}
        response.data = {"error": _first_message(errors), "errors": errors}
    elif isinstance(response.data, dict) and "detail" in response.data:
        response.data = {"error": response.data["detail"]}
    return response
