from __future__ import annotations

import logging

from rest_framework import exceptions as drf_exceptions
from rest_framework import status

from .api_response import api_error

logger = logging.getLogger(__name__)

class MarketplaceError(Exception):

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Request could not be processed."

    def __init__(self, message: str | None = None, data=None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.data = data

class InvalidRequest(MarketplaceError):
    default_message = "Invalid request."

class NotAuthorized(MarketplaceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized."

class NotFound(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found."

class IllegalTransition(MarketplaceError):
    default_message = "Invalid status transition."

    def __init__(self, current: str, requested: str, message: str | None = None) -> None:
        super().__init__(message, data={"current": current, "requested": requested})
        self.current = current
        self.requested = requested

class ConcurrentModification(MarketplaceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "The record was modified by another request. Reload and try again."

class PersistenceUnavailable(MarketplaceError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Storage is temporarily unavailable."

class PaymentGatewayError(MarketplaceError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Payment processor error."

def _first_message(detail) -> str:
    if isinstance(detail, dict):
        for key, value in detail.items():
            text = _first_message(value)
            return text if key == "non_field_errors" else f"{key}: {text}"
        return "Invalid request."
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else "Invalid request."
    return str(detail)

def marketplace_exception_handler(exc, context):
    if isinstance(exc, MarketplaceError):
        if exc.status_code >= 500:
            logger.warning("%s: %s", type(exc).__name__, exc.message)
        return api_error(exc.message, data=exc.data, status_code=exc.status_code)

    # rest_framework.views loads the authentication classes, which import this module.
    from rest_framework.views import exception_handler

    response = exception_handler(exc, context)
    if response is None:
        logger.exception("Unhandled error in %s", context.get("view").__class__.__name__)
        return api_error(
            "Server error.",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, drf_exceptions.ValidationError):
        wrapped = api_error(
            _first_message(exc.detail),
            data=exc.detail,
            status_code=response.status_code,
        )
    else:
        detail = response.data.get("detail", response.data) if isinstance(response.data, dict) else response.data
        wrapped = api_error(_first_message(detail), status_code=response.status_code)

    for header, value in response.items():
        wrapped[header] = value
    return wrapped
