import logging

from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

from .exceptions import MentorshipAPIError


logger = logging.getLogger(__name__)

SERVER_ERROR = {
    "code": "server_error",
    "message": "An error occurred on the server.",
}


def _error_code(exc, fallback):
    if isinstance(exc, APIException):
        codes = exc.get_codes()
        if isinstance(codes, str):
            return codes
    return fallback


def envelope_exception_handler(exc, context):
    """Render every error, unexpected ones included, as `{"success": false, "error": {...}}`."""
    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.exception("Unhandled error in %s", view.__class__.__name__ if view else "request", exc_info=exc)
        set_rollback()
        return Response(
            {"success": False, "error": dict(SERVER_ERROR)},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    payload = {"success": False}
    if isinstance(exc, ValidationError):
        payload["error"] = {
            "code": "invalid",
            "message": "Invalid request.",
        }
        payload["fields"] = response.data
    else:
        data = response.data if isinstance(response.data, dict) else {}
        message = data.get("detail", "Request failed.")
        payload["error"] = {
            "code": _error_code(exc, getattr(message, "code", None) or "error"),
            "message": str(message),
        }
    if isinstance(exc, MentorshipAPIError):
        payload.update(exc.extra)

    response.data = payload
    return response
