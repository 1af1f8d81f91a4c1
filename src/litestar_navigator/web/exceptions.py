"""Exception handling for navigation web endpoints.

Maps navigator exceptions to JSON error responses of the form
``{"error": ..., "code": ..., "message": ...}``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from litestar import Response
from litestar.status_codes import HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND

from litestar_navigator.exceptions import InvalidActionError, StateCodecError, WorkflowNotFoundError

if TYPE_CHECKING:  # pragma: no cover
    from litestar import Request

    from litestar_navigator.exceptions import NavigatorError

__all__ = [
    "exception_handlers",
    "invalid_action_handler",
    "state_codec_error_handler",
    "workflow_not_found_handler",
]

logger = logging.getLogger(__name__)


def _error_response(error: str, exc: NavigatorError, status_code: int, **extra: Any) -> Response:
    logger.info("Request failed", extra={"error": error, "code": str(exc.code), "detail": str(exc)})
    return Response(
        content={"error": error, "code": str(exc.code), "message": str(exc), **extra},
        status_code=status_code,
        media_type="application/json",
    )


def state_codec_error_handler(_request: Request, exc: StateCodecError) -> Response:
    """Exception handler for StateCodecError.

    Returns a 400 Bad Request response. Schema validation failures carry the
    field-level messages under ``errors``.
    """
    extra = {"errors": exc.errors} if exc.errors else {}
    return _error_response("invalid_state_token", exc, HTTP_400_BAD_REQUEST, **extra)


def invalid_action_handler(_request: Request, exc: InvalidActionError) -> Response:
    """Exception handler for InvalidActionError, returning 400 Bad Request."""
    return _error_response("invalid_action", exc, HTTP_400_BAD_REQUEST)


def workflow_not_found_handler(_request: Request, exc: WorkflowNotFoundError) -> Response:
    """Exception handler for WorkflowNotFoundError, returning 404 Not Found."""
    return _error_response("workflow_not_found", exc, HTTP_404_NOT_FOUND)


exception_handlers = {
    StateCodecError: state_codec_error_handler,
    InvalidActionError: invalid_action_handler,
    WorkflowNotFoundError: workflow_not_found_handler,
}
