"""Global exception handlers — map SDK exceptions to HTTP status codes.

The SDK raises ``KeyError`` subclasses for unknown templates and
``ValueError`` for invalid input.  Rather than catching these in every
route, we install global handlers.  This keeps route handlers focused on
the happy path.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from triage_rulesets.ruleset import UnknownTemplateError

logger = logging.getLogger(__name__)

# Client-facing message for unknown template ids
UNKNOWN_TEMPLATE_DETAIL = "Unknown triage template."


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Map SDK ``ValueError`` to 400.

    The raw exception message is logged server-side but never sent to the
    client; it may echo user-entered text.
    """
    logger.warning("ValueError at %s: %s", request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": "Invalid request"})


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    """Map ``KeyError`` (unknown template, question or action level) to 404."""
    logger.warning("KeyError at %s: %s", request.url.path, exc)
    if isinstance(exc, UnknownTemplateError):
        return JSONResponse(status_code=404, content={"detail": UNKNOWN_TEMPLATE_DETAIL})
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log full traceback, return 500."""
    logger.exception("Unhandled exception at %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
