"""
Error Types and Global Error Handling

This module defines the error kinds raised by the query engine and the
application-wide exception handlers that turn them into HTTP responses.

Design Goals
------------
- Every core failure propagates to the boundary without local recovery
- Plain-text error bodies, matching the service's historical wire format
- Log full stack traces internally for unexpected failures
- Remain testable and framework-agnostic where possible
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.responses import PlainTextResponse

logger = logging.getLogger("wikiwrapper.errors")


# ---------------------------------------------------------------------
# Core Error Kinds
# ---------------------------------------------------------------------

class WikiWrapperError(RuntimeError):
    """Base exception for all failures surfaced by the query engine."""


class UnsupportedGameError(WikiWrapperError):
    """Raised when a game code does not resolve in the game registry."""


class InvalidProtagonistError(WikiWrapperError):
    """
    Raised on wrong single/multi-protagonist usage, or when a protagonist
    name does not resolve for the requested game.
    """


class InvalidContinueKeyError(WikiWrapperError):
    """Raised when a caller's continuation offset is not a non-negative integer."""


class UpstreamQueryError(WikiWrapperError):
    """Raised when the wiki cannot be reached or reports an API error."""


class MalformedUpstreamError(WikiWrapperError):
    """Raised when a required structural field is absent from a response."""


# ---------------------------------------------------------------------
# Boundary Errors
# ---------------------------------------------------------------------

class MissingParameterError(ValueError):
    """Raised by route handlers when a required query parameter is absent."""

    def __init__(self, name: str) -> None:
        super().__init__(f"{name} not specified")
        self.name = name


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def missing_parameter_handler(
    request: Request,
    exc: MissingParameterError,
) -> PlainTextResponse:
    """
    Reject a request that omits a required query parameter.

    Returns
    -------
    PlainTextResponse
        A 400 response naming the missing parameter.
    """
    logger.info("Rejected %s: %s", request.url.path, exc)
    return PlainTextResponse(str(exc), status_code=400)


async def wiki_wrapper_error_handler(
    request: Request,
    exc: WikiWrapperError,
) -> PlainTextResponse:
    """
    Map any core error to the single generic failure response.

    The error kinds are not distinguished on the wire; the message text is
    returned as the body and the kind is recorded in the log.
    """
    if isinstance(exc, (UpstreamQueryError, MalformedUpstreamError)):
        logger.error(
            "Upstream failure during %s %s: %s (%s)",
            request.method,
            request.url.path,
            exc,
            type(exc).__name__,
        )
    else:
        logger.warning(
            "Request %s failed validation: %s (%s)",
            request.url.path,
            exc,
            type(exc).__name__,
        )

    return PlainTextResponse(str(exc), status_code=500)


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> PlainTextResponse:
    """
    Catch-all handler for uncaught exceptions.

    Behavior
    --------
    - Logs the full exception stack trace for internal diagnostics.
    - Returns a generic 500 error to the client with no internal details.
    """

    # Log full traceback internally (never returned to client)
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    return PlainTextResponse("Internal server error", status_code=500)
