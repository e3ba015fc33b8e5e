#!/usr/bin/env python3
"""
Error handlers for the web application.

Business-rule failures from the core arrive as MarketplaceError subclasses
and are mapped to HTTP status codes by kind.
"""

import logging
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

from core.errors import (
    MarketplaceError,
    NotFound,
    Unauthorized,
    RoleMismatch,
    ProfileMissing,
    SelfApplication,
    SelfFeedback,
    DuplicateApplication,
    DuplicateFeedback,
    RequestClosed,
    CapacityExceeded,
    PriceExceedsBudget,
    InvalidInput,
    NotSelected,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (NotFound, 404),
    ((Unauthorized, RoleMismatch, ProfileMissing, SelfApplication, SelfFeedback), 403),
    ((DuplicateApplication, DuplicateFeedback, RequestClosed, CapacityExceeded), 409),
    ((PriceExceedsBudget, InvalidInput, NotSelected), 422),
)


def status_code_for(exc: MarketplaceError) -> int:
    for error_types, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_types):
            return status_code
    return 400


async def marketplace_exception_handler(
    request: Request,
    exc: MarketplaceError
) -> JSONResponse:
    """
    Handle business-rule failures raised by the core services.

    Args:
        request: The FastAPI request.
        exc: The marketplace error.

    Returns:
        JSONResponse with the error kind and message.
    """
    status_code = status_code_for(exc)
    logger.info(f"{request.method} {request.url.path} rejected: {exc.kind}: {exc.message}")

    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": exc.message,
            "type": exc.kind
        }
    )


async def http_exception_handler(
    request: Request,
    exc: HTTPException
) -> JSONResponse:
    """
    Handle FastAPI HTTP exceptions with consistent format.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "type": "HTTPException"
        }
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle unexpected exceptions, including store unavailability.
    """
    logger.exception(f"Unexpected error in {request.url.path}")

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "type": "InternalError"
        }
    )
