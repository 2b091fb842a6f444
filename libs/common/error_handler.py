"""Global exception handlers producing a consistent error body.

Every error leaves the API as::

    {"success": false, "error": "<human readable message>"}

which is the shape the GainVault frontend reads (``response.error``).
"""

import re
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException

from libs.common.logging import get_logger

logger = get_logger(__name__)

# postgres: Key (username)=(alice) already exists.
_PG_KEY_RE = re.compile(r"Key \((?P<field>[^)]+)\)=")
# sqlite: UNIQUE constraint failed: users.username
_SQLITE_UNIQUE_RE = re.compile(r"UNIQUE constraint failed: (?:\w+\.)?(?P<field>\w+)")

_FIELD_LABELS = {
    "username": "Username",
    "wallet_address": "Wallet address",
    "email": "Email",
    "referral_code": "Referral code",
    "referred_user_id": "Referred user",
}


def error_body(message: Any) -> dict:
    return {"success": False, "error": message}


def conflicting_field(exc: IntegrityError) -> Optional[str]:
    """Best-effort extraction of the column behind a unique violation."""
    text = str(exc.orig) if exc.orig is not None else str(exc)
    for pattern in (_PG_KEY_RE, _SQLITE_UNIQUE_RE):
        match = pattern.search(text)
        if match:
            return match.group("field")
    return None


def integrity_error_message(exc: IntegrityError) -> str:
    field = conflicting_field(exc)
    if field is None:
        return "Duplicate or invalid value"
    label = _FIELD_LABELS.get(field, field)
    return f"{label} already exists"


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(message),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    message = integrity_error_message(exc)
    logger.warning("Integrity error on %s: %s", request.url.path, message)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(message),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error"),
    )


def add_exception_handlers(app: FastAPI) -> None:
    """Register the handlers on ``app``."""
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
