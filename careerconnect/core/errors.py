"""
Error taxonomy and the exception handlers that turn it into HTTP responses.

Services and dependencies raise these; create_app() registers the handlers
once, so every route answers errors with the same body shape:

    {"detail": "<message>"}                                   # 401/403/404/409/500
    {"detail": "Validation failed", "errors": [{field, message}]}  # 400
"""

from typing import List, Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = structlog.get_logger()


class AppError(Exception):
    """Base class for errors that map onto an HTTP status."""

    status_code: int = 500
    detail: str = "Internal server error"

    def __init__(self, detail: Optional[str] = None):
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


# ============================================================
# 401 - AUTHENTICATION
# ============================================================

class AuthenticationError(AppError):
    status_code = 401
    detail = "Please authenticate."


class MissingTokenError(AuthenticationError):
    detail = "Authentication token missing"


class InvalidTokenError(AuthenticationError):
    detail = "Invalid authentication token"


class TokenUserNotFoundError(AuthenticationError):
    detail = "User for this token no longer exists"


class InvalidCredentialsError(AuthenticationError):
    detail = "Invalid login credentials"


# ============================================================
# 403 - AUTHORIZATION
# ============================================================

class AuthorizationError(AppError):
    status_code = 403
    detail = "Access denied."


class ForbiddenError(AuthorizationError):
    pass


# ============================================================
# 400 / 404 / 409
# ============================================================

class ValidationError(AppError):
    status_code = 400
    detail = "Validation failed"

    def __init__(self, detail: Optional[str] = None, errors: Optional[List[dict]] = None):
        super().__init__(detail)
        self.errors = errors or []


class NotFoundError(AppError):
    status_code = 404
    detail = "Not found"


class ConflictError(AppError):
    status_code = 409
    detail = "Resource already exists"


# ============================================================
# HANDLERS
# ============================================================

def _field_errors(exc: RequestValidationError) -> List[dict]:
    """Flatten pydantic errors into field/message pairs."""
    errors = []
    for err in exc.errors():
        # loc looks like ("body", "salary", "min") or ("query", "minSalary")
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or "body", "message": err.get("msg", "Invalid value")})
    return errors


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    content = {"detail": exc.detail}
    if isinstance(exc, ValidationError) and exc.errors:
        content["errors"] = exc.errors

    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}

    logger.info("request.rejected", status=exc.status_code, error=type(exc).__name__)
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = _field_errors(exc)
    logger.info("request.invalid", errors=errors)
    return JSONResponse(
        status_code=400,
        content={"detail": ValidationError.detail, "errors": errors},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("request.failed", error=str(exc))
    return JSONResponse(status_code=500, content={"detail": AppError.detail})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
