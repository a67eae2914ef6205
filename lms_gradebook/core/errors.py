import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class GradebookError(Exception):
    """Base for errors that map onto a stable code and HTTP status."""

    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, details: list[dict[str, Any]] | None = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class UnauthorizedError(GradebookError):
    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class ForbiddenError(GradebookError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Access denied"


class NotFoundError(GradebookError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class InvalidInputError(GradebookError):
    status_code = 400
    code = "INVALID_INPUT"
    default_message = "Invalid input"


class ConflictError(GradebookError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Conflict"


class InternalError(GradebookError):
    pass


def error_body(code: str, message: str, details: list[dict[str, Any]] | None = None) -> dict:
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"error": error}


def _validation_details(exc: RequestValidationError) -> list[dict[str, Any]]:
    details = []
    for err in exc.errors():
        # drop the "body"/"query" prefix so paths name the field itself
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query")]
        details.append({"path": ".".join(loc), "message": err.get("msg", "Invalid value")})
    return details


def add_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(GradebookError)
    async def gradebook_error_handler(request: Request, exc: GradebookError):
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.code, exc.message, exc.details),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=error_body("INVALID_INPUT", "Invalid request", _validation_details(exc)),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_body("INTERNAL_ERROR", "Internal server error"),
        )
