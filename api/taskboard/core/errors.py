import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class TaskboardError(Exception):
    """Base for errors that map onto an HTTP status with a client-safe message."""

    status_code = 500
    detail = "Internal server error"

    def __init__(self, detail: str = None):
        super().__init__(detail or self.detail)
        if detail:
            self.detail = detail


class ValidationError(TaskboardError):
    status_code = 400
    detail = "Invalid request"


class AuthenticationError(TaskboardError):
    status_code = 401
    detail = "Access denied. No token provided."


class InvalidToken(AuthenticationError):
    status_code = 403
    detail = "Invalid or expired token."


class NotFound(TaskboardError):
    status_code = 404
    detail = "Not found"


class Conflict(TaskboardError):
    status_code = 409
    detail = "Already exists"


class StoreFailure(TaskboardError):
    status_code = 500
    detail = "Internal server error"


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(TaskboardError)
    async def taskboard_error(request: Request, exc: TaskboardError):
        return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        fields = sorted({".".join(str(p) for p in e["loc"][1:]) for e in exc.errors() if len(e["loc"]) > 1})
        detail = f"Invalid or missing fields: {', '.join(fields)}" if fields else ValidationError.detail
        return JSONResponse({"detail": detail}, status_code=ValidationError.status_code)

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse({"detail": StoreFailure.detail}, status_code=500)
