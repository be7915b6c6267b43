import logging
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PhotoServiceError(Exception):
    """Base class for errors reported to the caller."""

    code = "error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(PhotoServiceError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, key):
        super().__init__(f'Entity "{entity}" ({key}) was not found.')
        self.entity = entity
        self.key = key


class UnauthorizedError(PhotoServiceError):
    code = "unauthorized"
    status_code = status.HTTP_403_FORBIDDEN


class InvalidArgumentError(PhotoServiceError):
    code = "invalid_argument"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class ConflictError(PhotoServiceError):
    """A concurrent write collided with a uniqueness constraint. Safe to retry."""

    code = "conflict"
    status_code = status.HTTP_409_CONFLICT


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PhotoServiceError)
    async def photo_service_error_handler(request: Request, exc: PhotoServiceError) -> JSONResponse:
        content = {"detail": exc.message, "error": exc.code}
        if isinstance(exc, InvalidArgumentError) and exc.field:
            content["field"] = exc.field
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        first = errors[0] if errors else {}
        content = {"detail": first.get("msg", "Invalid request"), "error": InvalidArgumentError.code}
        location = [str(part) for part in first.get("loc", ()) if part not in ("body", "path", "query")]
        if location:
            content["field"] = ".".join(location)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=content)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error", "error": "internal"},
        )
