import logging
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base error carrying the HTTP status and response body it maps to.

    ``resource`` names the entity or parameter the error is about and
    ``cause`` keeps the underlying error (also chained via ``raise ... from``).
    """

    status_code: int = 500
    title: str = "SERVER_ERROR"

    def __init__(self, resource: Optional[str] = None, cause: Optional[BaseException] = None):
        self.resource = resource
        self.cause = cause
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.cause is not None:
            return str(self.cause)
        return f"error in {self.resource}"

    def http_response(self) -> Dict[str, Any]:
        return {
            "code": self.title,
            "detail": str(self),
            "entity": self.resource,
        }


class InvalidParameterError(AppError):
    status_code = 400
    title = "INVALID_PARAM"

    def __init__(self, resource: str, cause: Any):
        if isinstance(cause, str):
            cause = ValueError(cause)
        super().__init__(resource=resource, cause=cause)


class NotFoundError(AppError):
    status_code = 404
    title = "NOT_FOUND"

    def __init__(self, resource: str):
        super().__init__(resource=resource, cause=LookupError("not found"))


class PermissionDeniedError(AppError):
    status_code = 401
    title = "PERMISSION_ERROR"

    def __init__(self, resource: str, cause: Any = "permission error"):
        if isinstance(cause, str):
            cause = PermissionError(cause)
        super().__init__(resource=resource, cause=cause)


class ServerError(AppError):
    status_code = 500
    title = "SERVER_ERROR"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.message = message
        super().__init__(resource=None, cause=cause)

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message

    def http_response(self) -> Dict[str, Any]:
        res = super().http_response()
        # never echo collaborator details to the client
        res["detail"] = "internal server error"
        return res


def create_error_response(error: Any) -> dict:
    """Create a standardized error response"""
    return {
        "success": False,
        "data": None,
        "error": error
    }


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render any AppError into the standard envelope"""
    if isinstance(exc, ServerError):
        logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.title} {exc}")
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.http_response())
    )
