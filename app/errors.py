"""
Error taxonomy and the FastAPI exception handlers that map it to JSON.
"""
import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_405_METHOD_NOT_ALLOWED,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_502_BAD_GATEWAY,
    HTTP_503_SERVICE_UNAVAILABLE,
)

logger = logging.getLogger(__name__)


class TrackerError(Exception):
    """Base class for errors with a defined API status."""
    status_code = HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TrackerError):
    status_code = HTTP_400_BAD_REQUEST


class NotFoundError(TrackerError):
    status_code = HTTP_404_NOT_FOUND


class UpstreamError(TrackerError):
    """The extraction model call failed or returned nothing usable."""
    status_code = HTTP_502_BAD_GATEWAY


class StoreUnavailableError(TrackerError):
    status_code = HTTP_503_SERVICE_UNAVAILABLE


def tracker_error_handler(request: Request, exc: TrackerError):
    if exc.status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # unknown path and known path with an unsupported method look the same
    if exc.status_code in (HTTP_404_NOT_FOUND, HTTP_405_METHOD_NOT_ALLOWED):
        return JSONResponse(status_code=HTTP_404_NOT_FOUND, content={"error": "Endpoint not found"})
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=HTTP_400_BAD_REQUEST,
        content={
            "error": "Validation error",
            "details": [
                {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
                for err in exc.errors()
            ],
        },
    )


def generic_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "message": str(exc)},
    )
