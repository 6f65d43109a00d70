"""
Global error handling middleware and exception handlers.
"""
import logging
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable

from treeledger.api.v1.models.responses import ERROR_STATUS_CODES, error_body
from treeledger.domain.errors import ErrorKind, RegistryError


logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Catches exceptions that escaped the ledger and returns tagged error
    responses in the same shape as rejected calls.
    """

    async def dispatch(self, request: Request, call_next: Callable):
        """
        Process the request and handle any exceptions.

        Args:
            request: The incoming request
            call_next: The next middleware or route handler

        Returns:
            Response object
        """
        try:
            response = await call_next(request)
            return response

        except RegistryError as e:
            # Raised outside a ledger call
            logger.warning(
                f"Registry error outside ledger call: {e.kind.value} - {e.message}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                }
            )
            return JSONResponse(
                status_code=ERROR_STATUS_CODES[e.kind],
                content=error_body(e.kind, e.message),
            )

        except ValueError as e:
            logger.warning(
                f"Validation error: {str(e)}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                }
            )
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content=error_body(ErrorKind.INVALID_INPUT, str(e)),
            )

        except Exception as e:
            logger.exception(
                f"Unhandled exception: {str(e)}",
                extra={
                    "path": request.url.path,
                    "method": request.method,
                }
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "type": "err",
                    "error": "InternalError",
                    "detail": "An unexpected error occurred",
                }
            )


HTTP_ERROR_KINDS = {
    status.HTTP_401_UNAUTHORIZED: ErrorKind.UNAUTHORIZED,
    status.HTTP_403_FORBIDDEN: ErrorKind.UNAUTHORIZED,
    status.HTTP_404_NOT_FOUND: ErrorKind.NOT_FOUND,
    status.HTTP_409_CONFLICT: ErrorKind.ALREADY_EXISTS,
}


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Render request validation failures as tagged InvalidInput errors.

    Args:
        request: The incoming request
        exc: Validation error raised while parsing the request

    Returns:
        400 response with a tagged error body
    """
    detail = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    logger.warning(
        f"Request validation failed: {detail}",
        extra={
            "path": request.url.path,
            "method": request.method,
        }
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(ErrorKind.INVALID_INPUT, detail),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Render HTTP exceptions (missing caller identity, unknown routes) as tagged errors.

    Args:
        request: The incoming request
        exc: HTTP exception raised by a dependency or the router

    Returns:
        Response with the original status code and a tagged error body
    """
    kind = HTTP_ERROR_KINDS.get(exc.status_code, ErrorKind.INVALID_INPUT)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(kind, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )
