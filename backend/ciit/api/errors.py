"""Maps failed Results onto HTTP errors with a ``{"error": ...}`` body."""
from __future__ import annotations
import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from ciit.domain.common.result import CONFLICT, NOT_FOUND, Result

logger = logging.getLogger(__name__)

_STATUS_BY_CODE = {
    NOT_FOUND: status.HTTP_404_NOT_FOUND,
    CONFLICT: status.HTTP_409_CONFLICT,
}


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def raise_for_result(result: Result) -> None:
    if not result.is_success:
        raise ApiError(_STATUS_BY_CODE.get(result.code, status.HTTP_400_BAD_REQUEST), result.error)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )
