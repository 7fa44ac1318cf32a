"""Uniform JSON envelope for every API response.

Success: {"success": true, "data": ..., "meta": {"timestamp": ..., ...}}
Failure: {"success": false, "error": {"code": ..., "message": ..., "details": ...}}
"""

from datetime import UTC, datetime
from typing import Any

from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from seo_platform.core.errors import AppError, ErrorKind


def _timestamp() -> str:
    return datetime.now(UTC).isoformat()


def success(
    data: Any,
    meta: dict[str, Any] | None = None,
    status_code: int = status.HTTP_200_OK,
) -> JSONResponse:
    """Wrap data in the success envelope."""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": True,
            "data": jsonable_encoder(data),
            "meta": {"timestamp": _timestamp(), **(meta or {})},
        },
    )


def created(data: Any, meta: dict[str, Any] | None = None) -> JSONResponse:
    return success(data, meta, status_code=status.HTTP_201_CREATED)


def error(exc: AppError) -> JSONResponse:
    """Serialize an AppError with the status its kind maps to."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": jsonable_encoder(exc.to_dict())},
    )


def internal_error() -> JSONResponse:
    """Envelope for unexpected exceptions; never carries detail."""
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": {
                "code": ErrorKind.INTERNAL.value,
                "message": "An unexpected error occurred",
                "details": None,
            },
        },
    )
