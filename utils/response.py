import logging
from datetime import datetime, timezone
from typing import Any, List, Optional
from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from schemas import ApiResponse, ErrorBody

logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def success(data: Any, status_code: int = status.HTTP_200_OK) -> JSONResponse:
    """Success envelope; pydantic payloads are rendered with camelCase keys"""
    body = ApiResponse(success=True, data=jsonable_encoder(data, by_alias=True), timestamp=_timestamp())
    return JSONResponse(body.model_dump(exclude={"error"}), status_code=status_code)


def created(data: Any) -> JSONResponse:
    return success(data, status.HTTP_201_CREATED)


def error(
    message: str,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    details: Optional[List[dict]] = None,
) -> JSONResponse:
    """Error envelope"""
    logger.warning("API Error: %s (%s) %s", message, status_code, details or "")
    body = ApiResponse(
        success=False,
        error=ErrorBody(message=message, details=jsonable_encoder(details), timestamp=_timestamp()),
    )
    return JSONResponse(body.model_dump(exclude={"data", "timestamp"}), status_code=status_code)


def not_found(resource: str = "Resource") -> JSONResponse:
    return error(f"{resource} not found", status.HTTP_404_NOT_FOUND)


def internal_error(message: str = "Internal server error") -> JSONResponse:
    return error(message, status.HTTP_500_INTERNAL_SERVER_ERROR)
