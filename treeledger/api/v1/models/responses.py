"""
API response models using Pydantic.

Every body is a tagged result: ``{"type": "ok", "value": ...}`` or
``{"type": "err", "error": "<Kind>", "detail": "..."}``.
"""
from typing import Any, Literal
from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from treeledger.domain.errors import ErrorKind
from treeledger.infrastructure.ledger import Err, Result


ERROR_STATUS_CODES = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorKind.INVALID_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_TRANSITION: status.HTTP_409_CONFLICT,
}


class OkResponse(BaseModel):
    """Successful call."""
    type: Literal["ok"] = "ok"
    value: Any = Field(description="Operation result; true for mutations")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"type": "ok", "value": True}
        }
    )


class ErrResponse(BaseModel):
    """Rejected call."""
    type: Literal["err"] = "err"
    error: ErrorKind
    detail: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "err",
                "error": "NotFound",
                "detail": "Tree 'tree-404' not found",
            }
        }
    )


def error_body(kind: ErrorKind, detail: str) -> dict:
    return {"type": "err", "error": kind.value, "detail": detail}


def to_response(result: Result) -> JSONResponse:
    """
    Render a ledger result as an HTTP response.

    Args:
        result: Ok or Err from a ledger call

    Returns:
        JSONResponse with the tagged body and matching status code
    """
    if isinstance(result, Err):
        return JSONResponse(
            status_code=ERROR_STATUS_CODES[result.kind],
            content=error_body(result.kind, result.message),
        )
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={"type": "ok", "value": jsonable_encoder(result.value, by_alias=True)},
    )


# Shared OpenAPI response documentation
COMMON_RESPONSES = {
    400: {"model": ErrResponse, "description": "Invalid input or malformed request"},
    404: {"model": ErrResponse, "description": "Referenced record not found"},
    429: {"description": "Rate limit exceeded"},
}

MUTATION_RESPONSES = {
    **COMMON_RESPONSES,
    401: {"model": ErrResponse, "description": "Missing caller identity"},
    403: {"model": ErrResponse, "description": "Caller lacks ownership or role"},
    409: {"model": ErrResponse, "description": "Record already exists or status change not allowed"},
}
