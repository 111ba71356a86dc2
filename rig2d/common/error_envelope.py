"""Error envelope shared by the rig2d HTTP routes.

Body shape of every 4xx raised by a router:
{
  "error": {
    "code": "skeleton.cycle",
    "message": "Bone 'a' is its own ancestor",
    "http_status": 400,
    "resource_kind": "skeleton | chain | solver | null",
    "details": {}
  }
}
"""
from __future__ import annotations

from typing import Any, Dict, Literal, NoReturn, Optional

from fastapi import HTTPException
from pydantic import BaseModel, Field

ResourceKind = Literal["skeleton", "chain", "solver", None]


class ErrorDetail(BaseModel):
    code: str
    message: str
    http_status: int
    resource_kind: Optional[ResourceKind] = None
    details: Dict[str, Any] = Field(default_factory=dict)


class ErrorEnvelope(BaseModel):
    error: ErrorDetail


def build_error_envelope(
    code: str,
    message: str,
    status_code: int = 400,
    resource_kind: Optional[ResourceKind] = None,
    details: Optional[Dict[str, Any]] = None,
) -> ErrorEnvelope:
    """Build the envelope body without raising."""
    return ErrorEnvelope(
        error=ErrorDetail(
            code=code,
            message=message,
            http_status=status_code,
            resource_kind=resource_kind,
            details=details or {},
        )
    )


def error_response(
    code: str,
    message: str,
    status_code: int = 400,
    resource_kind: Optional[ResourceKind] = None,
    details: Optional[Dict[str, Any]] = None,
) -> NoReturn:
    """Raise an HTTPException whose detail is the canonical envelope.

    Args:
        code: Dotted machine-readable code, e.g. "chain.effector_not_found"
        message: Human-readable explanation
        status_code: HTTP status (default 400)
        resource_kind: skeleton, chain or solver
        details: Extra request context (effector id, solver kind, ...)
    """
    envelope = build_error_envelope(code, message, status_code, resource_kind, details)
    raise HTTPException(status_code=status_code, detail=envelope.model_dump())


def raise_for_error(
    exc: Exception,
    status_code: int = 400,
    details: Optional[Dict[str, Any]] = None,
) -> NoReturn:
    """Raise the envelope for a domain error carrying `code` and `resource_kind`."""
    error_response(
        getattr(exc, "code", "internal_error"),
        getattr(exc, "message", str(exc)),
        status_code=status_code,
        resource_kind=getattr(exc, "resource_kind", None),
        details=details,
    )
