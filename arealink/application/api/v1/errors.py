"""Centralized error transformation for API routes.

Maps arealink errors (domain and infrastructure) to HTTPException responses.
"""

from typing import Any

from fastapi import HTTPException

from arealink.domain.shared.error import (
    AreaLinkError,
    AuthorizationError,
    ConflictError,
    DomainError,
    InfrastructureError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)

DOMAIN_ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    NotFoundError: 404,
    ValidationError: 422,
    InvalidStateError: 409,
    ConflictError: 409,
    AuthorizationError: 403,
}


def _domain_status(error: DomainError) -> int:
    for cls in type(error).__mro__:
        if cls in DOMAIN_ERROR_STATUS_MAP:
            return DOMAIN_ERROR_STATUS_MAP[cls]
    return 400


def map_error(error: AreaLinkError) -> HTTPException:
    """Map an arealink error to an HTTPException.

    Args:
        error: The error to map.

    Returns:
        HTTPException with appropriate status code and detail.
    """
    detail: dict[str, Any] = {
        "code": error.code,
        "message": error.message,
    }

    if isinstance(error, InfrastructureError):
        # Provider and storage failures → 503 Service Unavailable
        return HTTPException(status_code=503, detail=detail)

    if isinstance(error, DomainError):
        if isinstance(error, ValidationError) and error.field is not None:
            detail["field"] = error.field
        # Distinguish 401 (signed out) from 403 (not allowed)
        if isinstance(error, AuthorizationError) and error.code == "missing_session":
            return HTTPException(status_code=401, detail=detail)
        return HTTPException(status_code=_domain_status(error), detail=detail)

    return HTTPException(status_code=500, detail=detail)
