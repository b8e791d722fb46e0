"""
Storefront exception system.

Usage:
    from storefront.core.exceptions import EditWindowClosed, ProjectError

    raise EditWindowClosed("Edit window expired", details={"order_id": str(order.id)})

    try:
        ...
    except ProjectError as exc:
        raise HTTPException(status_code=exc.http_status, detail=exc.to_http_detail())
"""
from storefront.core.exceptions.base import ProjectError, exception_factory
from storefront.core.exceptions.errors import (
    ConfigurationError,
    ConflictError,
    EditWindowClosed,
    ExternalServiceError,
    ForbiddenField,
    InvalidStatusError,
    InvalidTransitionError,
    MissingRecipient,
    NotFoundError,
    NotificationDispatchFailure,
    TerminalStateViolation,
    ValidationError,
)

__all__ = [
    "ProjectError",
    "exception_factory",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "ExternalServiceError",
    "InvalidStatusError",
    "EditWindowClosed",
    "ForbiddenField",
    "TerminalStateViolation",
    "InvalidTransitionError",
    "NotificationDispatchFailure",
    "MissingRecipient",
]
