"""
Built-in exception types. Generic kinds first, then the order lifecycle kinds.
"""
from __future__ import annotations

from storefront.core.exceptions.base import ProjectError


class ConfigurationError(ProjectError):
    """Invalid or missing configuration."""

    default_code = "CONFIGURATION_ERROR"
    default_http_status = 500


class ValidationError(ProjectError):
    """Request or input validation failed."""

    default_code = "VALIDATION_ERROR"
    default_http_status = 400


class NotFoundError(ProjectError):
    """Requested resource not found."""

    default_code = "NOT_FOUND"
    default_http_status = 404


class ConflictError(ProjectError):
    """Resource state conflict (e.g. duplicate, stale state)."""

    default_code = "CONFLICT"
    default_http_status = 409


class ExternalServiceError(ProjectError):
    """External service (database, mail provider) failed."""

    default_code = "EXTERNAL_SERVICE_ERROR"
    default_http_status = 502


# ── Order lifecycle ───────────────────────────────────────────────────────────


class InvalidStatusError(ValidationError):
    """A status string that is not one of the five known order statuses."""

    default_code = "INVALID_STATUS"
    default_http_status = 400


class EditWindowClosed(ConflictError):
    """Customer edit attempted after the edit window expired or the order left pending."""

    default_code = "EDIT_WINDOW_CLOSED"
    default_http_status = 409


class ForbiddenField(ProjectError):
    """Customer edit touched a field outside the editable allowlist."""

    default_code = "FORBIDDEN_FIELD"
    default_http_status = 422


class TerminalStateViolation(ConflictError):
    """Status transition attempted from delivered or cancelled."""

    default_code = "TERMINAL_STATE"
    default_http_status = 409


class InvalidTransitionError(ConflictError):
    """Status transition to the status the order already has."""

    default_code = "INVALID_TRANSITION"
    default_http_status = 409


class NotificationDispatchFailure(ExternalServiceError):
    """The mail provider rejected the message or could not be reached."""

    default_code = "NOTIFICATION_DISPATCH_FAILED"
    default_http_status = 502


class MissingRecipient(ProjectError):
    """Order has no customer email; there is no channel to notify through."""

    default_code = "MISSING_RECIPIENT"
    default_http_status = 422
