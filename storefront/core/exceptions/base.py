"""
Base exception types for the storefront.

Subclass ProjectError or use exception_factory() to add new exception types
on demand. Every exception carries a machine-readable code and an HTTP status
so the API layer can translate it without a lookup table.
"""
from __future__ import annotations

import traceback
from typing import Any, Dict, Optional, Type


class ProjectError(Exception):
    """
    Base exception for all storefront errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable slug (defaults to the class default_code).
        http_status: Suggested HTTP status for API responses (default 500).
        details: Optional dict for extra context (offending fields, order id).
        cause: Optional chained exception (transport or driver error).
    """

    default_code: str = "ERROR"
    default_http_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        http_status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code if code is not None else getattr(
            self.__class__, "default_code", self.__class__.__name__
        )
        self.http_status = (
            http_status
            if http_status is not None
            else getattr(self.__class__, "default_http_status", 500)
        )
        self.details: Dict[str, Any] = details or {}
        self.cause = cause

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, code={self.code!r}, "
            f"http_status={self.http_status})"
        )

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for structured logging (includes the cause traceback)."""
        out: Dict[str, Any] = self.to_http_detail()
        out["http_status"] = self.http_status
        if self.cause is not None:
            out["cause"] = str(self.cause)
            out["cause_traceback"] = traceback.format_exception(
                type(self.cause), self.cause, self.cause.__traceback__
            )
        return out

    def to_http_detail(self) -> Dict[str, Any]:
        """Client-safe payload for HTTPException.detail (no tracebacks)."""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            out["details"] = self.details
        return out


def exception_factory(
    name: str,
    *,
    code: Optional[str] = None,
    http_status: int = 500,
    base: Type[ProjectError] = ProjectError,
) -> Type[ProjectError]:
    """
    Create a new exception class on demand.

    Example:
        RefundError = exception_factory("RefundError", code="REFUND_ERROR", http_status=409)
        raise RefundError("Order was never paid", details={"order_code": "ORD-7KQ2M9XA"})
    """
    code = code or name.upper().replace(" ", "_")
    return type(
        name,
        (base,),
        {
            "default_code": code,
            "default_http_status": http_status,
        },
    )
