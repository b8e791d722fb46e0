"""
storefront.config.mail – transactional email (Brevo) settings.

Env vars: BREVO_API_KEY, ADMIN_EMAIL, MAIL_SENDER_NAME, MAIL_TIMEOUT_SECONDS, MAIL_REQUIRED.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

_TRUTHY = ("1", "true", "yes")


@dataclass(frozen=True)
class MailConfig:
    """
    Brevo API credentials and sender identity.

    ADMIN_EMAIL doubles as the sender address and the recipient of new-order
    notifications.
    """

    api_key: Optional[str] = None
    admin_email: Optional[str] = None
    sender_name: str = "Storefront"
    timeout_seconds: float = 10.0
    required: bool = False
    """When true, a missing key or admin email is a startup error instead of a no-op dispatcher."""

    api_url: str = "https://api.brevo.com/v3/smtp/email"

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {self.timeout_seconds!r}")
        if self.admin_email is not None and "@" not in self.admin_email:
            raise ValueError(f"ADMIN_EMAIL is not an email address: {self.admin_email!r}")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.admin_email)

    @classmethod
    def from_env(cls, **overrides: object) -> "MailConfig":
        """Build config from environment variables; keyword overrides win."""
        api_key = overrides.get("api_key") or os.environ.get("BREVO_API_KEY") or None
        admin_email = overrides.get("admin_email") or os.environ.get("ADMIN_EMAIL") or None
        timeout = overrides.get("timeout_seconds")
        if timeout is None:
            timeout = os.environ.get("MAIL_TIMEOUT_SECONDS", "10")
        required = overrides.get("required")
        if required is None:
            required = os.environ.get("MAIL_REQUIRED", "").strip().lower() in _TRUTHY
        return cls(
            api_key=str(api_key) if api_key else None,
            admin_email=str(admin_email).strip() if admin_email else None,
            sender_name=str(overrides.get("sender_name") or os.environ.get("MAIL_SENDER_NAME", "Storefront")),
            timeout_seconds=float(timeout),
            required=bool(required),
        )


def load_mail_config(**overrides: object) -> MailConfig:
    """Load and validate mail config from environment (with optional overrides)."""
    return MailConfig.from_env(**overrides)
