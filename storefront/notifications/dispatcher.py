"""Outbound email dispatch.

The dispatcher only delivers. It never retries: the deadline scan retries by
leaving ``deadline_warning_sent`` unset when ``send`` raises.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

import httpx

from storefront.config.mail import MailConfig
from storefront.core.exceptions import ConfigurationError, NotificationDispatchFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Recipient:
    email: str
    name: Optional[str] = None

    def to_payload(self) -> dict:
        payload = {"email": self.email}
        if self.name:
            payload["name"] = self.name
        return payload


class NotificationDispatcher(ABC):
    @property
    @abstractmethod
    def provider(self) -> str:
        ...

    @abstractmethod
    async def send(
        self,
        recipients: Sequence[Recipient],
        subject: str,
        html_body: str,
    ) -> None:
        """Deliver one message. Raises NotificationDispatchFailure on any transport error."""
        ...


class BrevoDispatcher(NotificationDispatcher):
    """Brevo (ex-Sendinblue) transactional email API."""

    def __init__(
        self,
        config: MailConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not config.is_configured:
            raise ConfigurationError("BREVO_API_KEY and ADMIN_EMAIL are required for Brevo")
        self._config = config
        self._transport = transport

    @property
    def provider(self) -> str:
        return "brevo"

    async def send(
        self,
        recipients: Sequence[Recipient],
        subject: str,
        html_body: str,
    ) -> None:
        if not recipients:
            raise NotificationDispatchFailure("No recipients given")
        body = {
            "sender": {"name": self._config.sender_name, "email": self._config.admin_email},
            "to": [r.to_payload() for r in recipients],
            "subject": subject,
            "htmlContent": html_body,
        }
        to_list = ", ".join(r.email for r in recipients)
        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds, transport=self._transport,
            ) as client:
                resp = await client.post(
                    self._config.api_url,
                    json=body,
                    headers={
                        "Accept": "application/json",
                        "api-key": self._config.api_key or "",
                    },
                )
        except httpx.HTTPError as exc:
            logger.warning("BrevoDispatcher: transport error sending to %s: %s", to_list, exc)
            raise NotificationDispatchFailure(
                f"Email transport failed: {exc}", cause=exc,
            ) from exc

        if resp.status_code >= 400:
            logger.warning(
                "BrevoDispatcher: HTTP %d sending to %s: %s",
                resp.status_code, to_list, resp.text,
            )
            raise NotificationDispatchFailure(
                f"Email provider returned HTTP {resp.status_code}",
                details={"status_code": resp.status_code, "body": resp.text[:500]},
            )
        logger.info("BrevoDispatcher: sent %r to %s (%d)", subject, to_list, resp.status_code)


class NoOpDispatcher(NotificationDispatcher):
    """Logs and drops every message. Used when mail is not configured (dev)."""

    @property
    def provider(self) -> str:
        return "noop"

    async def send(
        self,
        recipients: Sequence[Recipient],
        subject: str,
        html_body: str,
    ) -> None:
        logger.info(
            "NoOpDispatcher: dropping %r for %s",
            subject, ", ".join(r.email for r in recipients),
        )


def build_dispatcher(config: MailConfig) -> NotificationDispatcher:
    """Brevo when configured; no-op otherwise unless mail is required."""
    if config.is_configured:
        return BrevoDispatcher(config)
    if config.required:
        raise ConfigurationError("Missing email configuration (BREVO_API_KEY, ADMIN_EMAIL)")
    logger.warning("Mail not configured; notifications will be logged and dropped")
    return NoOpDispatcher()
