"""
storefront.config.store – order lifecycle settings.

Env vars: ORDER_EDIT_WINDOW_MINUTES, DEADLINE_WARNING_MINUTES, APP_URL, STORE_NAME.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta


@dataclass(frozen=True)
class StoreConfig:
    """Edit window, warning lookahead and public links used in emails."""

    edit_window_minutes: int = 30
    """Minutes after checkout during which the customer may edit contact/delivery details."""

    warning_window_minutes: int = 15
    """Lookahead of the deadline warning scan."""

    app_url: str = "http://localhost:3000"
    """Public shop URL; deep links in emails are built on top of it."""

    store_name: str = "Storefront"

    def __post_init__(self) -> None:
        if not isinstance(self.edit_window_minutes, int) or self.edit_window_minutes < 1:
            raise ValueError(
                f"edit_window_minutes must be an integer >= 1, got {self.edit_window_minutes!r}"
            )
        if not isinstance(self.warning_window_minutes, int) or self.warning_window_minutes < 1:
            raise ValueError(
                f"warning_window_minutes must be an integer >= 1, got {self.warning_window_minutes!r}"
            )
        if not self.app_url.startswith(("http://", "https://")):
            raise ValueError("APP_URL must start with http:// or https://")
        if not self.store_name.strip():
            raise ValueError("store_name must be a non-empty string")

    @property
    def edit_window(self) -> timedelta:
        return timedelta(minutes=self.edit_window_minutes)

    @property
    def warning_window(self) -> timedelta:
        return timedelta(minutes=self.warning_window_minutes)

    def order_link(self, order_id: object) -> str:
        """Deep link to the customer's order page."""
        return f"{self.app_url.rstrip('/')}/my-orders?orderId={order_id}"

    @classmethod
    def from_env(cls, **overrides: object) -> "StoreConfig":
        """Build config from environment variables; keyword overrides win."""

        def _int(attr: str, var: str, default: int) -> int:
            v = overrides.get(attr)
            if v is not None:
                return int(v)
            return int(os.environ.get(var, default))

        return cls(
            edit_window_minutes=_int("edit_window_minutes", "ORDER_EDIT_WINDOW_MINUTES", 30),
            warning_window_minutes=_int("warning_window_minutes", "DEADLINE_WARNING_MINUTES", 15),
            app_url=str(overrides.get("app_url") or os.environ.get("APP_URL", "http://localhost:3000")),
            store_name=str(overrides.get("store_name") or os.environ.get("STORE_NAME", "Storefront")),
        )


def load_store_config(**overrides: object) -> StoreConfig:
    """Load and validate store config from environment (with optional overrides)."""
    return StoreConfig.from_env(**overrides)
