"""FastAPI dependency providers. Everything is read from app.state, set up in the lifespan."""
from __future__ import annotations

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config.store import StoreConfig
from storefront.core.clock import Clock, utcnow
from storefront.notifications.dispatcher import NotificationDispatcher
from storefront.services.order_notification_service import OrderNotificationService


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield a transactional AsyncSession from the app-level session factory."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


def get_store_config(request: Request) -> StoreConfig:
    return request.app.state.store_config


def get_dispatcher(request: Request) -> NotificationDispatcher:
    return request.app.state.dispatcher


def get_clock(request: Request) -> Clock:
    return getattr(request.app.state, "clock", utcnow)


def get_notifications(request: Request) -> OrderNotificationService:
    mail_config = getattr(request.app.state, "mail_config", None)
    return OrderNotificationService(
        request.app.state.dispatcher,
        request.app.state.store_config,
        admin_email=mail_config.admin_email if mail_config else None,
    )
