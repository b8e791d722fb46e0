"""
storefront.infra.database – PostgreSQL async engine, session, models and repositories.

Public API
──────────
  build_engine, build_session_factory, init_db, close_engine, ensure_database_exists
  Base, Order, OrderItem (models)
  BaseRepository, OrderRepository
"""
from storefront.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)
from storefront.infra.database.models import Base, Order, OrderItem
from storefront.infra.database.repositories import BaseRepository, OrderRepository

__all__ = [
    "build_engine",
    "build_session_factory",
    "close_engine",
    "ensure_database_exists",
    "init_db",
    "Base",
    "Order",
    "OrderItem",
    "BaseRepository",
    "OrderRepository",
]
