"""Repositories for the storefront database."""
from storefront.infra.database.repositories.base import BaseRepository
from storefront.infra.database.repositories.order import OrderRepository

__all__ = [
    "BaseRepository",
    "OrderRepository",
]
