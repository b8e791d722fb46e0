"""
Storefront config: frozen dataclasses loaded from env.

load_postgres_config(), load_store_config(), load_mail_config().
"""
from storefront.config.mail import MailConfig, load_mail_config
from storefront.config.postgres import PostgresConfig, load_postgres_config
from storefront.config.store import StoreConfig, load_store_config

__all__ = [
    "PostgresConfig",
    "load_postgres_config",
    "StoreConfig",
    "load_store_config",
    "MailConfig",
    "load_mail_config",
]
