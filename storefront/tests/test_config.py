"""Tests for env-driven configs."""
import os
import unittest
from datetime import timedelta
from unittest.mock import patch

from storefront.config import (
    MailConfig,
    PostgresConfig,
    StoreConfig,
    load_mail_config,
    load_postgres_config,
    load_store_config,
)
from storefront.core.logger import LoggerConfig


class TestStoreConfig(unittest.TestCase):
    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        cfg = load_store_config()
        self.assertEqual(cfg.edit_window, timedelta(minutes=30))
        self.assertEqual(cfg.warning_window, timedelta(minutes=15))
        self.assertEqual(cfg.app_url, "http://localhost:3000")

    @patch.dict(os.environ, {"ORDER_EDIT_WINDOW_MINUTES": "45", "APP_URL": "https://shop.example.com/"}, clear=True)
    def test_env(self):
        cfg = load_store_config()
        self.assertEqual(cfg.edit_window_minutes, 45)
        self.assertEqual(cfg.order_link("abc"), "https://shop.example.com/my-orders?orderId=abc")

    @patch.dict(os.environ, {"ORDER_EDIT_WINDOW_MINUTES": "45"}, clear=True)
    def test_override_beats_env(self):
        self.assertEqual(load_store_config(edit_window_minutes=10).edit_window_minutes, 10)

    def test_invalid_window(self):
        with self.assertRaises(ValueError):
            StoreConfig(edit_window_minutes=0)

    def test_invalid_app_url(self):
        with self.assertRaises(ValueError):
            StoreConfig(app_url="shop.example.com")


class TestMailConfig(unittest.TestCase):
    @patch.dict(os.environ, {}, clear=True)
    def test_unconfigured_by_default(self):
        cfg = load_mail_config()
        self.assertFalse(cfg.is_configured)
        self.assertFalse(cfg.required)

    @patch.dict(
        os.environ,
        {"BREVO_API_KEY": "k", "ADMIN_EMAIL": " admin@shop.example.com ", "MAIL_REQUIRED": "true"},
        clear=True,
    )
    def test_env(self):
        cfg = load_mail_config()
        self.assertTrue(cfg.is_configured)
        self.assertTrue(cfg.required)
        self.assertEqual(cfg.admin_email, "admin@shop.example.com")

    def test_bad_admin_email(self):
        with self.assertRaises(ValueError):
            MailConfig(admin_email="not-an-email")

    def test_bad_timeout(self):
        with self.assertRaises(ValueError):
            MailConfig(timeout_seconds=0)


class TestPostgresConfig(unittest.TestCase):
    @patch.dict(os.environ, {}, clear=True)
    def test_defaults(self):
        cfg = load_postgres_config()
        self.assertEqual(cfg.url, "postgresql://localhost/storefront")
        self.assertEqual(cfg.pool_size, 5)
        self.assertFalse(cfg.echo)

    @patch.dict(os.environ, {"DATABASE_URL": "postgres://u:p@db/shop", "DB_POOL_SIZE": "20", "DB_ECHO": "yes"}, clear=True)
    def test_env(self):
        cfg = load_postgres_config()
        self.assertEqual(cfg.pool_size, 20)
        self.assertTrue(cfg.echo)

    def test_rejects_other_dialects(self):
        with self.assertRaises(ValueError):
            PostgresConfig(url="mysql://localhost/shop")


class TestLoggerConfig(unittest.TestCase):
    @patch.dict(os.environ, {"LOG_LEVEL": "debug", "LOG_CONSOLE": "false"}, clear=True)
    def test_from_env(self):
        cfg = LoggerConfig.from_env()
        self.assertEqual(cfg.level, "DEBUG")
        self.assertFalse(cfg.console)
        self.assertIsNone(cfg.log_dir)

    def test_with_overrides_ignores_none(self):
        cfg = LoggerConfig().with_overrides(level="WARNING", log_dir=None)
        self.assertEqual(cfg.level, "WARNING")
        self.assertIsNone(cfg.log_dir)


if __name__ == "__main__":
    unittest.main()
