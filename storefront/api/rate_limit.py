"""Shared slowapi limiter. Limits are configurable via env."""
from __future__ import annotations

import os

from slowapi import Limiter
from slowapi.util import get_remote_address

TRACKING_RATE_LIMIT = os.environ.get("TRACKING_RATE_LIMIT", "30/minute")

limiter = Limiter(key_func=get_remote_address)
