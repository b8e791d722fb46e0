"""Storefront FastAPI application: entry point.

Start with:
    uvicorn storefront.api.main:app --reload --host 0.0.0.0 --port 8000

Mail delivery is optional: without BREVO_API_KEY / ADMIN_EMAIL a no-op
dispatcher is used and notifications are only logged (unless MAIL_REQUIRED
is set, in which case startup fails).
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from storefront import __version__
from storefront.api.rate_limit import limiter
from storefront.config import load_mail_config, load_store_config
from storefront.core.clock import utcnow
from storefront.core.logger import configure
from storefront.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)
from storefront.notifications.dispatcher import build_dispatcher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── Startup ──────────────────────────────────────────────────
    configure()

    store_config = load_store_config()
    mail_config = load_mail_config()

    await ensure_database_exists()
    engine = build_engine()
    session_factory = build_session_factory(engine)
    await init_db()

    app.state.session_factory = session_factory
    app.state.store_config = store_config
    app.state.mail_config = mail_config
    app.state.dispatcher = build_dispatcher(mail_config)
    app.state.clock = utcnow
    logger.info(
        "API: ready (edit window %d min, warning window %d min, mail via %s)",
        store_config.edit_window_minutes,
        store_config.warning_window_minutes,
        app.state.dispatcher.provider,
    )

    yield

    # ── Shutdown ─────────────────────────────────────────────────
    await close_engine()
    logger.info("API: engine disposed")


app = FastAPI(
    title="Storefront API",
    version=__version__,
    description="Order checkout, tracking, edit window and status lifecycle for the storefront.",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

_allowed_origins = os.environ.get(
    "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Admin API key ────────────────────────────────────────────────
# Set ADMIN_API_KEY to protect the admin and jobs endpoints.
# Requests must then include the header:  X-Api-Key: <value>
# The shop endpoints stay public. Without ADMIN_API_KEY the check is skipped.
_ADMIN_API_KEY = os.environ.get("ADMIN_API_KEY", "").strip() or None
_PROTECTED_PREFIXES = ("/api/v1/orders", "/api/v1/jobs")


@app.middleware("http")
async def api_key_middleware(request: Request, call_next):
    if _ADMIN_API_KEY and request.url.path.startswith(_PROTECTED_PREFIXES):
        if request.headers.get("X-Api-Key") != _ADMIN_API_KEY:
            return JSONResponse(
                status_code=401,
                content={"detail": "Unauthorized: set X-Api-Key header"},
            )
    return await call_next(request)


# ── Routers ───────────────────────────────────────────────────────
from storefront.api.routers import jobs, orders, shop  # noqa: E402

app.include_router(shop.router, prefix="/api/v1")
app.include_router(orders.router, prefix="/api/v1")
app.include_router(jobs.router, prefix="/api/v1")


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
