#!/usr/bin/env python3
"""
Deadline warning scan, meant to be run by cron / a scheduler every few minutes.

Usage:
  python -m storefront.scripts.deadline_scan [--now 2024-05-01T12:00:00+00:00] [--dry-run] [--verbose]

Required env: DATABASE_URL. Mail: BREVO_API_KEY, ADMIN_EMAIL (no-op dispatcher otherwise).

Prints the scan result as JSON. Exit code is 0 when the scan ran (even if some
orders failed; see "errors"), 1 when the batch could not run at all.
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime
from typing import List, Optional, Sequence

from storefront.config import load_mail_config, load_store_config
from storefront.core.clock import ensure_aware
from storefront.core.exceptions import ProjectError
from storefront.core.logger import LoggerConfig, configure
from storefront.infra.database.engine import build_engine, build_session_factory, close_engine
from storefront.notifications.dispatcher import build_dispatcher
from storefront.services.deadline_warning_service import DeadlineWarningService

logger = logging.getLogger(__name__)


def _parse_now(raw: str) -> datetime:
    try:
        return ensure_aware(datetime.fromisoformat(raw))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid ISO-8601 timestamp: {raw!r}") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="deadline_scan",
        description="Email customers whose order edit window is about to close.",
    )
    parser.add_argument("--now", type=_parse_now, default=None, help="Override the scan time (ISO-8601).")
    parser.add_argument(
        "--dry-run", action="store_true", help="List due orders without sending or flagging anything.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging.")
    return parser


async def _run_scan(now: Optional[datetime], dry_run: bool) -> dict:
    store_config = load_store_config()
    mail_config = load_mail_config()
    dispatcher = build_dispatcher(mail_config)

    engine = build_engine(use_null_pool=True)
    session_factory = build_session_factory(engine)
    try:
        async with session_factory() as session:
            svc = DeadlineWarningService(session, dispatcher, store_config=store_config)
            if dry_run:
                due = await svc.find_due(now)
                return {"due": [o.order_code for o in due]}
            result = await svc.scan(now)
            return result.to_dict()
    finally:
        await close_engine()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = LoggerConfig.from_env()
    if args.verbose:
        config = config.with_overrides(level="DEBUG")
    configure(config)

    try:
        output = asyncio.run(_run_scan(args.now, args.dry_run))
    except ProjectError as exc:
        logger.error("Deadline scan aborted: %s", exc, extra={"error": exc.to_dict()})
        print(json.dumps({"error": exc.to_http_detail()}, ensure_ascii=False))
        return 1
    except ValueError as exc:
        logger.error("Deadline scan aborted, invalid configuration: %s", exc)
        print(json.dumps({"error": {"code": "CONFIGURATION_ERROR", "message": str(exc)}}))
        return 1

    errors: List[str] = output.get("errors", [])
    if errors:
        logger.warning("Deadline scan finished with %d error(s)", len(errors))
    print(json.dumps(output, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
