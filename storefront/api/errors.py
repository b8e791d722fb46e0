"""Translate ProjectError into HTTPException."""
from __future__ import annotations

import logging

from fastapi import HTTPException

from storefront.core.exceptions import ProjectError

logger = logging.getLogger(__name__)


def to_http(exc: ProjectError) -> HTTPException:
    if exc.http_status >= 500:
        logger.error("API: %s", exc.to_dict())
    return HTTPException(status_code=exc.http_status, detail=exc.to_http_detail())
