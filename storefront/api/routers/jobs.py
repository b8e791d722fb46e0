"""Jobs API: endpoints hit by the external scheduler."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.dependencies import get_clock, get_dispatcher, get_session, get_store_config
from storefront.api.errors import to_http
from storefront.api.schemas.orders import ScanResultResponse
from storefront.config.store import StoreConfig
from storefront.core.clock import Clock
from storefront.core.exceptions import ProjectError
from storefront.notifications.dispatcher import NotificationDispatcher
from storefront.services.deadline_warning_service import DeadlineWarningService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])


@router.post("/deadline-warnings", response_model=ScanResultResponse)
async def run_deadline_warning_scan(
    session: AsyncSession = Depends(get_session),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    store_config: StoreConfig = Depends(get_store_config),
    clock: Clock = Depends(get_clock),
):
    """Run one deadline warning scan. Per-order failures are reported, not raised."""
    svc = DeadlineWarningService(session, dispatcher, store_config=store_config, clock=clock)
    try:
        result = await svc.scan()
    except ProjectError as exc:
        raise to_http(exc) from exc
    if result.errors:
        logger.warning("Jobs: deadline scan finished with %d error(s)", len(result.errors))
    return ScanResultResponse(**result.to_dict())
