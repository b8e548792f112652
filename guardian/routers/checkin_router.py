# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.


from functools import partial
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from guardian.models.database import store_lock
from guardian.routers.dependencies import get_db, get_watchdog
from guardian.schemas.checkin_schemas import CheckinRequest, CheckinResponse, StatsResponse
from guardian.services.checkin_service import record_checkin, list_history, HISTORY_LIMIT
from guardian.services.mirror_service import mirror_in_background
from guardian.services.stats_service import get_stats
from guardian.services.watchdog import Watchdog
from guardian.utils.rate_limit_utils import limiter, WRITE_RATE

router = APIRouter(tags=["Check-in"])


@router.post("/check-in", response_model=CheckinResponse)
@limiter.limit(WRITE_RATE)
def check_in(
    request: Request,
    payload: CheckinRequest,
    db: Session = Depends(get_db),
    watchdog: Watchdog = Depends(get_watchdog)
):
    mirror = partial(mirror_in_background, session_factory=request.app.state.session_factory)
    with store_lock:
        return record_checkin(db, thought=payload.thought, mood=payload.mood, watchdog=watchdog, mirror=mirror)


@router.get("/stats", response_model=StatsResponse)
def stats(db: Session = Depends(get_db), watchdog: Watchdog = Depends(get_watchdog)):
    with store_lock:
        return get_stats(db, watchdog)


@router.get("/history")
def history(
    limit: int = Query(HISTORY_LIMIT, ge=1, le=1000),
    db: Session = Depends(get_db)
):
    with store_lock:
        return list_history(db, limit=limit)
