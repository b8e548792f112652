# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.


from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from guardian.models.database import store_lock
from guardian.routers.dependencies import get_db, get_watchdog
from guardian.services.watchdog import Watchdog
from guardian.utils.rate_limit_utils import limiter, WRITE_RATE

router = APIRouter(tags=["Watchdog"])


@router.post("/activity/soft-pulse")
@limiter.limit(WRITE_RATE)
def soft_pulse(request: Request, watchdog: Watchdog = Depends(get_watchdog)):
    """
    Called by the shell on incidental activity (e.g. screen unlock).
    Extends the silence deadline until the next hard check-in or restart.
    """
    extension = watchdog.register_activity()
    return {"success": True, "soft_pulse_extension_hours": extension}


@router.post("/watchdog/evaluate")
def evaluate_now(db: Session = Depends(get_db), watchdog: Watchdog = Depends(get_watchdog)):
    with store_lock:
        return watchdog.evaluate(db).to_dict()
