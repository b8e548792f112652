# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.


from fastapi import APIRouter, Request

from guardian.models.database import store_lock
from guardian.services.store_health import check_store, rebuild_store
from guardian.utils.encryption import codec

router = APIRouter(tags=["Infra"])


@router.get("/health")
def health_check(request: Request):
    scheduler = request.app.state.scheduler
    return {
        "status": "ok",
        "secure_storage": codec.is_available(),
        "watchdog_running": bool(scheduler and scheduler.running),
    }


@router.get("/db-health")
def db_health(request: Request):
    with store_lock:
        return check_store(request.app.state.engine)


@router.post("/db-health/rebuild")
def db_rebuild(request: Request):
    with store_lock:
        return rebuild_store(request.app.state.engine)
