# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.


import os
import logging
from datetime import datetime, timedelta
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.triggers.date import DateTrigger
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from guardian.models import database
from guardian.models.migrations import ensure_schema
from guardian.routers import profile_router, checkin_router, watchdog_router
from guardian.routers import notifications_router, healthz_router
from guardian.services.watchdog import Watchdog
from guardian.utils.rate_limit_utils import limiter
from guardian.utils.time_utils import LOCAL_TZ

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("guardian")

WATCHDOG_INTERVAL_MINUTES = float(os.getenv("WATCHDOG_INTERVAL_MINUTES", "15"))
WATCHDOG_STARTUP_DELAY_SECONDS = float(os.getenv("WATCHDOG_STARTUP_DELAY_SECONDS", "5"))


def schedule_watchdog(scheduler: BackgroundScheduler, watchdog: Watchdog) -> None:
    # 🛡️ Recurring evaluation
    scheduler.add_job(
        watchdog.run_tick,
        trigger=IntervalTrigger(minutes=WATCHDOG_INTERVAL_MINUTES, timezone=LOCAL_TZ),
        id="watchdog_interval",
        replace_existing=True,
        max_instances=1,
        coalesce=True
    )
    # 🚀 Once shortly after startup
    scheduler.add_job(
        watchdog.run_tick,
        trigger=DateTrigger(
            run_date=datetime.now(LOCAL_TZ) + timedelta(seconds=WATCHDOG_STARTUP_DELAY_SECONDS),
            timezone=LOCAL_TZ
        ),
        id="watchdog_startup",
        replace_existing=True
    )


def create_app(engine=None, session_factory=None, run_scheduler: bool = True, watchdog: Watchdog = None) -> FastAPI:
    engine = engine or database.engine
    session_factory = session_factory or database.SessionLocal
    watchdog = watchdog or Watchdog(session_factory=session_factory)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("🛡️ System Boot: Alive Guardian backend")
        ensure_schema(engine)

        scheduler = None
        if run_scheduler:
            scheduler = BackgroundScheduler(job_defaults={"misfire_grace_time": 60}, timezone=LOCAL_TZ)
            schedule_watchdog(scheduler, watchdog)
            scheduler.start()
        app.state.scheduler = scheduler

        yield

        if scheduler:
            # Waits for a running tick so no evaluation is cut mid-write
            scheduler.shutdown(wait=True)
        logger.info("👋 Watchdog stopped")

    app = FastAPI(
        lifespan=lifespan,
        title="Alive Guardian API",
        description="Check-in watchdog and emergency escalation backend",
        version="1.0"
    )

    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.watchdog = watchdog
    app.state.scheduler = None
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)

    app.include_router(profile_router.router)
    app.include_router(checkin_router.router)
    app.include_router(watchdog_router.router)
    app.include_router(notifications_router.router)
    app.include_router(healthz_router.router)

    # ---------------------- ADDING EXCEPTION HANDLER ----------------------
    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_exceeded_handler(request, exc):
        return JSONResponse(
            status_code=429,
            content={"detail": "Too many requests. Please slow down."}
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=os.getenv("GUARDIAN_HOST", "127.0.0.1"), port=int(os.getenv("GUARDIAN_PORT", "8765")))
