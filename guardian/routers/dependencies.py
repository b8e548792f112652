# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.

from fastapi import Request

from guardian.services.watchdog import Watchdog


# Dependency to get DB session. Endpoints take store_lock themselves, in their
# own worker thread; holding it here would pin a second threadpool slot.
def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


# ✅ The watchdog (and its grace state) is owned by the running app
def get_watchdog(request: Request) -> Watchdog:
    return request.app.state.watchdog
