# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.


from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from typing import Optional

from guardian.models.database import store_lock
from guardian.routers.dependencies import get_db
from guardian.schemas.profile_schemas import ProfileSaveRequest, ProfileView
from guardian.services.profile_service import get_profile_view, save_profile
from guardian.utils.rate_limit_utils import limiter, WRITE_RATE

router = APIRouter(tags=["Profile"])


@router.get("/profile", response_model=Optional[ProfileView])
def read_profile(db: Session = Depends(get_db)):
    """
    Returns the decrypted profile, or null before onboarding.
    Secrets are never returned, only has_smtp / has_mirror flags.
    """
    with store_lock:
        return get_profile_view(db)


@router.post("/profile")
@limiter.limit(WRITE_RATE)
def write_profile(request: Request, payload: ProfileSaveRequest, db: Session = Depends(get_db)):
    with store_lock:
        save_profile(db, payload.to_store())
    return {"success": True}
