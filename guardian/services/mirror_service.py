# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.


import logging
import threading
from typing import Optional

from sqlalchemy.orm import Session

from guardian.models.checkin import CheckIn, SyncStatus
from guardian.models.database import locked_session
from guardian.models.profile import Profile
from guardian.services.cloud_mirror_client import CloudMirrorClient
from guardian.utils.encryption import encrypt

logger = logging.getLogger(__name__)


def client_from_profile(profile: Profile) -> Optional[CloudMirrorClient]:
    if not (profile.mirror_url and profile.mirror_key):
        return None
    return CloudMirrorClient(profile.mirror_url, profile.mirror_key)


def build_payload(checkin: CheckIn, thought: Optional[str]) -> dict:
    # The replica only ever sees ciphertext
    return {
        "timestamp": checkin.timestamp.isoformat(),
        "thought": encrypt(thought) or "",
        "mood": checkin.mood.value if checkin.mood else None,
        "sentiment_score": checkin.sentiment_score,
    }


def mark_synced(db: Session, checkin_id: int) -> bool:
    row = db.get(CheckIn, checkin_id)
    if row is None:
        return False
    row.sync_status = SyncStatus.synced
    db.commit()
    return True


def mirror_checkin(checkin_id: int, payload: dict, client: CloudMirrorClient, session_factory=None) -> bool:
    result = client.upsert(payload)
    if not result.success:
        logger.warning(f"☁️ Mirror failed for check-in {checkin_id}: {result.reason}")
        return False

    with locked_session(session_factory) as db:
        mark_synced(db, checkin_id)
    logger.info(f"☁️ Check-in {checkin_id} mirrored")
    return True


def _mirror_safely(checkin_id: int, payload: dict, client: CloudMirrorClient, session_factory=None) -> None:
    try:
        mirror_checkin(checkin_id, payload, client, session_factory)
    except Exception as e:
        logger.error(f"🛑 Mirror task crashed for check-in {checkin_id}: {e}", exc_info=True)


def mirror_in_background(checkin_id: int, payload: dict, client: CloudMirrorClient,
                         session_factory=None) -> threading.Thread:
    worker = threading.Thread(
        target=_mirror_safely,
        args=(checkin_id, payload, client, session_factory),
        name=f"mirror-checkin-{checkin_id}",
        daemon=True
    )
    worker.start()
    return worker
