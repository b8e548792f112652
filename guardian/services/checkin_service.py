# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.


import logging
from datetime import datetime
from typing import Callable, List, Optional
from sqlalchemy.orm import Session

from guardian.models.checkin import CheckIn, Mood
from guardian.models.profile import Profile, PROFILE_ID
from guardian.services import continuity_tracker, mirror_service
from guardian.services.sentiment_scorer import score as default_scorer
from guardian.utils.time_utils import utcnow, local_date

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 100


def latest_checkin(db: Session) -> Optional[CheckIn]:
    return (
        db.query(CheckIn)
        .order_by(CheckIn.timestamp.desc(), CheckIn.id.desc())
        .first()
    )


def list_history(db: Session, limit: int = HISTORY_LIMIT) -> List[dict]:
    rows = (
        db.query(CheckIn)
        .order_by(CheckIn.timestamp.desc(), CheckIn.id.desc())
        .limit(limit)
        .all()
    )
    return [
        {
            "id": row.id,
            "timestamp": row.timestamp.isoformat(),
            "thought": row.thought,  # Already decrypted automatically
            "mood": row.mood.value if row.mood else None,
            "sentiment_score": row.sentiment_score,
            "sync_status": row.sync_status.value,
        }
        for row in rows
    ]


def _safe_score(scorer: Callable[[str], int], text: str) -> int:
    try:
        return int(scorer(text))
    except Exception as e:
        logger.warning(f"⚠️ Sentiment scorer raised, using 0: {e}")
        return 0


def record_checkin(
    db: Session,
    thought: Optional[str] = None,
    mood: Optional[Mood] = None,
    now: Optional[datetime] = None,
    watchdog=None,
    scorer: Callable[[str], int] = default_scorer,
    mirror: Optional[Callable] = None,
) -> dict:
    """
    Stores a hard check-in, advances the streak and clears any soft-pulse grace.
    The cloud mirror (if configured) is started in the background and never awaited.
    """
    now = now or utcnow()
    thought = thought or None

    checkin = CheckIn(
        timestamp=now,
        thought=thought,
        mood=mood,
        sentiment_score=_safe_score(scorer, thought or "")
    )
    db.add(checkin)
    db.commit()
    db.refresh(checkin)

    count = continuity_tracker.apply_checkin(db, local_date(now))

    if watchdog is not None:
        watchdog.reset_grace()

    logger.info(f"✅ Check-in {checkin.id} recorded (mood={mood.value if mood else '-'}, score={checkin.sentiment_score})")

    profile = db.get(Profile, PROFILE_ID)
    if profile is not None:
        client = mirror_service.client_from_profile(profile)
        if client is not None:
            payload = mirror_service.build_payload(checkin, thought)
            (mirror or mirror_service.mirror_in_background)(checkin.id, payload, client)

    return {"success": True, "count": count, "id": checkin.id}
