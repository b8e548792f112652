# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.


from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session

from guardian.models.profile import Profile, PROFILE_ID
from guardian.services.adaptive_threshold import (
    STATS_SENTIMENT_WINDOW,
    compute_threshold_hours,
    recent_sentiment_scores,
    trailing_sentiment_average,
)
from guardian.services.checkin_service import latest_checkin
from guardian.services.continuity_tracker import get_streak, life_streak_days
from guardian.services.watchdog import ESCALATION_WINDOW_HOURS
from guardian.utils.time_utils import utcnow, local_date, hours_between


def get_stats(db: Session, watchdog, now: Optional[datetime] = None) -> dict:
    """
    Dashboard aggregates. Uses the 7-check-in sentiment window, which is
    deliberately separate from the watchdog's own window.
    """
    now = now or utcnow()
    profile = db.get(Profile, PROFILE_ID)
    last = latest_checkin(db)
    streak = get_streak(db)

    scores = recent_sentiment_scores(db, STATS_SENTIMENT_WINDOW)
    avg_sentiment = trailing_sentiment_average(scores)

    life_streak = life_streak_days(profile.owner_birthday, local_date(now)) if profile else 0

    warning_active = False
    time_remaining_seconds = None

    if profile and last:
        diff_hours = hours_between(last.timestamp, now)
        threshold_hours = compute_threshold_hours(profile.danger_threshold_days, avg_sentiment)
        deadline = watchdog.effective_deadline_hours(threshold_hours)

        warning_active = diff_hours >= deadline
        # Seconds left before the emergency alert becomes eligible
        remaining_hours = deadline + ESCALATION_WINDOW_HOURS - diff_hours
        time_remaining_seconds = max(0, int(remaining_hours * 3600))

    return {
        "streak": streak.current_count,
        "life_streak": life_streak,
        "avg_sentiment": avg_sentiment,
        "recent_checkins": len(scores),
        "last_checkin": last.timestamp.isoformat() if last else None,
        "warning_active": warning_active,
        "time_remaining_seconds": time_remaining_seconds,
        "soft_pulse_extension_hours": watchdog.grace.soft_pulse_extension_hours,
    }
