# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.

import logging
from datetime import date, timedelta
from typing import Optional
from sqlalchemy.orm import Session

from guardian.models.streak import StreakCounter, STREAK_ID
from guardian.utils.time_utils import parse_iso_date

logger = logging.getLogger(__name__)


def next_streak_count(current_count: int, last_checkin_date: Optional[date], today: date) -> int:
    """
    Consecutive-day streak after a check-in on `today`:
    same day keeps the count, the day after extends it, anything else restarts at 1.
    """
    if last_checkin_date == today:
        return current_count
    if last_checkin_date == today - timedelta(days=1):
        return current_count + 1
    return 1


def get_streak(db: Session) -> StreakCounter:
    streak = db.get(StreakCounter, STREAK_ID)
    if streak is None:
        streak = StreakCounter(id=STREAK_ID, current_count=0)
        db.add(streak)
        db.flush()
    return streak


def apply_checkin(db: Session, today: date) -> int:
    streak = get_streak(db)
    new_count = next_streak_count(streak.current_count or 0, streak.last_checkin_date, today)

    if streak.last_checkin_date != today:
        streak.current_count = new_count
        streak.last_checkin_date = today
        db.commit()
        logger.info(f"🔥 Streak now {new_count} day(s)")

    return new_count


def life_streak_days(birthday: Optional[str], today: date) -> int:
    """Whole days since the owner's birthday; 0 when it is unknown."""
    born = parse_iso_date(birthday)
    if born is None or born > today:
        return 0
    return (today - born).days
