# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.

from typing import Iterable, List, Optional
from sqlalchemy.orm import Session

from guardian.models.checkin import CheckIn

# Independent windows: escalation looks at the last 5, the stats view at the last 7
WATCHDOG_SENTIMENT_WINDOW = 5
STATS_SENTIMENT_WINDOW = 7

NEGATIVE_TREND_CUTOFF = -1
TIGHTEN_FACTOR = 0.5


def recent_sentiment_scores(db: Session, limit: int) -> List[int]:
    rows = (
        db.query(CheckIn.sentiment_score)
        .order_by(CheckIn.timestamp.desc(), CheckIn.id.desc())
        .limit(limit)
        .all()
    )
    return [row[0] or 0 for row in rows]


def trailing_sentiment_average(scores: Iterable[Optional[int]]) -> float:
    values = [score or 0 for score in scores]
    if not values:
        return 0.0
    return sum(values) / len(values)


def compute_threshold_hours(danger_threshold_days: int, avg_sentiment: float) -> float:
    """
    Silence tolerated before the warning starts.
    A sustained negative mood (average strictly below -1) halves the window.
    """
    base_hours = danger_threshold_days * 24
    if avg_sentiment < NEGATIVE_TREND_CUTOFF:
        return base_hours * TIGHTEN_FACTOR
    return float(base_hours)


def current_threshold_hours(db: Session, danger_threshold_days: int, window: int) -> float:
    avg = trailing_sentiment_average(recent_sentiment_scores(db, window))
    return compute_threshold_hours(danger_threshold_days, avg)
