# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.

import os
from datetime import date, datetime
from typing import Optional
from pytz import timezone, utc

if os.getenv("ENV") != "production":
    from dotenv import load_dotenv
    load_dotenv()

LOCAL_TZ = timezone(os.getenv("GUARDIAN_TIMEZONE", "UTC"))


def utcnow() -> datetime:
    # Stored timestamps are naive UTC
    return datetime.utcnow()


def local_date(moment: datetime, tz=None) -> date:
    """Calendar date of a naive-UTC instant in the owner's time zone."""
    tz = tz or LOCAL_TZ
    return utc.localize(moment).astimezone(tz).date()


def hours_between(earlier: datetime, later: datetime) -> float:
    return (later - earlier).total_seconds() / 3600


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None
