# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.

from pydantic import BaseModel, Field, field_validator
from typing import Optional

from guardian.models.checkin import Mood


class CheckinRequest(BaseModel):
    thought: Optional[str] = Field(None, max_length=5000)
    mood: Optional[Mood] = None

    @field_validator("mood", mode="before")
    @classmethod
    def empty_mood_is_unset(cls, v):
        return v or None


class CheckinResponse(BaseModel):
    success: bool
    count: int
    id: int


class StatsResponse(BaseModel):
    streak: int
    life_streak: int
    avg_sentiment: float
    recent_checkins: int
    last_checkin: Optional[str] = None
    warning_active: bool
    time_remaining_seconds: Optional[int] = None
    soft_pulse_extension_hours: float
