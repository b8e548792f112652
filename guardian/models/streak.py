# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.

from sqlalchemy import Column, Integer, Date
from guardian.models.database import Base

STREAK_ID = 1


class StreakCounter(Base):
    __tablename__ = "streak"

    id = Column(Integer, primary_key=True, default=STREAK_ID)
    current_count = Column(Integer, nullable=False, default=0, server_default="0")
    last_checkin_date = Column(Date, nullable=True)
