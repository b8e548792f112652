# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.

import enum
from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Enum
from guardian.models.database import Base
from guardian.utils.encryption import EncryptedTypeHybrid  # 🔐


class Mood(enum.Enum):
    happy = "happy"
    neutral = "neutral"
    tired = "tired"
    sad = "sad"
    empty = "empty"


class SyncStatus(enum.Enum):
    pending = "pending"
    synced = "synced"


class CheckIn(Base):
    """Append-only. Only sync_status may change after insert."""
    __tablename__ = "check_ins"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    thought = Column(EncryptedTypeHybrid, nullable=True)  # 🔐 Encrypted
    mood = Column(Enum(Mood, native_enum=False), nullable=True)
    sentiment_score = Column(Integer, nullable=False, default=0, server_default="0")

    sync_status = Column(
        Enum(SyncStatus, native_enum=False),
        nullable=False,
        default=SyncStatus.pending,
        server_default=SyncStatus.pending.value
    )
