# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from datetime import datetime
from guardian.models.database import Base
from guardian.utils.encryption import EncryptedTypeHybrid  # 🔐 Encryption utils


class NotificationLog(Base):
    __tablename__ = "notification_logs"

    id = Column(Integer, primary_key=True, index=True)
    notification_type = Column(String, default="generic")  # e.g., warning, birthday

    title = Column(String, nullable=False)
    content = Column(EncryptedTypeHybrid, nullable=True)  # 🔐 Encrypted transparently

    delivered = Column(Boolean, default=False)
    timestamp = Column(DateTime, default=datetime.utcnow)
