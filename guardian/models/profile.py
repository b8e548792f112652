# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.

from sqlalchemy import Column, Integer, String, DateTime, Boolean
from guardian.models.database import Base
from guardian.utils.encryption import EncryptedTypeHybrid  # 🔐 Encryption utils

PROFILE_ID = 1


class Profile(Base):
    __tablename__ = "profile"

    id = Column(Integer, primary_key=True, default=PROFILE_ID)

    # 🔐 Owner identity
    user_name = Column(EncryptedTypeHybrid, nullable=True)
    user_email = Column(EncryptedTypeHybrid, nullable=True)
    owner_birthday = Column(EncryptedTypeHybrid, nullable=True)  # ISO date, e.g. "1990-04-12"

    # 🔐 Emergency contact
    contact_name = Column(EncryptedTypeHybrid, nullable=True)
    contact_email = Column(EncryptedTypeHybrid, nullable=True)
    contact_phone = Column(EncryptedTypeHybrid, nullable=True)

    # ✅ Escalation policy
    danger_threshold_days = Column(Integer, nullable=False, default=2, server_default="2")
    last_alert_sent = Column(DateTime, nullable=True)
    last_birthday_notice_year = Column(Integer, nullable=True)

    # ✉️ Mail relay (password encrypted)
    smtp_host = Column(String, nullable=True)
    smtp_port = Column(Integer, nullable=True)
    smtp_user = Column(String, nullable=True)
    smtp_pass = Column(EncryptedTypeHybrid, nullable=True)

    # ☁️ Cloud mirror (key encrypted)
    mirror_url = Column(String, nullable=True)
    mirror_key = Column(EncryptedTypeHybrid, nullable=True)

    auto_start = Column(Boolean, nullable=False, default=False, server_default="0")
