# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.

from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import date


class ProfileSaveRequest(BaseModel):
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    owner_birthday: Optional[date] = None
    danger_threshold_days: int = Field(2, ge=1)

    smtp_host: Optional[str] = None
    smtp_port: Optional[int] = Field(None, ge=1, le=65535)
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None  # blank keeps the stored secret

    mirror_url: Optional[str] = None
    mirror_key: Optional[str] = None  # blank keeps the stored secret

    auto_start: bool = False

    @field_validator("user_name", "user_email", "contact_name", "contact_email",
                     "contact_phone", "smtp_host", "smtp_user", "mirror_url", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    def to_store(self) -> dict:
        data = self.model_dump()
        data["owner_birthday"] = self.owner_birthday.isoformat() if self.owner_birthday else None
        return data


class ProfileView(BaseModel):
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    owner_birthday: Optional[str] = None
    danger_threshold_days: int
    last_alert_sent: Optional[str] = None
    smtp_host: Optional[str] = None
    smtp_port: Optional[int] = None
    smtp_user: Optional[str] = None
    mirror_url: Optional[str] = None
    auto_start: bool = False
    has_smtp: bool = False
    has_mirror: bool = False
