# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.


import logging
from typing import Optional
from sqlalchemy.orm import Session

from guardian.models.profile import Profile, PROFILE_ID
from guardian.utils import encryption

logger = logging.getLogger(__name__)

PLAIN_FIELDS = (
    "user_name", "user_email", "contact_name", "contact_email", "contact_phone",
    "owner_birthday", "danger_threshold_days", "smtp_host", "smtp_port", "smtp_user",
    "mirror_url", "auto_start",
)
# Secrets are only replaced when a new value is supplied
SECRET_FIELDS = ("smtp_pass", "mirror_key")


def get_profile(db: Session) -> Optional[Profile]:
    return db.get(Profile, PROFILE_ID)


def get_profile_view(db: Session) -> Optional[dict]:
    """
    Decrypted profile for the shell. Secrets are reported as flags only.
    Fields that cannot be decrypted on this machine come back as None.
    """
    profile = get_profile(db)
    if profile is None:
        return None

    return {
        "user_name": profile.user_name,
        "user_email": profile.user_email,
        "contact_name": profile.contact_name,
        "contact_email": profile.contact_email,
        "contact_phone": profile.contact_phone,
        "owner_birthday": profile.owner_birthday,
        "danger_threshold_days": profile.danger_threshold_days,
        "last_alert_sent": profile.last_alert_sent.isoformat() if profile.last_alert_sent else None,
        "smtp_host": profile.smtp_host,
        "smtp_port": profile.smtp_port,
        "smtp_user": profile.smtp_user,
        "mirror_url": profile.mirror_url,
        "auto_start": bool(profile.auto_start),
        "has_smtp": profile.smtp_pass is not None,
        "has_mirror": profile.mirror_key is not None,
    }


def save_profile(db: Session, data: dict) -> Profile:
    profile = get_profile(db)
    if profile is None:
        profile = Profile(id=PROFILE_ID)
        db.add(profile)

    for field in PLAIN_FIELDS:
        if field in data:
            setattr(profile, field, data[field])

    for field in SECRET_FIELDS:
        if not data.get(field):
            continue
        if not encryption.codec.is_available():
            # A secret that cannot be encrypted must not wipe the stored one
            logger.warning(f"🔐 Secure storage unavailable: {field} left unchanged")
            continue
        setattr(profile, field, data[field])

    if profile.danger_threshold_days is None:
        profile.danger_threshold_days = 2
    profile.auto_start = bool(profile.auto_start)

    db.commit()
    db.refresh(profile)
    logger.info("🔐 Profile Securely Updated")
    return profile
