# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.


import os
import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session

from guardian.models.database import locked_session
from guardian.models.profile import Profile, PROFILE_ID
from guardian.services.adaptive_threshold import current_threshold_hours, WATCHDOG_SENTIMENT_WINDOW
from guardian.services.checkin_service import latest_checkin
from guardian.services.notification_dispatcher import NotificationDispatcher
from guardian.utils.time_utils import utcnow, local_date, hours_between, parse_iso_date

logger = logging.getLogger(__name__)

if os.getenv("ENV") != "production":
    from dotenv import load_dotenv
    load_dotenv()

SOFT_PULSE_BONUS_HOURS = float(os.getenv("SOFT_PULSE_BONUS_HOURS", "6"))
ESCALATION_WINDOW_HOURS = 1
REALERT_GUARD_HOURS = 12

WARNING_TITLE = "Are You Alive?"
WARNING_BODY = "Pulse check required. Silent escalation starting soon."
BIRTHDAY_TITLE = "Happy Birthday!"
BIRTHDAY_BODY = "Wishing you a bright year in the cosmos. Stay alive, stay curious."


class EscalationLevel(enum.Enum):
    normal = "normal"
    warning = "warning"
    escalated = "escalated"


class GraceState:
    """Process-lifetime grace extension. Never persisted, so a restart clears it."""

    def __init__(self, soft_pulse_extension_hours: float = 0.0):
        self.soft_pulse_extension_hours = soft_pulse_extension_hours


@dataclass
class WatchdogReport:
    active: bool
    level: Optional[EscalationLevel] = None
    diff_hours: Optional[float] = None
    threshold_hours: Optional[float] = None
    effective_deadline_hours: Optional[float] = None
    warning_sent: bool = False
    alert_attempted: bool = False
    alert_sent: bool = False
    alert_reason: Optional[str] = None
    birthday_notice_sent: bool = False
    skipped_reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "active": self.active,
            "level": self.level.value if self.level else None,
            "diff_hours": self.diff_hours,
            "threshold_hours": self.threshold_hours,
            "effective_deadline_hours": self.effective_deadline_hours,
            "warning_sent": self.warning_sent,
            "alert_attempted": self.alert_attempted,
            "alert_sent": self.alert_sent,
            "alert_reason": self.alert_reason,
            "birthday_notice_sent": self.birthday_notice_sent,
            "skipped_reason": self.skipped_reason,
        }


def classify_silence(diff_hours: float, effective_deadline_hours: float) -> EscalationLevel:
    if diff_hours < effective_deadline_hours:
        return EscalationLevel.normal
    if diff_hours - effective_deadline_hours < ESCALATION_WINDOW_HOURS:
        return EscalationLevel.warning
    return EscalationLevel.escalated


def alert_guard_allows(last_alert_sent: Optional[datetime], now: datetime) -> bool:
    # The re-alert guard is the only backoff for emergency mail
    return last_alert_sent is None or last_alert_sent < now - timedelta(hours=REALERT_GUARD_HOURS)


def is_birthday(born, today) -> bool:
    if (born.month, born.day) == (today.month, today.day):
        return True
    # Feb 29 birthdays are celebrated on Feb 28 in common years
    if (born.month, born.day) == (2, 29) and (today.month, today.day) == (2, 28):
        try:
            today.replace(day=29)
        except ValueError:
            return True
    return False


class Watchdog:
    """
    Level-triggered escalation: every tick recomputes the state from the absolute
    silence since the last check-in. Owns the soft-pulse grace state.
    """

    def __init__(self, dispatcher: Optional[NotificationDispatcher] = None,
                 session_factory=None,
                 soft_pulse_bonus_hours: float = SOFT_PULSE_BONUS_HOURS):
        self.dispatcher = dispatcher or NotificationDispatcher()
        self.session_factory = session_factory
        self.soft_pulse_bonus_hours = soft_pulse_bonus_hours
        self.grace = GraceState()

    # ---------------------- 🫀 GRACE ----------------------
    def register_activity(self) -> float:
        self.grace.soft_pulse_extension_hours = self.soft_pulse_bonus_hours
        logger.info(f"💓 Soft Pulse Detected: grace extended by {self.soft_pulse_bonus_hours}h")
        return self.grace.soft_pulse_extension_hours

    def reset_grace(self) -> None:
        self.grace.soft_pulse_extension_hours = 0.0

    def effective_deadline_hours(self, threshold_hours: float) -> float:
        return threshold_hours + self.grace.soft_pulse_extension_hours

    # ---------------------- 🎂 BIRTHDAY ----------------------
    def _maybe_send_birthday_notice(self, db: Session, profile: Profile, now: datetime) -> bool:
        born = parse_iso_date(profile.owner_birthday)
        if born is None:
            return False

        today = local_date(now)
        if not is_birthday(born, today):
            return False
        if profile.last_birthday_notice_year is not None and profile.last_birthday_notice_year >= today.year:
            return False

        self.dispatcher.notify_local(db, BIRTHDAY_TITLE, BIRTHDAY_BODY, notification_type="birthday")
        profile.last_birthday_notice_year = today.year
        db.commit()
        logger.info(f"🎂 Birthday notice sent for {today.year}")
        return True

    # ---------------------- 🛡️ EVALUATION ----------------------
    def evaluate(self, db: Session, now: Optional[datetime] = None) -> WatchdogReport:
        now = now or utcnow()

        profile = db.get(Profile, PROFILE_ID)
        if profile is None:
            return WatchdogReport(active=False, skipped_reason="no profile")

        last = latest_checkin(db)
        if last is None:
            return WatchdogReport(active=False, skipped_reason="no check-in yet")

        report = WatchdogReport(active=True)
        report.birthday_notice_sent = self._maybe_send_birthday_notice(db, profile, now)

        report.diff_hours = hours_between(last.timestamp, now)
        report.threshold_hours = current_threshold_hours(
            db, profile.danger_threshold_days, WATCHDOG_SENTIMENT_WINDOW
        )
        report.effective_deadline_hours = self.effective_deadline_hours(report.threshold_hours)
        report.level = classify_silence(report.diff_hours, report.effective_deadline_hours)

        if report.level is EscalationLevel.warning:
            self.dispatcher.notify_local(db, WARNING_TITLE, WARNING_BODY, notification_type="warning")
            report.warning_sent = True
            logger.info(f"⚠️ Warning: silent for {report.diff_hours:.1f}h (deadline {report.effective_deadline_hours:.1f}h)")

        elif report.level is EscalationLevel.escalated:
            if alert_guard_allows(profile.last_alert_sent, now):
                report.alert_attempted = True
                result = self.dispatcher.send_emergency_alert(profile)
                report.alert_sent = result.sent
                report.alert_reason = result.reason
                if result.sent:
                    profile.last_alert_sent = now
                    db.commit()
            else:
                logger.info(f"⏱️ Emergency alert already sent at {profile.last_alert_sent.isoformat()}")

        return report

    def run_tick(self) -> Optional[WatchdogReport]:
        """Scheduler entry point. Never raises."""
        try:
            with locked_session(self.session_factory) as db:
                return self.evaluate(db)
        except Exception as e:
            logger.error(f"🛑 Watchdog tick failed: {e}", exc_info=True)
            return None
