# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.


import logging
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from html import escape
from typing import Callable, Optional
from sqlalchemy.orm import Session

from guardian.models.notification import NotificationLog
from guardian.models.profile import Profile
from guardian.services.mail_relay_client import SmtpMailRelay

logger = logging.getLogger(__name__)

SENDER_NAME = "Are You Alive Guardian"


@dataclass
class DispatchResult:
    sent: bool
    reason: Optional[str] = None


def log_surface(title: str, body: str) -> None:
    """Default OS surface: the shell picks notifications up from notification_logs."""
    logger.info(f"🔔 {title}: {body}")


def relay_from_profile(profile: Profile) -> Optional[SmtpMailRelay]:
    # smtp_pass reads as None when it cannot be decrypted on this machine
    if not (profile.smtp_host and profile.smtp_user and profile.smtp_pass):
        return None
    return SmtpMailRelay(
        host=profile.smtp_host,
        port=profile.smtp_port,
        user=profile.smtp_user,
        password=profile.smtp_pass
    )


def build_emergency_message(profile: Profile) -> EmailMessage:
    owner = profile.user_name or "the account owner"
    days = profile.danger_threshold_days

    message = EmailMessage()
    message["From"] = formataddr((SENDER_NAME, profile.smtp_user or ""))
    message["To"] = profile.contact_email
    message["Subject"] = f"CRITICAL ALERT: {owner} Initializing Emergency Protocol"

    greeting = f"Hello {profile.contact_name}," if profile.contact_name else "Hello,"
    message.set_content(
        f"{greeting}\n\n"
        f"This is an automated alert regarding {owner}.\n"
        f"The \"Are You Alive?\" system has detected silence for over {days} days.\n\n"
        "Please attempt to contact them directly.\n"
    )
    message.add_alternative(
        "<div style=\"font-family: 'Segoe UI', Tahoma, sans-serif; padding: 24px;\">"
        "<h1 style=\"color: #ef4444;\">EMERGENCY PULSE ALERT</h1>"
        f"<p>This is an automated alert regarding <strong>{escape(owner)}</strong>. "
        f"The \"Are You Alive?\" system has detected silence for over <strong>{days} days</strong>.</p>"
        "<p>Please attempt to contact them directly.</p>"
        "</div>",
        subtype="html"
    )
    return message


class NotificationDispatcher:
    """
    Hands local notices to the OS surface and the emergency e-mail to the mail relay.
    Nothing here raises into the watchdog.
    """

    def __init__(self,
                 surface: Callable[[str, str], None] = log_surface,
                 relay_factory: Callable[[Profile], Optional[object]] = relay_from_profile):
        self.surface = surface
        self.relay_factory = relay_factory

    def notify_local(self, db: Session, title: str, body: str, notification_type: str = "generic") -> bool:
        delivered = True
        try:
            self.surface(title, body)
        except Exception as e:
            delivered = False
            logger.warning(f"⚠️ Local notification failed ({title}): {e}")

        try:
            db.add(NotificationLog(
                notification_type=notification_type,
                title=title,
                content=body,
                delivered=False
            ))
            db.commit()
        except Exception as e:
            db.rollback()
            logger.warning(f"⚠️ Could not record notification ({title}): {e}")

        return delivered

    def send_emergency_alert(self, profile: Profile) -> DispatchResult:
        relay = self.relay_factory(profile)
        if relay is None:
            logger.error("🛑 Alert Failed: mail relay not configured")
            return DispatchResult(sent=False, reason="mail relay not configured")

        if not profile.contact_email:
            logger.error("🛑 Alert Failed: emergency contact e-mail unavailable")
            return DispatchResult(sent=False, reason="emergency contact e-mail unavailable")

        result = relay.send(build_emergency_message(profile))
        if not result.success:
            logger.error(f"🛑 Alert Delivery Failed: {result.reason}")
            return DispatchResult(sent=False, reason=result.reason)

        logger.info("🚨 Alert Sent Successfully via mail relay")
        return DispatchResult(sent=True)
