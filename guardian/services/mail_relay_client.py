# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.

import os
import ssl
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Optional

logger = logging.getLogger(__name__)

MAIL_TIMEOUT_SECONDS = float(os.getenv("MAIL_TIMEOUT_SECONDS", "15"))


@dataclass
class SendResult:
    success: bool
    reason: Optional[str] = None


class SmtpMailRelay:
    """
    Single-attempt SMTP sender. Port 465 uses implicit TLS, anything else
    upgrades with STARTTLS when the server offers it.
    """

    def __init__(self, host: str, port: Optional[int], user: str, password: str,
                 timeout: float = MAIL_TIMEOUT_SECONDS):
        self.host = host
        self.port = port or 587
        self.user = user
        self.password = password
        self.timeout = timeout

    def send(self, message: EmailMessage) -> SendResult:
        try:
            if self.port == 465:
                with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout,
                                      context=ssl.create_default_context()) as smtp:
                    smtp.login(self.user, self.password)
                    smtp.send_message(message)
            else:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                    smtp.ehlo()
                    if smtp.has_extn("starttls"):
                        smtp.starttls(context=ssl.create_default_context())
                        smtp.ehlo()
                    smtp.login(self.user, self.password)
                    smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            return SendResult(success=False, reason=f"{type(e).__name__}: {e}")

        return SendResult(success=True)
