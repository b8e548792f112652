# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.

import os
import logging
import requests

from guardian.services.mail_relay_client import SendResult

logger = logging.getLogger(__name__)

MIRROR_TIMEOUT_SECONDS = float(os.getenv("MIRROR_TIMEOUT_SECONDS", "10"))
MIRROR_TABLE = "check_ins"


class CloudMirrorClient:
    """Best-effort replica of check-ins in a Supabase-style REST table."""

    def __init__(self, url: str, key: str, timeout: float = MIRROR_TIMEOUT_SECONDS):
        self.endpoint = f"{url.rstrip('/')}/rest/v1/{MIRROR_TABLE}"
        self.headers = {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
            "Prefer": "resolution=merge-duplicates,return=minimal"
        }
        self.timeout = timeout

    def upsert(self, payload: dict) -> SendResult:
        try:
            response = requests.post(self.endpoint, headers=self.headers, json=[payload], timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            return SendResult(success=False, reason=str(e))
        return SendResult(success=True)
