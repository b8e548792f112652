# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.

import os
import logging
from typing import Optional
from sqlalchemy.types import TypeDecorator, Text
from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger(__name__)

# ✅ Optional: load from .env in dev
if os.getenv("ENV") != "production":
    from dotenv import load_dotenv
    load_dotenv()


class FieldCodec:
    """
    Reversible at-rest protection for sensitive text fields.

    The key lives in the host's secure storage (exposed to us as FERNET_SECRET).
    When no usable key is available every operation returns None instead of
    raising, and callers treat None as "value unavailable".
    """

    def __init__(self, secret: Optional[str]):
        self._fernet = None
        if not secret:
            return
        try:
            self._fernet = Fernet(secret)
        except (ValueError, TypeError):
            logger.error("⚠️ FERNET_SECRET is invalid. Encrypted fields will be unavailable.")

    def is_available(self) -> bool:
        return self._fernet is not None

    def encrypt(self, text: Optional[str]) -> Optional[str]:
        if not text or not self.is_available():
            return None
        return self._fernet.encrypt(text.encode()).decode()

    def decrypt(self, token) -> Optional[str]:
        if not token or not self.is_available():
            return None
        if isinstance(token, str):
            token = token.encode()
        try:
            return self._fernet.decrypt(bytes(token)).decode()
        except (InvalidToken, ValueError, TypeError):
            # Foreign or corrupt ciphertext reads as absent
            return None


# 🔐 Process-wide codec backed by the configured secret
codec = FieldCodec(os.getenv("FERNET_SECRET"))

if not codec.is_available():
    logger.warning("🔐 Secure storage unavailable: sensitive fields will not be stored.")


def encrypt(text: Optional[str]) -> Optional[str]:
    return codec.encrypt(text)


def decrypt(token) -> Optional[str]:
    return codec.decrypt(token)


# 🧩 Custom Encrypted DB Field
class EncryptedTypeHybrid(TypeDecorator):
    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return encrypt(value)
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            return decrypt(value)
        return value
