# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.

import os
import threading
from contextlib import contextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

# ✅ Only load .env in local/dev
if os.environ.get("ENV") != "production":
    from dotenv import load_dotenv
    load_dotenv()

SQLALCHEMY_DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./guardian.sqlite")


def build_engine(url: str):
    if url.startswith("sqlite"):
        # Watchdog ticks and API requests run on different threads
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_size=5,
        max_overflow=5,
        pool_recycle=1800,
        pool_pre_ping=True
    )


engine = build_engine(SQLALCHEMY_DATABASE_URL)

# ✅ Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ✅ Base model
Base = declarative_base()

# 🔒 Single writer at a time: check-ins, watchdog ticks and mirror callbacks
# all touch the same profile/streak rows.
store_lock = threading.Lock()


@contextmanager
def locked_session(factory=None):
    """
    Opens a session while holding the store lock. Use only at the outermost
    boundary (request dependency, scheduled job); the lock is not re-entrant.
    """
    factory = factory or SessionLocal
    with store_lock:
        db = factory()
        try:
            yield db
        finally:
            db.close()