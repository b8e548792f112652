# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.


import os
import logging
from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


def _database_path(engine: Engine):
    path = engine.url.database
    if not path or path == ":memory:":
        return None
    return os.path.abspath(path)


def check_store(engine: Engine) -> dict:
    """
    Integrity report for the local store. Corruption is reported, never repaired here.
    """
    path = _database_path(engine)
    try:
        with engine.connect() as conn:
            rows = [row[0] for row in conn.execute(text("PRAGMA integrity_check")).fetchall()]
    except SQLAlchemyError as e:
        logger.error(f"🛑 Store health check failed: {e}")
        return {"status": "error", "message": str(e), "path": path}

    healthy = rows == ["ok"]
    if not healthy:
        logger.error(f"🛑 Store integrity check reported problems: {rows[:5]}")

    size_mb = None
    if path and os.path.exists(path):
        size_mb = f"{os.path.getsize(path) / 1024 / 1024:.2f} MB"

    return {
        "status": "healthy" if healthy else "corrupted",
        "problems": [] if healthy else rows,
        "size": size_mb,
        "path": path,
    }


def rebuild_store(engine: Engine) -> dict:
    try:
        with engine.connect().execution_options(isolation_level="AUTOCOMMIT") as conn:
            conn.execute(text("VACUUM"))
    except SQLAlchemyError as e:
        logger.error(f"🛑 Store rebuild failed: {e}")
        return {"success": False, "message": str(e)}

    logger.info("🧹 Store rebuilt (VACUUM)")
    return {"success": True}
