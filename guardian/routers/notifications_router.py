# Copyright (c) 2025 Shiladitya Mallick
# This file is part of the Alive Guardian project.
# Licensed under the MIT License - see the LICENSE file for details.


from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from guardian.models.database import store_lock
from guardian.routers.dependencies import get_db
from guardian.models.notification import NotificationLog

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("/recent")
def get_recent_notifications(db: Session = Depends(get_db), limit: int = 10):
    with store_lock:
        logs = (
            db.query(NotificationLog)
            .order_by(NotificationLog.timestamp.desc(), NotificationLog.id.desc())
            .limit(limit)
            .all()
        )

        return [
            {
                "id": log.id,
                "type": log.notification_type,
                "title": log.title,
                "text": log.content,  # Already decrypted automatically
                "delivered": log.delivered,
                "timestamp": log.timestamp.isoformat()
            }
            for log in logs
        ]


@router.patch("/mark-delivered/{notification_id}")
def mark_as_delivered(notification_id: int, db: Session = Depends(get_db)):
    with store_lock:
        log = db.get(NotificationLog, notification_id)
        if not log:
            raise HTTPException(status_code=404, detail="Notification not found")
        log.delivered = True
        db.commit()
    return {"status": "updated"}
