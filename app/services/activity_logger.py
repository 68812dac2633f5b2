"""
Activity logging service for the audit trail
"""

from fastapi import Request
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional
import logging

from app.models.activity_log import ActivityLog

logger = logging.getLogger(__name__)

class ActivityLogger:
    """Service for recording API activity"""

    def __init__(self, db: Session):
        self.db = db

    async def log_activity(
        self,
        endpoint: str,
        method: str,
        status_code: int,
        user_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        error_message: Optional[str] = None
    ) -> Optional[ActivityLog]:
        """Record an activity; audit failures never fail the main operation"""
        try:
            activity_log = ActivityLog(
                endpoint=endpoint,
                method=method,
                status_code=status_code,
                user_id=user_id,
                ip_address=ip_address,
                user_agent=user_agent,
                error_message=error_message
            )

            self.db.add(activity_log)
            self.db.commit()
            self.db.refresh(activity_log)

            return activity_log

        except SQLAlchemyError as e:
            logger.error(f"Failed to log activity: {e}")
            self.db.rollback()
            return None

    async def log_request(
        self,
        request: Request,
        status_code: int,
        user_id: Optional[str] = None,
        error_message: Optional[str] = None
    ) -> Optional[ActivityLog]:
        """Record an activity using the endpoint and client details of a request"""
        return await self.log_activity(
            endpoint=str(request.url.path),
            method=request.method,
            status_code=status_code,
            user_id=user_id,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
            error_message=error_message
        )

    def get_recent_activities(self, limit: int = 100) -> list[ActivityLog]:
        """Get recent activities"""
        return (
            self.db.query(ActivityLog)
            .order_by(ActivityLog.created_at.desc())
            .limit(limit)
            .all()
        )
