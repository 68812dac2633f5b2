"""
Dashboard endpoints: patient overview, headline statistics and the day's agenda
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from datetime import date, datetime
from typing import Optional
import logging

from app.database import get_db
from app.schemas.dashboard import AppointmentListResponse, DashboardStatsResponse, PatientListResponse
from app.services.dashboard_service import DashboardService
from app.utils.error_handler import ClinicError, InternalError, ValidationError
from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/patients", response_model=PatientListResponse)
@limiter.limit("30/minute")
async def get_dashboard_patients(
    request: Request,
    limit: int = Query(10, ge=1, description="Maximum number of patients"),
    sort_by: str = Query("created_at", alias="sortBy", description="created_at, updated_at, name or last_session"),
    order: str = Query("desc", description="asc or desc"),
    db: Session = Depends(get_db)
):
    """Active patients with last session and session counts, plus clinic-wide counters"""
    try:
        dashboard_service = DashboardService(db)
        data = await dashboard_service.list_patients(limit=limit, sort_by=sort_by, order=order)
        return PatientListResponse(success=True, data=data)

    except ClinicError:
        raise
    except Exception as e:
        logger.error(f"Failed to get dashboard patients: {e}")
        raise InternalError("Error fetching patients", original_error=e)

@router.get("/stats", response_model=DashboardStatsResponse)
@limiter.limit("30/minute")
async def get_dashboard_stats(
    request: Request,
    db: Session = Depends(get_db)
):
    """Headline statistics for the dashboard cards"""
    try:
        dashboard_service = DashboardService(db)
        data = await dashboard_service.get_stats()
        return DashboardStatsResponse(success=True, data=data)

    except ClinicError:
        raise
    except Exception as e:
        logger.error(f"Failed to get dashboard stats: {e}")
        raise InternalError("Error fetching dashboard statistics", original_error=e)

@router.get("/appointments", response_model=AppointmentListResponse)
@limiter.limit("30/minute")
async def get_dashboard_appointments(
    request: Request,
    day: Optional[str] = Query(None, alias="date", description="Day to list (YYYY-MM-DD), defaults to today"),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Open appointments of a day in chronological order"""
    if day:
        try:
            target_day = date.fromisoformat(day)
        except ValueError:
            raise ValidationError("Invalid date, expected YYYY-MM-DD")
    else:
        target_day = datetime.utcnow().date()

    try:
        dashboard_service = DashboardService(db)
        data = await dashboard_service.list_appointments(target_day, limit=limit)
        return AppointmentListResponse(success=True, data=data)

    except ClinicError:
        raise
    except Exception as e:
        logger.error(f"Failed to get appointments: {e}")
        raise InternalError("Error fetching appointments", original_error=e)
