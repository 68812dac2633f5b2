"""
Patient intake and search endpoints
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.database import get_db
from app.schemas.patient import (
    Pagination, PatientCreate, PatientCreateResponse, PatientDetail, PatientListItem, PatientSearchResponse
)
from app.services.patient_service import PatientService
from app.services.activity_logger import ActivityLogger
from app.utils.error_handler import ClinicError, InternalError, ValidationError
from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("", response_model=PatientCreateResponse, status_code=201)
@limiter.limit("10/minute")
async def create_patient(
    request: Request,
    patient: PatientCreate,
    db: Session = Depends(get_db)
):
    """Register a new patient from the intake form"""
    if not all([patient.name, patient.email, patient.phone, patient.birth_date, patient.gender]):
        raise ValidationError("Missing required fields")
    if not patient.emergency_contact or not patient.emergency_phone:
        raise ValidationError("Emergency contact information is required")
    if not patient.reason_for_therapy or not patient.therapy_type:
        raise ValidationError("Therapy information is required")

    try:
        patient_service = PatientService(db)
        created = await patient_service.create_patient(patient)

        activity_logger = ActivityLogger(db)
        await activity_logger.log_request(request, status_code=201)

        return PatientCreateResponse(
            success=True,
            message=f"Patient {created.name} created successfully",
            data=PatientDetail.from_orm(created)
        )

    except ClinicError:
        raise
    except Exception as e:
        logger.error(f"Failed to create patient: {e}")
        raise InternalError("Internal server error while creating patient", original_error=e)

@router.get("", response_model=PatientSearchResponse)
@limiter.limit("30/minute")
async def search_patients(
    request: Request,
    email: Optional[str] = Query(None, description="Email contains (case-insensitive)"),
    name: Optional[str] = Query(None, description="Name contains (case-insensitive)"),
    skip: int = Query(0, ge=0),
    take: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Search patients by email or name"""
    try:
        patient_service = PatientService(db)
        patients, total = await patient_service.search_patients(email=email, name=name, skip=skip, take=take)

        return PatientSearchResponse(
            success=True,
            data=[PatientListItem.from_orm(p) for p in patients],
            pagination=Pagination(skip=skip, take=take, total=total)
        )

    except ClinicError:
        raise
    except Exception as e:
        logger.error(f"Failed to search patients: {e}")
        raise InternalError("Internal server error while fetching patients", original_error=e)
