"""
Company directory endpoints
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
import logging

from app.database import get_db
from app.schemas.company import CompanyCreate, CompanyCreateResponse, CompanyListResponse
from app.services.company_service import CompanyService
from app.services.activity_logger import ActivityLogger
from app.utils.error_handler import ClinicError, InternalError, ValidationError
from app.utils.rate_limit import limiter

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("", response_model=CompanyListResponse)
@limiter.limit("30/minute")
async def list_companies(
    request: Request,
    limit: int = Query(50, ge=1, le=200, description="Maximum number of companies"),
    sort_by: str = Query("created_at", alias="sortBy", description="Column to order by"),
    order: str = Query("desc", description="asc or desc"),
    db: Session = Depends(get_db)
):
    """List active companies with their billing contact"""
    try:
        company_service = CompanyService(db)
        data = await company_service.list_companies(limit=limit, sort_by=sort_by, order=order)
        return CompanyListResponse(success=True, data=data)

    except ClinicError:
        raise
    except Exception as e:
        logger.error(f"Failed to get companies: {e}")
        raise InternalError("Internal server error", original_error=e)

@router.post("", response_model=CompanyCreateResponse, status_code=201, response_model_exclude_unset=True)
@limiter.limit("10/minute")
async def create_company(
    request: Request,
    company: CompanyCreate,
    db: Session = Depends(get_db)
):
    """Create a new client company"""
    if not company.name or not company.email:
        raise ValidationError("Name and email are required")

    try:
        company_service = CompanyService(db)
        created = await company_service.create_company(company)

        activity_logger = ActivityLogger(db)
        await activity_logger.log_request(request, status_code=201)

        return CompanyCreateResponse(
            success=True,
            message="Company created successfully",
            data=created
        )

    except ClinicError:
        raise
    except Exception as e:
        logger.error(f"Failed to create company: {e}")
        raise InternalError("Internal server error", original_error=e)
