"""
Pydantic schemas for patient intake and search
"""

from pydantic import BaseModel, Field, EmailStr, validator
from typing import Optional
from datetime import date, datetime

from app.schemas.common import CamelModel

class SupportContactIn(CamelModel):
    """Support network entry submitted with the intake form"""
    full_name: str = Field(..., min_length=1, max_length=150)
    relationship: str = Field(..., min_length=1, max_length=50)
    phone: Optional[str] = Field(None, max_length=30)
    email: Optional[EmailStr] = None
    legal_representative: bool = False

class PatientCreate(CamelModel):
    """Intake form; required groups are checked by the route so each gets its own message"""
    # Basic information
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    birth_date: Optional[str] = None
    gender: Optional[str] = None

    # Personal information
    occupation: Optional[str] = None
    company: Optional[str] = None
    address: Optional[str] = None

    # Sociodemographic information
    marital_status: Optional[str] = None
    education_level: Optional[str] = None
    nationality: Optional[str] = None
    religion: Optional[str] = None
    living_situation: Optional[str] = None
    has_children: Optional[str] = Field(None, description="\"yes\" when the patient has children")
    children_count: Optional[int] = Field(None, ge=0)

    # Emergency contact
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None

    # Therapy information
    therapy_type: Optional[str] = None
    referred_by: Optional[str] = None
    reason_for_therapy: Optional[str] = None
    notes: Optional[str] = None

    # Clinical history
    expectations: Optional[str] = None
    previous_therapy: Optional[str] = Field(None, description="\"yes\" when the patient has been in therapy before")
    previous_therapy_details: Optional[str] = None
    current_medications: Optional[str] = None
    medical_conditions: Optional[str] = None
    family_history: Optional[str] = None

    support_network: list[SupportContactIn] = []

    @validator('gender')
    def validate_gender(cls, v):
        if v is None:
            return v
        allowed = ['M', 'F', 'Other']
        if v not in allowed:
            raise ValueError(f'Gender must be one of: {", ".join(allowed)}')
        return v

    @validator('has_children', 'previous_therapy', pre=True)
    def bool_to_yes_no(cls, v):
        if isinstance(v, bool):
            return "yes" if v else "no"
        return v

    @validator('email', pre=True)
    def blank_email_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

class SupportContactOut(CamelModel):
    id: int
    full_name: str
    relationship: str = Field(..., validation_alias="relationship_type")
    phone: Optional[str] = None
    email: Optional[str] = None
    legal_representative: bool

class PatientDetail(CamelModel):
    """Full patient record as stored at intake"""
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    gender: Optional[str] = None
    occupation: Optional[str] = None
    company_name: Optional[str] = None
    address: Optional[str] = None
    emergency_contact_name: Optional[str] = None
    emergency_contact_phone: Optional[str] = None
    therapy_type: Optional[str] = None
    referred_by: Optional[str] = None
    reason_for_therapy: Optional[str] = None
    notes: Optional[str] = None
    marital_status: Optional[str] = None
    education_level: Optional[str] = None
    nationality: Optional[str] = None
    religion: Optional[str] = None
    living_situation: Optional[str] = None
    has_children: bool = False
    children_count: int = 0
    expectations: Optional[str] = None
    previous_therapy: bool = False
    previous_therapy_details: Optional[str] = None
    current_medications: Optional[str] = None
    medical_conditions: Optional[str] = None
    family_psychiatric_history: Optional[str] = None
    preferred_language: str = "es"
    status: str
    support_network: list[SupportContactOut] = []
    created_at: Optional[datetime] = None

class PatientCreateResponse(BaseModel):
    success: bool = True
    message: str
    data: PatientDetail

class PatientListItem(CamelModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    birth_date: Optional[date] = None
    gender: Optional[str] = None
    occupation: Optional[str] = None
    company_name: Optional[str] = None
    therapy_type: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None

class Pagination(BaseModel):
    skip: int
    take: int
    total: int

class PatientSearchResponse(BaseModel):
    success: bool = True
    data: list[PatientListItem]
    pagination: Pagination
