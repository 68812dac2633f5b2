"""
Pydantic schemas for dashboard payloads
"""

from pydantic import BaseModel
from typing import Optional, Union
from datetime import datetime

from app.schemas.common import CamelModel, EntityRef

class LastSession(CamelModel):
    date: datetime
    status: str
    formatted: Optional[str] = None

class SessionCount(CamelModel):
    total: int = 0
    completed: int = 0

class PatientSummary(CamelModel):
    """Patient row enriched with session statistics"""
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    photo_url: Optional[str] = None
    status: str
    company: Optional[EntityRef] = None
    primary_therapist: Optional[EntityRef] = None
    last_session: Optional[LastSession] = None
    session_count: SessionCount
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class PatientListData(CamelModel):
    patients: list[PatientSummary]
    total: int
    new_this_month: int
    returned: int

class PatientListResponse(BaseModel):
    success: bool = True
    data: PatientListData

class StatItem(CamelModel):
    value: Union[int, float]
    change: str
    change_type: str
    label: str
    formatted: Optional[str] = None

class DashboardStats(CamelModel):
    active_patients: StatItem
    appointments_today: StatItem
    revenue_this_month: StatItem
    attendance_rate: StatItem

class DashboardStatsResponse(BaseModel):
    success: bool = True
    data: DashboardStats

class Appointment(CamelModel):
    """A session on the day's agenda"""
    id: str
    patient_id: str
    patient_name: str
    patient_email: str
    patient_phone: str
    patient_photo: Optional[str] = None
    time: str
    full_date_time: datetime
    type: Optional[str] = None
    duration: Optional[int] = None
    appointment_type: str
    meet_link: Optional[str] = None
    status: str
    confirmed: bool
    therapist_id: Optional[str] = None
    therapist_name: str
    therapist_avatar: Optional[str] = None

class AppointmentSummary(CamelModel):
    confirmed: int
    pending: int
    in_progress: int

class AppointmentListData(CamelModel):
    appointments: list[Appointment]
    total: int
    date: str
    summary: AppointmentSummary

class AppointmentListResponse(BaseModel):
    success: bool = True
    data: AppointmentListData
