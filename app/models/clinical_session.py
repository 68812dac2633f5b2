"""
Clinical session (appointment) model
"""

from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import uuid

# Statuses that still occupy a slot in the calendar
OPEN_STATUSES = ("scheduled", "confirmed", "in_progress")

class ClinicalSession(Base):
    """A scheduled or completed therapy appointment"""
    __tablename__ = "sessions"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    patient_id = Column(String(36), ForeignKey("patients.id"), nullable=False, index=True)
    therapist_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=True)
    session_date = Column(DateTime(timezone=True), nullable=False, index=True)
    status = Column(String(20), default="scheduled", nullable=False)  # scheduled, confirmed, in_progress, completed, cancelled, no_show
    session_type = Column(String(50), nullable=True)
    session_duration_minutes = Column(Integer, default=50, nullable=True)
    appointment_type = Column(String(20), nullable=True)  # presencial, videollamada, visita
    meet_link = Column(String(500), nullable=True)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    session_cost = Column(Numeric(10, 2), nullable=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    
    patient = relationship("Patient")
    therapist = relationship("User")
    
    def __repr__(self):
        return f"<ClinicalSession(id={self.id}, patient_id={self.patient_id}, status='{self.status}')>"
