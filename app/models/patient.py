"""
Patient and support network models
"""

from sqlalchemy import Column, Integer, String, DateTime, Date, Boolean, Text, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import uuid

class Patient(Base):
    """Patient record with intake information"""
    __tablename__ = "patients"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(150), nullable=False, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(30), nullable=True)
    photo_url = Column(String(500), nullable=True)
    status = Column(String(20), default="active", nullable=False)  # active, inactive, discharged
    company_id = Column(String(36), ForeignKey("companies.id"), nullable=True)
    primary_therapist_id = Column(String(36), ForeignKey("user_profiles.id"), nullable=True)
    
    # Intake information
    birth_date = Column(Date, nullable=True)
    gender = Column(String(10), nullable=True)
    occupation = Column(String(150), nullable=True)
    company_name = Column(String(200), nullable=True)
    address = Column(String(500), nullable=True)
    emergency_contact_name = Column(String(150), nullable=True)
    emergency_contact_phone = Column(String(30), nullable=True)
    therapy_type = Column(String(50), nullable=True)
    referred_by = Column(String(150), nullable=True)
    notes = Column(Text, nullable=True)
    preferred_language = Column(String(5), default="es", nullable=False)
    
    # Sociodemographic information
    marital_status = Column(String(50), nullable=True)
    education_level = Column(String(50), nullable=True)
    nationality = Column(String(100), nullable=True)
    religion = Column(String(100), nullable=True)
    living_situation = Column(String(100), nullable=True)
    has_children = Column(Boolean, default=False, nullable=False)
    children_count = Column(Integer, default=0, nullable=False)
    
    # Clinical history
    reason_for_therapy = Column(Text, nullable=True)
    expectations = Column(Text, nullable=True)
    previous_therapy = Column(Boolean, default=False, nullable=False)
    previous_therapy_details = Column(Text, nullable=True)
    current_medications = Column(Text, nullable=True)
    medical_conditions = Column(Text, nullable=True)
    family_psychiatric_history = Column(Text, nullable=True)
    
    deleted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    
    company = relationship("Company")
    primary_therapist = relationship("User")
    support_network = relationship("SupportContact", back_populates="patient", cascade="all, delete-orphan")
    
    def __repr__(self):
        return f"<Patient(id={self.id}, name='{self.name}', status='{self.status}')>"

class SupportContact(Base):
    """Person in a patient's support network"""
    __tablename__ = "support_network"
    
    id = Column(Integer, primary_key=True, index=True)
    patient_id = Column(String(36), ForeignKey("patients.id"), nullable=False, index=True)
    full_name = Column(String(150), nullable=False)
    relationship_type = Column("relationship", String(50), nullable=False)
    phone = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)
    legal_representative = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    
    patient = relationship("Patient", back_populates="support_network")
