"""
Patient intake and search service
"""

from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from datetime import date
from typing import Optional
import logging

from app.models.patient import Patient, SupportContact
from app.schemas.patient import PatientCreate
from app.utils.error_handler import ClinicError, ConflictError, DatabaseError, ValidationError

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "A patient with this email already exists"

def parse_birth_date(value: str) -> date:
    """Accept YYYY-MM-DD, optionally followed by a time part"""
    try:
        return date.fromisoformat(value.strip()[:10])
    except (ValueError, AttributeError):
        raise ValidationError("Invalid birth date format")

def is_yes(value: Optional[str]) -> bool:
    return value == "yes"

class PatientService:
    """Service for patient records"""

    def __init__(self, db: Session):
        self.db = db

    def _email_taken(self, email: str) -> bool:
        return self.db.query(Patient.id).filter(Patient.email == email).first() is not None

    async def create_patient(self, patient_data: PatientCreate) -> Patient:
        """Create a patient together with its support network in one transaction"""
        birth_date = parse_birth_date(patient_data.birth_date)

        try:
            if self._email_taken(patient_data.email):
                raise ConflictError(DUPLICATE_EMAIL_MESSAGE)

            patient = Patient(
                name=patient_data.name,
                email=patient_data.email,
                phone=patient_data.phone,
                birth_date=birth_date,
                gender=patient_data.gender,
                occupation=patient_data.occupation,
                company_name=patient_data.company,
                address=patient_data.address,
                marital_status=patient_data.marital_status,
                education_level=patient_data.education_level,
                nationality=patient_data.nationality,
                religion=patient_data.religion,
                living_situation=patient_data.living_situation,
                has_children=is_yes(patient_data.has_children),
                children_count=patient_data.children_count or 0,
                emergency_contact_name=patient_data.emergency_contact,
                emergency_contact_phone=patient_data.emergency_phone,
                therapy_type=patient_data.therapy_type,
                referred_by=patient_data.referred_by,
                reason_for_therapy=patient_data.reason_for_therapy,
                expectations=patient_data.expectations,
                previous_therapy=is_yes(patient_data.previous_therapy),
                previous_therapy_details=patient_data.previous_therapy_details,
                current_medications=patient_data.current_medications,
                medical_conditions=patient_data.medical_conditions,
                family_psychiatric_history=patient_data.family_history,
                notes=patient_data.notes,
                status="active",
                preferred_language="es"
            )
            patient.support_network = [
                SupportContact(
                    full_name=supporter.full_name,
                    relationship_type=supporter.relationship,
                    phone=supporter.phone,
                    email=supporter.email,
                    legal_representative=supporter.legal_representative
                )
                for supporter in patient_data.support_network
            ]

            self.db.add(patient)
            self.db.commit()
            self.db.refresh(patient)

            logger.info(f"Created patient with ID: {patient.id} ({len(patient.support_network)} support contacts)")
            return patient

        except ClinicError:
            raise
        except IntegrityError as e:
            # Concurrent intake with the same email
            self.db.rollback()
            logger.warning(f"Duplicate patient email rejected by the store: {patient_data.email}")
            raise ConflictError(DUPLICATE_EMAIL_MESSAGE, original_error=e)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create patient: {e}")
            raise DatabaseError("Internal server error while creating patient", original_error=e)

    async def search_patients(
        self,
        email: Optional[str] = None,
        name: Optional[str] = None,
        skip: int = 0,
        take: int = 10
    ) -> tuple[list[Patient], int]:
        """Case-insensitive substring search, newest first"""
        try:
            query = self.db.query(Patient)

            if email:
                query = query.filter(Patient.email.ilike(f"%{email}%"))
            if name:
                query = query.filter(Patient.name.ilike(f"%{name}%"))

            total = query.count()
            patients = (
                query.order_by(Patient.created_at.desc())
                .offset(skip)
                .limit(take)
                .all()
            )

            return patients, total

        except Exception as e:
            logger.error(f"Failed to search patients: {e}")
            raise DatabaseError("Internal server error while fetching patients", original_error=e)
