"""
Dashboard aggregation service
Joins patient, session, company and therapist records into dashboard payloads
"""

from sqlalchemy.orm import Session, joinedload
from sqlalchemy import func
from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Iterable, Optional, TypeVar
import logging

from app.models.patient import Patient
from app.models.clinical_session import ClinicalSession, OPEN_STATUSES
from app.schemas.common import EntityRef
from app.schemas.dashboard import (
    Appointment, AppointmentListData, AppointmentSummary, DashboardStats,
    LastSession, PatientListData, PatientSummary, SessionCount, StatItem
)
from app.utils.error_handler import ClinicError, DatabaseError
from app.utils.formatting import (
    change_type, format_currency, format_percent, format_short_date, format_time, percent_change
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

LAST_SESSION = "last_session"

# Fields the store can order by; anything else is left unordered
PATIENT_SORT_COLUMNS = {
    "created_at": Patient.created_at,
    "updated_at": Patient.updated_at,
    "name": Patient.name,
}

ATTENDANCE_STATUSES = ("completed", "no_show", "cancelled")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

def _as_utc(value: datetime) -> datetime:
    """Normalise naive (stored as UTC) and aware datetimes for comparison"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

def last_session_sort_key(summary: PatientSummary) -> datetime:
    """Sort key placing patients without sessions at the epoch"""
    if summary.last_session is None:
        return EPOCH
    return _as_utc(summary.last_session.date)

def sort_by_last_session(patients: list[PatientSummary], order: str) -> list[PatientSummary]:
    return sorted(patients, key=last_session_sort_key, reverse=order.lower() != "asc")

def gather(lookup: Callable[[T], R], items: Iterable[T]) -> list[R]:
    """Run an independent lookup per item, preserving input order; any failure fails the whole gather"""
    return [lookup(item) for item in items]

def month_start(now: datetime) -> datetime:
    return datetime(now.year, now.month, 1)

class DashboardService:
    """Read-only aggregation routines backing the dashboard"""

    def __init__(self, db: Session):
        self.db = db

    def _active_patients(self):
        return self.db.query(Patient).filter(
            Patient.status == "active",
            Patient.deleted_at.is_(None)
        )

    def _live_sessions(self, patient_id: str):
        return self.db.query(ClinicalSession).filter(
            ClinicalSession.patient_id == patient_id,
            ClinicalSession.deleted_at.is_(None)
        )

    def _enrich_patient(self, patient: Patient) -> PatientSummary:
        """Attach last-session and session-count statistics to one patient"""
        last = (
            self._live_sessions(patient.id)
            .order_by(ClinicalSession.session_date.desc())
            .first()
        )
        total_sessions = self._live_sessions(patient.id).count()
        completed_sessions = self._live_sessions(patient.id).filter(
            ClinicalSession.status == "completed"
        ).count()

        company = patient.company
        therapist = patient.primary_therapist

        return PatientSummary(
            id=patient.id,
            name=patient.name,
            email=patient.email,
            phone=patient.phone,
            photo_url=patient.photo_url,
            status=patient.status,
            company=EntityRef(id=company.id, name=company.name) if company else None,
            primary_therapist=EntityRef(id=therapist.id, name=therapist.full_name) if therapist else None,
            last_session=LastSession(
                date=last.session_date,
                status=last.status,
                formatted=format_short_date(last.session_date)
            ) if last else None,
            session_count=SessionCount(total=total_sessions, completed=completed_sessions),
            created_at=patient.created_at,
            updated_at=patient.updated_at
        )

    async def list_patients(
        self,
        limit: int = 10,
        sort_by: str = "created_at",
        order: str = "desc",
        now: Optional[datetime] = None
    ) -> PatientListData:
        """Page of active patients enriched with session statistics, plus clinic-wide counters"""
        now = now or datetime.utcnow()
        order = (order or "desc").lower()
        try:
            query = self._active_patients().options(
                joinedload(Patient.company),
                joinedload(Patient.primary_therapist)
            )

            column = PATIENT_SORT_COLUMNS.get(sort_by)
            if column is not None:
                query = query.order_by(column.asc() if order == "asc" else column.desc())

            patients = gather(self._enrich_patient, query.limit(limit).all())

            if sort_by == LAST_SESSION:
                patients = sort_by_last_session(patients, order)

            total = self._active_patients().count()
            new_this_month = self._active_patients().filter(
                Patient.created_at >= month_start(now)
            ).count()

            return PatientListData(
                patients=patients,
                total=total,
                new_this_month=new_this_month,
                returned=len(patients)
            )

        except ClinicError:
            raise
        except Exception as e:
            logger.error(f"Failed to build patient listing: {e}")
            raise DatabaseError("Failed to retrieve patients", original_error=e)

    def _count_open_sessions(self, start: datetime, end: datetime) -> int:
        return self.db.query(ClinicalSession).filter(
            ClinicalSession.session_date >= start,
            ClinicalSession.session_date <= end,
            ClinicalSession.status.in_(OPEN_STATUSES),
            ClinicalSession.deleted_at.is_(None)
        ).count()

    def _completed_revenue(self, start: datetime, end: Optional[datetime] = None) -> float:
        query = self.db.query(func.coalesce(func.sum(ClinicalSession.session_cost), 0)).filter(
            ClinicalSession.session_date >= start,
            ClinicalSession.status == "completed",
            ClinicalSession.deleted_at.is_(None)
        )
        if end is not None:
            query = query.filter(ClinicalSession.session_date < end)
        return float(query.scalar() or 0)

    def _attendance_rate(self, start: datetime, end: datetime, include_end: bool) -> float:
        upper = ClinicalSession.session_date <= end if include_end else ClinicalSession.session_date < end
        rows = (
            self.db.query(ClinicalSession.status, func.count(ClinicalSession.id))
            .filter(
                ClinicalSession.session_date >= start,
                upper,
                ClinicalSession.status.in_(ATTENDANCE_STATUSES),
                ClinicalSession.deleted_at.is_(None)
            )
            .group_by(ClinicalSession.status)
            .all()
        )
        counts = dict(rows)
        total = sum(counts.values())
        if not total:
            return 0.0
        return round(counts.get("completed", 0) / total * 100, 1)

    async def get_stats(self, now: Optional[datetime] = None) -> DashboardStats:
        """Headline statistics with their change against the previous period"""
        now = now or datetime.utcnow()
        try:
            current_month = month_start(now)
            last_month = month_start(current_month - timedelta(days=1))

            # Active patients vs. those that already existed before this month
            active_patients = self._active_patients().count()
            before_month = self._active_patients().filter(Patient.created_at < current_month).count()
            patients_change = percent_change(active_patients, before_month)

            # Appointments today vs. yesterday
            today = now.date()
            yesterday = today - timedelta(days=1)
            appointments_today = self._count_open_sessions(
                datetime.combine(today, time.min), datetime.combine(today, time.max)
            )
            appointments_yesterday = self._count_open_sessions(
                datetime.combine(yesterday, time.min), datetime.combine(yesterday, time.max)
            )
            appointments_change = appointments_today - appointments_yesterday

            # Revenue from completed sessions
            revenue = self._completed_revenue(current_month)
            revenue_last_month = self._completed_revenue(last_month, current_month)
            revenue_change = percent_change(revenue, revenue_last_month)

            # Attendance over the last 30 days vs. the 30 days before
            thirty_days_ago = now - timedelta(days=30)
            attendance = self._attendance_rate(thirty_days_ago, now, include_end=True)
            previous_attendance = self._attendance_rate(now - timedelta(days=60), thirty_days_ago, include_end=False)
            attendance_change = round(attendance - previous_attendance, 1)

            return DashboardStats(
                active_patients=StatItem(
                    value=active_patients,
                    change=f"{patients_change:.1f}",
                    change_type=change_type(patients_change),
                    label="vs last month"
                ),
                appointments_today=StatItem(
                    value=appointments_today,
                    change=f"{appointments_change:+d}",
                    change_type=change_type(appointments_change),
                    label="vs yesterday"
                ),
                revenue_this_month=StatItem(
                    value=revenue,
                    formatted=format_currency(revenue),
                    change=f"{revenue_change:.1f}",
                    change_type=change_type(revenue_change),
                    label="vs last month"
                ),
                attendance_rate=StatItem(
                    value=attendance,
                    formatted=format_percent(attendance),
                    change=f"{attendance_change:.1f}",
                    change_type=change_type(attendance_change),
                    label="last 30 days"
                )
            )

        except ClinicError:
            raise
        except Exception as e:
            logger.error(f"Failed to compute dashboard stats: {e}")
            raise DatabaseError("Failed to retrieve dashboard statistics", original_error=e)

    async def list_appointments(self, day: date, limit: int = 10) -> AppointmentListData:
        """Open appointments of a single day in chronological order"""
        try:
            day_start = datetime.combine(day, time.min)
            day_end = datetime.combine(day, time.max)

            sessions = (
                self.db.query(ClinicalSession)
                .join(Patient, ClinicalSession.patient_id == Patient.id)
                .options(joinedload(ClinicalSession.patient), joinedload(ClinicalSession.therapist))
                .filter(
                    ClinicalSession.session_date >= day_start,
                    ClinicalSession.session_date <= day_end,
                    ClinicalSession.status.in_(OPEN_STATUSES),
                    ClinicalSession.deleted_at.is_(None)
                )
                .order_by(ClinicalSession.session_date.asc())
                .limit(limit)
                .all()
            )

            appointments = [
                Appointment(
                    id=s.id,
                    patient_id=s.patient_id,
                    patient_name=s.patient.name if s.patient else "Unknown",
                    patient_email=(s.patient.email if s.patient else None) or "",
                    patient_phone=(s.patient.phone if s.patient else None) or "",
                    patient_photo=s.patient.photo_url if s.patient else None,
                    time=format_time(s.session_date),
                    full_date_time=s.session_date,
                    type=s.session_type,
                    duration=s.session_duration_minutes,
                    appointment_type=s.appointment_type or "presencial",
                    meet_link=s.meet_link,
                    status=s.status,
                    confirmed=s.confirmed_at is not None,
                    therapist_id=s.therapist_id,
                    therapist_name=s.therapist.full_name if s.therapist else "Unassigned",
                    therapist_avatar=s.therapist.avatar_url if s.therapist else None
                )
                for s in sessions
            ]

            total = self._count_open_sessions(day_start, day_end)

            return AppointmentListData(
                appointments=appointments,
                total=total,
                date=day.isoformat(),
                summary=AppointmentSummary(
                    confirmed=sum(1 for a in appointments if a.status == "confirmed"),
                    pending=sum(1 for a in appointments if a.status == "scheduled"),
                    in_progress=sum(1 for a in appointments if a.status == "in_progress")
                )
            )

        except ClinicError:
            raise
        except Exception as e:
            logger.error(f"Failed to list appointments for {day}: {e}")
            raise DatabaseError("Failed to retrieve appointments", original_error=e)
