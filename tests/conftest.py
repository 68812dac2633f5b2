"""
Shared fixtures: isolated SQLite database per test and record factories
"""

import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from datetime import datetime
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.auth.auth_handler import auth_handler
from app.models.company import Company
from app.models.clinical_session import ClinicalSession
from app.models.patient import Patient
from app.models.role import Role
from app.models.user import User
from app.services.role_seeder import seed_roles
from main import app

# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

@pytest.fixture()
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture()
def session_factory(db):
    """Session factory bound to the test database, for code that opens its own sessions"""
    return TestingSessionLocal

@pytest.fixture()
def client(db):
    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()

@pytest.fixture()
def make_user(db):
    seed_roles(db)
    db.commit()

    def _make(email="ana@clinic.mx", password="Secret123!", full_name="Ana Torres", role="therapist", is_active=True):
        role_row = db.query(Role).filter(Role.name == role).first()
        user = User(
            email=email,
            password_hash=auth_handler.get_password_hash(password),
            full_name=full_name,
            role_id=role_row.id if role_row else None,
            is_active=is_active
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make

@pytest.fixture()
def make_company(db):
    def _make(name="Acme", email="contact@acme.com", **fields):
        company = Company(name=name, email=email, **fields)
        db.add(company)
        db.commit()
        db.refresh(company)
        return company

    return _make

@pytest.fixture()
def make_patient(db):
    counter = {"n": 0}

    def _make(name="Patient", status="active", **fields):
        counter["n"] += 1
        fields.setdefault("email", f"patient{counter['n']}@mail.mx")
        patient = Patient(name=name, status=status, **fields)
        db.add(patient)
        db.commit()
        db.refresh(patient)
        return patient

    return _make

@pytest.fixture()
def make_session(db):
    def _make(patient, session_date, status="scheduled", **fields):
        if isinstance(session_date, str):
            session_date = datetime.fromisoformat(session_date)
        session = ClinicalSession(patient_id=patient.id, session_date=session_date, status=status, **fields)
        db.add(session)
        db.commit()
        db.refresh(session)
        return session

    return _make
