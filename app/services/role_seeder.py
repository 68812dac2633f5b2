"""
Idempotent provisioning of the base clinic roles
"""

from sqlalchemy.orm import Session
import logging

from app.models.role import Role

logger = logging.getLogger(__name__)

BASE_ROLES = [
    ("admin", "Full control of the system: manages users, contracts, reports and settings."),
    ("therapist", "Psychologist who sees patients and manages their clinical notes and sessions."),
    ("company_admin", "Client company representative: views reports and manages associated employees."),
    ("patient", "Patient or employee receiving care. Accesses only their own profile and sessions."),
    ("assistant", "Administrative staff managing patients, sessions and availability."),
]

def seed_roles(db: Session) -> int:
    """Insert any missing base roles; returns how many were created"""
    existing = {name for (name,) in db.query(Role.name).all()}
    created = 0
    for name, description in BASE_ROLES:
        if name not in existing:
            db.add(Role(name=name, description=description))
            created += 1
    db.flush()

    if created:
        logger.info(f"Created {created} base roles")
    else:
        logger.info("Base roles already present")
    return created

if __name__ == "__main__":
    from dotenv import load_dotenv
    load_dotenv()

    from app.database import Base, SessionLocal, engine
    from app.utils.error_handler import DatabaseManager

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    Base.metadata.create_all(bind=engine)
    with DatabaseManager(SessionLocal) as db:
        seed_roles(db)
