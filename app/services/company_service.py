"""
Company directory service
"""

from sqlalchemy.orm import Session
import logging

from app.models.company import Company
from app.schemas.company import BillingContact, CompanyCreate, CompanyCreated, CompanyListData, CompanySummary
from app.utils.error_handler import ClinicError, DatabaseError

logger = logging.getLogger(__name__)

COMPANY_SORT_COLUMNS = {
    "created_at": Company.created_at,
    "updated_at": Company.updated_at,
    "name": Company.name,
    "industry": Company.industry,
    "employee_count": Company.employee_count,
}

def billing_contact_of(company: Company):
    """Nested billing contact, or None when no part of it is recorded"""
    if not any([company.billing_contact_name, company.billing_contact_email, company.billing_contact_phone]):
        return None
    return BillingContact(
        name=company.billing_contact_name,
        email=company.billing_contact_email,
        phone=company.billing_contact_phone
    )

class CompanyService:
    """Service for company directory operations"""

    def __init__(self, db: Session):
        self.db = db

    def _listed_companies(self):
        return self.db.query(Company).filter(
            Company.is_active == True,
            Company.deleted_at.is_(None)
        )

    async def list_companies(self, limit: int = 50, sort_by: str = "created_at", order: str = "desc") -> CompanyListData:
        """Active, non-deleted companies in the requested order"""
        order = (order or "desc").lower()
        try:
            column = COMPANY_SORT_COLUMNS.get(sort_by, Company.created_at)
            companies = (
                self._listed_companies()
                .order_by(column.asc() if order == "asc" else column.desc())
                .limit(limit)
                .all()
            )

            summaries = [
                CompanySummary(
                    id=c.id,
                    name=c.name,
                    email=c.email,
                    phone=c.phone,
                    address=c.address,
                    website=c.website,
                    industry=c.industry,
                    employee_count=c.employee_count,
                    is_active=c.is_active,
                    billing_contact=billing_contact_of(c),
                    created_at=c.created_at,
                    updated_at=c.updated_at
                )
                for c in companies
            ]

            return CompanyListData(companies=summaries, total=self._listed_companies().count())

        except ClinicError:
            raise
        except Exception as e:
            logger.error(f"Failed to list companies: {e}")
            raise DatabaseError("Failed to retrieve companies", original_error=e)

    async def create_company(self, company_data: CompanyCreate) -> CompanyCreated:
        """Persist a company and echo the submitted fields with its generated id"""
        try:
            submitted = company_data.dict(exclude_unset=True)

            db_company = Company(**{k: v for k, v in submitted.items() if v is not None})
            self.db.add(db_company)
            self.db.commit()
            self.db.refresh(db_company)

            logger.info(f"Created company {db_company.name} with ID: {db_company.id}")

            return CompanyCreated(**submitted, id=db_company.id, created_at=db_company.created_at)

        except ClinicError:
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create company: {e}")
            raise DatabaseError("Failed to create company", original_error=e)
