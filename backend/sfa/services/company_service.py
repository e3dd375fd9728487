from typing import List, Optional

from sqlalchemy.orm import Session

from sfa.core.exceptions import NotFoundError, ValidationError
from sfa.models.company import Company
from sfa.schemas.company import CompanyCreate, CompanyUpdate
from sfa.utils.text_cleaner import normalize_whitespace


def _code_taken(db: Session, code: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Company).filter(Company.company_code == code)
    if exclude_id is not None:
        query = query.filter(Company.company_id != exclude_id)
    return db.query(query.exists()).scalar()


def create_company(db: Session, payload: CompanyCreate) -> Company:
    code = normalize_whitespace(payload.company_code).upper()
    if _code_taken(db, code):
        raise ValidationError(f"Company code {code} already exists")
    company = Company(**payload.model_dump(exclude={"company_code"}), company_code=code)
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


def get_company(db: Session, company_id: int) -> Company:
    company = db.query(Company).filter(Company.company_id == company_id).first()
    if not company:
        raise NotFoundError("Company", company_id)
    return company


def list_companies(db: Session, active_only: bool = False) -> List[Company]:
    query = db.query(Company)
    if active_only:
        query = query.filter(Company.is_active.is_(True))
    return query.order_by(Company.company_name).all()


def update_company(db: Session, company_id: int, payload: CompanyUpdate) -> Company:
    company = get_company(db, company_id)
    code = normalize_whitespace(payload.company_code).upper()
    if _code_taken(db, code, exclude_id=company_id):
        raise ValidationError(f"Company code {code} already exists")
    for field, value in payload.model_dump(exclude={"company_code"}).items():
        setattr(company, field, value)
    company.company_code = code
    db.commit()
    db.refresh(company)
    return company


def deactivate_company(db: Session, company_id: int) -> Company:
    """Companies keep their branches; only the flag changes."""
    company = get_company(db, company_id)
    company.is_active = False
    db.commit()
    db.refresh(company)
    return company
