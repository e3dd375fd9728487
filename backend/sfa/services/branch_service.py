from typing import List, Optional

from sqlalchemy.orm import Session

from sfa.core.exceptions import NotFoundError, ValidationError
from sfa.models.branch import Branch
from sfa.schemas.branch import BranchCreate, BranchUpdate
from sfa.services.company_service import get_company
from sfa.utils.text_cleaner import normalize_whitespace


def _code_taken(db: Session, code: str, exclude_id: Optional[int] = None) -> bool:
    query = db.query(Branch).filter(Branch.branch_code == code)
    if exclude_id is not None:
        query = query.filter(Branch.branch_id != exclude_id)
    return db.query(query.exists()).scalar()


def create_branch(db: Session, payload: BranchCreate) -> Branch:
    code = normalize_whitespace(payload.branch_code).upper()
    if _code_taken(db, code):
        raise ValidationError(f"Branch code {code} already exists")
    if payload.company_id is not None:
        get_company(db, payload.company_id)
    branch = Branch(**payload.model_dump(exclude={"branch_code"}), branch_code=code)
    db.add(branch)
    db.commit()
    db.refresh(branch)
    return branch


def get_branch(db: Session, branch_id: int) -> Branch:
    branch = db.query(Branch).filter(Branch.branch_id == branch_id).first()
    if not branch:
        raise NotFoundError("Branch", branch_id)
    return branch


def list_branches(db: Session, active_only: bool = False) -> List[Branch]:
    query = db.query(Branch)
    if active_only:
        query = query.filter(Branch.is_active.is_(True))
    return query.order_by(Branch.branch_name).all()


def update_branch(db: Session, branch_id: int, payload: BranchUpdate) -> Branch:
    branch = get_branch(db, branch_id)
    code = normalize_whitespace(payload.branch_code).upper()
    if _code_taken(db, code, exclude_id=branch_id):
        raise ValidationError(f"Branch code {code} already exists")
    if payload.company_id is not None:
        get_company(db, payload.company_id)
    for field, value in payload.model_dump(exclude={"branch_code"}).items():
        setattr(branch, field, value)
    branch.branch_code = code
    db.commit()
    db.refresh(branch)
    return branch


def deactivate_branch(db: Session, branch_id: int) -> Branch:
    branch = get_branch(db, branch_id)
    branch.is_active = False
    db.commit()
    db.refresh(branch)
    return branch
