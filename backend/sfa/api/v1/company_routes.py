from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from sfa.api.errors import http_error
from sfa.deps import get_current_session, get_db
from sfa.schemas.company import CompanyCreate, CompanyOut, CompanyUpdate
from sfa.services.company_service import (
    create_company,
    deactivate_company,
    get_company,
    list_companies,
    update_company,
)

router = APIRouter(dependencies=[Depends(get_current_session)])


@router.post(
    "",
    response_model=CompanyOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a company",
)
def create_company_api(payload: CompanyCreate, db: Session = Depends(get_db)):
    try:
        return create_company(db, payload)
    except ValueError as exc:
        raise http_error(exc)


@router.get("", response_model=List[CompanyOut], summary="List companies")
def list_companies_api(active_only: bool = False, db: Session = Depends(get_db)):
    return list_companies(db, active_only=active_only)


@router.get("/{company_id}", response_model=CompanyOut, summary="Get a company")
def get_company_api(company_id: int, db: Session = Depends(get_db)):
    try:
        return get_company(db, company_id)
    except ValueError as exc:
        raise http_error(exc)


@router.put("/{company_id}", response_model=CompanyOut, summary="Update a company")
def update_company_api(company_id: int, payload: CompanyUpdate, db: Session = Depends(get_db)):
    try:
        return update_company(db, company_id, payload)
    except ValueError as exc:
        raise http_error(exc)


@router.delete("/{company_id}", response_model=CompanyOut, summary="Deactivate a company")
def deactivate_company_api(company_id: int, db: Session = Depends(get_db)):
    try:
        return deactivate_company(db, company_id)
    except ValueError as exc:
        raise http_error(exc)
