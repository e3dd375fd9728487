from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from sfa.api.errors import http_error
from sfa.deps import get_current_session, get_db
from sfa.schemas.auth import UserSession
from sfa.schemas.branch import BranchCreate, BranchOut, BranchUpdate
from sfa.services.branch_service import (
    create_branch,
    deactivate_branch,
    get_branch,
    list_branches,
    update_branch,
)

router = APIRouter(dependencies=[Depends(get_current_session)])


@router.post(
    "",
    response_model=BranchOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a branch",
)
def create_branch_api(payload: BranchCreate, db: Session = Depends(get_db)):
    try:
        return create_branch(db, payload)
    except ValueError as exc:
        raise http_error(exc)


@router.get("", response_model=List[BranchOut], summary="List branches")
def list_branches_api(active_only: bool = False, db: Session = Depends(get_db)):
    return list_branches(db, active_only=active_only)


@router.get("/{branch_id}", response_model=BranchOut, summary="Get a branch")
def get_branch_api(branch_id: int, db: Session = Depends(get_db)):
    try:
        return get_branch(db, branch_id)
    except ValueError as exc:
        raise http_error(exc)


@router.put("/{branch_id}", response_model=BranchOut, summary="Update a branch")
def update_branch_api(branch_id: int, payload: BranchUpdate, db: Session = Depends(get_db)):
    try:
        return update_branch(db, branch_id, payload)
    except ValueError as exc:
        raise http_error(exc)


@router.delete("/{branch_id}", response_model=BranchOut, summary="Deactivate a branch")
def deactivate_branch_api(branch_id: int, db: Session = Depends(get_db)):
    try:
        return deactivate_branch(db, branch_id)
    except ValueError as exc:
        raise http_error(exc)
