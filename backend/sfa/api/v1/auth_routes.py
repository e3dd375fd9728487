from typing import List, Optional

from fastapi import APIRouter, Depends, Form, HTTPException, status
from sqlalchemy.orm import Session

from sfa.api.errors import http_error
from sfa.deps import get_current_session, get_db
from sfa.schemas.auth import UserCreate, UserOut, UserSession, UserStatusUpdate
from sfa.services.user_service import authenticate, create_user, list_users, set_user_active

router = APIRouter()


@router.post(
    "/login",
    response_model=UserSession,
    summary="Login with mobile number and password",
)
def login(
    mobile_no: str = Form(...),
    password: str = Form(...),
    db: Session = Depends(get_db),
):
    session = authenticate(db, mobile_no, password)
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return session


@router.get(
    "/me",
    response_model=UserSession,
    summary="Session of the calling user",
)
def me(session: UserSession = Depends(get_current_session)):
    return session


@router.post(
    "/users",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
)
def create_user_api(
    payload: UserCreate,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    try:
        return create_user(db, payload, created_by=session.user_id)
    except ValueError as exc:
        raise http_error(exc)


@router.get(
    "/users",
    response_model=List[UserOut],
    summary="List users",
)
def list_users_api(
    role: Optional[str] = None,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    return list_users(db, role=role)


@router.patch(
    "/users/{user_id}/status",
    response_model=UserOut,
    summary="Activate or deactivate a user",
)
def set_user_status(
    user_id: int,
    payload: UserStatusUpdate,
    db: Session = Depends(get_db),
    session: UserSession = Depends(get_current_session),
):
    try:
        return set_user_active(db, user_id, payload.is_active)
    except ValueError as exc:
        raise http_error(exc)
