import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from sfa.core.exceptions import NotFoundError, ValidationError
from sfa.models.customer import Customer
from sfa.models.user import AppUser
from sfa.schemas.auth import UserCreate, UserSession

logger = logging.getLogger(__name__)


def build_session(db: Session, user: AppUser) -> UserSession:
    """Session payload for a user; customers get their customer row linked by mobile."""
    customer_id = None
    if user.role == "customer":
        customer = (
            db.query(Customer)
            .filter((Customer.user_id == user.user_id) | (Customer.mobile_no == user.mobile_no))
            .order_by(Customer.customer_id)
            .first()
        )
        customer_id = customer.customer_id if customer else None
    return UserSession(
        user_id=user.user_id,
        full_name=user.full_name,
        mobile_no=user.mobile_no,
        role=user.role,
        customer_id=customer_id,
    )


def authenticate(db: Session, mobile_no: str, password: str) -> Optional[UserSession]:
    """Plain credential lookup against active users; no tokens are issued."""
    user = (
        db.query(AppUser)
        .filter(AppUser.mobile_no == mobile_no.strip(), AppUser.is_active.is_(True))
        .first()
    )
    if not user or user.password != password:
        logger.info("Failed login for %s", mobile_no)
        return None
    return build_session(db, user)


def session_for_user_id(db: Session, user_id: int) -> Optional[UserSession]:
    user = (
        db.query(AppUser)
        .filter(AppUser.user_id == user_id, AppUser.is_active.is_(True))
        .first()
    )
    return build_session(db, user) if user else None


def create_user(db: Session, payload: UserCreate, created_by: Optional[int] = None) -> AppUser:
    mobile_no = payload.mobile_no.strip()
    if db.query(AppUser).filter(AppUser.mobile_no == mobile_no).first():
        raise ValidationError("Mobile number already registered.")
    user = AppUser(
        **payload.model_dump(exclude={"mobile_no"}),
        mobile_no=mobile_no,
        created_by=created_by,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def list_users(db: Session, role: Optional[str] = None) -> List[AppUser]:
    query = db.query(AppUser)
    if role:
        query = query.filter(AppUser.role == role)
    return query.order_by(AppUser.full_name).all()


def set_user_active(db: Session, user_id: int, is_active: bool) -> AppUser:
    user = db.query(AppUser).filter(AppUser.user_id == user_id).first()
    if not user:
        raise NotFoundError("User", user_id)
    user.is_active = is_active
    db.commit()
    db.refresh(user)
    return user
