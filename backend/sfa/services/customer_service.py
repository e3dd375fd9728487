import logging
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from sfa.core.config import settings
from sfa.core.exceptions import NotFoundError, ValidationError
from sfa.core.storage import StorageClient
from sfa.models.customer import Customer
from sfa.models.user import AppUser
from sfa.schemas.auth import UserSession
from sfa.schemas.customer import CustomerCreate, CustomerUpdate
from sfa.services.pricing_service import customer_type_key
from sfa.services.route_service import get_route, upsert_customer_route
from sfa.utils.text_cleaner import normalize_whitespace

logger = logging.getLogger(__name__)

IMAGE_SLOTS = (1, 2, 3)


def _ensure_unique_code(db: Session, code: str, exclude_id: Optional[int] = None) -> None:
    query = db.query(Customer).filter(Customer.customer_code == code)
    if exclude_id is not None:
        query = query.filter(Customer.customer_id != exclude_id)
    if query.first():
        raise ValidationError(f"Customer code {code} already exists")


def create_customer(db: Session, payload: CustomerCreate, session: Optional[UserSession] = None) -> Customer:
    """
    Create a customer. A mobile number also creates an inactive customer login
    with the default password; a route id assigns the customer's route.
    """
    code = normalize_whitespace(payload.customer_code).upper()
    _ensure_unique_code(db, code)
    if payload.route_id is not None:
        get_route(db, payload.route_id)

    data = payload.model_dump(exclude={"customer_code", "route_id"})
    data["customer_name"] = normalize_whitespace(data["customer_name"])
    data["customer_type"] = customer_type_key(data["customer_type"])
    customer = Customer(
        **data,
        customer_code=code,
        created_by=session.user_id if session else None,
    )
    db.add(customer)
    db.flush()

    if customer.mobile_no:
        existing_user = db.query(AppUser).filter(AppUser.mobile_no == customer.mobile_no).first()
        if existing_user:
            customer.user_id = existing_user.user_id
        else:
            user = AppUser(
                mobile_no=customer.mobile_no,
                full_name=customer.customer_name,
                password=settings.DEFAULT_CUSTOMER_PASSWORD,
                role="customer",
                is_active=False,
                created_by=session.user_id if session else None,
            )
            db.add(user)
            db.flush()
            customer.user_id = user.user_id

    if payload.route_id is not None:
        upsert_customer_route(db, customer.customer_id, payload.route_id, commit=False)

    db.commit()
    db.refresh(customer)
    return customer


def get_customer(db: Session, customer_id: int) -> Customer:
    customer = db.query(Customer).filter(Customer.customer_id == customer_id).first()
    if not customer:
        raise NotFoundError("Customer", customer_id)
    return customer


def list_customers(
    db: Session,
    search: Optional[str] = None,
    status: str = "all",
    session: Optional[UserSession] = None,
    limit: int = 200,
    offset: int = 0,
) -> List[Customer]:
    query = db.query(Customer)
    if session and session.is_customer:
        query = query.filter(Customer.customer_id == session.customer_id)
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Customer.customer_name).like(pattern),
                func.lower(Customer.customer_code).like(pattern),
                func.lower(Customer.mobile_no).like(pattern),
                func.lower(Customer.shop_name).like(pattern),
            )
        )
    if status == "active":
        query = query.filter(Customer.is_active.is_(True))
    elif status == "inactive":
        query = query.filter(Customer.is_active.is_(False))
    return query.order_by(Customer.customer_name).offset(offset).limit(limit).all()


def update_customer(db: Session, customer_id: int, payload: CustomerUpdate) -> Customer:
    customer = get_customer(db, customer_id)
    code = normalize_whitespace(payload.customer_code).upper()
    _ensure_unique_code(db, code, exclude_id=customer_id)
    for field, value in payload.model_dump(exclude={"customer_code"}).items():
        setattr(customer, field, value)
    customer.customer_code = code
    customer.customer_name = normalize_whitespace(payload.customer_name)
    customer.customer_type = customer_type_key(payload.customer_type)
    db.commit()
    db.refresh(customer)
    return customer


def delete_customer(db: Session, customer_id: int) -> None:
    customer = get_customer(db, customer_id)
    db.delete(customer)
    db.commit()


def attach_customer_image(
    db: Session,
    customer_id: int,
    slot: int,
    content: bytes,
    filename: str,
    content_type: Optional[str] = None,
) -> Customer:
    if slot not in IMAGE_SLOTS:
        raise ValidationError(f"Image slot must be one of {IMAGE_SLOTS}")
    customer = get_customer(db, customer_id)
    path = StorageClient.generate_path("customer-images", filename)
    url = StorageClient.upload(content, path, content_type)
    setattr(customer, f"image_url_{slot}", url)
    db.commit()
    db.refresh(customer)
    return customer
