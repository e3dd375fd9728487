from typing import List, Optional

from sqlalchemy.orm import Session

from sfa.core.exceptions import NotFoundError, ValidationError
from sfa.models.customer import Customer
from sfa.models.route import Route, RouteCustomerMapping, UserRouteMapping
from sfa.models.user import AppUser
from sfa.schemas.route import RouteCreate, RouteUpdate
from sfa.utils.text_cleaner import normalize_whitespace


def create_route(db: Session, payload: RouteCreate) -> Route:
    code = normalize_whitespace(payload.route_code).upper()
    if db.query(Route).filter(Route.route_code == code).first():
        raise ValidationError(f"Route code {code} already exists")
    route = Route(
        route_code=code,
        route_name=normalize_whitespace(payload.route_name),
        description=payload.description,
        is_active=payload.is_active,
    )
    db.add(route)
    db.commit()
    db.refresh(route)
    return route


def get_route(db: Session, route_id: int) -> Route:
    route = db.query(Route).filter(Route.route_id == route_id).first()
    if not route:
        raise NotFoundError("Route", route_id)
    return route


def list_routes(db: Session, active_only: bool = False) -> List[Route]:
    query = db.query(Route)
    if active_only:
        query = query.filter(Route.is_active.is_(True))
    return query.order_by(Route.route_name).all()


def update_route(db: Session, route_id: int, payload: RouteUpdate) -> Route:
    route = get_route(db, route_id)
    code = normalize_whitespace(payload.route_code).upper()
    clash = db.query(Route).filter(Route.route_code == code, Route.route_id != route_id).first()
    if clash:
        raise ValidationError(f"Route code {code} already exists")
    route.route_code = code
    route.route_name = normalize_whitespace(payload.route_name)
    route.description = payload.description
    route.is_active = payload.is_active
    db.commit()
    db.refresh(route)
    return route


def deactivate_route(db: Session, route_id: int) -> Route:
    route = get_route(db, route_id)
    route.is_active = False
    db.commit()
    db.refresh(route)
    return route


# -------------------------------------------------
# ROUTE <-> CUSTOMER
# -------------------------------------------------

def active_route_id(db: Session, customer_id: int) -> Optional[int]:
    mapping = (
        db.query(RouteCustomerMapping)
        .filter(
            RouteCustomerMapping.customer_id == customer_id,
            RouteCustomerMapping.is_active.is_(True),
        )
        .order_by(RouteCustomerMapping.mapping_id.desc())
        .first()
    )
    return mapping.route_id if mapping else None


def upsert_customer_route(
    db: Session,
    customer_id: int,
    route_id: int,
    is_active: bool = True,
    commit: bool = True,
) -> RouteCustomerMapping:
    """
    Keep one route mapping per customer: an existing mapping is repointed
    instead of inserting a second one.
    """
    mapping = (
        db.query(RouteCustomerMapping)
        .filter(RouteCustomerMapping.customer_id == customer_id)
        .order_by(RouteCustomerMapping.mapping_id)
        .first()
    )
    if mapping:
        mapping.route_id = route_id
        mapping.is_active = is_active
    else:
        mapping = RouteCustomerMapping(route_id=route_id, customer_id=customer_id, is_active=is_active)
        db.add(mapping)
    if commit:
        db.commit()
        db.refresh(mapping)
    return mapping


def assign_customer_route(db: Session, customer_id: int, route_id: int, is_active: bool = True) -> RouteCustomerMapping:
    if not db.query(Customer).filter(Customer.customer_id == customer_id).first():
        raise NotFoundError("Customer", customer_id)
    get_route(db, route_id)
    return upsert_customer_route(db, customer_id, route_id, is_active=is_active)


def list_customer_routes(db: Session, route_id: Optional[int] = None) -> List[RouteCustomerMapping]:
    query = db.query(RouteCustomerMapping)
    if route_id is not None:
        query = query.filter(RouteCustomerMapping.route_id == route_id)
    return query.order_by(RouteCustomerMapping.mapping_id).all()


def remove_customer_route(db: Session, mapping_id: int) -> None:
    mapping = db.query(RouteCustomerMapping).filter(RouteCustomerMapping.mapping_id == mapping_id).first()
    if not mapping:
        raise NotFoundError("Route mapping", mapping_id)
    db.delete(mapping)
    db.commit()


# -------------------------------------------------
# ROUTE <-> FIELD STAFF
# -------------------------------------------------

def assign_user_route(db: Session, user_id: int, route_id: int) -> UserRouteMapping:
    if not db.query(AppUser).filter(AppUser.user_id == user_id).first():
        raise NotFoundError("User", user_id)
    get_route(db, route_id)
    mapping = (
        db.query(UserRouteMapping)
        .filter(UserRouteMapping.user_id == user_id, UserRouteMapping.route_id == route_id)
        .first()
    )
    if mapping:
        if not mapping.is_active:
            mapping.is_active = True
            db.commit()
            db.refresh(mapping)
        return mapping
    mapping = UserRouteMapping(user_id=user_id, route_id=route_id, is_active=True)
    db.add(mapping)
    db.commit()
    db.refresh(mapping)
    return mapping


def list_user_routes(db: Session, user_id: Optional[int] = None) -> List[UserRouteMapping]:
    query = db.query(UserRouteMapping)
    if user_id is not None:
        query = query.filter(UserRouteMapping.user_id == user_id)
    return query.order_by(UserRouteMapping.mapping_id).all()


def remove_user_route(db: Session, mapping_id: int) -> None:
    mapping = db.query(UserRouteMapping).filter(UserRouteMapping.mapping_id == mapping_id).first()
    if not mapping:
        raise NotFoundError("Route mapping", mapping_id)
    db.delete(mapping)
    db.commit()
