from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from sfa.api.errors import http_error
from sfa.deps import get_current_session, get_db
from sfa.schemas.route import (
    RouteCreate,
    RouteCustomerAssign,
    RouteCustomerOut,
    RouteOut,
    RouteUpdate,
    RouteUserAssign,
    RouteUserOut,
)
from sfa.services.route_service import (
    assign_customer_route,
    assign_user_route,
    create_route,
    deactivate_route,
    get_route,
    list_customer_routes,
    list_routes,
    list_user_routes,
    remove_customer_route,
    remove_user_route,
    update_route,
)

router = APIRouter(dependencies=[Depends(get_current_session)])


# -------------------------------------------------
# ROUTE <-> CUSTOMER
# -------------------------------------------------

@router.post(
    "/customers",
    response_model=RouteCustomerOut,
    summary="Assign a customer to a route (replaces its current route)",
)
def assign_customer_api(payload: RouteCustomerAssign, db: Session = Depends(get_db)):
    try:
        return assign_customer_route(db, payload.customer_id, payload.route_id, is_active=payload.is_active)
    except ValueError as exc:
        raise http_error(exc)


@router.get("/customers", response_model=List[RouteCustomerOut], summary="List route-customer mappings")
def list_customer_mappings_api(route_id: Optional[int] = None, db: Session = Depends(get_db)):
    return list_customer_routes(db, route_id=route_id)


@router.delete(
    "/customers/{mapping_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a route-customer mapping",
)
def remove_customer_mapping_api(mapping_id: int, db: Session = Depends(get_db)):
    try:
        remove_customer_route(db, mapping_id)
    except ValueError as exc:
        raise http_error(exc)
    return None


# -------------------------------------------------
# ROUTE <-> FIELD STAFF
# -------------------------------------------------

@router.post("/users", response_model=RouteUserOut, summary="Assign a field staff user to a route")
def assign_user_api(payload: RouteUserAssign, db: Session = Depends(get_db)):
    try:
        return assign_user_route(db, payload.user_id, payload.route_id)
    except ValueError as exc:
        raise http_error(exc)


@router.get("/users", response_model=List[RouteUserOut], summary="List route-user mappings")
def list_user_mappings_api(user_id: Optional[int] = None, db: Session = Depends(get_db)):
    return list_user_routes(db, user_id=user_id)


@router.delete(
    "/users/{mapping_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a route-user mapping",
)
def remove_user_mapping_api(mapping_id: int, db: Session = Depends(get_db)):
    try:
        remove_user_route(db, mapping_id)
    except ValueError as exc:
        raise http_error(exc)
    return None


# -------------------------------------------------
# ROUTES
# -------------------------------------------------

@router.post(
    "",
    response_model=RouteOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a route",
)
def create_route_api(payload: RouteCreate, db: Session = Depends(get_db)):
    try:
        return create_route(db, payload)
    except ValueError as exc:
        raise http_error(exc)


@router.get("", response_model=List[RouteOut], summary="List routes")
def list_routes_api(active_only: bool = False, db: Session = Depends(get_db)):
    return list_routes(db, active_only=active_only)


@router.get("/{route_id}", response_model=RouteOut, summary="Get a route")
def get_route_api(route_id: int, db: Session = Depends(get_db)):
    try:
        return get_route(db, route_id)
    except ValueError as exc:
        raise http_error(exc)


@router.put("/{route_id}", response_model=RouteOut, summary="Update a route")
def update_route_api(route_id: int, payload: RouteUpdate, db: Session = Depends(get_db)):
    try:
        return update_route(db, route_id, payload)
    except ValueError as exc:
        raise http_error(exc)


@router.delete("/{route_id}", response_model=RouteOut, summary="Deactivate a route")
def deactivate_route_api(route_id: int, db: Session = Depends(get_db)):
    try:
        return deactivate_route(db, route_id)
    except ValueError as exc:
        raise http_error(exc)
