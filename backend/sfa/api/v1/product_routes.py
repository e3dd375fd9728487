from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from sfa.api.errors import http_error
from sfa.deps import get_current_session, get_db
from sfa.schemas.product import (
    BrandCreate,
    BrandOut,
    EffectivePrice,
    ProductCreate,
    ProductOut,
    ProductPriceCreate,
    ProductPriceOut,
    ProductUpdate,
)
from sfa.services.product_service import (
    add_price,
    create_brand,
    create_product,
    deactivate_product,
    get_effective_price,
    get_product,
    list_brands,
    list_prices,
    list_products,
    update_brand,
    update_product,
)

router = APIRouter(dependencies=[Depends(get_current_session)])


# -------------------------------------------------
# BRANDS
# -------------------------------------------------

@router.post(
    "/brands",
    response_model=BrandOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a brand",
)
def create_brand_api(payload: BrandCreate, db: Session = Depends(get_db)):
    try:
        return create_brand(db, payload)
    except ValueError as exc:
        raise http_error(exc)


@router.get("/brands", response_model=List[BrandOut], summary="List brands")
def list_brands_api(active_only: bool = False, db: Session = Depends(get_db)):
    return list_brands(db, active_only=active_only)


@router.put("/brands/{brand_id}", response_model=BrandOut, summary="Update a brand")
def update_brand_api(brand_id: int, payload: BrandCreate, db: Session = Depends(get_db)):
    try:
        return update_brand(db, brand_id, payload)
    except ValueError as exc:
        raise http_error(exc)


# -------------------------------------------------
# PRODUCTS
# -------------------------------------------------

@router.post(
    "",
    response_model=ProductOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a product",
)
def create_product_api(payload: ProductCreate, db: Session = Depends(get_db)):
    try:
        return create_product(db, payload)
    except ValueError as exc:
        raise http_error(exc)


@router.get("", response_model=List[ProductOut], summary="List products")
def list_products_api(
    search: Optional[str] = None,
    active_only: bool = False,
    limit: int = Query(default=200, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
):
    return list_products(db, search=search, active_only=active_only, limit=limit, offset=offset)


@router.get("/{product_id}", response_model=ProductOut, summary="Get a product")
def get_product_api(product_id: int, db: Session = Depends(get_db)):
    try:
        return get_product(db, product_id)
    except ValueError as exc:
        raise http_error(exc)


@router.put("/{product_id}", response_model=ProductOut, summary="Update a product")
def update_product_api(product_id: int, payload: ProductUpdate, db: Session = Depends(get_db)):
    try:
        return update_product(db, product_id, payload)
    except ValueError as exc:
        raise http_error(exc)


@router.delete("/{product_id}", response_model=ProductOut, summary="Deactivate a product")
def deactivate_product_api(product_id: int, db: Session = Depends(get_db)):
    try:
        return deactivate_product(db, product_id)
    except ValueError as exc:
        raise http_error(exc)


# -------------------------------------------------
# PRICES
# -------------------------------------------------

@router.post(
    "/{product_id}/prices",
    response_model=ProductPriceOut,
    status_code=status.HTTP_201_CREATED,
    summary="Add a price row",
)
def add_price_api(product_id: int, payload: ProductPriceCreate, db: Session = Depends(get_db)):
    try:
        return add_price(db, product_id, payload)
    except ValueError as exc:
        raise http_error(exc)


@router.get("/{product_id}/prices", response_model=List[ProductPriceOut], summary="List price rows")
def list_prices_api(product_id: int, db: Session = Depends(get_db)):
    try:
        return list_prices(db, product_id)
    except ValueError as exc:
        raise http_error(exc)


@router.get(
    "/{product_id}/effective-price",
    response_model=EffectivePrice,
    summary="Price in effect for a customer type on a date",
)
def effective_price_api(
    product_id: int,
    customer_type: Optional[str] = None,
    on_date: Optional[date] = None,
    db: Session = Depends(get_db),
):
    try:
        return get_effective_price(db, product_id, customer_type=customer_type, on_date=on_date)
    except ValueError as exc:
        raise http_error(exc)
