from datetime import date
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from sfa.core.exceptions import NotFoundError, ValidationError
from sfa.models.product import Brand, Product, ProductPrice
from sfa.schemas.product import (
    BrandCreate,
    EffectivePrice,
    ProductCreate,
    ProductPriceCreate,
    ProductUpdate,
)
from sfa.services.pricing_service import customer_type_key, find_effective_price
from sfa.utils.text_cleaner import normalize_whitespace
from sfa.utils.values import ZERO


# -------------------------------------------------
# BRANDS
# -------------------------------------------------

def create_brand(db: Session, payload: BrandCreate) -> Brand:
    code = normalize_whitespace(payload.brand_code).upper()
    if db.query(Brand).filter(Brand.brand_code == code).first():
        raise ValidationError(f"Brand code {code} already exists")
    brand = Brand(
        brand_code=code,
        brand_name=normalize_whitespace(payload.brand_name),
        is_active=payload.is_active,
    )
    db.add(brand)
    db.commit()
    db.refresh(brand)
    return brand


def list_brands(db: Session, active_only: bool = False) -> List[Brand]:
    query = db.query(Brand)
    if active_only:
        query = query.filter(Brand.is_active.is_(True))
    return query.order_by(Brand.brand_name).all()


def update_brand(db: Session, brand_id: int, payload: BrandCreate) -> Brand:
    brand = db.query(Brand).filter(Brand.brand_id == brand_id).first()
    if not brand:
        raise NotFoundError("Brand", brand_id)
    brand.brand_code = normalize_whitespace(payload.brand_code).upper()
    brand.brand_name = normalize_whitespace(payload.brand_name)
    brand.is_active = payload.is_active
    db.commit()
    db.refresh(brand)
    return brand


# -------------------------------------------------
# PRODUCTS
# -------------------------------------------------

def _check_brand(db: Session, brand_id: Optional[int]) -> None:
    if brand_id is not None and not db.query(Brand).filter(Brand.brand_id == brand_id).first():
        raise NotFoundError("Brand", brand_id)


def create_product(db: Session, payload: ProductCreate) -> Product:
    code = normalize_whitespace(payload.product_code).upper()
    if db.query(Product).filter(Product.product_code == code).first():
        raise ValidationError(f"Product code {code} already exists")
    _check_brand(db, payload.brand_id)
    product = Product(**payload.model_dump(exclude={"product_code"}), product_code=code)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


def get_product(db: Session, product_id: int) -> Product:
    product = (
        db.query(Product)
        .options(joinedload(Product.brand))
        .filter(Product.product_id == product_id)
        .first()
    )
    if not product:
        raise NotFoundError("Product", product_id)
    return product


def list_products(
    db: Session,
    search: Optional[str] = None,
    active_only: bool = False,
    limit: int = 200,
    offset: int = 0,
) -> List[Product]:
    query = db.query(Product).outerjoin(Brand)
    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.filter(
            or_(
                func.lower(Product.product_code).like(pattern),
                func.lower(Product.product_name).like(pattern),
                func.lower(Brand.brand_name).like(pattern),
            )
        )
    if active_only:
        query = query.filter(Product.is_active.is_(True))
    return query.order_by(Product.product_name).offset(offset).limit(limit).all()


def update_product(db: Session, product_id: int, payload: ProductUpdate) -> Product:
    product = get_product(db, product_id)
    code = normalize_whitespace(payload.product_code).upper()
    clash = db.query(Product).filter(Product.product_code == code, Product.product_id != product_id).first()
    if clash:
        raise ValidationError(f"Product code {code} already exists")
    _check_brand(db, payload.brand_id)
    for field, value in payload.model_dump(exclude={"product_code"}).items():
        setattr(product, field, value)
    product.product_code = code
    db.commit()
    db.refresh(product)
    return product


def deactivate_product(db: Session, product_id: int) -> Product:
    product = get_product(db, product_id)
    product.is_active = False
    db.commit()
    db.refresh(product)
    return product


# -------------------------------------------------
# PRICES
# -------------------------------------------------

def add_price(db: Session, product_id: int, payload: ProductPriceCreate) -> ProductPrice:
    get_product(db, product_id)
    price = ProductPrice(
        product_id=product_id,
        **payload.model_dump(exclude={"customer_type"}),
        customer_type=customer_type_key(payload.customer_type),
    )
    db.add(price)
    db.commit()
    db.refresh(price)
    return price


def list_prices(db: Session, product_id: int) -> List[ProductPrice]:
    get_product(db, product_id)
    return (
        db.query(ProductPrice)
        .filter(ProductPrice.product_id == product_id)
        .order_by(ProductPrice.customer_type, ProductPrice.effective_from.desc())
        .all()
    )


def get_effective_price(
    db: Session,
    product_id: int,
    customer_type: Optional[str] = None,
    on_date: Optional[date] = None,
) -> EffectivePrice:
    get_product(db, product_id)
    customer_type = customer_type_key(customer_type)
    on_date = on_date or date.today()
    row = find_effective_price(db, product_id, customer_type, on_date)
    return EffectivePrice(
        product_id=product_id,
        customer_type=customer_type,
        on_date=on_date,
        price=row.price if row else ZERO,
        discount_percentage=row.discount_percentage if row else ZERO,
        price_id=row.price_id if row else None,
    )
