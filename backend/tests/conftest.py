import os

# settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_RESULT_BACKEND", "cache+memory://")

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sfa.core.storage import StorageClient
from sfa.deps import get_db
from sfa.main import create_app
from sfa.models import (
    AppUser,
    Base,
    Branch,
    Brand,
    Customer,
    Product,
    ProductPrice,
    Route,
    RouteCustomerMapping,
)
from sfa.schemas.auth import UserSession


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture()
def db(engine):
    TestingSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


class FakeBucket:
    """In-memory stand-in for a Supabase storage bucket."""

    def __init__(self):
        self.files = {}
        self.error = None

    def upload(self, path, file, file_options=None):
        if self.error is not None:
            raise self.error
        self.files[path] = (file, dict(file_options or {}))
        return {"path": path}

    def get_public_url(self, path):
        return f"https://storage.test/uploads/{path}"


class FakeSupabase:
    def __init__(self, bucket):
        self.bucket = bucket
        self.storage = self
        self.bucket_names = []

    def from_(self, name):
        self.bucket_names.append(name)
        return self.bucket


@pytest.fixture(autouse=True)
def storage_bucket(monkeypatch):
    bucket = FakeBucket()
    client = FakeSupabase(bucket)
    monkeypatch.setattr(StorageClient, "get_client", classmethod(lambda cls: client))
    return bucket


@pytest.fixture()
def seed(db):
    """Small master-data set shared by service and API tests."""
    branch = Branch(branch_code="BLR", branch_name="Bangalore", is_active=True)
    other_branch = Branch(branch_code="MYS", branch_name="Mysore", is_active=True)
    brand = Brand(brand_code="ACME", brand_name="Acme", is_active=True)
    route = Route(route_code="R1", route_name="North Loop", is_active=True)
    route_2 = Route(route_code="R2", route_name="South Loop", is_active=True)
    admin = AppUser(mobile_no="9000000001", full_name="Admin", password="admin", role="admin", is_active=True)
    staff = AppUser(mobile_no="9000000002", full_name="Ravi", password="ravi", role="field_staff", is_active=True)
    db.add_all([branch, other_branch, brand, route, route_2, admin, staff])
    db.flush()

    shop = Customer(
        customer_code="C001",
        customer_name="Sri Stores",
        customer_type="retail",
        mobile_no="9111111111",
        is_active=True,
    )
    dealer = Customer(
        customer_code="C002",
        customer_name="Metro Traders",
        customer_type="wholesale",
        is_active=True,
    )
    db.add_all([shop, dealer])
    db.flush()
    db.add(RouteCustomerMapping(route_id=route.route_id, customer_id=shop.customer_id, is_active=True))

    oil = Product(
        product_code="P001",
        product_name="Sunflower Oil 1L",
        brand_id=brand.brand_id,
        unit_of_measure="pcs",
        gst_rate=Decimal("5"),
        is_active=True,
    )
    soap = Product(
        product_code="P002",
        product_name="Bath Soap",
        brand_id=None,
        unit_of_measure="pcs",
        gst_rate=Decimal("18"),
        is_active=True,
    )
    db.add_all([oil, soap])
    db.flush()
    db.add_all(
        [
            ProductPrice(
                product_id=oil.product_id,
                customer_type="retail",
                price=Decimal("100"),
                discount_percentage=Decimal("5"),
                effective_from=date(2024, 1, 1),
                is_active=True,
            ),
            ProductPrice(
                product_id=oil.product_id,
                customer_type="wholesale",
                price=Decimal("90"),
                discount_percentage=Decimal("0"),
                effective_from=date(2024, 1, 1),
                is_active=True,
            ),
        ]
    )
    db.commit()
    return {
        "branch": branch,
        "other_branch": other_branch,
        "brand": brand,
        "route": route,
        "route_2": route_2,
        "admin": admin,
        "staff": staff,
        "shop": shop,
        "dealer": dealer,
        "oil": oil,
        "soap": soap,
    }


@pytest.fixture()
def staff_session(seed):
    staff = seed["staff"]
    return UserSession(
        user_id=staff.user_id,
        full_name=staff.full_name,
        mobile_no=staff.mobile_no,
        role="field_staff",
    )


@pytest.fixture()
def client(db):
    app = create_app()

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def auth_headers(seed):
    return {"X-User-Id": str(seed["staff"].user_id)}
