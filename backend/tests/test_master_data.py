from datetime import date
from decimal import Decimal

import pytest

from sfa.core.exceptions import NotFoundError, ValidationError
from sfa.models import AppUser, RouteCustomerMapping
from sfa.schemas.auth import UserCreate
from sfa.schemas.branch import BranchCreate, BranchUpdate
from sfa.schemas.company import CompanyCreate, CompanyUpdate
from sfa.schemas.customer import CustomerCreate
from sfa.schemas.product import ProductCreate, ProductPriceCreate
from sfa.schemas.route import RouteCreate
from sfa.services.branch_service import create_branch, deactivate_branch, list_branches, update_branch
from sfa.services.company_service import (
    create_company,
    deactivate_company,
    get_company,
    list_companies,
    update_company,
)
from sfa.services.customer_service import (
    attach_customer_image,
    create_customer,
    list_customers,
)
from sfa.services.product_service import add_price, create_product, get_effective_price
from sfa.services.route_service import (
    active_route_id,
    assign_customer_route,
    assign_user_route,
    create_route,
    list_user_routes,
)
from sfa.services.user_service import authenticate, create_user, set_user_active


def test_branch_codes_are_unique(db, seed):
    create_branch(db, BranchCreate(branch_code="che", branch_name="Chennai"))
    with pytest.raises(ValidationError):
        create_branch(db, BranchCreate(branch_code="CHE", branch_name="Chennai 2"))


def test_deactivated_branch_hidden_from_active_list(db, seed):
    deactivate_branch(db, seed["other_branch"].branch_id)
    names = [b.branch_name for b in list_branches(db, active_only=True)]
    assert names == ["Bangalore"]


def test_company_codes_are_unique_and_deactivation_keeps_branches(db, seed):
    company = create_company(db, CompanyCreate(company_code=" acme ", company_name="Acme Distributors"))
    assert company.company_code == "ACME"
    with pytest.raises(ValidationError):
        create_company(db, CompanyCreate(company_code="ACME", company_name="Copy"))

    branch = create_branch(
        db, BranchCreate(branch_code="hub", branch_name="Hubli", company_id=company.company_id)
    )
    assert branch.company_id == company.company_id

    deactivate_company(db, company.company_id)
    assert list_companies(db, active_only=True) == []
    assert [c.company_code for c in list_companies(db)] == ["ACME"]
    db.refresh(branch)
    assert branch.company_id == company.company_id


def test_branch_rejects_unknown_company(db, seed):
    with pytest.raises(NotFoundError, match="Company '404' not found"):
        create_branch(db, BranchCreate(branch_code="X1", branch_name="Nowhere", company_id=404))
    with pytest.raises(NotFoundError):
        update_branch(
            db,
            seed["branch"].branch_id,
            BranchUpdate(branch_code="BLR", branch_name="Bangalore", company_id=404),
        )


def test_update_company(db, seed):
    company = create_company(db, CompanyCreate(company_code="A1", company_name="Alpha"))
    other = create_company(db, CompanyCreate(company_code="B1", company_name="Beta"))
    updated = update_company(
        db, company.company_id, CompanyUpdate(company_code="a2", company_name="Alpha Foods", gstin="29ABCDE1234F1Z5")
    )
    assert (updated.company_code, updated.company_name, updated.gstin) == ("A2", "Alpha Foods", "29ABCDE1234F1Z5")
    with pytest.raises(ValidationError):
        update_company(db, company.company_id, CompanyUpdate(company_code="b1", company_name="Alpha"))
    assert get_company(db, other.company_id).company_name == "Beta"


def test_customer_with_mobile_gets_inactive_login(db, seed):
    customer = create_customer(
        db,
        CustomerCreate(
            customer_code=" cus009 ",
            customer_name="Lakshmi  Agencies",
            mobile_no="9333333333",
            route_id=seed["route_2"].route_id,
        ),
    )

    assert customer.customer_code == "CUS009"
    assert customer.customer_name == "Lakshmi Agencies"
    login = db.query(AppUser).filter(AppUser.user_id == customer.user_id).one()
    assert login.role == "customer"
    assert not login.is_active
    assert active_route_id(db, customer.customer_id) == seed["route_2"].route_id


def test_customer_code_clash_and_unknown_route(db, seed):
    with pytest.raises(ValidationError):
        create_customer(db, CustomerCreate(customer_code="c001", customer_name="Clash"))
    with pytest.raises(NotFoundError):
        create_customer(db, CustomerCreate(customer_code="C777", customer_name="Lost", route_id=999))


def test_customer_search_and_status_filter(db, seed):
    seed["dealer"].is_active = False
    db.commit()

    assert [c.customer_code for c in list_customers(db, search="metro")] == ["C002"]
    assert [c.customer_code for c in list_customers(db, status="active")] == ["C001"]
    assert [c.customer_code for c in list_customers(db, status="inactive")] == ["C002"]


def test_customer_image_slots(db, seed, storage_bucket):
    customer = attach_customer_image(db, seed["shop"].customer_id, 2, b"img", "front.jpg", "image/jpeg")
    assert customer.image_url_2.startswith("https://storage.test/uploads/customer-images/")
    assert list(storage_bucket.files) == [customer.image_url_2.split("/uploads/", 1)[1]]
    with pytest.raises(ValidationError):
        attach_customer_image(db, seed["shop"].customer_id, 4, b"img", "x.jpg")


def test_customer_route_upsert_keeps_single_mapping(db, seed):
    customer_id = seed["shop"].customer_id
    assign_customer_route(db, customer_id, seed["route_2"].route_id)
    assign_customer_route(db, customer_id, seed["route"].route_id)

    mappings = db.query(RouteCustomerMapping).filter(RouteCustomerMapping.customer_id == customer_id).all()
    assert len(mappings) == 1
    assert mappings[0].route_id == seed["route"].route_id


def test_user_route_assignment_is_idempotent(db, seed):
    staff_id = seed["staff"].user_id
    first = assign_user_route(db, staff_id, seed["route"].route_id)
    second = assign_user_route(db, staff_id, seed["route"].route_id)
    assert first.mapping_id == second.mapping_id
    assert len(list_user_routes(db, staff_id)) == 1


def test_route_codes_are_unique(db, seed):
    with pytest.raises(ValidationError):
        create_route(db, RouteCreate(route_code="r1", route_name="Again"))


def test_login_checks_password_and_active_flag(db, seed):
    session = authenticate(db, "9000000002", "ravi")
    assert session.user_id == seed["staff"].user_id
    assert authenticate(db, "9000000002", "wrong") is None

    set_user_active(db, seed["staff"].user_id, False)
    assert authenticate(db, "9000000002", "ravi") is None


def test_customer_login_is_linked_to_customer(db, seed):
    user = create_user(
        db,
        UserCreate(mobile_no="9111111111", full_name="Sri Stores", password="shop", role="customer"),
    )
    session = authenticate(db, "9111111111", "shop")
    assert session.user_id == user.user_id
    assert session.is_customer
    assert session.customer_id == seed["shop"].customer_id


def test_duplicate_mobile_is_rejected(db, seed):
    with pytest.raises(ValidationError, match="already registered"):
        create_user(db, UserCreate(mobile_no="9000000002", full_name="Copy", password="pass"))


def test_product_code_uppercased_and_brand_checked(db, seed):
    product = create_product(db, ProductCreate(product_code="p-77", product_name="Ghee 500ml", gst_rate=Decimal("12")))
    assert product.product_code == "P-77"
    with pytest.raises(NotFoundError):
        create_product(db, ProductCreate(product_code="P-78", product_name="Ghee", brand_id=999))


def test_product_service_reports_effective_price(db, seed):
    oil_id = seed["oil"].product_id
    add_price(
        db,
        oil_id,
        ProductPriceCreate(
            customer_type="retail",
            price=Decimal("110"),
            effective_from=date(2024, 7, 1),
            effective_to=date(2024, 7, 31),
        ),
    )

    july = get_effective_price(db, oil_id, "retail", date(2024, 7, 15))
    june = get_effective_price(db, oil_id, "retail", date(2024, 6, 15))
    before = get_effective_price(db, oil_id, "retail", date(2023, 12, 31))

    assert july.price == Decimal("110")
    assert june.price == Decimal("100")
    assert before.price == Decimal("0")
    assert before.price_id is None


def test_price_range_must_be_ordered():
    with pytest.raises(ValueError):
        ProductPriceCreate(price=Decimal("1"), effective_from=date(2024, 2, 1), effective_to=date(2024, 1, 1))


def test_customer_type_is_stored_lower_case(db, seed):
    customer = create_customer(
        db, CustomerCreate(customer_code="C050", customer_name="Big Buyer", customer_type=" Wholesale ")
    )
    assert customer.customer_type == "wholesale"

    price = add_price(
        db,
        seed["soap"].product_id,
        ProductPriceCreate(customer_type="WHOLESALE", price=Decimal("33"), effective_from=date(2024, 1, 1)),
    )
    assert price.customer_type == "wholesale"
    assert get_effective_price(db, seed["soap"].product_id, customer.customer_type, date(2024, 6, 1)).price == Decimal("33")
    assert get_effective_price(db, seed["oil"].product_id, "Wholesale", date(2024, 6, 1)).customer_type == "wholesale"
