import random
from datetime import date
from decimal import Decimal

import pytest

from sfa.core.config import settings
from sfa.core.exceptions import ValidationError
from sfa.models import ProductPrice
from sfa.services.pricing_service import (
    aggregate_lines,
    calculate_line,
    collection_balance,
    customer_type_key,
    find_effective_price,
)


def _random_inputs(rng):
    return (
        Decimal(str(round(rng.uniform(0, 500), 3))),
        Decimal(str(round(rng.uniform(0, 5000), 2))),
        Decimal(str(round(rng.uniform(0, 100), 2))),
        Decimal(str(round(rng.uniform(0, 100), 2))),
    )


def test_line_total_matches_closed_form():
    rng = random.Random(20240601)
    for _ in range(200):
        qty, price, disc, tax = _random_inputs(rng)
        line = calculate_line(qty, price, disc, tax)
        expected = qty * price * (1 - disc / 100) * (1 + tax / 100)
        assert abs(line.line_total - expected) < Decimal("1e-6")
        assert line.taxable_amount == line.gross_amount - line.discount_amount
        assert line.line_total == line.taxable_amount + line.tax_amount


def test_order_line_scenario():
    line = calculate_line(10, 100, 5, 18)
    assert line.gross_amount == Decimal("1000")
    assert line.discount_amount == Decimal("50")
    assert line.taxable_amount == Decimal("950")
    assert line.tax_amount == Decimal("171")
    assert line.line_total == Decimal("1121")


def test_calculate_line_is_pure():
    first = calculate_line("3.5", "12.40", "2", "12")
    second = calculate_line("3.5", "12.40", "2", "12")
    assert first == second


@pytest.mark.parametrize("bad", [None, "", "abc", "-5", float("nan")])
def test_bad_inputs_count_as_zero(bad):
    line = calculate_line(bad, 100, 0, 18)
    assert line.line_total == Decimal("0")
    priced = calculate_line(2, 50, bad, bad)
    assert priced.line_total == Decimal("100")


def test_aggregation_is_order_independent():
    rng = random.Random(7)
    lines = [calculate_line(*_random_inputs(rng)) for _ in range(25)]
    expected = aggregate_lines(lines)
    for _ in range(10):
        shuffled = list(lines)
        rng.shuffle(shuffled)
        totals = aggregate_lines(shuffled)
        assert abs(totals.net_amount - expected.net_amount) < Decimal("1e-6")
        assert abs(totals.gross_amount - expected.gross_amount) < Decimal("1e-6")
        assert abs(totals.tax_amount - expected.tax_amount) < Decimal("1e-6")


def test_header_identity_holds_for_generated_documents():
    rng = random.Random(99)
    for _ in range(50):
        lines = [calculate_line(*_random_inputs(rng)) for _ in range(rng.randint(1, 12))]
        totals = aggregate_lines(lines)
        identity = totals.gross_amount - totals.discount_amount + totals.tax_amount
        assert abs(totals.net_amount - identity) < Decimal("1e-6")


def test_header_net_scenario():
    lines = [
        calculate_line(1, "100.00"),
        calculate_line(1, "250.50"),
        calculate_line(1, "75.25"),
    ]
    assert aggregate_lines(lines).net_amount == Decimal("425.75")


def test_empty_document_totals_are_zero():
    totals = aggregate_lines([])
    assert totals.net_amount == Decimal("0")
    assert totals.gross_amount == Decimal("0")


def test_collection_balance_scenario():
    assert collection_balance(5000, 3000) == Decimal("2000")
    assert collection_balance(None, 300) == Decimal("-300")


def test_effective_price_respects_date_window(db, seed):
    oil = seed["oil"]
    db.add(
        ProductPrice(
            product_id=oil.product_id,
            customer_type="retail",
            price=Decimal("120"),
            discount_percentage=Decimal("0"),
            effective_from=date(2023, 1, 1),
            effective_to=date(2023, 12, 31),
            is_active=True,
        )
    )
    db.commit()

    assert find_effective_price(db, oil.product_id, "retail", date(2023, 6, 1)).price == Decimal("120")
    assert find_effective_price(db, oil.product_id, "retail", date(2024, 6, 1)).price == Decimal("100")
    assert find_effective_price(db, oil.product_id, "retail", date(2022, 6, 1)) is None
    assert find_effective_price(db, oil.product_id, "distributor", date(2024, 6, 1)) is None


def test_overlapping_prices_follow_conflict_policy(db, seed, monkeypatch):
    oil = seed["oil"]
    db.add(
        ProductPrice(
            product_id=oil.product_id,
            customer_type="retail",
            price=Decimal("110"),
            discount_percentage=Decimal("0"),
            effective_from=date(2024, 6, 1),
            is_active=True,
        )
    )
    db.commit()

    picked = find_effective_price(db, oil.product_id, "retail", date(2024, 7, 1))
    assert picked.price == Decimal("110")

    monkeypatch.setattr(settings, "PRICE_CONFLICT_POLICY", "reject")
    with pytest.raises(ValidationError):
        find_effective_price(db, oil.product_id, "retail", date(2024, 7, 1))


def test_customer_type_matching_ignores_case_and_padding(db, seed):
    soap = seed["soap"]
    db.add(
        ProductPrice(
            product_id=soap.product_id,
            customer_type=" Wholesale ",
            price=Decimal("35"),
            discount_percentage=Decimal("0"),
            effective_from=date(2024, 1, 1),
            is_active=True,
        )
    )
    db.commit()

    for typed in ("wholesale", "WHOLESALE", "  Wholesale"):
        assert find_effective_price(db, soap.product_id, typed, date(2024, 6, 1)).price == Decimal("35")
    assert find_effective_price(db, seed["oil"].product_id, None, date(2024, 6, 1)).price == Decimal("100")
    assert customer_type_key("  Retail ") == "retail"
    assert customer_type_key("") == settings.DEFAULT_CUSTOMER_TYPE
