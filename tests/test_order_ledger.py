"""Tests for order totals, references and status transitions."""

import re
from decimal import Decimal

import pytest

from src.integrations.contracts.orders import (
    FulfillmentStatus,
    InvalidTransitionError,
    PaymentStatus,
    can_transition_payment,
    compute_order_totals,
    fulfillment_sources,
    new_order_reference,
)
from src.integrations.contracts.packages import validate_data_amount


def test_fee_is_rounded_half_up_to_cents():
    fee, total = compute_order_totals(Decimal("46.00"))
    assert fee == Decimal("0.54")
    assert total == Decimal("46.54")


def test_fee_on_small_amount():
    fee, total = compute_order_totals(Decimal("5.00"))
    assert fee == Decimal("0.06")
    assert total == Decimal("5.06")


def test_order_reference_format_and_uniqueness():
    refs = {new_order_reference() for _ in range(50)}
    assert len(refs) == 50
    assert all(re.fullmatch(r"FS-\d{13}-[0-9a-f]{8}", r) for r in refs)


@pytest.mark.parametrize(
    "current,requested,allowed",
    [
        ("pending", "completed", True),
        ("pending", "processing", True),
        ("processing", "pending", False),
        ("failed", "pending", True),
        ("completed", "pending", False),
        ("completed", "failed", False),
        ("completed", "completed", True),
    ],
)
def test_payment_transition_table(current, requested, allowed):
    assert can_transition_payment(current, requested) is allowed


def test_fulfillment_sources_follow_transition_table():
    assert fulfillment_sources(FulfillmentStatus.PROCESSING) == (FulfillmentStatus.PENDING, FulfillmentStatus.FAILED)
    assert fulfillment_sources(FulfillmentStatus.FULFILLED) == (FulfillmentStatus.PROCESSING,)
    assert fulfillment_sources(FulfillmentStatus.FAILED) == (FulfillmentStatus.PROCESSING,)
    assert fulfillment_sources(FulfillmentStatus.PENDING) == ()


def test_unknown_status_value_is_rejected():
    with pytest.raises(ValueError):
        can_transition_payment("pending", "refunded")


def test_data_amount_validation():
    assert validate_data_amount("5GB") == "5GB"
    for bad in ("5MB", "GB", "", None, "5 GB", "1.5GB", "5GB\n", "\u0665GB", 5):
        with pytest.raises(ValueError):
            validate_data_amount(bad)


def test_create_order_freezes_amounts(db, package_10gb):
    order = db.create_order(package=package_10gb, phone_number="0241234567", email="a@b.co")
    assert order.amount == Decimal("46.00")
    assert order.fee == Decimal("0.54")
    assert order.total_amount == Decimal("46.54")
    assert order.status == PaymentStatus.PENDING.value
    assert order.fulfillment_status == FulfillmentStatus.PENDING.value

    db.update_package(package_10gb.id, {"price": Decimal("50.00")})
    assert db.get_order(order.id).amount == Decimal("46.00")


def test_order_lookup_by_reference(db, package_10gb):
    order = db.create_order(package=package_10gb, phone_number="0241234567", email="a@b.co")
    assert db.get_order_by_reference(order.payment_reference).id == order.id
    assert db.get_order_by_reference("FS-missing") is None


def test_completed_payment_cannot_be_reverted(db, paid_order):
    with pytest.raises(InvalidTransitionError):
        db.update_payment_status(paid_order.id, "pending")
    assert db.get_order(paid_order.id).status == "completed"


def test_rewriting_same_payment_status_is_noop(db, paid_order):
    order = db.update_payment_status(paid_order.id, "completed")
    assert order.status == "completed"


def test_claim_is_granted_once(db, paid_order):
    assert db.claim_for_fulfillment(paid_order.id) is True
    assert db.claim_for_fulfillment(paid_order.id) is False
    assert db.get_order(paid_order.id).fulfillment_status == "processing"


def test_finish_requires_processing(db, paid_order):
    assert db.complete_fulfillment(paid_order.id, supplier="dataxpress", supplier_reference="x") is False
    assert db.get_order(paid_order.id).fulfillment_status == "pending"


def test_failed_order_can_be_claimed_again(db, paid_order):
    db.claim_for_fulfillment(paid_order.id)
    db.fail_fulfillment(paid_order.id, error="insufficient balance", supplier="dataxpress")
    failed = db.get_order(paid_order.id)
    assert failed.fulfillment_status == "failed"
    assert failed.fulfillment_error == "insufficient balance"
    assert db.claim_for_fulfillment(paid_order.id) is True


def test_packages_listed_in_numeric_order(db):
    for amount in ("10GB", "2GB", "1GB"):
        db.create_package(data_amount=amount, price=Decimal("5"), supplier_cost=Decimal("3"))
    assert [p.data_amount for p in db.list_packages()] == ["1GB", "2GB", "10GB"]


def test_inactive_packages_hidden_from_catalogue(db):
    db.create_package(data_amount="1GB", price=Decimal("5"), supplier_cost=Decimal("3"), is_active=False)
    assert db.list_packages(active_only=True) == []
    assert len(db.list_packages()) == 1


def test_seed_only_runs_on_empty_table(db):
    from src.database.seed import default_packages

    assert db.seed_packages(default_packages()) == 17
    assert db.seed_packages(default_packages()) == 0
    ten = next(p for p in db.list_packages() if p.data_amount == "10GB")
    assert ten.price == Decimal("46.00")
    assert ten.supplier_cost == Decimal("32.20")


def test_storage_rejects_trailing_newline_in_data_amount(db, package_10gb):
    with pytest.raises(ValueError):
        db.create_package(data_amount="5GB\n", price=Decimal("23.00"), supplier_cost=Decimal("16.10"))
    with pytest.raises(ValueError):
        db.update_package(package_10gb.id, {"data_amount": "10GB\n"})
    assert db.get_package(package_10gb.id).data_amount == "10GB"


def test_fulfilled_order_cannot_be_failed_or_reclaimed(db, paid_order):
    db.claim_for_fulfillment(paid_order.id)
    db.complete_fulfillment(paid_order.id, supplier="dataxpress", supplier_reference="DX-1")

    assert db.fail_fulfillment(paid_order.id, error="late failure") is False
    assert db.claim_for_fulfillment(paid_order.id) is False
    order = db.get_order(paid_order.id)
    assert order.fulfillment_status == "fulfilled"
    assert order.fulfillment_error is None


def test_utcnow_is_timezone_aware():
    from datetime import timezone

    from src.database.models import utcnow

    assert utcnow().tzinfo is timezone.utc
