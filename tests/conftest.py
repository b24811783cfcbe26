"""Pytest fixtures for storefront ledger, routing and fulfillment tests."""

from decimal import Decimal

import pytest

from src.database.storage import StorefrontDB
from src.integrations.contracts.interfaces import SupplierId
from tests.fakes import RecordingAdapter


@pytest.fixture
def db():
    """In-memory SQLite storefront database."""
    store = StorefrontDB("sqlite://")
    store.create_tables()
    return store


@pytest.fixture
def package_10gb(db):
    return db.create_package(data_amount="10GB", price=Decimal("46.00"), supplier_cost=Decimal("32.20"))


@pytest.fixture
def paid_order(db, package_10gb):
    order = db.create_order(package=package_10gb, phone_number="0241234567", email="buyer@example.com")
    return db.update_payment_status(order.id, "completed")


@pytest.fixture
def adapters():
    return {
        SupplierId.DATAXPRESS: RecordingAdapter(SupplierId.DATAXPRESS),
        SupplierId.HUBNET: RecordingAdapter(SupplierId.HUBNET),
    }
