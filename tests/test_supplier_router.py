"""Tests for active-supplier resolution and dispatch."""

from decimal import Decimal

import pytest

from src.integrations.contracts.interfaces import PurchaseResult, SupplierId
from src.integrations.policy.supplier_router import ACTIVE_SUPPLIER_KEY, SupplierRouter
from tests.fakes import RecordingAdapter


class BrokenSettingsDB:
    def get_setting(self, key):
        raise RuntimeError("database unavailable")


@pytest.fixture
def router(db, adapters):
    return SupplierRouter(db, adapters)


def test_defaults_to_dataxpress_when_unset(router):
    assert router.get_active_supplier() == SupplierId.DATAXPRESS


def test_storage_error_falls_back_to_default(adapters):
    router = SupplierRouter(BrokenSettingsDB(), adapters)
    assert router.get_active_supplier() == SupplierId.DATAXPRESS


def test_unknown_stored_value_falls_back_to_default(db, router):
    db.upsert_setting(ACTIVE_SUPPLIER_KEY, "acme")
    assert router.get_active_supplier() == SupplierId.DATAXPRESS


def test_unregistered_supplier_falls_back_to_default(db, router):
    db.upsert_setting(ACTIVE_SUPPLIER_KEY, "sandbox")
    assert router.get_active_supplier() == SupplierId.DATAXPRESS


def test_set_active_supplier_persists(db, router):
    assert router.set_active_supplier("HUBNET") == SupplierId.HUBNET
    assert db.get_setting(ACTIVE_SUPPLIER_KEY) == "hubnet"
    assert router.get_active_supplier() == SupplierId.HUBNET


def test_set_active_supplier_rejects_unknown(router):
    with pytest.raises(ValueError):
        router.set_active_supplier("acme")
    with pytest.raises(ValueError):
        router.set_active_supplier(SupplierId.SANDBOX)


def test_default_must_be_registered(db):
    with pytest.raises(ValueError):
        SupplierRouter(db, {SupplierId.HUBNET: RecordingAdapter(SupplierId.HUBNET)})


@pytest.mark.asyncio
async def test_purchase_goes_to_active_supplier_after_switch(router, adapters):
    await router.purchase("0241234567", "5GB", Decimal("16.10"), "FS-1-a")
    router.set_active_supplier(SupplierId.HUBNET)
    result = await router.purchase("0241234567", "5GB", Decimal("16.10"), "FS-1-b")

    assert [c["order_reference"] for c in adapters[SupplierId.DATAXPRESS].calls] == ["FS-1-a"]
    assert [c["order_reference"] for c in adapters[SupplierId.HUBNET].calls] == ["FS-1-b"]
    assert result.supplier == SupplierId.HUBNET


@pytest.mark.asyncio
async def test_no_failover_on_supplier_failure(db, adapters):
    adapters[SupplierId.DATAXPRESS].result = PurchaseResult(success=False, message="insufficient balance")
    router = SupplierRouter(db, adapters)

    result = await router.purchase("0241234567", "5GB", Decimal("16.10"), "FS-1-a")

    assert result.success is False
    assert result.message == "insufficient balance"
    assert adapters[SupplierId.HUBNET].calls == []


@pytest.mark.asyncio
async def test_explicit_supplier_overrides_active(router, adapters):
    balance = await router.get_balance(SupplierId.HUBNET)
    assert balance.supplier == SupplierId.HUBNET

    with pytest.raises(ValueError):
        await router.get_balance("sandbox")


@pytest.mark.asyncio
async def test_all_balances_queries_every_supplier(router, adapters):
    adapters[SupplierId.HUBNET].balance = "7.00"

    balances = await router.get_all_balances()

    assert set(balances) == {SupplierId.DATAXPRESS, SupplierId.HUBNET}
    assert balances[SupplierId.HUBNET].balance == "7.00"
    assert balances[SupplierId.HUBNET].supplier == SupplierId.HUBNET
