"""Tests for the fulfillment orchestrator."""

import asyncio
from decimal import Decimal

import pytest

from src.integrations.clients.mocks.sandbox import SandboxSupplierClient
from src.integrations.contracts.interfaces import PurchaseResult, SupplierId
from src.integrations.policy.fulfillment_service import (
    FulfillmentService,
    OrderNotFoundError,
    PackageNotFoundError,
    fulfill_in_background,
)
from src.integrations.policy.supplier_router import SupplierRouter
from tests.fakes import RecordingAdapter


@pytest.fixture
def service(db, adapters):
    return FulfillmentService(db, SupplierRouter(db, adapters))


@pytest.mark.asyncio
async def test_successful_fulfillment_records_supplier(service, db, paid_order, adapters):
    outcome = await service.fulfill(paid_order.id)

    assert outcome.success is True
    order = db.get_order(paid_order.id)
    assert order.fulfillment_status == "fulfilled"
    assert order.supplier == "dataxpress"
    assert order.supplier_reference == "dataxpress-tx"
    assert order.fulfillment_error is None


@pytest.mark.asyncio
async def test_supplier_is_paid_wholesale_cost(service, paid_order, adapters):
    await service.fulfill(paid_order.id)

    call = adapters[SupplierId.DATAXPRESS].calls[0]
    assert call["price"] == Decimal("32.20")
    assert call["data_amount"] == "10GB"
    assert call["order_reference"] == paid_order.payment_reference


@pytest.mark.asyncio
async def test_fulfilled_order_is_not_sent_again(service, paid_order, adapters):
    await service.fulfill(paid_order.id)
    second = await service.fulfill(paid_order.id)

    assert second.skipped is True
    assert len(adapters[SupplierId.DATAXPRESS].calls) == 1


@pytest.mark.asyncio
async def test_concurrent_triggers_call_supplier_once(service, db, paid_order, adapters):
    outcomes = await asyncio.gather(service.fulfill(paid_order.id), service.fulfill(paid_order.id))

    assert len(adapters[SupplierId.DATAXPRESS].calls) == 1
    assert sorted(o.skipped for o in outcomes) == [False, True]
    assert db.get_order(paid_order.id).fulfillment_status == "fulfilled"


@pytest.mark.asyncio
async def test_missing_supplier_reference_falls_back_to_order_reference(db, paid_order):
    adapter = RecordingAdapter(SupplierId.DATAXPRESS, result=PurchaseResult(success=True, message="ok", data={}))
    service = FulfillmentService(db, SupplierRouter(db, {SupplierId.DATAXPRESS: adapter}))

    await service.fulfill(paid_order.id)

    assert db.get_order(paid_order.id).supplier_reference == paid_order.payment_reference


@pytest.mark.asyncio
async def test_failure_then_retry_after_switch(db, paid_order, adapters):
    adapters[SupplierId.DATAXPRESS].result = PurchaseResult(success=False, message="insufficient balance")
    router = SupplierRouter(db, adapters)
    service = FulfillmentService(db, router)

    first = await service.fulfill(paid_order.id)
    assert first.success is False
    failed = db.get_order(paid_order.id)
    assert failed.fulfillment_status == "failed"
    assert failed.fulfillment_error == "insufficient balance"
    assert failed.supplier == "dataxpress"

    router.set_active_supplier(SupplierId.HUBNET)
    retry = await service.fulfill(paid_order.id)

    assert retry.success is True
    order = db.get_order(paid_order.id)
    assert order.supplier == "hubnet"
    assert order.fulfillment_error is None
    assert len(adapters[SupplierId.HUBNET].calls) == 1


@pytest.mark.asyncio
async def test_sandbox_scenario_ten_gigabytes(db, paid_order):
    sandbox = SandboxSupplierClient(balance=Decimal("100.00"))
    router = SupplierRouter(db, {SupplierId.DATAXPRESS: RecordingAdapter(SupplierId.DATAXPRESS), SupplierId.SANDBOX: sandbox})
    router.set_active_supplier(SupplierId.SANDBOX)

    outcome = await FulfillmentService(db, router).fulfill(paid_order.id)

    assert outcome.success is True
    assert sandbox.purchases[0]["volume_code"] == 10
    assert sandbox.purchases[0]["price"] == Decimal("32.20")
    assert sandbox.balance == Decimal("67.80")


@pytest.mark.asyncio
async def test_sandbox_scenario_insufficient_balance(db, paid_order):
    sandbox = SandboxSupplierClient(balance=Decimal("20.00"))
    router = SupplierRouter(db, {SupplierId.DATAXPRESS: RecordingAdapter(SupplierId.DATAXPRESS), SupplierId.SANDBOX: sandbox})
    router.set_active_supplier(SupplierId.SANDBOX)

    outcome = await FulfillmentService(db, router).fulfill(paid_order.id)

    assert outcome.success is False
    order = db.get_order(paid_order.id)
    assert order.fulfillment_status == "failed"
    assert order.fulfillment_error == "insufficient balance"
    assert order.supplier == "sandbox"


@pytest.mark.asyncio
async def test_unknown_order(service):
    with pytest.raises(OrderNotFoundError):
        await service.fulfill("does-not-exist")


@pytest.mark.asyncio
async def test_missing_package_leaves_order_untouched(service, db, paid_order, adapters):
    db.delete_package(paid_order.package_id)

    with pytest.raises(PackageNotFoundError):
        await service.fulfill(paid_order.id)

    order = db.get_order(paid_order.id)
    assert order.fulfillment_status == "pending"
    assert adapters[SupplierId.DATAXPRESS].calls == []


@pytest.mark.asyncio
async def test_unexpected_error_marks_failed_and_propagates(db, paid_order):
    adapter = RecordingAdapter(SupplierId.DATAXPRESS, raises=RuntimeError("connection reset"))
    service = FulfillmentService(db, SupplierRouter(db, {SupplierId.DATAXPRESS: adapter}))

    with pytest.raises(RuntimeError):
        await service.fulfill(paid_order.id)

    order = db.get_order(paid_order.id)
    assert order.fulfillment_status == "failed"
    assert order.fulfillment_error == "connection reset"


@pytest.mark.asyncio
async def test_background_entry_point_swallows_and_logs(db, paid_order, caplog):
    adapter = RecordingAdapter(SupplierId.DATAXPRESS, raises=RuntimeError("boom"))
    service = FulfillmentService(db, SupplierRouter(db, {SupplierId.DATAXPRESS: adapter}))

    await fulfill_in_background(service, paid_order.id)

    assert "Background fulfillment" in caplog.text
    assert db.get_order(paid_order.id).fulfillment_status == "failed"


class RivalClaimDB:
    """Lets another worker win the claim between the status read and our own claim."""

    def __init__(self, db):
        self._db = db
        self.claims = []

    def __getattr__(self, name):
        return getattr(self._db, name)

    def get_package(self, package_id):
        self._db.claim_for_fulfillment(self._order_id)
        return self._db.get_package(package_id)

    def claim_for_fulfillment(self, order_id):
        granted = self._db.claim_for_fulfillment(order_id)
        self.claims.append(granted)
        return granted

    def racing(self, order_id):
        self._order_id = order_id
        return self


@pytest.mark.asyncio
async def test_lost_claim_skips_supplier_call(db, paid_order, adapters):
    rival = RivalClaimDB(db).racing(paid_order.id)
    service = FulfillmentService(rival, SupplierRouter(db, adapters))

    outcome = await service.fulfill(paid_order.id)

    assert outcome.skipped is True
    assert rival.claims == [False]
    assert outcome.order.fulfillment_status == "processing"
    assert adapters[SupplierId.DATAXPRESS].calls == []
    assert adapters[SupplierId.HUBNET].calls == []
