"""Fake supplier adapter shared by the tests."""

import asyncio
from decimal import Decimal
from typing import Any, Dict, List, Optional

from src.integrations.contracts.interfaces import (
    BalanceResult,
    CostPriceResult,
    OrderStatusResult,
    PurchaseResult,
    SupplierAdapter,
    SupplierId,
)


class RecordingAdapter(SupplierAdapter):
    """Fake supplier that records purchase calls and answers with a canned result."""

    def __init__(
        self,
        supplier_id: SupplierId,
        result: Optional[PurchaseResult] = None,
        raises: Optional[Exception] = None,
        balance: str = "100.00",
    ):
        self._supplier_id = supplier_id
        self.result = result or PurchaseResult(success=True, message="ok", data={"transaction_id": f"{supplier_id.value}-tx"})
        self.raises = raises
        self.balance = balance
        self.calls: List[Dict[str, Any]] = []

    @property
    def supplier(self) -> SupplierId:
        return self._supplier_id

    async def purchase(self, phone_number, data_amount, price, order_reference):
        self.calls.append(
            {"phone_number": phone_number, "data_amount": data_amount, "price": price, "order_reference": order_reference}
        )
        # yield to the loop so concurrent triggers interleave
        await asyncio.sleep(0)
        if self.raises is not None:
            raise self.raises
        return self.result

    async def get_balance(self):
        return BalanceResult(success=True, balance=self.balance, currency="GHS")

    async def get_cost_price(self, data_amount):
        return CostPriceResult(success=True, cost_price=Decimal("1.00"))

    async def check_order_status(self, order_reference):
        return OrderStatusResult(success=True, status="delivered")
