"""
Sandbox supplier: MOCK client.

⚠️  In-process supplier for development and testing. No network calls.
    Bundles are addressed by *volume code*: the bare GB integer ("5GB" -> 5),
    the same way the sandbox price list is keyed.

Behaviour is configurable through the constructor so tests can exercise both
successful deliveries and business rejections (e.g. "insufficient balance").
"""

import logging
import uuid
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
from src.integrations.contracts.packages import parse_gigabytes

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------

# volume code -> wholesale price (GHS)
_SANDBOX_PRICE_LIST: Dict[int, Decimal] = {
    1: Decimal("3.50"),
    2: Decimal("7.00"),
    3: Decimal("9.80"),
    5: Decimal("16.10"),
    10: Decimal("32.20"),
    20: Decimal("64.40"),
    50: Decimal("161.00"),
    100: Decimal("322.00"),
}


def volume_code(data_amount: str) -> int:
    """``"5GB"`` -> ``5``. Raises ValueError for anything but ``<int>GB``."""
    return parse_gigabytes(data_amount)


# ---------------------------------------------------------------------------
# Mock client
# ---------------------------------------------------------------------------

class SandboxSupplierClient(SupplierAdapter):
    """
    Mock wholesale supplier.

    Parameters
    ----------
    balance : Decimal
        Starting wallet balance. Purchases are debited from it.
    fail_with : str, optional
        When set, every purchase is rejected with this message.
    price_list : dict, optional
        Volume code -> wholesale price. Defaults to the built-in list.
    """

    def __init__(
        self,
        balance: Decimal = Decimal("1000.00"),
        fail_with: Optional[str] = None,
        price_list: Optional[Dict[int, Decimal]] = None,
    ):
        self.balance = Decimal(balance)
        self.fail_with = fail_with
        self._price_list = dict(price_list or _SANDBOX_PRICE_LIST)

        # In-memory stores (reset on restart)
        self.purchases: List[Dict[str, Any]] = []
        self._orders: Dict[str, Dict[str, Any]] = {}

        logger.info("[SANDBOX] Supplier initialised (balance=%s)", self.balance)

    @property
    def supplier(self) -> SupplierId:
        return SupplierId.SANDBOX

    def _new_transaction_id(self) -> str:
        return f"SBX-{uuid.uuid4().hex[:12].upper()}"

    # ------------------------------------------------------------------
    # Purchases
    # ------------------------------------------------------------------

    async def purchase(self, phone_number: str, data_amount: str, price: Decimal, order_reference: str) -> PurchaseResult:
        try:
            code = volume_code(data_amount)
        except ValueError as exc:
            return PurchaseResult(success=False, message=str(exc))

        call = {
            "phone_number": phone_number,
            "volume_code": code,
            "price": Decimal(str(price)),
            "order_reference": order_reference,
        }
        self.purchases.append(call)
        logger.info("[SANDBOX] Purchase ref=%s phone=%s volume_code=%s price=%s", order_reference, phone_number, code, price)

        if self.fail_with:
            return PurchaseResult(success=False, message=self.fail_with)

        # Same reference twice is treated as the same order, as a real supplier would.
        existing = self._orders.get(order_reference)
        if existing is not None:
            return PurchaseResult(success=True, message="Order already processed", data=dict(existing))

        if call["price"] > self.balance:
            return PurchaseResult(success=False, message="insufficient balance")

        self.balance -= call["price"]
        record = {"transaction_id": self._new_transaction_id(), "reference": order_reference, "status": "delivered"}
        self._orders[order_reference] = record
        return PurchaseResult(success=True, message="Data bundle delivered", data=dict(record))

    async def check_order_status(self, order_reference: str) -> OrderStatusResult:
        record = self._orders.get(order_reference)
        if record is None:
            return OrderStatusResult(success=False, message=f"Order '{order_reference}' not found")
        return OrderStatusResult(success=True, status=record["status"], data=dict(record))

    # ------------------------------------------------------------------
    # Wallet & pricing
    # ------------------------------------------------------------------

    async def get_balance(self) -> BalanceResult:
        return BalanceResult(success=True, balance=f"{self.balance:.2f}", currency="GHS")

    async def get_cost_price(self, data_amount: str) -> CostPriceResult:
        try:
            code = volume_code(data_amount)
        except ValueError as exc:
            return CostPriceResult(success=False, message=str(exc))
        if code not in self._price_list:
            return CostPriceResult(success=False, message=f"No sandbox price for {data_amount}")
        return CostPriceResult(success=True, cost_price=self._price_list[code])
