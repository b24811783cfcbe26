from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class SupplierId(str, Enum):
    DATAXPRESS = "dataxpress"
    HUBNET = "hubnet"
    SANDBOX = "sandbox"

    @classmethod
    def parse(cls, value: Any) -> "SupplierId":
        """Accept enum members or case-insensitive strings; raise ValueError otherwise."""
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown supplier '{value}'. Expected one of: {', '.join(s.value for s in cls)}") from None


# ---------------------------------------------------------------------------
# Normalized supplier results
# ---------------------------------------------------------------------------

@dataclass
class PurchaseResult:
    success: bool
    message: str
    data: Dict[str, Any] = field(default_factory=dict)   # supplier transaction id(s), opaque
    supplier: Optional[SupplierId] = None

    @property
    def transaction_reference(self) -> Optional[str]:
        for key in ("transaction_id", "transactionId", "reference", "ref", "order_id", "id"):
            value = self.data.get(key)
            if value not in (None, ""):
                return str(value)
        return None


@dataclass
class BalanceResult:
    success: bool
    balance: Optional[str] = None
    currency: Optional[str] = None
    message: Optional[str] = None
    supplier: Optional[SupplierId] = None


@dataclass
class CostPriceResult:
    success: bool
    cost_price: Optional[Decimal] = None
    message: Optional[str] = None
    supplier: Optional[SupplierId] = None


@dataclass
class OrderStatusResult:
    success: bool
    status: Optional[str] = None
    message: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    supplier: Optional[SupplierId] = None


# ---------------------------------------------------------------------------
# Abstract supplier interface
# ---------------------------------------------------------------------------

class SupplierAdapter(ABC):
    """Every wholesale data supplier client must implement this interface.

    Implementations never raise: configuration problems, transport errors,
    HTTP errors and business rejections all come back as ``success=False``
    with a human-readable message.
    """

    @property
    @abstractmethod
    def supplier(self) -> SupplierId:
        """Return the supplier enum value."""

    @abstractmethod
    async def purchase(
        self,
        phone_number: str,
        data_amount: str,
        price: Decimal,
        order_reference: str,
    ) -> PurchaseResult:
        """Deliver ``data_amount`` to ``phone_number``, paying the supplier ``price``."""

    @abstractmethod
    async def get_balance(self) -> BalanceResult:
        """Return the wallet balance held with the supplier."""

    @abstractmethod
    async def get_cost_price(self, data_amount: str) -> CostPriceResult:
        """Wholesale price quote; unsupported suppliers answer success=False."""

    @abstractmethod
    async def check_order_status(self, order_reference: str) -> OrderStatusResult:
        """Look up a previously submitted purchase; unsupported suppliers answer success=False."""


def capability_not_supported(supplier_name: str, capability: str) -> str:
    return f"{supplier_name} does not provide a {capability} API."
