"""
Supplier router.

Single source of truth for "which supplier is active", plus a pass-through
dispatcher to that supplier's adapter. The active supplier is read from the
settings table on every call, so an admin switch takes effect for the next
order without any cache to invalidate.

There is no automatic failover: a failure from the active supplier is
returned as-is. Switching suppliers is an explicit admin action.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from decimal import Decimal
from typing import Dict, Mapping, Optional, Union

from src.database.storage import StorefrontDB
from src.integrations.contracts.interfaces import (
    BalanceResult,
    CostPriceResult,
    OrderStatusResult,
    PurchaseResult,
    SupplierAdapter,
    SupplierId,
)

logger = logging.getLogger(__name__)

ACTIVE_SUPPLIER_KEY = "active_supplier"
DEFAULT_SUPPLIER = SupplierId.DATAXPRESS


class SupplierRouter:
    def __init__(
        self,
        db: StorefrontDB,
        adapters: Mapping[SupplierId, SupplierAdapter],
        default_supplier: SupplierId = DEFAULT_SUPPLIER,
    ) -> None:
        if default_supplier not in adapters:
            raise ValueError(f"Default supplier '{default_supplier.value}' has no registered adapter.")
        self.db = db
        self.adapters: Dict[SupplierId, SupplierAdapter] = dict(adapters)
        self.default_supplier = default_supplier

    # ------------------------------------------------------------------
    # Active supplier setting
    # ------------------------------------------------------------------

    def get_active_supplier(self) -> SupplierId:
        try:
            value = self.db.get_setting(ACTIVE_SUPPLIER_KEY)
        except Exception as exc:
            # Storage trouble here must not fail an order; fall back to the default.
            logger.error("Error fetching active supplier, using default %s: %s", self.default_supplier.value, exc)
            return self.default_supplier

        if value is None:
            logger.info("No active supplier setting found, using default: %s", self.default_supplier.value)
            return self.default_supplier

        try:
            supplier = SupplierId.parse(value)
        except ValueError:
            logger.warning("Active supplier setting %r is not a known supplier, using default %s", value, self.default_supplier.value)
            return self.default_supplier

        if supplier not in self.adapters:
            logger.warning("Active supplier %s has no registered adapter, using default %s", supplier.value, self.default_supplier.value)
            return self.default_supplier

        logger.info("Active supplier: %s", supplier.value)
        return supplier

    def set_active_supplier(self, supplier: Union[SupplierId, str]) -> SupplierId:
        target = SupplierId.parse(supplier)
        if target not in self.adapters:
            raise ValueError(f"Supplier '{target.value}' is not available.")
        self.db.upsert_setting(ACTIVE_SUPPLIER_KEY, target.value)
        logger.info("Active supplier set to: %s", target.value)
        return target

    def _resolve(self, supplier: Optional[Union[SupplierId, str]]) -> SupplierId:
        if supplier is None:
            return self.get_active_supplier()
        target = SupplierId.parse(supplier)
        if target not in self.adapters:
            raise ValueError(f"Supplier '{target.value}' is not available.")
        return target

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def purchase(
        self,
        phone_number: str,
        data_amount: str,
        price: Decimal,
        order_reference: str,
        supplier: Optional[Union[SupplierId, str]] = None,
    ) -> PurchaseResult:
        target = self._resolve(supplier)
        logger.info("Routing order %s to %s", order_reference, target.value.upper())
        result = await self.adapters[target].purchase(phone_number, data_amount, price, order_reference)
        return dataclasses.replace(result, supplier=target)

    async def get_balance(self, supplier: Optional[Union[SupplierId, str]] = None) -> BalanceResult:
        target = self._resolve(supplier)
        result = await self.adapters[target].get_balance()
        return dataclasses.replace(result, supplier=target)

    async def get_cost_price(self, data_amount: str, supplier: Optional[Union[SupplierId, str]] = None) -> CostPriceResult:
        target = self._resolve(supplier)
        result = await self.adapters[target].get_cost_price(data_amount)
        return dataclasses.replace(result, supplier=target)

    async def check_order_status(
        self,
        order_reference: str,
        supplier: Optional[Union[SupplierId, str]] = None,
    ) -> OrderStatusResult:
        target = self._resolve(supplier)
        result = await self.adapters[target].check_order_status(order_reference)
        return dataclasses.replace(result, supplier=target)

    async def get_all_balances(self) -> Dict[SupplierId, BalanceResult]:
        suppliers = list(self.adapters)
        results = await asyncio.gather(*(self.adapters[s].get_balance() for s in suppliers))
        return {s: dataclasses.replace(r, supplier=s) for s, r in zip(suppliers, results)}
