"""
Order fulfillment service.

Takes a paid order, claims it for delivery, asks the active supplier to send
the data bundle and records the outcome on the order.

Fulfillment lifecycle:

    pending   --claim--> processing --supplier success--> fulfilled
    failed    --claim--> processing --supplier failure--> failed
    fulfilled | processing --> no-op (duplicate trigger)

The claim is a conditional update, so a webhook and a manual admin retry that
arrive together result in a single supplier call.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from src.database.models import Order
from src.database.storage import StorefrontDB
from src.integrations.contracts.interfaces import PurchaseResult
from src.integrations.contracts.orders import FulfillmentStatus
from src.integrations.policy.supplier_router import SupplierRouter

logger = logging.getLogger(__name__)


class FulfillmentError(Exception):
    """Base class for fulfillment errors that a retry cannot fix by itself."""


class OrderNotFoundError(FulfillmentError):
    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order '{order_id}' not found")
        self.order_id = order_id


class PackageNotFoundError(FulfillmentError):
    def __init__(self, order_id: str, package_id: Optional[str]) -> None:
        super().__init__(f"Package '{package_id}' for order '{order_id}' not found")
        self.order_id = order_id
        self.package_id = package_id


@dataclass
class FulfillmentOutcome:
    order: Order
    skipped: bool = False                     # duplicate trigger, supplier not called
    result: Optional[PurchaseResult] = None   # supplier answer when it was called

    @property
    def success(self) -> bool:
        return self.order.fulfillment_status == FulfillmentStatus.FULFILLED.value

    @property
    def message(self) -> str:
        if self.result is not None:
            return self.result.message
        return f"Order already {self.order.fulfillment_status}; nothing to do"


class FulfillmentService:
    def __init__(self, db: StorefrontDB, router: SupplierRouter) -> None:
        self.db = db
        self.router = router

    async def fulfill(self, order_id: str) -> FulfillmentOutcome:
        order = self.db.get_order(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)

        if order.fulfillment_status in (FulfillmentStatus.FULFILLED.value, FulfillmentStatus.PROCESSING.value):
            logger.info("Order %s already %s; skipping fulfillment", order.id, order.fulfillment_status)
            return FulfillmentOutcome(order=order, skipped=True)

        package = self.db.get_package(order.package_id) if order.package_id else None
        if package is None:
            # Data-integrity problem: leave the fulfillment fields as they are.
            logger.error("Order %s references missing package %s", order.id, order.package_id)
            raise PackageNotFoundError(order.id, order.package_id)

        if not self.db.claim_for_fulfillment(order.id):
            current = self.db.get_order(order.id) or order
            logger.info("Order %s was claimed by another trigger (%s); skipping", order.id, current.fulfillment_status)
            return FulfillmentOutcome(order=current, skipped=True)

        try:
            # Wholesale cost goes upstream, never the customer price.
            result = await self.router.purchase(
                phone_number=order.phone_number,
                data_amount=package.data_amount,
                price=package.supplier_cost,
                order_reference=order.payment_reference,
            )
            supplier = result.supplier.value if result.supplier else None

            if result.success:
                reference = result.transaction_reference or order.payment_reference
                self.db.complete_fulfillment(order.id, supplier=supplier, supplier_reference=reference)
                logger.info("Order %s fulfilled by %s (reference=%s)", order.id, supplier, reference)
            else:
                self.db.fail_fulfillment(order.id, error=result.message, supplier=supplier)
                logger.error("Order %s fulfillment failed via %s: %s", order.id, supplier, result.message)
        except Exception as exc:
            logger.exception("Unexpected error while fulfilling order %s", order.id)
            self.db.fail_fulfillment(order.id, error=str(exc) or exc.__class__.__name__)
            raise

        return FulfillmentOutcome(order=self.db.get_order(order.id) or order, result=result)


async def fulfill_in_background(service: FulfillmentService, order_id: str) -> None:
    """Fire-and-forget entry point for webhook-triggered fulfillment."""
    try:
        outcome = await service.fulfill(order_id)
    except Exception:
        logger.exception("Background fulfillment for order %s failed", order_id)
        return
    logger.info(
        "Background fulfillment for order %s finished: status=%s skipped=%s",
        order_id, outcome.order.fulfillment_status, outcome.skipped,
    )
