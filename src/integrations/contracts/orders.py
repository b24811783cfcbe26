"""
Order contract: payment and fulfillment lifecycles.

An order carries two independent status dimensions:
- ``status``: the payment lifecycle, moved by payment confirmation or an admin edit
- ``fulfillment_status``: the delivery lifecycle, moved only by the fulfillment service

Both are closed enumerations with an explicit transition table. Writes that
are not in the table are rejected; writing the current value again is a no-op.
"""

from __future__ import annotations

import time
import uuid
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Dict, FrozenSet, Tuple, Union


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class FulfillmentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    FULFILLED = "fulfilled"
    FAILED = "failed"


PAYMENT_TRANSITIONS: Dict[PaymentStatus, FrozenSet[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PROCESSING, PaymentStatus.COMPLETED, PaymentStatus.FAILED}),
    PaymentStatus.PROCESSING: frozenset({PaymentStatus.COMPLETED, PaymentStatus.FAILED}),
    PaymentStatus.FAILED: frozenset({PaymentStatus.PENDING, PaymentStatus.PROCESSING, PaymentStatus.COMPLETED}),
    PaymentStatus.COMPLETED: frozenset(),
}

FULFILLMENT_TRANSITIONS: Dict[FulfillmentStatus, FrozenSet[FulfillmentStatus]] = {
    FulfillmentStatus.PENDING: frozenset({FulfillmentStatus.PROCESSING}),
    FulfillmentStatus.FAILED: frozenset({FulfillmentStatus.PROCESSING}),
    FulfillmentStatus.PROCESSING: frozenset({FulfillmentStatus.FULFILLED, FulfillmentStatus.FAILED}),
    FulfillmentStatus.FULFILLED: frozenset(),
}

DEFAULT_FEE_RATE = Decimal("0.0118")
_CENTS = Decimal("0.01")


class InvalidTransitionError(ValueError):
    def __init__(self, field_name: str, current: str, requested: str) -> None:
        super().__init__(f"Cannot change {field_name} from '{current}' to '{requested}'.")
        self.field_name = field_name
        self.current = current
        self.requested = requested


def can_transition_payment(current: Union[str, PaymentStatus], requested: Union[str, PaymentStatus]) -> bool:
    cur, req = PaymentStatus(current), PaymentStatus(requested)
    return cur == req or req in PAYMENT_TRANSITIONS[cur]


def fulfillment_sources(target: Union[str, FulfillmentStatus]) -> Tuple[FulfillmentStatus, ...]:
    """States the table allows to move into ``target``; storage uses them as the conditional-update guard."""
    req = FulfillmentStatus(target)
    return tuple(st for st in FulfillmentStatus if req in FULFILLMENT_TRANSITIONS[st])


def ensure_payment_transition(current: Union[str, PaymentStatus], requested: Union[str, PaymentStatus]) -> PaymentStatus:
    """Return the requested status, or raise InvalidTransitionError if the table forbids it."""
    if not can_transition_payment(current, requested):
        raise InvalidTransitionError("status", PaymentStatus(current).value, PaymentStatus(requested).value)
    return PaymentStatus(requested)


def to_money(value: Union[str, int, float, Decimal]) -> Decimal:
    """Coerce to a 2-decimal fixed-point amount (half-up)."""
    return Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP)


def compute_order_totals(amount: Union[str, Decimal], fee_rate: Decimal = DEFAULT_FEE_RATE) -> Tuple[Decimal, Decimal]:
    """Return ``(fee, total_amount)`` for a frozen order amount."""
    base = to_money(amount)
    fee = to_money(base * Decimal(str(fee_rate)))
    return fee, base + fee


def new_order_reference(prefix: str = "FS") -> str:
    """Opaque payment/supplier reference, unique per order and stable across retries."""
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"
