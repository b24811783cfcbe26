"""
Payment gateway contracts.

The storefront does not process payments itself: the hosted Paystack checkout
collects the money and notifies us through a webhook. This module defines the
shape we read from that webhook and the signature check applied to it.
"""

import hashlib
import hmac
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

CHARGE_SUCCESS = "charge.success"


@dataclass
class PaymentWebhookEvent:
    """Payload received from the payment gateway webhook callback."""
    event: str
    reference: Optional[str]
    amount: Optional[int] = None          # minor units (pesewas) as sent by the gateway
    currency: Optional[str] = None
    raw_payload: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_charge_success(self) -> bool:
        return self.event == CHARGE_SUCCESS and bool(self.reference)


def parse_webhook_event(payload: Dict[str, Any]) -> PaymentWebhookEvent:
    data = payload.get("data") if isinstance(payload.get("data"), dict) else {}
    return PaymentWebhookEvent(
        event=str(payload.get("event") or ""),
        reference=data.get("reference"),
        amount=data.get("amount"),
        currency=data.get("currency"),
        raw_payload=payload,
    )


def verify_webhook_signature(raw_body: bytes, signature: Optional[str], secret_key: str) -> bool:
    """Paystack signs the raw body with HMAC-SHA512 using the account secret key."""
    if not signature:
        return False
    expected = hmac.new(secret_key.encode("utf-8"), raw_body, hashlib.sha512).hexdigest()
    return hmac.compare_digest(expected, signature.strip())


def to_minor_units(amount: Decimal) -> int:
    """GHS 46.54 -> 4654 pesewas, the unit the gateway reports amounts in."""
    return int((Decimal(str(amount)) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def amount_matches(event: PaymentWebhookEvent, expected_total: Decimal) -> bool:
    """True only when the gateway reports exactly the order's total."""
    try:
        reported = int(event.amount)
    except (TypeError, ValueError):
        return False
    return reported == to_minor_units(expected_total)
