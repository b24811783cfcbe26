"""
Hubnet HTTP client.

API reference: https://console.hubnet.app/live/api/

Wire contract:
- auth header ``token: Bearer <key>``
- volumes are sent as a string of megabytes using decimal units (1GB = 1000MB)
- success marker is ``status`` true together with response ``code == "0000"``
- no cost-price or order-status endpoint is offered
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, Optional

import httpx

from src.integrations.clients.real_http.base import HttpSupplierClient
from src.integrations.contracts.interfaces import (
    BalanceResult,
    CostPriceResult,
    OrderStatusResult,
    PurchaseResult,
    SupplierId,
    capability_not_supported,
)
from src.integrations.contracts.packages import parse_gigabytes
from src.integrations.policy.response_wrappers import (
    error_message,
    normalize_wallet_balance,
    transport_error_message,
)

logger = logging.getLogger(__name__)

HUBNET_BASE_URL = "https://console.hubnet.app/live/api/context/business/transaction"
HUBNET_SUCCESS_CODE = "0000"
HUBNET_NETWORKS = ("mtn", "at", "big-time")


def volume_in_decimal_mb(data_amount: str) -> int:
    """``"5GB"`` -> ``5000``. Raises ValueError for anything but ``<int>GB``."""
    return parse_gigabytes(data_amount) * 1000


class HubnetClient(HttpSupplierClient):
    display_name = "Hubnet"

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        network: str = "mtn",
        timeout_seconds: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if network not in HUBNET_NETWORKS:
            raise ValueError(f"Unsupported Hubnet network '{network}'. Expected one of {HUBNET_NETWORKS}.")
        super().__init__(base_url or HUBNET_BASE_URL, api_key, timeout_seconds, transport)
        self.network = network

    @property
    def supplier(self) -> SupplierId:
        return SupplierId.HUBNET

    def _auth_headers(self) -> Dict[str, str]:
        return {"token": f"Bearer {self.api_key}"}

    async def purchase(self, phone_number: str, data_amount: str, price: Decimal, order_reference: str) -> PurchaseResult:
        if not self.is_configured:
            return PurchaseResult(success=False, message=self.not_configured_message())

        try:
            volume = volume_in_decimal_mb(data_amount)
            payload = {
                "phone": phone_number,
                "volume": str(volume),
                "reference": order_reference,
            }
            # Hubnet debits the wallet by its own price list; price is logged only.
            logger.info(
                "Sending data order to Hubnet: phone=%s data_amount=%s volume_mb=%s supplier_cost=%s ref=%s network=%s",
                phone_number, data_amount, volume, price, order_reference, self.network,
            )
            response, body = await self._request("POST", f"/{self.network}-new-transaction", json=payload)
        except Exception as exc:
            logger.error("Hubnet purchase error for ref=%s: %s", order_reference, exc)
            return PurchaseResult(success=False, message=transport_error_message(exc))

        if not response.is_success:
            logger.error("Hubnet API error (%s): %s", response.status_code, body)
            return PurchaseResult(
                success=False,
                message=error_message(body, "reason", "message", default=f"API request failed with status {response.status_code}"),
            )

        if body.get("status") and str(body.get("code")) == HUBNET_SUCCESS_CODE:
            logger.info("Hubnet order successful: ref=%s transaction_id=%s", order_reference, body.get("transaction_id"))
            return PurchaseResult(
                success=True,
                message=error_message(body, "message", "reason", default="Transaction successful"),
                data={
                    "transaction_id": body.get("transaction_id"),
                    "payment_id": body.get("payment_id"),
                    "reference": body.get("reference"),
                },
            )

        logger.error("Hubnet order failed: ref=%s code=%s message=%s", order_reference, body.get("code"), body.get("message") or body.get("reason"))
        return PurchaseResult(success=False, message=error_message(body, "message", "reason", default="Transaction failed"))

    async def get_balance(self) -> BalanceResult:
        if not self.is_configured:
            return BalanceResult(success=False, message=self.not_configured_message())

        try:
            response, body = await self._request("GET", "/check_balance")
            if not response.is_success:
                return BalanceResult(success=False, message=f"Failed to fetch balance: {response.status_code}")
            wallet = normalize_wallet_balance(body, fallback_currency="GHS")
        except Exception as exc:
            logger.error("Failed to fetch Hubnet wallet balance: %s", exc)
            return BalanceResult(success=False, message=transport_error_message(exc))

        return BalanceResult(success=True, balance=wallet.balance, currency=wallet.currency)

    async def get_cost_price(self, data_amount: str) -> CostPriceResult:
        return CostPriceResult(
            success=False,
            message=capability_not_supported(self.display_name, "cost price") + " Please configure pricing manually.",
        )

    async def check_order_status(self, order_reference: str) -> OrderStatusResult:
        return OrderStatusResult(success=False, message=capability_not_supported(self.display_name, "order status"))
