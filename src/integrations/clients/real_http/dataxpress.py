"""
DataXpress HTTP client.

API reference: https://www.dataxpress.shop/api-dev

Wire contract:
- auth header ``X-API-KEY: <key>``
- volumes are sent in megabytes using binary units (1GB = 1024MB) in ``volumeInMB``
- success marker is the body field ``status == "success"``
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
)
from src.integrations.contracts.packages import parse_gigabytes
from src.integrations.policy.response_wrappers import (
    IntegrationResponseError,
    error_message,
    normalize_cost_price,
    normalize_wallet_balance,
    transport_error_message,
)

logger = logging.getLogger(__name__)

DATAXPRESS_BASE_URL = "https://www.dataxpress.shop"
MB_PER_GB = 1024


def volume_in_mb(data_amount: str) -> int:
    """``"5GB"`` -> ``5120``. Raises ValueError for anything but ``<int>GB``."""
    return parse_gigabytes(data_amount) * MB_PER_GB


class DataXpressClient(HttpSupplierClient):
    display_name = "DataXpress"

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        network: str = "mtn",
        timeout_seconds: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        super().__init__(base_url or DATAXPRESS_BASE_URL, api_key, timeout_seconds, transport)
        self.network = network

    @property
    def supplier(self) -> SupplierId:
        return SupplierId.DATAXPRESS

    def _auth_headers(self) -> Dict[str, str]:
        return {"X-API-KEY": self.api_key}

    async def purchase(self, phone_number: str, data_amount: str, price: Decimal, order_reference: str) -> PurchaseResult:
        if not self.is_configured:
            return PurchaseResult(success=False, message=self.not_configured_message())

        try:
            volume = volume_in_mb(data_amount)
            payload = {
                "ref": order_reference,
                "phone": phone_number,
                "volumeInMB": volume,
                "amount": float(price),
                "networkType": self.network,
            }
            logger.info(
                "Sending data order to DataXpress: phone=%s data_amount=%s volume_mb=%s price=%s ref=%s",
                phone_number, data_amount, volume, price, order_reference,
            )
            response, body = await self._request("POST", "/api/buy-data", json=payload)
        except Exception as exc:
            logger.error("DataXpress purchase error for ref=%s: %s", order_reference, exc)
            return PurchaseResult(success=False, message=transport_error_message(exc))

        if not response.is_success:
            logger.error("DataXpress API error (%s): %s", response.status_code, body)
            return PurchaseResult(
                success=False,
                message=error_message(body, "message", default=f"API request failed with status {response.status_code}"),
            )

        if body.get("status") == "success":
            data = body.get("data") if isinstance(body.get("data"), dict) else {}
            logger.info("DataXpress order successful: ref=%s data=%s", order_reference, data)
            return PurchaseResult(success=True, message=str(body.get("message") or "Order placed"), data=data)

        logger.error("DataXpress order failed: ref=%s message=%s", order_reference, body.get("message"))
        return PurchaseResult(success=False, message=error_message(body, "message", default="Order was rejected by DataXpress"))

    async def get_balance(self) -> BalanceResult:
        if not self.is_configured:
            return BalanceResult(success=False, message=self.not_configured_message())

        try:
            response, body = await self._request("GET", "/api/wallet-balance")
            if not response.is_success or body.get("status") != "success":
                return BalanceResult(
                    success=False,
                    message=error_message(body, "message", default="Failed to fetch wallet balance"),
                )
            wallet = normalize_wallet_balance(body.get("data") or {})
        except Exception as exc:
            logger.error("Failed to fetch DataXpress wallet balance: %s", exc)
            return BalanceResult(success=False, message=transport_error_message(exc))

        return BalanceResult(success=True, balance=wallet.balance, currency=wallet.currency)

    async def get_cost_price(self, data_amount: str) -> CostPriceResult:
        if not self.is_configured:
            return CostPriceResult(success=False, message=self.not_configured_message())

        try:
            payload = {"volumeInMB": volume_in_mb(data_amount), "networkType": self.network}
            response, body = await self._request("POST", "/api/get-cost-price", json=payload)
            if not response.is_success or body.get("status") != "success":
                return CostPriceResult(
                    success=False,
                    message=error_message(body, "message", default="Failed to fetch cost price"),
                )
            cost_price = normalize_cost_price(body.get("data") or {})
        except IntegrationResponseError:
            return CostPriceResult(success=False, message="Cost price not found in response")
        except Exception as exc:
            logger.error("Failed to fetch DataXpress cost price for %s: %s", data_amount, exc)
            return CostPriceResult(success=False, message=transport_error_message(exc))

        return CostPriceResult(success=True, cost_price=cost_price)

    async def check_order_status(self, order_reference: str) -> OrderStatusResult:
        if not self.is_configured:
            return OrderStatusResult(success=False, message=self.not_configured_message())

        try:
            response, body = await self._request("GET", f"/api/order-status/{order_reference}")
        except Exception as exc:
            logger.error("Failed to check DataXpress order status for ref=%s: %s", order_reference, exc)
            return OrderStatusResult(success=False, message=transport_error_message(exc))

        if not response.is_success or body.get("status") != "success":
            return OrderStatusResult(
                success=False,
                message=error_message(body, "message", default="Failed to check order status"),
            )

        data = body.get("data") if isinstance(body.get("data"), dict) else {}
        return OrderStatusResult(success=True, status=data.get("status"), data=data)
