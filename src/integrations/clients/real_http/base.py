"""
Shared plumbing for supplier HTTP clients.

Only transport concerns live here (credentials, timeout, request dispatch).
Unit conversion and response interpretation are supplier-specific and stay in
each client module.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import httpx

from src.integrations.contracts.interfaces import SupplierAdapter
from src.integrations.policy.response_wrappers import read_json_body

logger = logging.getLogger(__name__)


class HttpSupplierClient(SupplierAdapter):
    display_name: str = "Supplier"

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str],
        timeout_seconds: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.api_key = api_key or ""
        self.timeout_seconds = timeout_seconds
        # Tests inject httpx.MockTransport here
        self._transport = transport
        if not self.api_key:
            logger.warning("%s API key not set - %s fulfillment will be disabled", self.display_name, self.display_name)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def not_configured_message(self) -> str:
        return f"{self.display_name} API key not configured"

    def _auth_headers(self) -> Dict[str, str]:
        raise NotImplementedError

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
    ) -> Tuple[httpx.Response, Dict[str, Any]]:
        headers = {"Content-Type": "application/json", **self._auth_headers()}
        url = f"{self.base_url}{path}"
        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            response = await client.request(method, url, json=json, headers=headers)
        logger.info("%s %s %s -> %s", self.display_name, method, path, response.status_code)
        return response, read_json_body(response)
