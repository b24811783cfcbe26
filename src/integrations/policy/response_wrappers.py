from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, Field, ValidationError


class IntegrationResponseError(ValueError):
    def __init__(self, message: str, *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.payload = payload or {}


class WalletBalanceModel(BaseModel):
    balance: str
    currency: str = "GHS"
    raw: Dict[str, Any] = Field(default_factory=dict)


def read_json_body(response: httpx.Response) -> Dict[str, Any]:
    """Best-effort JSON decode; suppliers sometimes answer errors with HTML or an empty body."""
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {"data": data}


def error_message(body: Dict[str, Any], *keys: str, default: str) -> str:
    value = _first_non_empty(body, *keys, default="")
    return str(value) if value != "" else default


def transport_error_message(exc: Exception) -> str:
    # httpx timeouts frequently stringify to ""
    return str(exc) or exc.__class__.__name__


def normalize_wallet_balance(raw: Dict[str, Any], *, fallback_currency: str = "GHS") -> WalletBalanceModel:
    balance = _first_non_empty(raw, "balance", "wallet_balance", "amount")
    currency = str(_first_non_empty(raw, "currency", default=fallback_currency)).upper()
    return _build_model(
        WalletBalanceModel,
        {"balance": str(balance), "currency": currency, "raw": raw},
        raw,
    )


def normalize_cost_price(raw: Dict[str, Any]) -> Decimal:
    value = _first_non_empty(raw, "cost_price", "costPrice", "price")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise IntegrationResponseError(f"Invalid cost price: {value!r}", payload=raw) from exc
    if amount <= 0:
        raise IntegrationResponseError(f"Cost price must be > 0; got {amount}.", payload=raw)
    return amount


def _first_non_empty(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    if default is not None:
        return default
    raise IntegrationResponseError(f"Missing required field. Checked keys: {', '.join(keys)}", payload=data)


def _build_model(model_type, payload: Dict[str, Any], raw: Dict[str, Any]):
    try:
        return model_type(**payload)
    except ValidationError as exc:
        raise IntegrationResponseError(f"Response validation failed: {exc}", payload=raw) from exc
