from decimal import Decimal
from typing import Any, Dict, Optional

from src.database.models import Order, Package
from src.integrations.contracts.interfaces import (
    BalanceResult,
    CostPriceResult,
    OrderStatusResult,
    PurchaseResult,
)


def _money(value: Optional[Decimal]) -> Optional[str]:
    return f"{value:.2f}" if value is not None else None


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None


def package_to_dict(pkg: Package) -> Dict[str, Any]:
    return {
        "id": pkg.id,
        "data_amount": pkg.data_amount,
        "price": _money(pkg.price),
        "supplier_cost": _money(pkg.supplier_cost),
        "is_active": pkg.is_active,
        "created_at": _iso(pkg.created_at),
        "updated_at": _iso(pkg.updated_at),
    }


def public_package_to_dict(pkg: Package) -> Dict[str, Any]:
    # Wholesale cost stays out of the customer-facing catalogue
    data = package_to_dict(pkg)
    data.pop("supplier_cost")
    return data


def order_to_dict(order: Order, package: Optional[Package] = None) -> Dict[str, Any]:
    data = {
        "id": order.id,
        "package_id": order.package_id,
        "phone_number": order.phone_number,
        "email": order.email,
        "amount": _money(order.amount),
        "fee": _money(order.fee),
        "total_amount": _money(order.total_amount),
        "payment_reference": order.payment_reference,
        "status": order.status,
        "fulfillment_status": order.fulfillment_status,
        "fulfillment_error": order.fulfillment_error,
        "supplier": order.supplier,
        "supplier_reference": order.supplier_reference,
        "created_at": _iso(order.created_at),
        "updated_at": _iso(order.updated_at),
    }
    if package is not None:
        data["package"] = public_package_to_dict(package)
    return data


def purchase_result_to_dict(result: PurchaseResult) -> Dict[str, Any]:
    return {
        "success": result.success,
        "message": result.message,
        "supplier": result.supplier.value if result.supplier else None,
        "data": result.data,
    }


def balance_result_to_dict(result: BalanceResult) -> Dict[str, Any]:
    return {
        "success": result.success,
        "supplier": result.supplier.value if result.supplier else None,
        "balance": result.balance,
        "currency": result.currency,
        "message": result.message,
    }


def cost_price_result_to_dict(result: CostPriceResult) -> Dict[str, Any]:
    return {
        "success": result.success,
        "supplier": result.supplier.value if result.supplier else None,
        "cost_price": _money(result.cost_price),
        "message": result.message,
    }


def order_status_result_to_dict(result: OrderStatusResult) -> Dict[str, Any]:
    return {
        "success": result.success,
        "supplier": result.supplier.value if result.supplier else None,
        "status": result.status,
        "message": result.message,
        "data": result.data,
    }
