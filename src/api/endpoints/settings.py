from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from src.api.dependencies import get_supplier_router, require_admin
from src.api.serializers import balance_result_to_dict, cost_price_result_to_dict
from src.integrations.contracts.interfaces import SupplierId
from src.integrations.policy.supplier_router import SupplierRouter

router = APIRouter(dependencies=[Depends(require_admin)])


class SupplierSwitchRequest(BaseModel):
    supplier: SupplierId = Field(..., description="Supplier that receives all new fulfillment requests")


def _parse_optional_supplier(value: Optional[str]) -> Optional[SupplierId]:
    if value is None:
        return None
    try:
        return SupplierId.parse(value)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.get("/settings/supplier", tags=["Settings"])
async def get_active_supplier(supplier_router: SupplierRouter = Depends(get_supplier_router)):
    return {
        "active_supplier": supplier_router.get_active_supplier().value,
        "available_suppliers": [s.value for s in supplier_router.adapters],
    }


@router.put("/settings/supplier", tags=["Settings"])
@router.post("/settings/supplier", tags=["Settings"])
async def set_active_supplier(body: SupplierSwitchRequest, supplier_router: SupplierRouter = Depends(get_supplier_router)):
    """Switch suppliers. Only orders fulfilled after the switch are affected; there is no failover."""
    try:
        active = supplier_router.set_active_supplier(body.supplier)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return {"active_supplier": active.value}


@router.get("/wallet/balance", tags=["Settings"])
async def get_wallet_balance(
    supplier: Optional[str] = Query(None, description="Defaults to the active supplier"),
    supplier_router: SupplierRouter = Depends(get_supplier_router),
):
    result = await supplier_router.get_balance(_parse_optional_supplier(supplier))
    return balance_result_to_dict(result)


@router.get("/wallet/balances", tags=["Settings"])
async def get_all_wallet_balances(supplier_router: SupplierRouter = Depends(get_supplier_router)):
    balances = await supplier_router.get_all_balances()
    return {sid.value: balance_result_to_dict(result) for sid, result in balances.items()}


@router.get("/suppliers/cost-price", tags=["Settings"])
async def get_cost_price(
    data_amount: str = Query(..., description="Bundle size, e.g. '5GB'"),
    supplier: Optional[str] = Query(None, description="Defaults to the active supplier"),
    supplier_router: SupplierRouter = Depends(get_supplier_router),
):
    result = await supplier_router.get_cost_price(data_amount, _parse_optional_supplier(supplier))
    return cost_price_result_to_dict(result)
