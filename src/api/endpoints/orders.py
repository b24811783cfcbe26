import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from src.api.dependencies import get_config, get_db, get_fulfillment_service, get_supplier_router, require_admin
from src.api.serializers import order_status_result_to_dict, order_to_dict, purchase_result_to_dict
from src.database.storage import StorefrontDB
from src.error_handler import ErrorHandler
from src.integrations.contracts.orders import InvalidTransitionError, PaymentStatus
from src.integrations.policy.fulfillment_service import (
    FulfillmentService,
    OrderNotFoundError,
    PackageNotFoundError,
)
from src.integrations.policy.supplier_router import SupplierRouter
from src.utils.config_loader import StorefrontConfig

logger = logging.getLogger(__name__)

router = APIRouter()
error_handler = ErrorHandler()


class OrderCreateRequest(BaseModel):
    package_id: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=9, max_length=15, pattern=r"^\+?\d+$")
    email: str = Field(..., min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class OrderStatusUpdateRequest(BaseModel):
    status: PaymentStatus


@router.post("/orders", tags=["Orders"])
async def create_order(
    body: OrderCreateRequest,
    db: StorefrontDB = Depends(get_db),
    config: StorefrontConfig = Depends(get_config),
):
    # Price comes from the database, never from the client
    pkg = db.get_package(body.package_id)
    if not pkg:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Package not found")
    if not pkg.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Package is not available")

    order = db.create_order(
        package=pkg,
        phone_number=body.phone_number,
        email=body.email,
        fee_rate=config.fee_rate,
        reference_prefix=config.order_reference_prefix,
    )
    logger.info("Created order %s for package %s (reference=%s)", order.id, pkg.data_amount, order.payment_reference)
    return {"order": order_to_dict(order, pkg), "currency": config.currency}


@router.get("/orders/reference/{reference}", tags=["Orders"])
async def get_order_by_reference(reference: str, db: StorefrontDB = Depends(get_db)):
    order = db.get_order_by_reference(reference)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order_to_dict(order, db.get_package(order.package_id) if order.package_id else None)


@router.get("/orders", tags=["Orders"], dependencies=[Depends(require_admin)])
async def list_orders(db: StorefrontDB = Depends(get_db)):
    packages = {p.id: p for p in db.list_packages()}
    return [order_to_dict(o, packages.get(o.package_id)) for o in db.list_orders()]


@router.get("/orders/{order_id}", tags=["Orders"], dependencies=[Depends(require_admin)])
async def get_order(order_id: str, db: StorefrontDB = Depends(get_db)):
    order = db.get_order(order_id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order_to_dict(order, db.get_package(order.package_id) if order.package_id else None)


@router.patch("/orders/{order_id}", tags=["Orders"], dependencies=[Depends(require_admin)])
async def update_order_status(order_id: str, body: OrderStatusUpdateRequest, db: StorefrontDB = Depends(get_db)):
    try:
        order = db.update_payment_status(order_id, body.status)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order_to_dict(order)


@router.delete("/orders/{order_id}", tags=["Orders"], dependencies=[Depends(require_admin)])
async def delete_order(order_id: str, db: StorefrontDB = Depends(get_db)):
    if not db.delete_order(order_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return {"message": "Order deleted successfully"}


@router.post("/orders/{order_id}/fulfill", tags=["Orders"], dependencies=[Depends(require_admin)])
async def fulfill_order(order_id: str, service: FulfillmentService = Depends(get_fulfillment_service)):
    """Manual fulfillment / retry. Safe to call repeatedly."""
    try:
        outcome = await service.fulfill(order_id)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except PackageNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_handler.handle_exception(e, context={"order_id": order_id}),
        ) from e

    return {
        "success": outcome.success,
        "skipped": outcome.skipped,
        "message": outcome.message,
        "supplier_result": purchase_result_to_dict(outcome.result) if outcome.result else None,
        "order": order_to_dict(outcome.order),
    }


@router.get("/orders/{order_id}/supplier-status", tags=["Orders"], dependencies=[Depends(require_admin)])
async def get_supplier_order_status(
    order_id: str,
    db: StorefrontDB = Depends(get_db),
    supplier_router: SupplierRouter = Depends(get_supplier_router),
):
    """Ask the supplier that handled the order what it knows about it (reconciliation)."""
    order = db.get_order(order_id)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    if not order.supplier:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Order has not been sent to a supplier yet")
    try:
        result = await supplier_router.check_order_status(order.payment_reference, supplier=order.supplier)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    return order_status_result_to_dict(result)
