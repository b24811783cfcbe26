import json
import logging
import os

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, status

from src.api.dependencies import get_db, get_fulfillment_service
from src.database.storage import StorefrontDB
from src.integrations.contracts.orders import InvalidTransitionError, PaymentStatus
from src.integrations.contracts.payments import amount_matches, parse_webhook_event, verify_webhook_signature
from src.integrations.policy.fulfillment_service import FulfillmentService, fulfill_in_background

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/webhooks/paystack", tags=["Payments"])
async def paystack_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    db: StorefrontDB = Depends(get_db),
    service: FulfillmentService = Depends(get_fulfillment_service),
):
    """
    Payment gateway callback.
    - ``charge.success`` marks the order's payment completed and dispatches
      fulfillment as a background task; the response does not wait for it.
    - Other events are acknowledged and ignored.
    """
    raw_body = await request.body()

    secret = os.getenv("PAYSTACK_SECRET_KEY", "")
    if secret and not verify_webhook_signature(raw_body, request.headers.get("x-paystack-signature"), secret):
        logger.warning("Rejected payment webhook with invalid signature")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid signature")

    try:
        payload = json.loads(raw_body or b"{}")
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON payload") from e
    if not isinstance(payload, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON payload")

    event = parse_webhook_event(payload)
    if not event.is_charge_success:
        return {"message": "Webhook received", "ignored": True}

    order = db.get_order_by_reference(event.reference)
    if order is None:
        logger.warning("Payment webhook for unknown reference %s", event.reference)
        return {"message": "Webhook received", "ignored": True}

    if not amount_matches(event, order.total_amount):
        logger.warning(
            "Payment webhook amount %s does not match order %s total %s; not completing",
            event.amount, order.id, order.total_amount,
        )
        return {"message": "Webhook received", "ignored": True}

    try:
        db.update_payment_status(order.id, PaymentStatus.COMPLETED)
    except InvalidTransitionError as e:
        logger.warning("Payment webhook could not complete order %s: %s", order.id, e)
        return {"message": "Webhook received", "ignored": True}

    background_tasks.add_task(fulfill_in_background, service, order.id)
    logger.info("Payment confirmed for order %s; fulfillment dispatched", order.id)
    return {"message": "Webhook received", "order_id": order.id}
