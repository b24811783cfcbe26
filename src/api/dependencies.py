import os
import hmac
import logging

from fastapi import Header, HTTPException, status, Request

from src.database.storage import StorefrontDB
from src.integrations.policy.fulfillment_service import FulfillmentService
from src.integrations.policy.supplier_router import SupplierRouter
from src.utils.config_loader import StorefrontConfig

logger = logging.getLogger(__name__)


def get_admin_api_keys():
    keys = os.getenv("ADMIN_API_KEYS", "")
    return [k.strip() for k in keys.split(",") if k.strip()]


async def require_admin(
    request: Request = None,  # keep Request type so FastAPI injects it; default None for direct calls/tests
    x_api_key: str = Header(default=None, alias="X-API-KEY"),
):
    debug = os.getenv("API_KEY_DEBUG", "").lower() in ("1", "true", "yes")
    path = request.url.path if request is not None else "<no-request>"

    valid_keys = get_admin_api_keys()
    candidate = (x_api_key or "").strip()

    ok = bool(candidate) and any(hmac.compare_digest(candidate, k) for k in valid_keys)
    if debug:
        logger.info("Admin key check: path=%s ok=%s configured_keys=%d", path, ok, len(valid_keys))

    if not ok:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API Key",
        )


# Services are attached to app.state by src.api.main.create_app
def get_db(request: Request) -> StorefrontDB:
    return request.app.state.db


def get_config(request: Request) -> StorefrontConfig:
    return request.app.state.config


def get_supplier_router(request: Request) -> SupplierRouter:
    return request.app.state.supplier_router


def get_fulfillment_service(request: Request) -> FulfillmentService:
    return request.app.state.fulfillment_service
