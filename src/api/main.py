"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os
from datetime import datetime
from typing import Dict, Mapping, Optional
from urllib.parse import urlparse

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.endpoints.orders import router as orders_router
from src.api.endpoints.packages import router as packages_router
from src.api.endpoints.payments import router as payments_router
from src.api.endpoints.settings import router as settings_router
from src.database.seed import default_packages
from src.database.storage import StorefrontDB
from src.integrations.clients.mocks.sandbox import SandboxSupplierClient
from src.integrations.clients.real_http.dataxpress import DataXpressClient
from src.integrations.clients.real_http.hubnet import HubnetClient
from src.integrations.contracts.interfaces import SupplierAdapter, SupplierId
from src.integrations.policy.fulfillment_service import FulfillmentService
from src.integrations.policy.supplier_router import SupplierRouter
from src.utils.config_loader import StorefrontConfig, load_storefront_config

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

SERVICE_NAME = "Data Bundle Storefront API"
SERVICE_VERSION = "1.0.0"
DEFAULT_DATABASE_URL = "sqlite:///./storefront.db"


# ============================================================================
# DEPENDENCY WIRING
# ============================================================================

def build_supplier_adapters(config: StorefrontConfig) -> Dict[SupplierId, SupplierAdapter]:
    """The only place supplier clients are constructed."""
    adapters: Dict[SupplierId, SupplierAdapter] = {}
    for supplier_id, supplier_cfg in config.enabled_suppliers().items():
        if supplier_id == SupplierId.DATAXPRESS:
            adapters[supplier_id] = DataXpressClient(
                base_url=supplier_cfg.base_url,
                api_key=supplier_cfg.api_key(),
                network=supplier_cfg.network,
                timeout_seconds=supplier_cfg.timeout_seconds,
            )
        elif supplier_id == SupplierId.HUBNET:
            adapters[supplier_id] = HubnetClient(
                base_url=supplier_cfg.base_url,
                api_key=supplier_cfg.api_key(),
                network=supplier_cfg.network,
                timeout_seconds=supplier_cfg.timeout_seconds,
            )
        elif supplier_id == SupplierId.SANDBOX:
            adapters[supplier_id] = SandboxSupplierClient()
    return adapters


def _log_database_target(url: str) -> None:
    # Never log credentials
    try:
        parsed = urlparse(url)
        logger.info("DATABASE_URL target: scheme=%s host=%s db=%s", parsed.scheme, parsed.hostname, (parsed.path or "").lstrip("/"))
    except Exception as e:
        logger.warning("Could not parse DATABASE_URL for startup logging: %s", e)


def create_app(
    db: Optional[StorefrontDB] = None,
    adapters: Optional[Mapping[SupplierId, SupplierAdapter]] = None,
    config: Optional[StorefrontConfig] = None,
) -> FastAPI:
    config = config or load_storefront_config()
    if db is None:
        database_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)
        _log_database_target(database_url)
        db = StorefrontDB(database_url)
    if adapters is None:
        adapters = build_supplier_adapters(config)

    supplier_router = SupplierRouter(db, adapters, default_supplier=config.default_supplier)
    if not os.getenv("PAYSTACK_SECRET_KEY"):
        logger.warning("PAYSTACK_SECRET_KEY not set - payment webhook signatures are NOT verified")

    app = FastAPI(
        title=SERVICE_NAME,
        description="Data bundle storefront: catalogue, orders, payment webhook and supplier fulfillment",
        version=SERVICE_VERSION,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.db = db
    app.state.supplier_router = supplier_router
    app.state.fulfillment_service = FulfillmentService(db, supplier_router)

    app.include_router(packages_router, prefix="/api")
    app.include_router(orders_router, prefix="/api")
    app.include_router(payments_router, prefix="/api")
    app.include_router(settings_router, prefix="/api")

    @app.get("/", tags=["Health"])
    async def root():
        """Health check endpoint."""
        return {"service": SERVICE_NAME, "status": "healthy", "version": SERVICE_VERSION, "timestamp": datetime.now().isoformat()}

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Detailed health check (database, active supplier)."""
        try:
            db.count_packages()
            database = "connected"
        except Exception as e:
            logger.error("Health check database error: %s", e)
            database = "unavailable"
        return {
            "status": "healthy" if database == "connected" else "degraded",
            "database": database,
            "active_supplier": supplier_router.get_active_supplier().value,
            "timestamp": datetime.now().isoformat(),
        }

    @app.on_event("startup")
    async def startup_event():
        """Initialize on startup"""
        logger.info("Starting %s...", SERVICE_NAME)
        try:
            db.create_tables()
            logger.info("Database tables initialized")
        except Exception as e:
            logger.error(f"Error initializing database: {str(e)}")
            return

        if config.seed_catalogue:
            inserted = db.seed_packages(default_packages())
            if inserted:
                logger.info("Seeded %d default packages", inserted)

        logger.info("Registered suppliers: %s", ", ".join(s.value for s in adapters))

    @app.on_event("shutdown")
    async def shutdown_event():
        """Cleanup on shutdown"""
        logger.info("Shutting down %s...", SERVICE_NAME)

    return app


# ASGI entrypoint (uvicorn src.api.main:app). Importing this module builds the default app:
# it reads config/storefront.yml and creates the DATABASE_URL engine (no connection is opened).
app = create_app()
