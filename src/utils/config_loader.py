"""
Configuration loader for the storefront (suppliers, fees, order references).

Secrets are never stored in the YAML file: each supplier names the environment
variable that holds its API key, and the key is read from the environment
(``.env`` is loaded by the API entrypoint).
"""

from __future__ import annotations

import logging
import os
from decimal import Decimal
from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from src.integrations.contracts.interfaces import SupplierId

logger = logging.getLogger(__name__)


class SupplierConfig(BaseModel):
    """Connection settings for one wholesale supplier"""

    enabled: bool = True
    base_url: Optional[str] = None
    api_key_env: Optional[str] = None
    network: str = "mtn"
    timeout_seconds: float = Field(default=20.0, gt=0, le=120)

    def api_key(self) -> str:
        return os.getenv(self.api_key_env, "") if self.api_key_env else ""


class StorefrontConfig(BaseModel):
    """Complete storefront configuration"""

    currency: str = "GHS"
    fee_rate: Decimal = Field(default=Decimal("0.0118"), ge=0, lt=1)
    order_reference_prefix: str = Field(default="FS", min_length=1, max_length=8)
    default_supplier: SupplierId = SupplierId.DATAXPRESS
    seed_catalogue: bool = True
    suppliers: Dict[SupplierId, SupplierConfig] = Field(
        default_factory=lambda: {
            SupplierId.DATAXPRESS: SupplierConfig(api_key_env="DATAXPRESS_API_KEY"),
            SupplierId.HUBNET: SupplierConfig(api_key_env="HUBNET_API_KEY"),
            SupplierId.SANDBOX: SupplierConfig(),
        }
    )

    def enabled_suppliers(self) -> Dict[SupplierId, SupplierConfig]:
        return {sid: cfg for sid, cfg in self.suppliers.items() if cfg.enabled}


def load_storefront_config(config_path: Optional[Path] = None) -> StorefrontConfig:
    """
    Load and validate storefront configuration from YAML file

    Args:
        config_path: Path to config file. Defaults to $STOREFRONT_CONFIG or config/storefront.yml

    Returns:
        Validated StorefrontConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    if config_path is None:
        env_path = os.getenv("STOREFRONT_CONFIG")
        config_path = Path(env_path) if env_path else Path(__file__).parent.parent.parent / "config" / "storefront.yml"

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    try:
        cfg = StorefrontConfig(**data)
        logger.info("Successfully loaded storefront config from %s", config_path)
        return cfg
    except ValidationError as e:
        logger.error("Storefront config validation failed: %s", e)
        raise
