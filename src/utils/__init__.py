"""
Utility modules for the storefront
"""
from .config_loader import StorefrontConfig, SupplierConfig, load_storefront_config

__all__ = [
    'StorefrontConfig',
    'SupplierConfig',
    'load_storefront_config',
]
