"""Tests for storefront YAML configuration loading."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from src.integrations.contracts.interfaces import SupplierId
from src.utils.config_loader import StorefrontConfig, load_storefront_config


def test_bundled_config_loads():
    cfg = load_storefront_config()
    assert cfg.currency == "GHS"
    assert cfg.fee_rate == Decimal("0.0118")
    assert cfg.default_supplier == SupplierId.DATAXPRESS
    assert cfg.suppliers[SupplierId.DATAXPRESS].api_key_env == "DATAXPRESS_API_KEY"


def test_config_path_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "storefront.yml"
    path.write_text(
        "fee_rate: '0.02'\n"
        "default_supplier: hubnet\n"
        "suppliers:\n"
        "  hubnet:\n"
        "    api_key_env: MY_HUBNET_KEY\n"
        "  sandbox:\n"
        "    enabled: false\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("STOREFRONT_CONFIG", str(path))
    monkeypatch.setenv("MY_HUBNET_KEY", "tok")

    cfg = load_storefront_config()

    assert cfg.fee_rate == Decimal("0.02")
    assert cfg.default_supplier == SupplierId.HUBNET
    assert cfg.suppliers[SupplierId.HUBNET].api_key() == "tok"
    assert SupplierId.SANDBOX not in cfg.enabled_suppliers()


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_storefront_config(tmp_path / "nope.yml")


def test_unknown_supplier_is_rejected(tmp_path):
    path = tmp_path / "storefront.yml"
    path.write_text("suppliers:\n  acme:\n    enabled: true\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_storefront_config(path)


def test_defaults_register_all_suppliers():
    cfg = StorefrontConfig()
    assert set(cfg.enabled_suppliers()) == {SupplierId.DATAXPRESS, SupplierId.HUBNET, SupplierId.SANDBOX}
    assert cfg.suppliers[SupplierId.SANDBOX].api_key() == ""
