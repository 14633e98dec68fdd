import json
import os

import pytest

from depotline.container import build_pricing_provider
from depotline.domain import PricingConfig
from depotline.pricing_config import FilePricingConfigProvider, StaticPricingConfigProvider
from depotline.settings import DATA_DIR, Settings


def write_config(path, mtime, **overrides):
    data = PricingConfig(**overrides).model_dump()
    path.write_text(json.dumps(data), encoding="utf-8")
    os.utime(path, (mtime, mtime))


class TestFilePricingConfigProvider:
    def test_reads_bundled_defaults(self):
        provider = FilePricingConfigProvider(str(DATA_DIR / "pricing.json"))
        assert provider.current() == PricingConfig()

    def test_reloads_when_file_changes(self, tmp_path):
        path = tmp_path / "pricing.json"
        write_config(path, 1_000_000, device_price=150.0)
        provider = FilePricingConfigProvider(str(path))
        assert provider.current().device_price == 150.0

        write_config(path, 1_000_100, device_price=120.0, shipping_cost_threshold_percent=0.2)
        current = provider.current()
        assert current.device_price == 120.0
        assert current.shipping_cost_threshold_percent == 0.2

    def test_invalid_reload_keeps_last_good_config(self, tmp_path):
        path = tmp_path / "pricing.json"
        write_config(path, 1_000_000, device_price=150.0)
        provider = FilePricingConfigProvider(str(path))

        path.write_text(json.dumps({"device_price": -5}), encoding="utf-8")
        os.utime(path, (1_000_200, 1_000_200))
        assert provider.current().device_price == 150.0

    def test_fix_written_with_same_mtime_is_loaded(self, tmp_path):
        path = tmp_path / "pricing.json"
        write_config(path, 1_000_000, device_price=100.0)
        provider = FilePricingConfigProvider(str(path))

        path.write_text("{not json", encoding="utf-8")
        os.utime(path, (2_000_000, 2_000_000))
        assert provider.current().device_price == 100.0

        write_config(path, 2_000_000, device_price=200.0)
        assert provider.current().device_price == 200.0

    def test_file_removed_at_runtime_keeps_last_good_config(self, tmp_path):
        path = tmp_path / "pricing.json"
        write_config(path, 1_000_000, device_price=130.0)
        provider = FilePricingConfigProvider(str(path))

        path.unlink()
        assert provider.current().device_price == 130.0
        assert provider.current().device_price == 130.0

        write_config(path, 1_000_300, device_price=140.0)
        assert provider.current().device_price == 140.0

    def test_missing_file_fails_at_startup(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            FilePricingConfigProvider(str(tmp_path / "absent.json"))


class TestBuildPricingProvider:
    def test_env_fallback_when_no_file(self):
        settings = Settings(pricing_config_path="", device_price=99.0, shipping_cost_threshold_percent=0.5)
        provider = build_pricing_provider(settings)
        assert isinstance(provider, StaticPricingConfigProvider)
        assert provider.current().device_price == 99.0
        assert provider.current().shipping_cost_threshold_percent == 0.5
        assert len(provider.current().discount_tiers) == 4

    def test_file_provider_when_path_set(self):
        settings = Settings(pricing_config_path=str(DATA_DIR / "pricing.json"))
        assert isinstance(build_pricing_provider(settings), FilePricingConfigProvider)
