import pytest

from depotline.domain import PricingConfig

from .support import Harness


@pytest.fixture
def config() -> PricingConfig:
    return PricingConfig()


@pytest.fixture
def make_harness(config):
    def factory(*warehouses, pricing=None) -> Harness:
        return Harness(warehouses, pricing or config)

    return factory
