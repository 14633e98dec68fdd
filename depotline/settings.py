from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .domain import PricingConfig

DATA_DIR = Path(__file__).resolve().parent / "data"
DEFAULT_WAREHOUSE_SEED = str(DATA_DIR / "warehouses.json")


class Settings(BaseSettings):
    app_name: str = Field("Depotline", alias="APP_NAME")
    api_key: str = Field("depotline-dev-key", alias="API_KEY")
    database_url: str = Field("", alias="DATABASE_URL")
    db_echo: bool = Field(False, alias="DB_ECHO")
    db_isolation_level: str = Field("", alias="DB_ISOLATION_LEVEL")
    warehouse_seed_path: str = Field(DEFAULT_WAREHOUSE_SEED, alias="WAREHOUSE_SEED_PATH")
    pricing_config_path: str = Field("", alias="PRICING_CONFIG_PATH")
    device_price: float = Field(150.0, alias="DEVICE_PRICE")
    device_weight_kg: float = Field(0.365, alias="DEVICE_WEIGHT_KG")
    shipping_rate_per_kg_km: float = Field(0.01, alias="SHIPPING_RATE_PER_KG_KM")
    shipping_cost_threshold_percent: float = Field(0.15, alias="SHIPPING_COST_THRESHOLD_PERCENT")
    max_order_quantity: int = Field(10000, alias="MAX_ORDER_QUANTITY")
    max_warehouse_stock: int = Field(1_000_000, alias="MAX_WAREHOUSE_STOCK")
    request_id_header: str = Field("X-Request-Id", alias="REQUEST_ID_HEADER")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    otel_enabled: bool = Field(False, alias="OTEL_ENABLED")
    otel_service_name: str = Field("depotline", alias="OTEL_SERVICE_NAME")
    otel_exporter_otlp_endpoint: str = Field("", alias="OTEL_EXPORTER_OTLP_ENDPOINT")

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    def fallback_pricing(self) -> PricingConfig:
        """Pricing built from env values when no pricing file is configured."""
        return PricingConfig(
            device_price=self.device_price,
            device_weight_kg=self.device_weight_kg,
            shipping_rate_per_kg_km=self.shipping_rate_per_kg_km,
            shipping_cost_threshold_percent=self.shipping_cost_threshold_percent,
        )


def resolve_env_file() -> Optional[Path]:
    explicit = os.getenv("DEPOTLINE_ENV_FILE")
    if explicit:
        return Path(explicit)
    default = Path.cwd() / "config" / "api.env"
    if default.exists():
        return default
    return None


def load_settings() -> Settings:
    env_file = resolve_env_file()
    if env_file:
        return Settings(_env_file=str(env_file))
    return Settings()
