from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, confloat, conint

from .errors import ErrorCategory


class Warehouse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    latitude: float
    longitude: float
    stock: int


class WarehouseCreate(BaseModel):
    name: str
    latitude: float
    longitude: float
    stock: int


class WarehouseUpdate(BaseModel):
    name: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    stock: Optional[int] = None


class WarehouseList(BaseModel):
    items: List[Warehouse]


class OrderInput(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    # Strict types: booleans and numeric strings are rejected, not coerced.
    quantity: StrictInt
    shipping_latitude: StrictFloat
    shipping_longitude: StrictFloat


class Allocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    warehouse: str
    quantity: conint(gt=0)


class AllocationResult(BaseModel):
    allocation: List[Allocation] = Field(default_factory=list)
    total_shipping_cost: float = 0.0
    is_stock_sufficient: bool


class PriceBreakdown(BaseModel):
    total_price: float
    discount: float


class OrderVerificationResult(BaseModel):
    is_valid: bool
    total_price: float = 0.0
    discount: float = 0.0
    shipping_cost: float = 0.0
    reason: Optional[str] = None
    category: Optional[ErrorCategory] = None
    fields: Dict[str, str] = Field(default_factory=dict)


class OrderDraft(BaseModel):
    quantity: int
    shipping_latitude: float
    shipping_longitude: float
    total_price: float
    discount: float
    shipping_cost: float
    warehouse_allocation: List[Allocation]


class Order(OrderDraft):
    model_config = ConfigDict(frozen=True)

    id: str
    created_at: datetime


class OrderList(BaseModel):
    items: List[Order]


class OrderLookup(BaseModel):
    order_id: str


class OrderSubmissionResult(BaseModel):
    id: str
    quantity: int
    total_price: float
    discount: float
    shipping_cost: float


class DiscountTier(BaseModel):
    model_config = ConfigDict(frozen=True)

    min_quantity: conint(ge=1)
    discount: confloat(ge=0, lt=1)


def default_discount_tiers() -> List[DiscountTier]:
    return [
        DiscountTier(min_quantity=250, discount=0.2),
        DiscountTier(min_quantity=100, discount=0.15),
        DiscountTier(min_quantity=50, discount=0.1),
        DiscountTier(min_quantity=25, discount=0.05),
    ]


class PricingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    device_price: confloat(gt=0) = 150.0
    device_weight_kg: confloat(gt=0) = 0.365
    shipping_rate_per_kg_km: confloat(gt=0) = 0.01
    shipping_cost_threshold_percent: confloat(gt=0, le=1) = 0.15
    discount_tiers: List[DiscountTier] = Field(default_factory=default_discount_tiers)


class HealthStatus(BaseModel):
    status: str
    time: datetime
    warehouses: int
