from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, List

from depotline.domain import PricingConfig, WarehouseCreate
from depotline.pricing_config import StaticPricingConfigProvider
from depotline.repositories import (
    InMemoryOrderRepository,
    InMemoryStore,
    InMemoryTransactionRunner,
    InMemoryWarehouseRepository,
    seed_in_memory,
)
from depotline.services import OrderService, OrderSubmitter, OrderVerifier


class TickingClock:
    def __init__(self) -> None:
        self._now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


class SequentialIds:
    def __init__(self) -> None:
        self._next = 0

    def new_id(self) -> str:
        self._next += 1
        return f"order-{self._next:04d}"


def site(name: str, latitude: float, longitude: float, stock: int) -> WarehouseCreate:
    return WarehouseCreate(name=name, latitude=latitude, longitude=longitude, stock=stock)


class Harness:
    """In-memory wiring of the order core for service-level tests."""

    def __init__(self, warehouses: Iterable[WarehouseCreate], config: PricingConfig, max_quantity: int = 10000) -> None:
        self.store = InMemoryStore()
        seed_in_memory(self.store, warehouses)
        clock = TickingClock()
        ids = SequentialIds()
        self.pricing = StaticPricingConfigProvider(config)
        self.warehouses = InMemoryWarehouseRepository(self.store)
        self.orders = InMemoryOrderRepository(self.store, ids, clock)
        self.transactions = InMemoryTransactionRunner(self.store, ids, clock)
        self.verifier = OrderVerifier(self.warehouses, self.pricing, max_quantity)
        self.submitter = OrderSubmitter(self.verifier, self.pricing, self.transactions)
        self.service = OrderService(self.verifier, self.submitter, self.orders)

    def stock(self) -> List[int]:
        return [warehouse.stock for warehouse in self.warehouses.list_all()]


