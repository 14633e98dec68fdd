from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .clock import Clock, IdProvider, SystemClock, UUIDProvider
from .logging import ServiceLogger
from .persistence.db import Database
from .persistence.repositories import (
    SessionPerCallOrderRepository,
    SessionPerCallWarehouseRepository,
    SqlAlchemyTransactionRunner,
)
from .persistence.seed import seed_warehouses_if_empty
from .pricing_config import FilePricingConfigProvider, PricingConfigProvider, StaticPricingConfigProvider
from .repositories import (
    InMemoryOrderRepository,
    InMemoryStore,
    InMemoryTransactionRunner,
    InMemoryWarehouseRepository,
    seed_in_memory,
)
from .seed import load_warehouse_seed
from .services import HealthService, OrderService, OrderSubmitter, OrderVerifier, WarehouseService
from .settings import Settings


@dataclass
class Container:
    settings: Settings
    order_service: OrderService
    warehouse_service: WarehouseService
    health_service: HealthService
    pricing: PricingConfigProvider
    clock: Clock
    id_provider: IdProvider
    db: Optional[Database] = None


def build_pricing_provider(settings: Settings) -> PricingConfigProvider:
    if settings.pricing_config_path:
        return FilePricingConfigProvider(settings.pricing_config_path)
    return StaticPricingConfigProvider(settings.fallback_pricing())


def build_container(settings: Settings) -> Container:
    clock = SystemClock()
    ids = UUIDProvider()
    logger = ServiceLogger("container")
    db: Optional[Database] = None

    if settings.database_url:
        db = Database(
            settings.database_url,
            echo=settings.db_echo,
            isolation_level=settings.db_isolation_level or None,
        )
        db.create_tables()
        seeded = seed_warehouses_if_empty(db, settings.warehouse_seed_path)
        warehouses = SessionPerCallWarehouseRepository(db)
        orders = SessionPerCallOrderRepository(db, ids, clock)
        transactions = SqlAlchemyTransactionRunner(db, ids, clock)
    else:
        store = InMemoryStore()
        items = load_warehouse_seed(settings.warehouse_seed_path)
        seed_in_memory(store, items)
        seeded = len(items)
        warehouses = InMemoryWarehouseRepository(store)
        orders = InMemoryOrderRepository(store, ids, clock)
        transactions = InMemoryTransactionRunner(store, ids, clock)

    logger.info("Storage ready", backend="sql" if db else "memory", seeded_warehouses=seeded)

    pricing = build_pricing_provider(settings)
    verifier = OrderVerifier(warehouses, pricing, settings.max_order_quantity)
    submitter = OrderSubmitter(verifier, pricing, transactions)

    return Container(
        settings=settings,
        order_service=OrderService(verifier, submitter, orders),
        warehouse_service=WarehouseService(warehouses, settings.max_warehouse_stock),
        health_service=HealthService(warehouses, clock),
        pricing=pricing,
        clock=clock,
        id_provider=ids,
        db=db,
    )
