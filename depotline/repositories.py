from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Protocol, TypeVar

from .clock import Clock, IdProvider
from .domain import Order, OrderDraft, Warehouse, WarehouseCreate, WarehouseUpdate

T = TypeVar("T")


class WarehouseRepository(Protocol):
    def list_all(self) -> List[Warehouse]: ...

    def get(self, warehouse_id: int) -> Optional[Warehouse]: ...

    def get_by_name(self, name: str) -> Optional[Warehouse]: ...

    def add(self, payload: WarehouseCreate) -> Warehouse: ...

    def update(self, warehouse_id: int, payload: WarehouseUpdate) -> Optional[Warehouse]: ...

    def delete(self, warehouse_id: int) -> bool: ...

    def count(self) -> int: ...

    def decrement_stock(self, warehouse_id: int, amount: int) -> bool:
        """Subtract ``amount`` only if at least that much stock remains; report whether it did."""
        ...


class OrderRepository(Protocol):
    def save(self, draft: OrderDraft) -> Order: ...

    def get(self, order_id: str) -> Optional[Order]: ...

    def list(self, limit: int) -> List[Order]: ...


@dataclass(frozen=True)
class TransactionScope:
    warehouses: WarehouseRepository
    orders: OrderRepository


class TransactionRunner(Protocol):
    def run(self, fn: Callable[[TransactionScope], T]) -> T: ...


@dataclass
class InMemoryStore:
    warehouses: Dict[int, Warehouse] = field(default_factory=dict)
    orders: Dict[str, Order] = field(default_factory=dict)
    next_warehouse_id: int = 1
    lock: threading.RLock = field(default_factory=threading.RLock)


class InMemoryWarehouseRepository(WarehouseRepository):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def list_all(self) -> List[Warehouse]:
        return sorted(self._store.warehouses.values(), key=lambda warehouse: warehouse.id)

    def get(self, warehouse_id: int) -> Optional[Warehouse]:
        return self._store.warehouses.get(warehouse_id)

    def get_by_name(self, name: str) -> Optional[Warehouse]:
        for warehouse in self._store.warehouses.values():
            if warehouse.name == name:
                return warehouse
        return None

    def add(self, payload: WarehouseCreate) -> Warehouse:
        with self._store.lock:
            warehouse = Warehouse(id=self._store.next_warehouse_id, **payload.model_dump())
            self._store.warehouses[warehouse.id] = warehouse
            self._store.next_warehouse_id += 1
        return warehouse

    def update(self, warehouse_id: int, payload: WarehouseUpdate) -> Optional[Warehouse]:
        with self._store.lock:
            current = self._store.warehouses.get(warehouse_id)
            if not current:
                return None
            updated = current.model_copy(update=payload.model_dump(exclude_none=True))
            self._store.warehouses[warehouse_id] = updated
        return updated

    def delete(self, warehouse_id: int) -> bool:
        with self._store.lock:
            return self._store.warehouses.pop(warehouse_id, None) is not None

    def count(self) -> int:
        return len(self._store.warehouses)

    def decrement_stock(self, warehouse_id: int, amount: int) -> bool:
        with self._store.lock:
            current = self._store.warehouses.get(warehouse_id)
            if not current or current.stock < amount:
                return False
            self._store.warehouses[warehouse_id] = current.model_copy(update={"stock": current.stock - amount})
        return True


class InMemoryOrderRepository(OrderRepository):
    def __init__(self, store: InMemoryStore, ids: IdProvider, clock: Clock) -> None:
        self._store = store
        self._ids = ids
        self._clock = clock

    def save(self, draft: OrderDraft) -> Order:
        order = Order(id=self._ids.new_id(), created_at=self._clock.now(), **draft.model_dump())
        with self._store.lock:
            self._store.orders[order.id] = order
        return order

    def get(self, order_id: str) -> Optional[Order]:
        return self._store.orders.get(order_id)

    def list(self, limit: int) -> List[Order]:
        orders = sorted(self._store.orders.values(), key=lambda order: order.created_at, reverse=True)
        return orders[:limit]


class InMemoryTransactionRunner(TransactionRunner):
    """Serialises transactions on the store lock and stages their writes on a copy.

    The copy replaces the live collections only when the callback returns, so
    readers outside the transaction never see uncommitted stock.
    """

    def __init__(self, store: InMemoryStore, ids: IdProvider, clock: Clock) -> None:
        self._store = store
        self._ids = ids
        self._clock = clock

    def run(self, fn: Callable[[TransactionScope], T]) -> T:
        with self._store.lock:
            staged = InMemoryStore(
                warehouses=dict(self._store.warehouses),
                orders=dict(self._store.orders),
                next_warehouse_id=self._store.next_warehouse_id,
                lock=self._store.lock,
            )
            result = fn(
                TransactionScope(
                    warehouses=InMemoryWarehouseRepository(staged),
                    orders=InMemoryOrderRepository(staged, self._ids, self._clock),
                )
            )
            self._store.warehouses = staged.warehouses
            self._store.orders = staged.orders
            self._store.next_warehouse_id = staged.next_warehouse_id
            return result


def seed_in_memory(store: InMemoryStore, warehouses: Iterable[WarehouseCreate]) -> None:
    repository = InMemoryWarehouseRepository(store)
    for payload in warehouses:
        repository.add(payload)
