from __future__ import annotations

from typing import Callable, List, Optional, TypeVar

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from ..clock import Clock, IdProvider
from ..domain import Allocation, Order, OrderDraft, Warehouse, WarehouseCreate, WarehouseUpdate
from ..repositories import TransactionScope
from .db import Database
from .models import OrderRecord, WarehouseRecord

T = TypeVar("T")


def warehouse_from_record(record: WarehouseRecord) -> Warehouse:
    return Warehouse(
        id=record.id,
        name=record.name,
        latitude=record.latitude,
        longitude=record.longitude,
        stock=record.stock,
    )


def order_from_record(record: OrderRecord) -> Order:
    return Order(
        id=record.id,
        quantity=record.quantity,
        shipping_latitude=record.shipping_latitude,
        shipping_longitude=record.shipping_longitude,
        total_price=record.total_price,
        discount=record.discount,
        shipping_cost=record.shipping_cost,
        warehouse_allocation=[Allocation(**entry) for entry in record.warehouse_allocation],
        created_at=record.created_at,
    )


class SqlAlchemyWarehouseRepository:
    """Warehouse storage bound to one session; the caller owns commit and rollback."""

    def __init__(self, session: Session, lock_rows: bool = False) -> None:
        self._session = session
        self._lock_rows = lock_rows

    def list_all(self) -> List[Warehouse]:
        stmt = select(WarehouseRecord).order_by(WarehouseRecord.id.asc())
        if self._lock_rows:
            stmt = stmt.with_for_update()
        records = self._session.execute(stmt).scalars().all()
        return [warehouse_from_record(record) for record in records]

    def get(self, warehouse_id: int) -> Optional[Warehouse]:
        record = self._session.get(WarehouseRecord, warehouse_id)
        return warehouse_from_record(record) if record else None

    def get_by_name(self, name: str) -> Optional[Warehouse]:
        stmt = select(WarehouseRecord).where(WarehouseRecord.name == name)
        record = self._session.execute(stmt).scalars().first()
        return warehouse_from_record(record) if record else None

    def add(self, payload: WarehouseCreate) -> Warehouse:
        record = WarehouseRecord(**payload.model_dump())
        self._session.add(record)
        self._session.flush()
        return warehouse_from_record(record)

    def update(self, warehouse_id: int, payload: WarehouseUpdate) -> Optional[Warehouse]:
        record = self._session.get(WarehouseRecord, warehouse_id)
        if not record:
            return None
        for key, value in payload.model_dump(exclude_none=True).items():
            setattr(record, key, value)
        self._session.flush()
        return warehouse_from_record(record)

    def delete(self, warehouse_id: int) -> bool:
        record = self._session.get(WarehouseRecord, warehouse_id)
        if not record:
            return False
        self._session.delete(record)
        return True

    def count(self) -> int:
        return int(self._session.execute(select(func.count()).select_from(WarehouseRecord)).scalar_one())

    def decrement_stock(self, warehouse_id: int, amount: int) -> bool:
        stmt = (
            update(WarehouseRecord)
            .where(WarehouseRecord.id == warehouse_id, WarehouseRecord.stock >= amount)
            .values(stock=WarehouseRecord.stock - amount)
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        return result.rowcount == 1


class SqlAlchemyOrderRepository:
    def __init__(self, session: Session, ids: IdProvider, clock: Clock) -> None:
        self._session = session
        self._ids = ids
        self._clock = clock

    def save(self, draft: OrderDraft) -> Order:
        record = OrderRecord(
            id=self._ids.new_id(),
            quantity=draft.quantity,
            shipping_latitude=draft.shipping_latitude,
            shipping_longitude=draft.shipping_longitude,
            total_price=draft.total_price,
            discount=draft.discount,
            shipping_cost=draft.shipping_cost,
            warehouse_allocation=[entry.model_dump() for entry in draft.warehouse_allocation],
            created_at=self._clock.now(),
        )
        self._session.add(record)
        self._session.flush()
        return order_from_record(record)

    def get(self, order_id: str) -> Optional[Order]:
        record = self._session.get(OrderRecord, order_id)
        return order_from_record(record) if record else None

    def list(self, limit: int) -> List[Order]:
        stmt = select(OrderRecord).order_by(OrderRecord.created_at.desc()).limit(limit)
        records = self._session.execute(stmt).scalars().all()
        return [order_from_record(record) for record in records]


class SqlAlchemyTransactionRunner:
    """Runs a callback inside one session; commits on return, rolls back on any exception."""

    def __init__(self, db: Database, ids: IdProvider, clock: Clock) -> None:
        self._db = db
        self._ids = ids
        self._clock = clock

    def run(self, fn: Callable[[TransactionScope], T]) -> T:
        with self._db.session() as session:
            scope = TransactionScope(
                warehouses=SqlAlchemyWarehouseRepository(session, lock_rows=True),
                orders=SqlAlchemyOrderRepository(session, self._ids, self._clock),
            )
            return fn(scope)


class SessionPerCallWarehouseRepository:
    """Opens a short session per call, for reads and inventory management outside a submission."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def _call(self, fn: Callable[[SqlAlchemyWarehouseRepository], T]) -> T:
        with self._db.session() as session:
            return fn(SqlAlchemyWarehouseRepository(session))

    def list_all(self) -> List[Warehouse]:
        return self._call(lambda repo: repo.list_all())

    def get(self, warehouse_id: int) -> Optional[Warehouse]:
        return self._call(lambda repo: repo.get(warehouse_id))

    def get_by_name(self, name: str) -> Optional[Warehouse]:
        return self._call(lambda repo: repo.get_by_name(name))

    def add(self, payload: WarehouseCreate) -> Warehouse:
        return self._call(lambda repo: repo.add(payload))

    def update(self, warehouse_id: int, payload: WarehouseUpdate) -> Optional[Warehouse]:
        return self._call(lambda repo: repo.update(warehouse_id, payload))

    def delete(self, warehouse_id: int) -> bool:
        return self._call(lambda repo: repo.delete(warehouse_id))

    def count(self) -> int:
        return self._call(lambda repo: repo.count())

    def decrement_stock(self, warehouse_id: int, amount: int) -> bool:
        return self._call(lambda repo: repo.decrement_stock(warehouse_id, amount))


class SessionPerCallOrderRepository:
    def __init__(self, db: Database, ids: IdProvider, clock: Clock) -> None:
        self._db = db
        self._ids = ids
        self._clock = clock

    def _call(self, fn: Callable[[SqlAlchemyOrderRepository], T]) -> T:
        with self._db.session() as session:
            return fn(SqlAlchemyOrderRepository(session, self._ids, self._clock))

    def save(self, draft: OrderDraft) -> Order:
        return self._call(lambda repo: repo.save(draft))

    def get(self, order_id: str) -> Optional[Order]:
        return self._call(lambda repo: repo.get(order_id))

    def list(self, limit: int) -> List[Order]:
        return self._call(lambda repo: repo.list(limit))
