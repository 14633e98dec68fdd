from __future__ import annotations

from sqlalchemy import select

from ..seed import load_warehouse_seed
from .db import Database
from .models import WarehouseRecord


def seed_warehouses_if_empty(db: Database, seed_path: str) -> int:
    items = load_warehouse_seed(seed_path)
    if not items:
        return 0

    with db.session() as session:
        existing = session.execute(select(WarehouseRecord.id).limit(1)).first()
        if existing:
            return 0
        session.add_all([WarehouseRecord(**item.model_dump()) for item in items])
    return len(items)
