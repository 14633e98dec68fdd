from __future__ import annotations

import json
from pathlib import Path
from typing import List

from pydantic import BaseModel

from .domain import WarehouseCreate


class WarehouseSeed(BaseModel):
    items: List[WarehouseCreate]


def load_warehouse_seed(path: str) -> List[WarehouseCreate]:
    if not path:
        return []
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return WarehouseSeed(**data).items
