"""Nearest-first greedy allocation of an order across warehouses."""

from __future__ import annotations

from typing import List, Sequence, Tuple

from .domain import Allocation, AllocationResult, Warehouse
from .geo import distance_km


def sort_by_proximity(
    warehouses: Sequence[Warehouse],
    latitude: float,
    longitude: float,
) -> List[Tuple[Warehouse, float]]:
    """Pair each warehouse with its distance to the point, nearest first.

    ``sorted`` is stable, so equidistant warehouses keep their input order.
    """
    distances = [
        (warehouse, distance_km(warehouse.latitude, warehouse.longitude, latitude, longitude))
        for warehouse in warehouses
    ]
    return sorted(distances, key=lambda pair: pair[1])


def allocate(
    quantity: int,
    latitude: float,
    longitude: float,
    warehouses: Sequence[Warehouse],
    weight_kg: float,
    rate_per_kg_km: float,
) -> AllocationResult:
    total_stock = sum(warehouse.stock for warehouse in warehouses)
    if not warehouses or total_stock < quantity:
        return AllocationResult(is_stock_sufficient=False)

    remaining = quantity
    allocation: List[Allocation] = []
    shipping_cost = 0.0

    for warehouse, distance in sort_by_proximity(warehouses, latitude, longitude):
        if remaining <= 0:
            break
        if warehouse.stock <= 0:
            continue
        taken = min(warehouse.stock, remaining)
        allocation.append(Allocation(warehouse=warehouse.name, quantity=taken))
        shipping_cost += taken * weight_kg * distance * rate_per_kg_km
        remaining -= taken

    return AllocationResult(
        allocation=allocation,
        total_shipping_cost=shipping_cost,
        is_stock_sufficient=True,
    )
