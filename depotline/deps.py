from __future__ import annotations

from fastapi import Depends, Request

from .container import Container
from .services import HealthService, OrderService, WarehouseService


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_settings(container: Container = Depends(get_container)):
    return container.settings


def get_order_service(container: Container = Depends(get_container)) -> OrderService:
    return container.order_service


def get_warehouse_service(container: Container = Depends(get_container)) -> WarehouseService:
    return container.warehouse_service


def get_health_service(container: Container = Depends(get_container)) -> HealthService:
    return container.health_service
