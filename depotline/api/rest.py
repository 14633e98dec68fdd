from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Response

from ..deps import get_health_service, get_order_service, get_settings, get_warehouse_service
from ..domain import (
    HealthStatus,
    Order,
    OrderInput,
    OrderLookup,
    OrderSubmissionResult,
    OrderVerificationResult,
    Warehouse,
    WarehouseCreate,
    WarehouseUpdate,
)
from ..errors import DomainError, unauthorized_error
from ..services import HealthService, OrderService, WarehouseService
from ..settings import Settings

router = APIRouter()


def api_key_auth(
    x_api_key: str = Header("", alias="X-API-Key"),
    authorization: str = Header("", alias="Authorization"),
    settings: Settings = Depends(get_settings),
) -> str:
    key = x_api_key
    if not key and authorization.startswith("Bearer "):
        key = authorization[len("Bearer "):]
    if not key:
        raise DomainError(
            unauthorized_error("API key must be provided in Authorization header (Bearer token) or X-API-Key header")
        )
    if key != settings.api_key:
        raise DomainError(unauthorized_error("Invalid API key"))
    return key


@router.get("/health", response_model=HealthStatus)
async def health(service: HealthService = Depends(get_health_service)):
    return service.health()


@router.get("/orders", response_model=list[Order])
async def list_orders(limit: int = 50, service: OrderService = Depends(get_order_service)):
    return service.list_orders(limit).items


@router.get("/orders/{order_id}", response_model=Order)
async def get_order(order_id: str, service: OrderService = Depends(get_order_service)):
    return service.get_order(OrderLookup(order_id=order_id))


@router.post("/orders/verify", response_model=OrderVerificationResult)
async def verify_order(payload: OrderInput, service: OrderService = Depends(get_order_service)):
    return service.verify_order(payload)


@router.post("/orders/submit", response_model=OrderSubmissionResult)
async def submit_order(
    payload: OrderInput,
    _: str = Depends(api_key_auth),
    service: OrderService = Depends(get_order_service),
):
    return service.submit_order(payload)


@router.post("/orders", response_model=OrderSubmissionResult)
async def create_order(
    payload: OrderInput,
    _: str = Depends(api_key_auth),
    service: OrderService = Depends(get_order_service),
):
    return service.submit_order(payload)


@router.get("/warehouses", response_model=list[Warehouse])
async def list_warehouses(service: WarehouseService = Depends(get_warehouse_service)):
    return service.list_warehouses().items


@router.get("/warehouses/{warehouse_id}", response_model=Warehouse)
async def get_warehouse(warehouse_id: int, service: WarehouseService = Depends(get_warehouse_service)):
    return service.get_warehouse(warehouse_id)


@router.post("/warehouses", response_model=Warehouse, status_code=201)
async def create_warehouse(
    payload: WarehouseCreate,
    _: str = Depends(api_key_auth),
    service: WarehouseService = Depends(get_warehouse_service),
):
    return service.create_warehouse(payload)


@router.put("/warehouses/{warehouse_id}", response_model=Warehouse)
async def update_warehouse(
    warehouse_id: int,
    payload: WarehouseUpdate,
    _: str = Depends(api_key_auth),
    service: WarehouseService = Depends(get_warehouse_service),
):
    return service.update_warehouse(warehouse_id, payload)


@router.delete("/warehouses/{warehouse_id}", status_code=204)
async def delete_warehouse(
    warehouse_id: int,
    _: str = Depends(api_key_auth),
    service: WarehouseService = Depends(get_warehouse_service),
) -> Response:
    service.delete_warehouse(warehouse_id)
    return Response(status_code=204)
