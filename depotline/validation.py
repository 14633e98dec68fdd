from __future__ import annotations

import math
from typing import Dict, Optional

from .domain import OrderInput, WarehouseCreate, WarehouseUpdate
from .errors import DomainError, validation_error

MIN_LATITUDE, MAX_LATITUDE = -90.0, 90.0
MIN_LONGITUDE, MAX_LONGITUDE = -180.0, 180.0


def _latitude_error(label: str, value: float) -> Optional[str]:
    if not math.isfinite(value):
        return f"{label} must be a finite number"
    if value < MIN_LATITUDE or value > MAX_LATITUDE:
        return f"{label} must be between -90 and 90 degrees"
    return None


def _longitude_error(label: str, value: float) -> Optional[str]:
    if not math.isfinite(value):
        return f"{label} must be a finite number"
    if value < MIN_LONGITUDE or value > MAX_LONGITUDE:
        return f"{label} must be between -180 and 180 degrees"
    return None


def order_input_errors(order_input: OrderInput, max_quantity: int) -> Dict[str, str]:
    """Field name -> reason for every violated field, in declaration order."""
    errors: Dict[str, str] = {}

    if order_input.quantity <= 0:
        errors["quantity"] = "Quantity must be positive"
    elif order_input.quantity > max_quantity:
        errors["quantity"] = f"Quantity cannot exceed {max_quantity:,} units"

    latitude = _latitude_error("Shipping latitude", order_input.shipping_latitude)
    if latitude:
        errors["shipping_latitude"] = latitude

    longitude = _longitude_error("Shipping longitude", order_input.shipping_longitude)
    if longitude:
        errors["shipping_longitude"] = longitude

    return errors


def _stock_error(stock: int, max_stock: int) -> Optional[str]:
    if stock < 0:
        return "Warehouse stock must be a non-negative number"
    if stock > max_stock:
        return f"Warehouse stock cannot exceed {max_stock:,} units"
    return None


def validate_warehouse_create(payload: WarehouseCreate, max_stock: int) -> None:
    errors: Dict[str, str] = {}
    if not payload.name.strip():
        errors["name"] = "Warehouse name is required"
    latitude = _latitude_error("Latitude", payload.latitude)
    if latitude:
        errors["latitude"] = latitude
    longitude = _longitude_error("Longitude", payload.longitude)
    if longitude:
        errors["longitude"] = longitude
    stock = _stock_error(payload.stock, max_stock)
    if stock:
        errors["stock"] = stock
    if errors:
        raise DomainError(validation_error("Warehouse input validation failed", errors))


def validate_warehouse_update(payload: WarehouseUpdate, max_stock: int) -> None:
    errors: Dict[str, str] = {}
    if payload.name is not None and not payload.name.strip():
        errors["name"] = "Warehouse name must not be empty"
    if payload.latitude is not None:
        latitude = _latitude_error("Latitude", payload.latitude)
        if latitude:
            errors["latitude"] = latitude
    if payload.longitude is not None:
        longitude = _longitude_error("Longitude", payload.longitude)
        if longitude:
            errors["longitude"] = longitude
    if payload.stock is not None:
        stock = _stock_error(payload.stock, max_stock)
        if stock:
            errors["stock"] = stock
    if errors:
        raise DomainError(validation_error("Warehouse input validation failed", errors))
