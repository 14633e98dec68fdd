from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from .allocation import allocate
from .clock import Clock
from .domain import (
    Allocation,
    HealthStatus,
    Order,
    OrderDraft,
    OrderInput,
    OrderList,
    OrderLookup,
    OrderSubmissionResult,
    OrderVerificationResult,
    PricingConfig,
    Warehouse,
    WarehouseCreate,
    WarehouseList,
    WarehouseUpdate,
)
from .errors import (
    DomainError,
    ErrorCategory,
    ErrorDetail,
    business_error,
    not_found_error,
    stock_race_error,
    system_error,
    validation_error,
)
from .logging import ServiceLogger
from .pricing import discount_rate, price
from .pricing_config import PricingConfigProvider
from .repositories import OrderRepository, TransactionRunner, TransactionScope, WarehouseRepository
from .validation import order_input_errors, validate_warehouse_create, validate_warehouse_update

NO_WAREHOUSES = "No warehouses available to fulfill the order"
NOT_ENOUGH_STOCK = "Not enough stock in all warehouses"
UNKNOWN_ERROR = "unknown error during order verification"


def shipping_cap_reason(cap: float) -> str:
    return f"Shipping cost exceeds {cap * 100:g}% of the order amount after discount"


class OrderVerifier:
    """Prices an order against current inventory without mutating anything.

    ``verify`` never raises: business rejections and unexpected failures alike
    come back as an invalid OrderVerificationResult.
    """

    def __init__(
        self,
        warehouses: WarehouseRepository,
        pricing: PricingConfigProvider,
        max_quantity: int,
    ) -> None:
        self._warehouses = warehouses
        self._pricing = pricing
        self._max_quantity = max_quantity
        self._logger = ServiceLogger("order_verifier")

    def verify(self, order_input: OrderInput, config: Optional[PricingConfig] = None) -> OrderVerificationResult:
        self._logger.info(
            "Verifying order",
            quantity=order_input.quantity,
            latitude=order_input.shipping_latitude,
            longitude=order_input.shipping_longitude,
        )
        errors = order_input_errors(order_input, self._max_quantity)
        if errors:
            return self._reject(next(iter(errors.values())), ErrorCategory.VALIDATION, errors)
        try:
            if config is None:
                config = self._pricing.current()
            return self.evaluate(order_input, self._warehouses.list_all(), config)
        except Exception as exc:
            self._logger.exception("Order verification failed with exception", error=str(exc))
            return self._reject(UNKNOWN_ERROR, ErrorCategory.SYSTEM)

    def evaluate(
        self,
        order_input: OrderInput,
        warehouses: Sequence[Warehouse],
        config: PricingConfig,
    ) -> OrderVerificationResult:
        """Verification against an explicit snapshot and config; input is assumed well-formed."""
        if not warehouses:
            return self._reject(NO_WAREHOUSES, ErrorCategory.BUSINESS_LOGIC)

        result = allocate(
            order_input.quantity,
            order_input.shipping_latitude,
            order_input.shipping_longitude,
            warehouses,
            config.device_weight_kg,
            config.shipping_rate_per_kg_km,
        )
        if not result.is_stock_sufficient:
            return self._reject(NOT_ENOUGH_STOCK, ErrorCategory.BUSINESS_LOGIC)

        rate = discount_rate(order_input.quantity, config.discount_tiers)
        breakdown = price(order_input.quantity, config.device_price, rate)
        shipping_cost = round(result.total_shipping_cost, 2)

        cap = config.shipping_cost_threshold_percent
        if breakdown.total_price > 0 and shipping_cost > cap * breakdown.total_price:
            self._logger.warning(
                "Shipping cost threshold exceeded",
                shipping_cost=shipping_cost,
                total_price=breakdown.total_price,
            )
            return self._reject(shipping_cap_reason(cap), ErrorCategory.BUSINESS_LOGIC)

        self._logger.info(
            "Order verification result calculated",
            total_price=breakdown.total_price,
            discount=breakdown.discount,
            shipping_cost=shipping_cost,
        )
        return OrderVerificationResult(
            is_valid=True,
            total_price=breakdown.total_price,
            discount=breakdown.discount,
            shipping_cost=shipping_cost,
        )

    def _reject(
        self,
        reason: str,
        category: ErrorCategory,
        fields: Optional[Dict[str, str]] = None,
    ) -> OrderVerificationResult:
        self._logger.warning("Order verification failed", reason=reason, category=category.value)
        return OrderVerificationResult(is_valid=False, reason=reason, category=category, fields=fields or {})


def rejection_detail(result: OrderVerificationResult) -> ErrorDetail:
    reason = result.reason or "Order verification failed"
    if result.category == ErrorCategory.VALIDATION:
        return validation_error(reason, result.fields)
    if result.category == ErrorCategory.SYSTEM:
        return system_error(reason)
    return business_error(reason)


class OrderSubmitter:
    """Verify, then reallocate and commit against fresh stock in one transaction.

    Price comes from verification; the stored allocation comes from the
    transaction, since stock may move between the two.
    """

    def __init__(
        self,
        verifier: OrderVerifier,
        pricing: PricingConfigProvider,
        transactions: TransactionRunner,
    ) -> None:
        self._verifier = verifier
        self._pricing = pricing
        self._transactions = transactions
        self._logger = ServiceLogger("order_submitter")

    def submit(self, order_input: OrderInput) -> Order:
        self._logger.info("Submitting order for processing", quantity=order_input.quantity)
        config = self._pricing.current()
        verification = self._verifier.verify(order_input, config)
        if not verification.is_valid:
            self._logger.warning("Order submission failed: verification failed", reason=verification.reason)
            raise DomainError(rejection_detail(verification))

        try:
            order = self._transactions.run(lambda scope: self._commit(scope, order_input, verification, config))
        except DomainError as exc:
            self._logger.warning("Order submission rejected", reason=exc.detail.reason)
            raise
        except Exception as exc:
            self._logger.exception("Order submission failed with error", error=str(exc))
            raise

        self._logger.info("Order submitted and persisted", order_id=order.id)
        return order

    def _commit(
        self,
        scope: TransactionScope,
        order_input: OrderInput,
        verification: OrderVerificationResult,
        config: PricingConfig,
    ) -> Order:
        warehouses = scope.warehouses.list_all()
        self._logger.info("Warehouses fetched for order submission", count=len(warehouses))
        if not warehouses:
            raise DomainError(business_error(NO_WAREHOUSES))

        result = allocate(
            order_input.quantity,
            order_input.shipping_latitude,
            order_input.shipping_longitude,
            warehouses,
            config.device_weight_kg,
            config.shipping_rate_per_kg_km,
        )
        if not result.is_stock_sufficient:
            raise DomainError(stock_race_error(f"{NOT_ENOUGH_STOCK}; stock changed since verification"))

        self._apply(scope, warehouses, result.allocation)

        draft = OrderDraft(
            quantity=order_input.quantity,
            shipping_latitude=order_input.shipping_latitude,
            shipping_longitude=order_input.shipping_longitude,
            total_price=verification.total_price,
            discount=verification.discount,
            shipping_cost=verification.shipping_cost,
            warehouse_allocation=result.allocation,
        )
        return scope.orders.save(draft)

    def _apply(self, scope: TransactionScope, warehouses: Sequence[Warehouse], allocation: List[Allocation]) -> None:
        allocated: Dict[str, int] = {entry.warehouse: entry.quantity for entry in allocation}
        for warehouse in warehouses:
            quantity = allocated.get(warehouse.name, 0)
            if quantity <= 0:
                continue
            if warehouse.stock < quantity or not scope.warehouses.decrement_stock(warehouse.id, quantity):
                self._logger.error(
                    "Stock inconsistency during order submission",
                    warehouse=warehouse.name,
                    stock=warehouse.stock,
                    allocated=quantity,
                )
                raise DomainError(stock_race_error(f"Warehouse {warehouse.name} does not have enough stock"))
            self._logger.info(
                "Warehouse stock updated",
                warehouse=warehouse.name,
                new_stock=warehouse.stock - quantity,
            )


class OrderService:
    def __init__(
        self,
        verifier: OrderVerifier,
        submitter: OrderSubmitter,
        orders: OrderRepository,
    ) -> None:
        self._verifier = verifier
        self._submitter = submitter
        self._orders = orders

    def verify_order(self, order_input: OrderInput) -> OrderVerificationResult:
        return self._verifier.verify(order_input)

    def submit_order(self, order_input: OrderInput) -> OrderSubmissionResult:
        order = self._submitter.submit(order_input)
        return OrderSubmissionResult(
            id=order.id,
            quantity=order.quantity,
            total_price=order.total_price,
            discount=order.discount,
            shipping_cost=order.shipping_cost,
        )

    def get_order(self, lookup: OrderLookup) -> Order:
        order = self._orders.get(lookup.order_id)
        if not order:
            raise DomainError(not_found_error("Order", lookup.order_id))
        return order

    def list_orders(self, limit: int = 50) -> OrderList:
        return OrderList(items=self._orders.list(limit))


class WarehouseService:
    def __init__(self, warehouses: WarehouseRepository, max_stock: int) -> None:
        self._warehouses = warehouses
        self._max_stock = max_stock
        self._logger = ServiceLogger("warehouses")

    def list_warehouses(self) -> WarehouseList:
        return WarehouseList(items=self._warehouses.list_all())

    def get_warehouse(self, warehouse_id: int) -> Warehouse:
        warehouse = self._warehouses.get(warehouse_id)
        if not warehouse:
            raise DomainError(not_found_error("Warehouse", str(warehouse_id)))
        return warehouse

    def create_warehouse(self, payload: WarehouseCreate) -> Warehouse:
        validate_warehouse_create(payload, self._max_stock)
        self._ensure_name_free(payload.name)
        warehouse = self._warehouses.add(payload)
        self._logger.info("Warehouse created", warehouse_id=warehouse.id, name=warehouse.name)
        return warehouse

    def update_warehouse(self, warehouse_id: int, payload: WarehouseUpdate) -> Warehouse:
        validate_warehouse_update(payload, self._max_stock)
        if payload.name is not None:
            self._ensure_name_free(payload.name, exclude_id=warehouse_id)
        updated = self._warehouses.update(warehouse_id, payload)
        if not updated:
            raise DomainError(not_found_error("Warehouse", str(warehouse_id)))
        self._logger.info("Warehouse updated", warehouse_id=warehouse_id, stock=updated.stock)
        return updated

    def delete_warehouse(self, warehouse_id: int) -> None:
        if not self._warehouses.delete(warehouse_id):
            raise DomainError(not_found_error("Warehouse", str(warehouse_id)))
        self._logger.info("Warehouse deleted", warehouse_id=warehouse_id)

    def _ensure_name_free(self, name: str, exclude_id: Optional[int] = None) -> None:
        existing = self._warehouses.get_by_name(name)
        if existing and existing.id != exclude_id:
            raise DomainError(business_error(f"Warehouse name '{name}' is already in use"))


class HealthService:
    def __init__(self, warehouses: WarehouseRepository, clock: Clock) -> None:
        self._warehouses = warehouses
        self._clock = clock

    def health(self) -> HealthStatus:
        return HealthStatus(status="ok", time=self._clock.now(), warehouses=self._warehouses.count())
