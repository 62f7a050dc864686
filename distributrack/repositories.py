from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, ContextManager, Dict, Iterable, List, Optional, Protocol, Tuple

from .domain import (
    CartLine,
    CartLineView,
    CartSummary,
    InventoryItem,
    InventoryQuery,
    Order,
    OrderItem,
    OrderStatus,
    ProductCreate,
    StockSnapshot,
    TopProduct,
)


@dataclass(frozen=True)
class OrderScope:
    """Which orders a report aggregates: one party's orders, optionally by status and period."""

    shopkeeper_id: Optional[int] = None
    distributor_id: Optional[int] = None
    status: Optional[OrderStatus] = None
    created_between: Optional[Tuple[datetime, datetime]] = None


class InventoryStore(Protocol):
    def lock_and_read(self, product_ids: Iterable[int]) -> Dict[int, StockSnapshot]: ...

    def conditional_decrement(self, product_id: int, amount: int) -> bool: ...

    def increment(self, product_id: int, amount: int) -> bool: ...

    def get(self, product_id: int, lock: bool = False) -> Optional[InventoryItem]: ...

    def browse(self, query: InventoryQuery) -> Tuple[List[InventoryItem], int]: ...

    def add(self, distributor_id: int, payload: ProductCreate, created_at: datetime) -> InventoryItem: ...

    def deactivate(self, product_id: int) -> None: ...

    def delete(self, product_id: int) -> bool: ...

    def low_stock(self, distributor_id: int, threshold: int, limit: int) -> List[InventoryItem]: ...


class CartStore(Protocol):
    def read_cart(self, shopkeeper_id: int, product_ids: Optional[Iterable[int]] = None) -> List[CartLine]: ...

    def delete_lines(self, shopkeeper_id: int, product_ids: Iterable[int]) -> int: ...

    def get_line(self, shopkeeper_id: int, product_id: int) -> Optional[CartLine]: ...

    def insert_line(self, shopkeeper_id: int, product_id: int, quantity: int) -> CartLine: ...

    def set_quantity(self, line_id: int, quantity: int) -> None: ...

    def delete_product_lines(self, product_id: int) -> int: ...

    def view(self, shopkeeper_id: int) -> List[CartLineView]: ...

    def summary(self, shopkeeper_id: int) -> CartSummary: ...

    def total_quantity(self, shopkeeper_id: int) -> int: ...


class OrderStore(Protocol):
    def create_order(self, shopkeeper_id: int, distributor_id: int, total: Decimal, created_at: datetime) -> int: ...

    def add_order_item(self, order_id: int, product_id: int, quantity: int, price: Decimal) -> None: ...

    def get(self, order_id: int, lock: bool = False) -> Optional[Order]: ...

    def items(self, order_ids: Iterable[int]) -> Dict[int, List[OrderItem]]: ...

    def list(
        self,
        shopkeeper_id: Optional[int],
        distributor_id: Optional[int],
        status: Optional[OrderStatus],
        created_between: Optional[Tuple[datetime, datetime]],
        limit: int,
    ) -> List[Order]: ...

    def set_status(self, order_id: int, status: OrderStatus, updated_at: datetime) -> None: ...

    def count_items_for_product(self, product_id: int) -> int: ...


class PaymentStore(Protocol):
    def add(
        self,
        order_id: int,
        amount: Decimal,
        method: str,
        reference: Optional[str],
        status: str,
        created_at: datetime,
    ) -> int: ...


class ReportStore(Protocol):
    def sales_totals(self, scope: OrderScope) -> Tuple[Decimal, int, int]: ...

    def top_products(self, scope: OrderScope, limit: int) -> List[TopProduct]: ...


class Stores(Protocol):
    """Stores sharing one open transaction."""

    inventory: InventoryStore
    cart: CartStore
    orders: OrderStore
    payments: PaymentStore
    reports: ReportStore


# Opens a transaction and yields the stores bound to it. Leaving the block
# normally commits; an exception rolls everything back.
UnitOfWork = Callable[[], ContextManager[Stores]]
