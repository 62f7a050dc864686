from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, Field, PlainSerializer, conint, field_validator, model_validator

# Currency amounts are Decimal internally and plain JSON numbers on the wire.
Money = Annotated[Decimal, PlainSerializer(lambda value: float(value), return_type=float, when_used="json")]

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT)


class ActorRole(str, Enum):
    SHOPKEEPER = "shopkeeper"
    DISTRIBUTOR = "distributor"


class OrderStatus(str, Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    PAID = "Paid"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class SkipReason(str, Enum):
    NOT_FOUND = "not_found"
    OUT_OF_STOCK = "out_of_stock"
    PARTIAL_FILL = "partial_fill"
    RACE_CONDITION = "race_condition"


class PaymentStatus(str, Enum):
    SUCCESS = "Success"


# --- auth -----------------------------------------------------------------


class TokenRequest(BaseModel):
    role: ActorRole
    account_id: conint(gt=0)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int


class TokenInput(BaseModel):
    token: str


class ActorContext(BaseModel):
    role: ActorRole
    account_id: int

    @property
    def is_shopkeeper(self) -> bool:
        return self.role == ActorRole.SHOPKEEPER

    @property
    def is_distributor(self) -> bool:
        return self.role == ActorRole.DISTRIBUTOR


# --- inventory ------------------------------------------------------------


class InventoryItem(BaseModel):
    id: int
    distributor_id: int
    product_name: str
    description: str = ""
    price: Money
    quantity: int
    is_active: bool = True
    created_at: Optional[datetime] = None


class ProductCreate(BaseModel):
    product_name: str = Field(min_length=1, max_length=255)
    description: str = ""
    price: Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]
    quantity: conint(ge=0)

    @field_validator("product_name", "description")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()

    @field_validator("product_name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value:
            raise ValueError("Product name is required")
        return value


class Restock(BaseModel):
    amount: conint(gt=0)


class InventoryQuery(BaseModel):
    distributor_id: Optional[int] = None
    q: Optional[str] = None
    in_stock_only: bool = False
    include_inactive: bool = False
    limit: conint(ge=1, le=100) = 50
    offset: conint(ge=0) = 0


class Paging(BaseModel):
    total: int
    limit: int
    offset: int
    returned: int


class InventoryPage(BaseModel):
    items: List[InventoryItem]
    paging: Paging


class ProductRemoval(BaseModel):
    product_id: int
    action: str


class StockSnapshot(BaseModel):
    """Inventory row as read under lock during order placement."""

    product_id: int
    distributor_id: int
    price: Decimal
    stock: int


# --- cart -----------------------------------------------------------------


class CartLine(BaseModel):
    id: int
    shopkeeper_id: int
    product_id: int
    quantity: int


class CartLineView(BaseModel):
    cart_id: int
    product_id: int
    product_name: str
    description: str = ""
    price: Money
    quantity: int
    line_total: Money
    stock: int
    distributor_id: int


class CartSummary(BaseModel):
    lines: int
    subtotal: Money


class CartView(BaseModel):
    items: List[CartLineView]
    summary: CartSummary


class CartAdd(BaseModel):
    product_id: conint(gt=0)
    quantity: conint(ge=1) = 1


class CartUpdate(BaseModel):
    quantity: Optional[int] = None
    increment: bool = False
    decrement: bool = False

    @model_validator(mode="after")
    def one_operation(self) -> "CartUpdate":
        if self.quantity is None and not self.increment and not self.decrement:
            raise ValueError("no_update_operation_specified")
        return self


class CartAddResult(BaseModel):
    cart_id: int
    product_id: int
    new_quantity: int
    cart_total_qty: int


class CartMutationResult(BaseModel):
    action: str
    product_id: int
    new_quantity: int
    summary: CartSummary


# --- order placement --------------------------------------------------------


class OrderItemRequest(BaseModel):
    product_id: conint(gt=0)
    quantity: Optional[int] = None


class PlaceOrderRequest(BaseModel):
    items: List[OrderItemRequest] = Field(default_factory=list)


class PlaceOrderCommand(BaseModel):
    """Validated input of the order placement workflow.

    ``overrides`` maps product id to an explicit quantity, or ``None`` to use
    the cart quantity. An empty mapping means the whole cart.
    """

    shopkeeper_id: int
    overrides: Dict[int, Optional[int]] = Field(default_factory=dict)

    @classmethod
    def from_request(cls, shopkeeper_id: int, request: Optional[PlaceOrderRequest]) -> "PlaceOrderCommand":
        overrides: Dict[int, Optional[int]] = {}
        for item in request.items if request else []:
            quantity = item.quantity if item.quantity is not None and item.quantity > 0 else None
            overrides[item.product_id] = quantity
        return cls(shopkeeper_id=shopkeeper_id, overrides=overrides)


class SkipEntry(BaseModel):
    product_id: int
    reason: SkipReason
    requested: Optional[int] = None
    available: Optional[int] = None
    fulfilled: Optional[int] = None


class CreatedOrder(BaseModel):
    order_id: int
    distributor_id: int
    total_amount: Money
    items_count: int
    created_at: datetime


class PlaceOrderResult(BaseModel):
    success: bool = True
    orders: List[CreatedOrder]
    skipped: List[SkipEntry] = Field(default_factory=list)


# --- orders -----------------------------------------------------------------


class OrderItem(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    price: Money
    line_total: Money


class Order(BaseModel):
    order_id: int
    shopkeeper_id: int
    distributor_id: int
    status: OrderStatus
    total_amount: Money
    created_at: datetime
    updated_at: Optional[datetime] = None
    items: Optional[List[OrderItem]] = None


class OrderQuery(BaseModel):
    status: Optional[OrderStatus] = None
    scope: Optional[str] = None
    include_items: bool = False
    limit: conint(ge=1, le=200) = 200

    @field_validator("scope")
    @classmethod
    def known_scope(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip().lower()
        if value not in ("", "all", "today"):
            raise ValueError("scope must be 'today' or 'all'")
        return None if value in ("", "all") else value


class OrderList(BaseModel):
    items: List[Order]
    count: int


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    restock: bool = False

    @field_validator("status", mode="before")
    @classmethod
    def title_case(cls, value):
        if isinstance(value, str):
            return value.strip().capitalize()
        return value


# --- payments ---------------------------------------------------------------


class PaymentLine(BaseModel):
    order_id: conint(gt=0)
    amount: Annotated[Decimal, Field(gt=0)]


class PaymentRequest(BaseModel):
    order_id: Optional[conint(gt=0)] = None
    amount: Optional[Annotated[Decimal, Field(gt=0)]] = None
    orders: List[PaymentLine] = Field(default_factory=list)
    method: str = Field("manual", max_length=50)
    reference: Optional[str] = Field(None, max_length=100)

    @model_validator(mode="after")
    def single_or_batch(self) -> "PaymentRequest":
        if self.order_id is not None:
            if self.amount is None:
                raise ValueError("amount is required")
            self.orders = [PaymentLine(order_id=self.order_id, amount=self.amount)]
        if not self.orders:
            raise ValueError("missing_order")
        return self


class PaymentRecordView(BaseModel):
    order_id: int
    payment_id: int
    amount: Money
    status: PaymentStatus


class PaymentFailure(BaseModel):
    order_id: int
    reason: str
    due: Optional[Money] = None
    paid: Optional[Money] = None


class PaymentResult(BaseModel):
    success: bool = True
    payments: List[PaymentRecordView]
    failed: List[PaymentFailure]


# --- reports ----------------------------------------------------------------


class ReportRange(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    CUSTOM = "custom"
    ALL = "all"


class ReportQuery(BaseModel):
    range: ReportRange = ReportRange.MONTH
    status: Optional[OrderStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @field_validator("range", mode="before")
    @classmethod
    def lower_range(cls, value):
        if isinstance(value, str):
            return value.strip().lower() or ReportRange.MONTH.value
        return value

    @model_validator(mode="after")
    def ordered_dates(self) -> "ReportQuery":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class ReportFilters(BaseModel):
    range: ReportRange
    status: str


class ReportSummary(BaseModel):
    total_sales: Money
    orders_count: int
    items_sold: int


class TopProduct(BaseModel):
    product_id: int
    product_name: Optional[str] = None
    total_sold: int
    revenue: Money


class SalesReport(BaseModel):
    success: bool = True
    role: ActorRole
    filters: ReportFilters
    summary: ReportSummary
    top_products: List[TopProduct]
    recent_orders: List[Order]


# --- notifications ----------------------------------------------------------


class NotificationType(str, Enum):
    ORDER_NEW = "order_new"
    ORDER_STATUS = "order_status"
    INVENTORY_LOW = "inventory_low"
    CART_REMINDER = "cart_reminder"


class NotificationQuery(BaseModel):
    scope: Optional[str] = None
    limit_orders: conint(ge=1, le=50) = 10
    limit_stock: conint(ge=1, le=50) = 10
    low_stock_threshold: conint(ge=0) = 5

    @field_validator("scope")
    @classmethod
    def known_scope(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip().lower()
        if value not in ("", "all", "today"):
            raise ValueError("scope must be 'today' or 'all'")
        return value or None


class Notification(BaseModel):
    id: str
    type: NotificationType
    priority: str
    title: str
    message: str
    created_at: datetime
    meta: Dict[str, Any] = Field(default_factory=dict)


class NotificationSummary(BaseModel):
    scope: str
    new_orders: Optional[int] = None
    low_stock: Optional[int] = None
    threshold: Optional[int] = None
    orders_considered: Optional[int] = None
    cart_items: Optional[int] = None


class NotificationFeed(BaseModel):
    success: bool = True
    role: ActorRole
    data: List[Notification]
    summary: NotificationSummary


class HealthStatus(BaseModel):
    status: str
    time: datetime
