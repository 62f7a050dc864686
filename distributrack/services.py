from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

import jwt
from sqlalchemy.exc import SQLAlchemyError

from .clock import Clock, day_bounds
from .domain import (
    ActorContext,
    ActorRole,
    CartAdd,
    CartAddResult,
    CartMutationResult,
    CartUpdate,
    CartView,
    CreatedOrder,
    HealthStatus,
    InventoryItem,
    InventoryPage,
    InventoryQuery,
    Notification,
    NotificationFeed,
    NotificationQuery,
    NotificationSummary,
    NotificationType,
    Order,
    OrderList,
    OrderQuery,
    OrderStatus,
    OrderStatusUpdate,
    Paging,
    PaymentFailure,
    PaymentRecordView,
    PaymentRequest,
    PaymentResult,
    PaymentStatus,
    PlaceOrderCommand,
    PlaceOrderResult,
    ProductCreate,
    ProductRemoval,
    ReportFilters,
    ReportQuery,
    ReportRange,
    ReportSummary,
    Restock,
    SalesReport,
    SkipEntry,
    SkipReason,
    TokenInput,
    TokenRequest,
    TokenResponse,
    to_money,
)
from .errors import (
    ConflictError,
    DomainError,
    EmptyCartError,
    ForbiddenError,
    NoItemsToOrderError,
    NotFoundError,
    PersistenceError,
    UnauthorizedError,
    ValidationError,
)
from .logging import ServiceLogger
from .repositories import OrderScope, Stores, UnitOfWork
from .settings import Settings

ORDER_TRANSITIONS: Dict[OrderStatus, List[OrderStatus]] = {
    OrderStatus.PENDING: [OrderStatus.PROCESSING, OrderStatus.PAID, OrderStatus.CANCELLED],
    OrderStatus.PROCESSING: [OrderStatus.SHIPPED, OrderStatus.PAID, OrderStatus.CANCELLED],
    OrderStatus.PAID: [OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED],
    OrderStatus.SHIPPED: [OrderStatus.DELIVERED, OrderStatus.CANCELLED],
    OrderStatus.DELIVERED: [],
    OrderStatus.CANCELLED: [],
}
TERMINAL_STATUSES = (OrderStatus.DELIVERED, OrderStatus.CANCELLED)


def require_shopkeeper(actor: Optional[ActorContext]) -> int:
    if actor is None or not actor.is_shopkeeper or actor.account_id <= 0:
        raise UnauthorizedError("unauthorized_or_missing_shopkeeper")
    return actor.account_id


def require_distributor(actor: Optional[ActorContext]) -> int:
    if actor is None or not actor.is_distributor or actor.account_id <= 0:
        raise UnauthorizedError("unauthorized")
    return actor.account_id


class AuthService:
    def __init__(self, settings: Settings, clock: Clock) -> None:
        self._settings = settings
        self._clock = clock

    def issue_token(self, payload: TokenRequest) -> TokenResponse:
        issued_at = self._clock.now().replace(tzinfo=timezone.utc)
        expires = int(issued_at.timestamp()) + self._settings.token_ttl_seconds
        claims = {
            "sub": str(payload.account_id),
            "role": payload.role.value,
            "iss": self._settings.jwt_issuer,
            "exp": expires,
        }
        token = jwt.encode(claims, self._settings.jwt_secret, algorithm="HS256")
        return TokenResponse(access_token=token, expires_in=self._settings.token_ttl_seconds)

    def verify_token(self, payload: TokenInput) -> ActorContext:
        try:
            decoded = jwt.decode(
                payload.token,
                self._settings.jwt_secret,
                algorithms=["HS256"],
                issuer=self._settings.jwt_issuer,
            )
            return ActorContext(role=ActorRole(decoded["role"]), account_id=int(decoded["sub"]))
        except (jwt.PyJWTError, KeyError, ValueError) as exc:
            raise UnauthorizedError() from exc


@dataclass(frozen=True)
class _Reservation:
    product_id: int
    quantity: int
    price: Decimal


class OrderPlacementService:
    """Turns a shopkeeper's cart into one pending order per distributor.

    Everything happens inside a single unit of work: inventory rows are read
    under an exclusive lock, stock is taken with a conditional decrement, and
    the consumed cart lines are deleted. Items that cannot be fully served are
    reported as skip entries instead of failing the request; if nothing at all
    can be ordered the transaction is rolled back.
    """

    def __init__(self, uow: UnitOfWork, clock: Clock) -> None:
        self._uow = uow
        self._clock = clock
        self._log = ServiceLogger("order_placement")

    def place_order(self, command: PlaceOrderCommand) -> PlaceOrderResult:
        if command.shopkeeper_id <= 0:
            raise UnauthorizedError("unauthorized_or_missing_shopkeeper")

        self._log.info(
            "Placing order",
            shopkeeper_id=command.shopkeeper_id,
            overrides=len(command.overrides),
        )
        try:
            with self._uow() as stores:
                result = self._place(stores, command)
        except NoItemsToOrderError as exc:
            self._log.warning(
                "Nothing to order, rolled back",
                shopkeeper_id=command.shopkeeper_id,
                skipped=len(exc.skipped),
            )
            raise
        except DomainError:
            raise
        except SQLAlchemyError as exc:
            self._log.exception("Order placement failed, rolled back", shopkeeper_id=command.shopkeeper_id)
            raise PersistenceError() from exc

        self._log.info(
            "Orders placed",
            shopkeeper_id=command.shopkeeper_id,
            orders=[order.order_id for order in result.orders],
            skipped=len(result.skipped),
        )
        return result

    def _place(self, stores: Stores, command: PlaceOrderCommand) -> PlaceOrderResult:
        shopkeeper_id = command.shopkeeper_id
        product_filter = list(command.overrides) or None
        lines = stores.cart.read_cart(shopkeeper_id, product_filter)
        if not lines:
            raise EmptyCartError()

        desired: Dict[int, int] = {}
        for line in lines:
            override = command.overrides.get(line.product_id)
            desired[line.product_id] = override if override else max(line.quantity, 1)

        stock = stores.inventory.lock_and_read(desired.keys())
        skipped: List[SkipEntry] = []
        pending: Dict[int, List[_Reservation]] = OrderedDict()

        for product_id, requested in desired.items():
            snapshot = stock.get(product_id)
            if snapshot is None:
                skipped.append(SkipEntry(product_id=product_id, reason=SkipReason.NOT_FOUND))
                continue
            if snapshot.stock < 1:
                skipped.append(
                    SkipEntry(
                        product_id=product_id,
                        reason=SkipReason.OUT_OF_STOCK,
                        requested=requested,
                        available=snapshot.stock,
                    )
                )
                continue

            fulfilled = min(requested, snapshot.stock)
            if not stores.inventory.conditional_decrement(product_id, fulfilled):
                self._log.warning(
                    "Stock changed after lock read",
                    shopkeeper_id=shopkeeper_id,
                    product_id=product_id,
                    wanted=fulfilled,
                )
                skipped.append(
                    SkipEntry(
                        product_id=product_id,
                        reason=SkipReason.RACE_CONDITION,
                        requested=requested,
                        available=0,
                    )
                )
                continue

            if fulfilled < requested:
                skipped.append(
                    SkipEntry(
                        product_id=product_id,
                        reason=SkipReason.PARTIAL_FILL,
                        requested=requested,
                        available=snapshot.stock,
                        fulfilled=fulfilled,
                    )
                )
            pending.setdefault(snapshot.distributor_id, []).append(
                _Reservation(product_id=product_id, quantity=fulfilled, price=snapshot.price)
            )

        for skip in skipped:
            self._log.info(
                "Item skipped",
                shopkeeper_id=shopkeeper_id,
                product_id=skip.product_id,
                reason=skip.reason.value,
            )

        if not pending:
            raise NoItemsToOrderError(skipped)

        created_at = self._clock.now()
        orders: List[CreatedOrder] = []
        for distributor_id, reservations in pending.items():
            total = to_money(sum((item.price * item.quantity for item in reservations), Decimal("0")))
            order_id = stores.orders.create_order(shopkeeper_id, distributor_id, total, created_at)
            for item in reservations:
                stores.orders.add_order_item(order_id, item.product_id, item.quantity, item.price)
            orders.append(
                CreatedOrder(
                    order_id=order_id,
                    distributor_id=distributor_id,
                    total_amount=total,
                    items_count=len(reservations),
                    created_at=created_at,
                )
            )

        ordered_products = [item.product_id for reservations in pending.values() for item in reservations]
        stores.cart.delete_lines(shopkeeper_id, ordered_products)
        return PlaceOrderResult(orders=orders, skipped=skipped)


class CartService:
    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow
        self._log = ServiceLogger("cart")

    def get_cart(self, actor: Optional[ActorContext]) -> CartView:
        shopkeeper_id = require_shopkeeper(actor)
        with self._uow() as stores:
            return CartView(items=stores.cart.view(shopkeeper_id), summary=stores.cart.summary(shopkeeper_id))

    def add_item(self, actor: Optional[ActorContext], payload: CartAdd) -> CartAddResult:
        shopkeeper_id = require_shopkeeper(actor)
        with self._uow() as stores:
            product = stores.inventory.get(payload.product_id, lock=True)
            if not product:
                raise NotFoundError("product_not_found")
            if not product.is_active:
                raise ValidationError("product_unavailable")

            existing = stores.cart.get_line(shopkeeper_id, payload.product_id)
            new_quantity = payload.quantity + (existing.quantity if existing else 0)
            if new_quantity > product.quantity:
                raise ConflictError(
                    "insufficient_stock",
                    {"requested_total": new_quantity, "available": product.quantity},
                )

            if existing:
                stores.cart.set_quantity(existing.id, new_quantity)
                cart_id = existing.id
            else:
                cart_id = stores.cart.insert_line(shopkeeper_id, payload.product_id, new_quantity).id
            total_quantity = stores.cart.total_quantity(shopkeeper_id)

        self._log.info("Cart line saved", shopkeeper_id=shopkeeper_id, product_id=payload.product_id, qty=new_quantity)
        return CartAddResult(
            cart_id=cart_id,
            product_id=payload.product_id,
            new_quantity=new_quantity,
            cart_total_qty=total_quantity,
        )

    def update_item(self, actor: Optional[ActorContext], product_id: int, payload: CartUpdate) -> CartMutationResult:
        shopkeeper_id = require_shopkeeper(actor)
        removed_unavailable = False
        with self._uow() as stores:
            line = stores.cart.get_line(shopkeeper_id, product_id)
            if not line:
                raise NotFoundError("cart_item_not_found")
            product = stores.inventory.get(product_id)

            if product is None or not product.is_active:
                stores.cart.delete_lines(shopkeeper_id, [product_id])
                removed_unavailable = True
            else:
                if payload.quantity is not None:
                    new_quantity, action = payload.quantity, "updated"
                elif payload.increment:
                    new_quantity, action = line.quantity + 1, "incremented"
                else:
                    new_quantity, action = line.quantity - 1, "decremented"

                if new_quantity <= 0:
                    stores.cart.delete_lines(shopkeeper_id, [product_id])
                    new_quantity, action = 0, "deleted"
                elif new_quantity > product.quantity:
                    raise ConflictError(
                        "insufficient_stock",
                        {"requested": new_quantity, "available": max(product.quantity, 0), "product_id": product_id},
                    )
                else:
                    stores.cart.set_quantity(line.id, new_quantity)
                summary = stores.cart.summary(shopkeeper_id)

        if removed_unavailable:
            # the stale line stays deleted; the caller is still told why
            raise ConflictError("product_unavailable_removed_from_cart", {"cart_id": line.id})
        return CartMutationResult(action=action, product_id=product_id, new_quantity=new_quantity, summary=summary)

    def remove_item(self, actor: Optional[ActorContext], product_id: int) -> CartMutationResult:
        shopkeeper_id = require_shopkeeper(actor)
        with self._uow() as stores:
            if not stores.cart.delete_lines(shopkeeper_id, [product_id]):
                raise NotFoundError("cart_item_not_found")
            summary = stores.cart.summary(shopkeeper_id)
        return CartMutationResult(action="deleted", product_id=product_id, new_quantity=0, summary=summary)


class InventoryService:
    def __init__(self, uow: UnitOfWork, clock: Clock) -> None:
        self._uow = uow
        self._clock = clock
        self._log = ServiceLogger("inventory")

    def browse(self, query: InventoryQuery) -> InventoryPage:
        with self._uow() as stores:
            items, total = stores.inventory.browse(query)
        return InventoryPage(
            items=items,
            paging=Paging(total=total, limit=query.limit, offset=query.offset, returned=len(items)),
        )

    def get(self, product_id: int) -> InventoryItem:
        with self._uow() as stores:
            item = stores.inventory.get(product_id)
        if not item:
            raise NotFoundError()
        return item

    def add_product(self, actor: Optional[ActorContext], payload: ProductCreate) -> InventoryItem:
        distributor_id = require_distributor(actor)
        with self._uow() as stores:
            item = stores.inventory.add(distributor_id, payload, self._clock.now())
        self._log.info("Product added", distributor_id=distributor_id, product_id=item.id)
        return item

    def restock(self, actor: Optional[ActorContext], product_id: int, payload: Restock) -> InventoryItem:
        distributor_id = require_distributor(actor)
        with self._uow() as stores:
            item = stores.inventory.get(product_id, lock=True)
            if not item or item.distributor_id != distributor_id:
                raise NotFoundError("not_found_or_not_owned")
            stores.inventory.increment(product_id, payload.amount)
        return item.model_copy(update={"quantity": item.quantity + payload.amount})

    def remove_product(self, actor: Optional[ActorContext], product_id: int, hard: bool = False) -> ProductRemoval:
        distributor_id = require_distributor(actor)
        with self._uow() as stores:
            item = stores.inventory.get(product_id, lock=True)
            if not item or item.distributor_id != distributor_id:
                raise NotFoundError("not_found_or_not_owned")

            if not hard:
                stores.inventory.deactivate(product_id)
                action = "soft_deleted"
            else:
                references = stores.orders.count_items_for_product(product_id)
                if references:
                    raise ConflictError("has_references", {"order_items": references})
                stores.cart.delete_product_lines(product_id)
                if not stores.inventory.delete(product_id):
                    raise ConflictError("delete_failed")
                action = "hard_deleted"

        self._log.info("Product removed", distributor_id=distributor_id, product_id=product_id, action=action)
        return ProductRemoval(product_id=product_id, action=action)


class OrderService:
    def __init__(self, uow: UnitOfWork, clock: Clock) -> None:
        self._uow = uow
        self._clock = clock
        self._log = ServiceLogger("orders")

    def list_orders(self, actor: ActorContext, query: OrderQuery) -> OrderList:
        shopkeeper_id = actor.account_id if actor.is_shopkeeper else None
        distributor_id = actor.account_id if actor.is_distributor else None
        created_between = day_bounds(self._clock) if query.scope == "today" else None
        with self._uow() as stores:
            orders = stores.orders.list(shopkeeper_id, distributor_id, query.status, created_between, query.limit)
            if query.include_items:
                items = stores.orders.items(order.order_id for order in orders)
                orders = [order.model_copy(update={"items": items.get(order.order_id, [])}) for order in orders]
        return OrderList(items=orders, count=len(orders))

    def get_order(self, actor: ActorContext, order_id: int) -> Order:
        with self._uow() as stores:
            order = stores.orders.get(order_id)
            if not order or not self._visible(actor, order):
                raise NotFoundError("order_not_found")
            items = stores.orders.items([order_id]).get(order_id, [])
        return order.model_copy(update={"items": items})

    def update_status(self, actor: ActorContext, order_id: int, payload: OrderStatusUpdate) -> Order:
        target = payload.status
        with self._uow() as stores:
            order = stores.orders.get(order_id, lock=True)
            if not order:
                raise NotFoundError("order_not_found")
            if not self._visible(actor, order):
                raise ForbiddenError("forbidden_not_your_order")

            current = order.status
            if current in TERMINAL_STATUSES:
                raise ConflictError("order_in_terminal_state", {"current_status": current.value})

            allowed = ORDER_TRANSITIONS[current]
            if actor.is_distributor:
                if target not in allowed:
                    raise ConflictError(
                        "invalid_transition",
                        {"from": current.value, "to": target.value, "allowed": [s.value for s in allowed]},
                    )
            elif not (target == OrderStatus.DELIVERED and current in (OrderStatus.SHIPPED, OrderStatus.PAID)):
                raise ForbiddenError(
                    "forbidden_transition_for_role",
                    {"role": actor.role.value, "from": current.value, "to": target.value},
                )

            if target == OrderStatus.CANCELLED and payload.restock:
                for item in stores.orders.items([order_id]).get(order_id, []):
                    stores.inventory.increment(item.product_id, item.quantity)

            now = self._clock.now()
            stores.orders.set_status(order_id, target, now)

        self._log.info(
            "Order status updated",
            order_id=order_id,
            from_status=current.value,
            to_status=target.value,
            restocked=target == OrderStatus.CANCELLED and payload.restock,
        )
        return order.model_copy(update={"status": target, "updated_at": now})

    @staticmethod
    def _visible(actor: ActorContext, order: Order) -> bool:
        if actor.is_distributor:
            return order.distributor_id == actor.account_id
        return order.shopkeeper_id == actor.account_id


class PaymentService:
    def __init__(self, uow: UnitOfWork, clock: Clock) -> None:
        self._uow = uow
        self._clock = clock
        self._log = ServiceLogger("payments")

    def process(self, actor: ActorContext, payload: PaymentRequest) -> PaymentResult:
        processed: List[PaymentRecordView] = []
        failed: List[PaymentFailure] = []
        with self._uow() as stores:
            for line in payload.orders:
                order = stores.orders.get(line.order_id, lock=True)
                if not order:
                    failed.append(PaymentFailure(order_id=line.order_id, reason="not_found"))
                    continue
                if actor.is_shopkeeper and order.shopkeeper_id != actor.account_id:
                    failed.append(PaymentFailure(order_id=line.order_id, reason="unauthorized_shopkeeper"))
                    continue
                if actor.is_distributor and order.distributor_id != actor.account_id:
                    failed.append(PaymentFailure(order_id=line.order_id, reason="unauthorized_distributor"))
                    continue
                if OrderStatus.PAID not in ORDER_TRANSITIONS[order.status]:
                    failed.append(PaymentFailure(order_id=line.order_id, reason="invalid_status"))
                    continue
                amount = to_money(line.amount)
                if amount < order.total_amount:
                    failed.append(
                        PaymentFailure(
                            order_id=line.order_id,
                            reason="insufficient_amount",
                            due=order.total_amount,
                            paid=amount,
                        )
                    )
                    continue

                now = self._clock.now()
                payment_id = stores.payments.add(
                    line.order_id, amount, payload.method, payload.reference, PaymentStatus.SUCCESS.value, now
                )
                stores.orders.set_status(line.order_id, OrderStatus.PAID, now)
                processed.append(
                    PaymentRecordView(
                        order_id=line.order_id,
                        payment_id=payment_id,
                        amount=amount,
                        status=PaymentStatus.SUCCESS,
                    )
                )

        self._log.info("Payments processed", paid=len(processed), failed=len(failed))
        return PaymentResult(payments=processed, failed=failed)


REPORT_RANGE_DAYS = {ReportRange.WEEK: 7, ReportRange.MONTH: 30, ReportRange.YEAR: 365}
TOP_PRODUCTS_LIMIT = 5
RECENT_ORDERS_LIMIT = 10


def report_window(query: ReportQuery, clock: Clock) -> Optional[Tuple[datetime, datetime]]:
    if query.range == ReportRange.ALL:
        return None
    if query.range == ReportRange.CUSTOM:
        if not (query.start_date and query.end_date):
            return None
        start = datetime.combine(query.start_date, time.min)
        return start, datetime.combine(query.end_date, time.min) + timedelta(days=1)
    today, tomorrow = day_bounds(clock)
    if query.range == ReportRange.TODAY:
        return today, tomorrow
    return today - timedelta(days=REPORT_RANGE_DAYS[query.range]), tomorrow


class ReportService:
    """Sales figures for the caller's own orders over a chosen period."""

    def __init__(self, uow: UnitOfWork, clock: Clock) -> None:
        self._uow = uow
        self._clock = clock

    def sales_report(self, actor: ActorContext, query: ReportQuery) -> SalesReport:
        scope = OrderScope(
            shopkeeper_id=actor.account_id if actor.is_shopkeeper else None,
            distributor_id=actor.account_id if actor.is_distributor else None,
            status=query.status,
            created_between=report_window(query, self._clock),
        )
        with self._uow() as stores:
            total_sales, orders_count, items_sold = stores.reports.sales_totals(scope)
            top_products = stores.reports.top_products(scope, TOP_PRODUCTS_LIMIT)
            recent = stores.orders.list(
                scope.shopkeeper_id,
                scope.distributor_id,
                scope.status,
                scope.created_between,
                RECENT_ORDERS_LIMIT,
            )
        return SalesReport(
            role=actor.role,
            filters=ReportFilters(range=query.range, status=query.status.value if query.status else "all"),
            summary=ReportSummary(total_sales=total_sales, orders_count=orders_count, items_sold=items_sold),
            top_products=top_products,
            recent_orders=recent,
        )


class NotificationService:
    """Builds the caller's notification feed from current orders, stock and cart.

    Distributors see new orders (today by default) and low stock alerts.
    Shopkeepers see updates on their orders (all time by default) and a
    reminder while their cart is not empty.
    """

    def __init__(self, uow: UnitOfWork, clock: Clock) -> None:
        self._uow = uow
        self._clock = clock

    def feed(self, actor: ActorContext, query: NotificationQuery) -> NotificationFeed:
        if actor.is_distributor:
            return self._distributor_feed(actor.account_id, query)
        return self._shopkeeper_feed(actor.account_id, query)

    def _distributor_feed(self, distributor_id: int, query: NotificationQuery) -> NotificationFeed:
        scope = query.scope or "today"
        window = day_bounds(self._clock) if scope == "today" else None
        now = self._clock.now()
        with self._uow() as stores:
            orders = stores.orders.list(None, distributor_id, None, window, query.limit_orders)
            low_stock = stores.inventory.low_stock(distributor_id, query.low_stock_threshold, query.limit_stock)

        notifications = [
            Notification(
                id=f"order-{order.order_id}",
                type=NotificationType.ORDER_NEW,
                priority="normal",
                title="New order received",
                message=f"Order #{order.order_id} from shopkeeper #{order.shopkeeper_id}, total {order.total_amount:.2f}.",
                created_at=order.created_at,
                meta={
                    "order_id": order.order_id,
                    "shopkeeper_id": order.shopkeeper_id,
                    "status": order.status.value,
                    "total_amount": float(order.total_amount),
                },
            )
            for order in orders
        ]
        notifications.extend(
            Notification(
                id=f"lowstock-{item.id}",
                type=NotificationType.INVENTORY_LOW,
                priority="high",
                title="Low stock alert",
                message=f'"{item.product_name}" is low on stock ({item.quantity} left).',
                created_at=now,
                meta={"product_id": item.id, "stock": item.quantity, "price": float(item.price)},
            )
            for item in low_stock
        )
        return NotificationFeed(
            role=ActorRole.DISTRIBUTOR,
            data=notifications,
            summary=NotificationSummary(
                scope=scope,
                new_orders=len(orders),
                low_stock=len(low_stock),
                threshold=query.low_stock_threshold,
            ),
        )

    def _shopkeeper_feed(self, shopkeeper_id: int, query: NotificationQuery) -> NotificationFeed:
        scope = query.scope or "all"
        window = day_bounds(self._clock) if scope == "today" else None
        with self._uow() as stores:
            orders = stores.orders.list(shopkeeper_id, None, None, window, query.limit_orders)
            cart_items = len(stores.cart.read_cart(shopkeeper_id))

        notifications = [
            Notification(
                id=f"order-{order.order_id}",
                type=NotificationType.ORDER_STATUS,
                priority="normal",
                title="Order update",
                message=(
                    f"Order #{order.order_id} with distributor #{order.distributor_id} "
                    f"is {order.status.value}, total {order.total_amount:.2f}."
                ),
                created_at=order.created_at,
                meta={
                    "order_id": order.order_id,
                    "status": order.status.value,
                    "total_amount": float(order.total_amount),
                },
            )
            for order in orders
        ]
        if cart_items:
            notifications.append(
                Notification(
                    id=f"cart-{shopkeeper_id}",
                    type=NotificationType.CART_REMINDER,
                    priority="low",
                    title="You have items in your cart",
                    message=f"You have {cart_items} item(s) waiting in your cart.",
                    created_at=self._clock.now(),
                    meta={"items": cart_items},
                )
            )
        return NotificationFeed(
            role=ActorRole.SHOPKEEPER,
            data=notifications,
            summary=NotificationSummary(scope=scope, orders_considered=len(orders), cart_items=cart_items),
        )


class HealthService:
    def __init__(self, clock: Clock) -> None:
        self._clock = clock

    def status(self) -> HealthStatus:
        return HealthStatus(status="ok", time=self._clock.now())
