from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import Session

from ..domain import (
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
    to_money,
)
from ..repositories import OrderScope
from .db import Database
from .models import CartLineRecord, InventoryItemRecord, OrderItemRecord, OrderRecord, PaymentRecord


def inventory_from_record(record: InventoryItemRecord) -> InventoryItem:
    return InventoryItem(
        id=record.id,
        distributor_id=record.distributor_id,
        product_name=record.product_name,
        description=record.description or "",
        price=to_money(record.price),
        quantity=record.quantity,
        is_active=record.is_active,
        created_at=record.created_at,
    )


def order_from_record(record: OrderRecord) -> Order:
    return Order(
        order_id=record.id,
        shopkeeper_id=record.shopkeeper_id,
        distributor_id=record.distributor_id,
        status=OrderStatus(record.status),
        total_amount=to_money(record.total_amount),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def cart_line_from_record(record: CartLineRecord) -> CartLine:
    return CartLine(
        id=record.id,
        shopkeeper_id=record.shopkeeper_id,
        product_id=record.product_id,
        quantity=record.quantity,
    )


class SqlAlchemyInventoryStore:
    def __init__(self, session: Session) -> None:
        self._session = session

    def lock_and_read(self, product_ids: Iterable[int]) -> Dict[int, StockSnapshot]:
        ids = sorted(set(product_ids))
        if not ids:
            return {}
        # rows are locked in id order so concurrent placements cannot deadlock
        stmt = (
            select(
                InventoryItemRecord.id,
                InventoryItemRecord.distributor_id,
                InventoryItemRecord.price,
                InventoryItemRecord.quantity,
            )
            .where(InventoryItemRecord.id.in_(ids), InventoryItemRecord.is_active.is_(True))
            .order_by(InventoryItemRecord.id.asc())
            .with_for_update()
        )
        rows = self._session.execute(stmt).all()
        return {
            row.id: StockSnapshot(
                product_id=row.id,
                distributor_id=row.distributor_id,
                price=to_money(row.price),
                stock=max(int(row.quantity), 0),
            )
            for row in rows
        }

    def conditional_decrement(self, product_id: int, amount: int) -> bool:
        stmt = (
            update(InventoryItemRecord)
            .where(InventoryItemRecord.id == product_id, InventoryItemRecord.quantity >= amount)
            .values(quantity=InventoryItemRecord.quantity - amount)
            .execution_options(synchronize_session=False)
        )
        return self._session.execute(stmt).rowcount == 1

    def increment(self, product_id: int, amount: int) -> bool:
        stmt = (
            update(InventoryItemRecord)
            .where(InventoryItemRecord.id == product_id)
            .values(quantity=InventoryItemRecord.quantity + amount)
            .execution_options(synchronize_session=False)
        )
        return self._session.execute(stmt).rowcount == 1

    def get(self, product_id: int, lock: bool = False) -> Optional[InventoryItem]:
        stmt = select(InventoryItemRecord).where(InventoryItemRecord.id == product_id)
        if lock:
            stmt = stmt.with_for_update()
        record = self._session.execute(stmt).scalars().first()
        return inventory_from_record(record) if record else None

    def browse(self, query: InventoryQuery) -> Tuple[List[InventoryItem], int]:
        conditions = []
        if query.distributor_id is not None:
            conditions.append(InventoryItemRecord.distributor_id == query.distributor_id)
        if not query.include_inactive:
            conditions.append(InventoryItemRecord.is_active.is_(True))
        if query.in_stock_only:
            conditions.append(InventoryItemRecord.quantity > 0)
        if query.q and query.q.strip():
            pattern = f"%{query.q.strip()}%"
            conditions.append(
                or_(
                    InventoryItemRecord.product_name.ilike(pattern),
                    InventoryItemRecord.description.ilike(pattern),
                )
            )

        total = self._session.execute(
            select(func.count()).select_from(InventoryItemRecord).where(*conditions)
        ).scalar_one()
        stmt = (
            select(InventoryItemRecord)
            .where(*conditions)
            .order_by(InventoryItemRecord.created_at.desc(), InventoryItemRecord.id.desc())
            .limit(query.limit)
            .offset(query.offset)
        )
        records = self._session.execute(stmt).scalars().all()
        return [inventory_from_record(record) for record in records], int(total)

    def add(self, distributor_id: int, payload: ProductCreate, created_at: datetime) -> InventoryItem:
        record = InventoryItemRecord(
            distributor_id=distributor_id,
            product_name=payload.product_name,
            description=payload.description,
            price=to_money(payload.price),
            quantity=payload.quantity,
            is_active=True,
            created_at=created_at,
        )
        self._session.add(record)
        self._session.flush()
        return inventory_from_record(record)

    def deactivate(self, product_id: int) -> None:
        self._session.execute(
            update(InventoryItemRecord)
            .where(InventoryItemRecord.id == product_id)
            .values(is_active=False)
            .execution_options(synchronize_session=False)
        )

    def delete(self, product_id: int) -> bool:
        result = self._session.execute(
            delete(InventoryItemRecord)
            .where(InventoryItemRecord.id == product_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def low_stock(self, distributor_id: int, threshold: int, limit: int) -> List[InventoryItem]:
        stmt = (
            select(InventoryItemRecord)
            .where(
                InventoryItemRecord.distributor_id == distributor_id,
                InventoryItemRecord.is_active.is_(True),
                InventoryItemRecord.quantity <= threshold,
            )
            .order_by(InventoryItemRecord.quantity.asc(), InventoryItemRecord.id.asc())
            .limit(limit)
        )
        return [inventory_from_record(record) for record in self._session.execute(stmt).scalars().all()]


class SqlAlchemyCartStore:
    def __init__(self, session: Session) -> None:
        self._session = session

    def read_cart(self, shopkeeper_id: int, product_ids: Optional[Iterable[int]] = None) -> List[CartLine]:
        stmt = select(CartLineRecord).where(CartLineRecord.shopkeeper_id == shopkeeper_id)
        if product_ids is not None:
            stmt = stmt.where(CartLineRecord.product_id.in_(list(product_ids)))
        records = self._session.execute(stmt.order_by(CartLineRecord.id.asc())).scalars().all()
        return [cart_line_from_record(record) for record in records]

    def delete_lines(self, shopkeeper_id: int, product_ids: Iterable[int]) -> int:
        ids = list(product_ids)
        if not ids:
            return 0
        result = self._session.execute(
            delete(CartLineRecord)
            .where(CartLineRecord.shopkeeper_id == shopkeeper_id, CartLineRecord.product_id.in_(ids))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def get_line(self, shopkeeper_id: int, product_id: int) -> Optional[CartLine]:
        stmt = select(CartLineRecord).where(
            CartLineRecord.shopkeeper_id == shopkeeper_id,
            CartLineRecord.product_id == product_id,
        )
        record = self._session.execute(stmt).scalars().first()
        return cart_line_from_record(record) if record else None

    def insert_line(self, shopkeeper_id: int, product_id: int, quantity: int) -> CartLine:
        record = CartLineRecord(shopkeeper_id=shopkeeper_id, product_id=product_id, quantity=quantity)
        self._session.add(record)
        self._session.flush()
        return cart_line_from_record(record)

    def set_quantity(self, line_id: int, quantity: int) -> None:
        self._session.execute(
            update(CartLineRecord)
            .where(CartLineRecord.id == line_id)
            .values(quantity=quantity)
            .execution_options(synchronize_session=False)
        )

    def delete_product_lines(self, product_id: int) -> int:
        result = self._session.execute(
            delete(CartLineRecord)
            .where(CartLineRecord.product_id == product_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def view(self, shopkeeper_id: int) -> List[CartLineView]:
        stmt = (
            select(CartLineRecord, InventoryItemRecord)
            .join(InventoryItemRecord, InventoryItemRecord.id == CartLineRecord.product_id)
            .where(CartLineRecord.shopkeeper_id == shopkeeper_id)
            .order_by(CartLineRecord.id.desc())
        )
        views: List[CartLineView] = []
        for line, product in self._session.execute(stmt).all():
            price = to_money(product.price)
            views.append(
                CartLineView(
                    cart_id=line.id,
                    product_id=line.product_id,
                    product_name=product.product_name,
                    description=product.description or "",
                    price=price,
                    quantity=line.quantity,
                    line_total=to_money(price * line.quantity),
                    stock=max(product.quantity, 0),
                    distributor_id=product.distributor_id,
                )
            )
        return views

    def summary(self, shopkeeper_id: int) -> CartSummary:
        stmt = (
            select(CartLineRecord.quantity, InventoryItemRecord.price)
            .join(InventoryItemRecord, InventoryItemRecord.id == CartLineRecord.product_id)
            .where(CartLineRecord.shopkeeper_id == shopkeeper_id)
        )
        rows = self._session.execute(stmt).all()
        subtotal = sum((to_money(row.price) * row.quantity for row in rows), Decimal("0"))
        return CartSummary(lines=len(rows), subtotal=to_money(subtotal))

    def total_quantity(self, shopkeeper_id: int) -> int:
        stmt = select(func.coalesce(func.sum(CartLineRecord.quantity), 0)).where(
            CartLineRecord.shopkeeper_id == shopkeeper_id
        )
        return int(self._session.execute(stmt).scalar_one())


class SqlAlchemyOrderStore:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_order(self, shopkeeper_id: int, distributor_id: int, total: Decimal, created_at: datetime) -> int:
        record = OrderRecord(
            shopkeeper_id=shopkeeper_id,
            distributor_id=distributor_id,
            total_amount=total,
            status=OrderStatus.PENDING.value,
            created_at=created_at,
        )
        self._session.add(record)
        self._session.flush()
        return record.id

    def add_order_item(self, order_id: int, product_id: int, quantity: int, price: Decimal) -> None:
        self._session.add(OrderItemRecord(order_id=order_id, product_id=product_id, quantity=quantity, price=price))
        self._session.flush()

    def get(self, order_id: int, lock: bool = False) -> Optional[Order]:
        stmt = select(OrderRecord).where(OrderRecord.id == order_id)
        if lock:
            stmt = stmt.with_for_update()
        record = self._session.execute(stmt).scalars().first()
        return order_from_record(record) if record else None

    def items(self, order_ids: Iterable[int]) -> Dict[int, List[OrderItem]]:
        ids = list(order_ids)
        if not ids:
            return {}
        stmt = (
            select(OrderItemRecord, InventoryItemRecord.product_name)
            .outerjoin(InventoryItemRecord, InventoryItemRecord.id == OrderItemRecord.product_id)
            .where(OrderItemRecord.order_id.in_(ids))
            .order_by(OrderItemRecord.order_id.asc(), OrderItemRecord.id.asc())
        )
        grouped: Dict[int, List[OrderItem]] = {order_id: [] for order_id in ids}
        for item, product_name in self._session.execute(stmt).all():
            price = to_money(item.price)
            grouped[item.order_id].append(
                OrderItem(
                    id=item.id,
                    product_id=item.product_id,
                    product_name=product_name,
                    quantity=item.quantity,
                    price=price,
                    line_total=to_money(price * item.quantity),
                )
            )
        return grouped

    def list(
        self,
        shopkeeper_id: Optional[int],
        distributor_id: Optional[int],
        status: Optional[OrderStatus],
        created_between: Optional[Tuple[datetime, datetime]],
        limit: int,
    ) -> List[Order]:
        stmt = select(OrderRecord)
        if distributor_id is not None:
            stmt = stmt.where(OrderRecord.distributor_id == distributor_id)
        if shopkeeper_id is not None:
            stmt = stmt.where(OrderRecord.shopkeeper_id == shopkeeper_id)
        if status:
            stmt = stmt.where(OrderRecord.status == status.value)
        if created_between:
            start, end = created_between
            stmt = stmt.where(OrderRecord.created_at >= start, OrderRecord.created_at < end)
        stmt = stmt.order_by(OrderRecord.created_at.desc(), OrderRecord.id.desc()).limit(limit)
        records = self._session.execute(stmt).scalars().all()
        return [order_from_record(record) for record in records]

    def set_status(self, order_id: int, status: OrderStatus, updated_at: datetime) -> None:
        self._session.execute(
            update(OrderRecord)
            .where(OrderRecord.id == order_id)
            .values(status=status.value, updated_at=updated_at)
            .execution_options(synchronize_session=False)
        )

    def count_items_for_product(self, product_id: int) -> int:
        stmt = select(func.count()).select_from(OrderItemRecord).where(OrderItemRecord.product_id == product_id)
        return int(self._session.execute(stmt).scalar_one())


class SqlAlchemyPaymentStore:
    def __init__(self, session: Session) -> None:
        self._session = session

    def add(
        self,
        order_id: int,
        amount: Decimal,
        method: str,
        reference: Optional[str],
        status: str,
        created_at: datetime,
    ) -> int:
        record = PaymentRecord(
            order_id=order_id,
            amount=to_money(amount),
            method=method,
            reference=reference,
            status=status,
            created_at=created_at,
        )
        self._session.add(record)
        self._session.flush()
        return record.id


def _scope_conditions(scope: OrderScope) -> list:
    conditions = []
    if scope.shopkeeper_id is not None:
        conditions.append(OrderRecord.shopkeeper_id == scope.shopkeeper_id)
    if scope.distributor_id is not None:
        conditions.append(OrderRecord.distributor_id == scope.distributor_id)
    if scope.status:
        conditions.append(OrderRecord.status == scope.status.value)
    if scope.created_between:
        start, end = scope.created_between
        conditions.extend([OrderRecord.created_at >= start, OrderRecord.created_at < end])
    return conditions


class SqlAlchemyReportStore:
    def __init__(self, session: Session) -> None:
        self._session = session

    def sales_totals(self, scope: OrderScope) -> Tuple[Decimal, int, int]:
        conditions = _scope_conditions(scope)
        # order totals and item quantities are summed separately so a join cannot repeat totals
        total_sales, orders_count = self._session.execute(
            select(func.coalesce(func.sum(OrderRecord.total_amount), 0), func.count(OrderRecord.id)).where(
                *conditions
            )
        ).one()
        items_sold = self._session.execute(
            select(func.coalesce(func.sum(OrderItemRecord.quantity), 0))
            .join(OrderRecord, OrderRecord.id == OrderItemRecord.order_id)
            .where(*conditions)
        ).scalar_one()
        return to_money(total_sales), int(orders_count), int(items_sold)

    def top_products(self, scope: OrderScope, limit: int) -> List[TopProduct]:
        total_sold = func.sum(OrderItemRecord.quantity).label("total_sold")
        revenue = func.sum(OrderItemRecord.quantity * OrderItemRecord.price).label("revenue")
        stmt = (
            select(OrderItemRecord.product_id, InventoryItemRecord.product_name, total_sold, revenue)
            .join(OrderRecord, OrderRecord.id == OrderItemRecord.order_id)
            .outerjoin(InventoryItemRecord, InventoryItemRecord.id == OrderItemRecord.product_id)
            .where(*_scope_conditions(scope))
            .group_by(OrderItemRecord.product_id, InventoryItemRecord.product_name)
            .order_by(total_sold.desc(), OrderItemRecord.product_id.asc())
            .limit(limit)
        )
        return [
            TopProduct(
                product_id=row.product_id,
                product_name=row.product_name,
                total_sold=int(row.total_sold),
                revenue=to_money(row.revenue),
            )
            for row in self._session.execute(stmt).all()
        ]


@dataclass
class SqlAlchemyStores:
    session: Session
    inventory: SqlAlchemyInventoryStore
    cart: SqlAlchemyCartStore
    orders: SqlAlchemyOrderStore
    payments: SqlAlchemyPaymentStore
    reports: SqlAlchemyReportStore

    @classmethod
    def bind(cls, session: Session) -> "SqlAlchemyStores":
        return cls(
            session=session,
            inventory=SqlAlchemyInventoryStore(session),
            cart=SqlAlchemyCartStore(session),
            orders=SqlAlchemyOrderStore(session),
            payments=SqlAlchemyPaymentStore(session),
            reports=SqlAlchemyReportStore(session),
        )


class SqlAlchemyUnitOfWork:
    def __init__(self, db: Database) -> None:
        self._db = db

    @contextmanager
    def __call__(self) -> Iterator[SqlAlchemyStores]:
        with self._db.session() as session:
            yield SqlAlchemyStores.bind(session)
