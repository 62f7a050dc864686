from __future__ import annotations

from sqlalchemy import select

from ..clock import Clock
from ..domain import to_money
from ..seed import load_inventory_seed
from .db import Database
from .models import InventoryItemRecord


def seed_inventory_if_empty(db: Database, seed_path: str, clock: Clock) -> int:
    items = load_inventory_seed(seed_path)
    if not items:
        return 0

    with db.session() as session:
        existing = session.execute(select(InventoryItemRecord.id).limit(1)).first()
        if existing:
            return 0
        now = clock.now()
        session.add_all(
            [
                InventoryItemRecord(
                    distributor_id=item.distributor_id,
                    product_name=item.product_name,
                    description=item.description,
                    price=to_money(item.price),
                    quantity=item.quantity,
                    is_active=item.is_active,
                    created_at=now,
                )
                for item in items
            ]
        )
    return len(items)
