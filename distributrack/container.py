from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .clock import Clock, SystemClock
from .logging import ServiceLogger
from .persistence.db import Database
from .persistence.repositories import SqlAlchemyUnitOfWork
from .persistence.seed import seed_inventory_if_empty
from .repositories import UnitOfWork
from .services import (
    AuthService,
    CartService,
    HealthService,
    InventoryService,
    NotificationService,
    OrderPlacementService,
    OrderService,
    PaymentService,
    ReportService,
)
from .settings import Settings


@dataclass
class Container:
    settings: Settings
    auth_service: AuthService
    order_placement_service: OrderPlacementService
    order_service: OrderService
    cart_service: CartService
    inventory_service: InventoryService
    payment_service: PaymentService
    report_service: ReportService
    notification_service: NotificationService
    health_service: HealthService
    clock: Clock
    db: Database


def build_container(
    settings: Settings,
    clock: Optional[Clock] = None,
    uow: Optional[UnitOfWork] = None,
) -> Container:
    clock = clock or SystemClock()
    log = ServiceLogger("container")

    db = Database(settings.database_url, echo=settings.db_echo)
    db.create_tables()
    if settings.inventory_seed_path:
        seeded = seed_inventory_if_empty(db, settings.inventory_seed_path, clock)
        if seeded:
            log.info("Inventory seeded", items=seeded, path=settings.inventory_seed_path)

    uow = uow or SqlAlchemyUnitOfWork(db)

    return Container(
        settings=settings,
        auth_service=AuthService(settings, clock),
        order_placement_service=OrderPlacementService(uow, clock),
        order_service=OrderService(uow, clock),
        cart_service=CartService(uow),
        inventory_service=InventoryService(uow, clock),
        payment_service=PaymentService(uow, clock),
        report_service=ReportService(uow, clock),
        notification_service=NotificationService(uow, clock),
        health_service=HealthService(clock),
        clock=clock,
        db=db,
    )
