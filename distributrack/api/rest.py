from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Body, Depends, Query
from pydantic import ValidationError as PydanticValidationError

from ..deps import (
    actor_context,
    get_auth_service,
    get_cart_service,
    get_health_service,
    get_inventory_service,
    get_notification_service,
    get_order_placement_service,
    get_order_service,
    get_payment_service,
    get_report_service,
    optional_actor,
    partner_auth,
    placing_shopkeeper,
)
from ..domain import (
    ActorContext,
    CartAdd,
    CartAddResult,
    CartMutationResult,
    CartUpdate,
    CartView,
    HealthStatus,
    InventoryItem,
    InventoryPage,
    InventoryQuery,
    NotificationFeed,
    NotificationQuery,
    Order,
    OrderList,
    OrderQuery,
    OrderStatus,
    OrderStatusUpdate,
    PaymentRequest,
    PaymentResult,
    PlaceOrderCommand,
    PlaceOrderRequest,
    PlaceOrderResult,
    ProductCreate,
    ProductRemoval,
    ReportQuery,
    Restock,
    SalesReport,
    TokenRequest,
    TokenResponse,
)
from ..errors import ValidationError
from ..services import (
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

router = APIRouter()


@router.get("/health", response_model=HealthStatus)
async def health(service: HealthService = Depends(get_health_service)):
    return service.status()


@router.post("/auth/token", response_model=TokenResponse, dependencies=[Depends(partner_auth)])
async def issue_token(payload: TokenRequest, auth: AuthService = Depends(get_auth_service)):
    return auth.issue_token(payload)


# --- inventory ---------------------------------------------------------------


@router.get("/inventory", response_model=InventoryPage)
async def browse_inventory(
    query: Annotated[InventoryQuery, Query()],
    service: InventoryService = Depends(get_inventory_service),
):
    return service.browse(query)


@router.get("/inventory/{product_id}", response_model=InventoryItem)
async def get_product(product_id: int, service: InventoryService = Depends(get_inventory_service)):
    return service.get(product_id)


@router.post("/inventory", response_model=InventoryItem, status_code=201)
async def add_product(
    payload: ProductCreate,
    actor: ActorContext = Depends(actor_context),
    service: InventoryService = Depends(get_inventory_service),
):
    return service.add_product(actor, payload)


@router.post("/inventory/{product_id}/restock", response_model=InventoryItem)
async def restock_product(
    product_id: int,
    payload: Restock,
    actor: ActorContext = Depends(actor_context),
    service: InventoryService = Depends(get_inventory_service),
):
    return service.restock(actor, product_id, payload)


@router.delete("/inventory/{product_id}", response_model=ProductRemoval)
async def remove_product(
    product_id: int,
    hard: bool = False,
    actor: ActorContext = Depends(actor_context),
    service: InventoryService = Depends(get_inventory_service),
):
    return service.remove_product(actor, product_id, hard=hard)


# --- cart ----------------------------------------------------------------------


@router.get("/cart", response_model=CartView)
async def get_cart(
    actor: Optional[ActorContext] = Depends(optional_actor),
    service: CartService = Depends(get_cart_service),
):
    return service.get_cart(actor)


@router.post("/cart/items", response_model=CartAddResult)
async def add_to_cart(
    payload: CartAdd,
    actor: Optional[ActorContext] = Depends(optional_actor),
    service: CartService = Depends(get_cart_service),
):
    return service.add_item(actor, payload)


@router.patch("/cart/items/{product_id}", response_model=CartMutationResult)
async def update_cart_item(
    product_id: int,
    payload: CartUpdate,
    actor: Optional[ActorContext] = Depends(optional_actor),
    service: CartService = Depends(get_cart_service),
):
    return service.update_item(actor, product_id, payload)


@router.delete("/cart/items/{product_id}", response_model=CartMutationResult)
async def remove_from_cart(
    product_id: int,
    actor: Optional[ActorContext] = Depends(optional_actor),
    service: CartService = Depends(get_cart_service),
):
    return service.remove_item(actor, product_id)


# --- orders --------------------------------------------------------------------


@router.post("/orders", response_model=PlaceOrderResult, response_model_exclude_none=True)
def place_order(
    payload: Optional[PlaceOrderRequest] = Body(None),
    shopkeeper_id: int = Depends(placing_shopkeeper),
    service: OrderPlacementService = Depends(get_order_placement_service),
):
    # sync handler: the workflow blocks on row locks and runs in the threadpool
    return service.place_order(PlaceOrderCommand.from_request(shopkeeper_id, payload))


@router.get("/orders", response_model=OrderList)
async def list_orders(
    status: Optional[OrderStatus] = None,
    scope: Optional[str] = None,
    include_items: bool = False,
    actor: ActorContext = Depends(actor_context),
    service: OrderService = Depends(get_order_service),
):
    try:
        query = OrderQuery(status=status, scope=scope, include_items=include_items)
    except PydanticValidationError as exc:
        raise ValidationError("invalid_scope") from exc
    return service.list_orders(actor, query)


@router.get("/orders/{order_id}", response_model=Order)
async def get_order(
    order_id: int,
    actor: ActorContext = Depends(actor_context),
    service: OrderService = Depends(get_order_service),
):
    return service.get_order(actor, order_id)


@router.post("/orders/{order_id}/status", response_model=Order)
async def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    actor: ActorContext = Depends(actor_context),
    service: OrderService = Depends(get_order_service),
):
    return service.update_status(actor, order_id, payload)


# --- payments ------------------------------------------------------------------


@router.post("/payments", response_model=PaymentResult)
async def process_payment(
    payload: PaymentRequest,
    actor: ActorContext = Depends(actor_context),
    service: PaymentService = Depends(get_payment_service),
):
    return service.process(actor, payload)


# --- reports & notifications ----------------------------------------------------


@router.get("/reports", response_model=SalesReport)
async def sales_report(
    query: Annotated[ReportQuery, Query()],
    actor: ActorContext = Depends(actor_context),
    service: ReportService = Depends(get_report_service),
):
    return service.sales_report(actor, query)


@router.get("/notifications", response_model=NotificationFeed, response_model_exclude_none=True)
async def notifications(
    query: Annotated[NotificationQuery, Query()],
    actor: ActorContext = Depends(actor_context),
    service: NotificationService = Depends(get_notification_service),
):
    return service.feed(actor, query)
