from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .container import Container
from .domain import ActorContext, TokenInput
from .errors import UnauthorizedError
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
    require_shopkeeper,
)
from .settings import Settings

bearer = HTTPBearer(auto_error=False)


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_settings(container: Container = Depends(get_container)) -> Settings:
    return container.settings


def get_auth_service(container: Container = Depends(get_container)) -> AuthService:
    return container.auth_service


def get_order_placement_service(container: Container = Depends(get_container)) -> OrderPlacementService:
    return container.order_placement_service


def get_order_service(container: Container = Depends(get_container)) -> OrderService:
    return container.order_service


def get_cart_service(container: Container = Depends(get_container)) -> CartService:
    return container.cart_service


def get_inventory_service(container: Container = Depends(get_container)) -> InventoryService:
    return container.inventory_service


def get_payment_service(container: Container = Depends(get_container)) -> PaymentService:
    return container.payment_service


def get_report_service(container: Container = Depends(get_container)) -> ReportService:
    return container.report_service


def get_notification_service(container: Container = Depends(get_container)) -> NotificationService:
    return container.notification_service


def get_health_service(container: Container = Depends(get_container)) -> HealthService:
    return container.health_service


def actor_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    auth: AuthService = Depends(get_auth_service),
) -> ActorContext:
    if credentials is None:
        raise UnauthorizedError()
    return auth.verify_token(TokenInput(token=credentials.credentials))


def partner_auth(
    x_api_key: str = Header("", alias="X-API-Key"),
    settings: Settings = Depends(get_settings),
) -> None:
    if not x_api_key or x_api_key != settings.partner_api_key:
        raise UnauthorizedError("invalid_partner_api_key")


def optional_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    auth: AuthService = Depends(get_auth_service),
) -> Optional[ActorContext]:
    if credentials is None:
        return None
    return auth.verify_token(TokenInput(token=credentials.credentials))


def placing_shopkeeper(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    auth: AuthService = Depends(get_auth_service),
) -> int:
    """Shopkeeper id for order placement; any token problem reports the same code."""
    if credentials is None:
        raise UnauthorizedError("unauthorized_or_missing_shopkeeper")
    try:
        actor = auth.verify_token(TokenInput(token=credentials.credentials))
    except UnauthorizedError as exc:
        raise UnauthorizedError("unauthorized_or_missing_shopkeeper") from exc
    return require_shopkeeper(actor)
