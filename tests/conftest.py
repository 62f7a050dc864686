import os
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import update

os.environ.setdefault("DISTRIBUTRACK_ENV_FILE", str(Path(__file__).with_name("test.env")))

from distributrack.clock import FixedClock
from distributrack.container import build_container
from distributrack.domain import ActorContext, ActorRole, CartAdd, ProductCreate
from distributrack.main import create_app
from distributrack.persistence.models import InventoryItemRecord
from distributrack.settings import Settings

PARTNER_API_KEY = "test-partner-key"
NOW = datetime(2024, 5, 17, 10, 30, 0)


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "APP_NAME": "DistribuTrack Test",
        "JWT_SECRET": "test-secret",
        "PARTNER_API_KEY": PARTNER_API_KEY,
        "DATABASE_URL": f"sqlite:///{tmp_path}/distributrack.db",
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def shopkeeper(account_id: int = 10) -> ActorContext:
    return ActorContext(role=ActorRole.SHOPKEEPER, account_id=account_id)


def distributor(account_id: int = 1) -> ActorContext:
    return ActorContext(role=ActorRole.DISTRIBUTOR, account_id=account_id)


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def clock():
    return FixedClock(NOW)


@pytest.fixture
def container(settings, clock):
    container = build_container(settings, clock=clock)
    yield container
    container.db.dispose()


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as test_client:
        yield test_client


class Shop:
    """Builds catalogue and cart state straight through the services."""

    def __init__(self, container) -> None:
        self.container = container

    def product(self, distributor_id: int, price: str, quantity: int, name: str = "Item") -> int:
        item = self.container.inventory_service.add_product(
            distributor(distributor_id),
            ProductCreate(product_name=name, price=Decimal(price), quantity=quantity),
        )
        return item.id

    def add_to_cart(self, shopkeeper_id: int, product_id: int, quantity: int) -> None:
        self.container.cart_service.add_item(
            shopkeeper(shopkeeper_id), CartAdd(product_id=product_id, quantity=quantity)
        )

    def set_stock(self, product_id: int, quantity: int) -> None:
        with self.container.db.session() as session:
            session.execute(
                update(InventoryItemRecord).where(InventoryItemRecord.id == product_id).values(quantity=quantity)
            )

    def stock(self, product_id: int) -> int:
        return self.container.inventory_service.get(product_id).quantity

    def cart_products(self, shopkeeper_id: int) -> dict:
        view = self.container.cart_service.get_cart(shopkeeper(shopkeeper_id))
        return {line.product_id: line.quantity for line in view.items}


@pytest.fixture
def shop(container):
    return Shop(container)


def issue_token(client: TestClient, role: str, account_id: int) -> str:
    response = client.post(
        "/auth/token",
        json={"role": role, "account_id": account_id},
        headers={"X-API-Key": PARTNER_API_KEY},
    )
    assert response.status_code == 200
    return response.json()["access_token"]


def bearer(client: TestClient, role: str, account_id: int) -> dict:
    return {"Authorization": f"Bearer {issue_token(client, role, account_id)}"}
