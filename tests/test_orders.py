from datetime import timedelta

from conftest import bearer
from distributrack.clock import FixedClock, SystemClock
from distributrack.domain import ActorRole, TokenRequest
from distributrack.services import AuthService
from test_cart import create_product


def fill_cart(client, headers, *lines):
    for product_id, quantity in lines:
        response = client.post("/cart/items", json={"product_id": product_id, "quantity": quantity}, headers=headers)
        assert response.status_code == 200


def place_single_order(client, distributor_id=1, quantity=2, price=4.0):
    product_id = create_product(client, distributor_id=distributor_id, price=price, quantity=10)
    shopper = bearer(client, "shopkeeper", 10)
    fill_cart(client, shopper, (product_id, quantity))
    [order] = client.post("/orders", headers=shopper).json()["orders"]
    return order["order_id"], product_id


class TestPlaceOrderEndpoint:
    def test_success_shape(self, client):
        rice = create_product(client, price=2.5, quantity=3, name="Rice")
        tea = create_product(client, distributor_id=2, price=6.75, name="Tea")
        shopper = bearer(client, "shopkeeper", 10)
        fill_cart(client, shopper, (rice, 3), (tea, 2))
        client.post(f"/inventory/{rice}/restock", json={"amount": 1}, headers=bearer(client, "distributor", 1))

        response = client.post("/orders", json={"items": [{"product_id": rice, "quantity": 5}, {"product_id": tea}]}, headers=shopper)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        totals = {order["distributor_id"]: order["total_amount"] for order in body["orders"]}
        assert totals == {1: 10.0, 2: 13.5}
        assert body["skipped"] == [
            {"product_id": rice, "reason": "partial_fill", "requested": 5, "available": 4, "fulfilled": 4}
        ]

    def test_empty_cart(self, client):
        response = client.post("/orders", headers=bearer(client, "shopkeeper", 10))
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "cart_empty"}

    def test_no_items_to_order_carries_skips(self, client):
        rice = create_product(client, quantity=1)
        shopper = bearer(client, "shopkeeper", 10)
        fill_cart(client, shopper, (rice, 1))
        other = bearer(client, "shopkeeper", 11)
        fill_cart(client, other, (rice, 1))
        client.post("/orders", headers=other)

        response = client.post("/orders", headers=shopper)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "no_items_to_order"
        assert body["skipped"] == [{"product_id": rice, "reason": "out_of_stock", "requested": 1, "available": 0}]
        assert len(client.get("/cart", headers=shopper).json()["items"]) == 1

    def test_requires_shopkeeper(self, client):
        anonymous = client.post("/orders")
        as_distributor = client.post("/orders", headers=bearer(client, "distributor", 1))
        for response in (anonymous, as_distributor):
            assert response.status_code == 401
            assert response.json()["error"] == "unauthorized_or_missing_shopkeeper"

    def test_invalid_token(self, client):
        response = client.post("/orders", headers={"Authorization": "Bearer not-a-token"})
        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized_or_missing_shopkeeper"

    def test_expired_token(self, client, settings):
        stale = AuthService(settings, FixedClock(SystemClock().now() - timedelta(hours=2)))
        token = stale.issue_token(TokenRequest(role=ActorRole.SHOPKEEPER, account_id=10)).access_token

        response = client.post("/orders", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json() == {"success": False, "error": "unauthorized_or_missing_shopkeeper"}

    def test_malformed_body(self, client):
        response = client.post("/orders", json={"items": [{"product_id": "abc"}]}, headers=bearer(client, "shopkeeper", 10))
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_request"


class TestListOrders:
    def test_scoped_by_role(self, client):
        rice = create_product(client, distributor_id=1)
        tea = create_product(client, distributor_id=2)
        shopper = bearer(client, "shopkeeper", 10)
        fill_cart(client, shopper, (rice, 1), (tea, 1))
        client.post("/orders", headers=shopper)

        mine = client.get("/orders", headers=shopper).json()
        first_distributor = client.get("/orders", headers=bearer(client, "distributor", 1)).json()
        stranger = client.get("/orders", headers=bearer(client, "shopkeeper", 99)).json()

        assert mine["count"] == 2
        assert [order["distributor_id"] for order in first_distributor["items"]] == [1]
        assert stranger == {"items": [], "count": 0}

    def test_include_items_and_filters(self, client):
        order_id, product_id = place_single_order(client, quantity=3)
        shopper = bearer(client, "shopkeeper", 10)

        with_items = client.get("/orders", params={"include_items": True, "scope": "today"}, headers=shopper).json()
        pending = client.get("/orders", params={"status": "Pending"}, headers=shopper).json()
        shipped = client.get("/orders", params={"status": "Shipped"}, headers=shopper).json()

        [order] = with_items["items"]
        assert order["order_id"] == order_id
        assert [(item["product_id"], item["quantity"]) for item in order["items"]] == [(product_id, 3)]
        assert pending["count"] == 1
        assert shipped["count"] == 0

    def test_unknown_scope(self, client):
        response = client.get("/orders", params={"scope": "yesterday"}, headers=bearer(client, "shopkeeper", 10))
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_scope"

    def test_requires_token(self, client):
        response = client.get("/orders")
        assert response.status_code == 401

    def test_get_order_hidden_from_others(self, client):
        order_id, _ = place_single_order(client)

        own = client.get(f"/orders/{order_id}", headers=bearer(client, "shopkeeper", 10))
        other = client.get(f"/orders/{order_id}", headers=bearer(client, "shopkeeper", 11))

        assert own.json()["items"][0]["line_total"] == 8.0
        assert other.status_code == 404
        assert other.json()["error"] == "order_not_found"


class TestOrderStatus:
    def test_distributor_walks_the_lifecycle(self, client):
        order_id, _ = place_single_order(client)
        headers = bearer(client, "distributor", 1)

        for status in ("Processing", "shipped", "Delivered"):
            response = client.post(f"/orders/{order_id}/status", json={"status": status}, headers=headers)
            assert response.status_code == 200

        assert client.get(f"/orders/{order_id}", headers=headers).json()["status"] == "Delivered"

    def test_invalid_transition(self, client):
        order_id, _ = place_single_order(client)

        response = client.post(
            f"/orders/{order_id}/status", json={"status": "Delivered"}, headers=bearer(client, "distributor", 1)
        )

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "invalid_transition"
        assert body["allowed"] == ["Processing", "Paid", "Cancelled"]

    def test_terminal_state_is_final(self, client):
        order_id, _ = place_single_order(client)
        headers = bearer(client, "distributor", 1)
        client.post(f"/orders/{order_id}/status", json={"status": "Cancelled"}, headers=headers)

        response = client.post(f"/orders/{order_id}/status", json={"status": "Processing"}, headers=headers)

        assert response.status_code == 409
        assert response.json()["error"] == "order_in_terminal_state"

    def test_cancel_with_restock(self, client):
        order_id, product_id = place_single_order(client, quantity=4)
        assert client.get(f"/inventory/{product_id}").json()["quantity"] == 6

        client.post(
            f"/orders/{order_id}/status",
            json={"status": "Cancelled", "restock": True},
            headers=bearer(client, "distributor", 1),
        )

        assert client.get(f"/inventory/{product_id}").json()["quantity"] == 10

    def test_shopkeeper_may_only_confirm_delivery(self, client):
        order_id, _ = place_single_order(client)
        shopper = bearer(client, "shopkeeper", 10)

        early = client.post(f"/orders/{order_id}/status", json={"status": "Delivered"}, headers=shopper)
        client.post(f"/orders/{order_id}/status", json={"status": "Processing"}, headers=bearer(client, "distributor", 1))
        client.post(f"/orders/{order_id}/status", json={"status": "Shipped"}, headers=bearer(client, "distributor", 1))
        confirmed = client.post(f"/orders/{order_id}/status", json={"status": "Delivered"}, headers=shopper)

        assert early.status_code == 403
        assert early.json()["error"] == "forbidden_transition_for_role"
        assert confirmed.status_code == 200

    def test_foreign_distributor(self, client):
        order_id, _ = place_single_order(client)

        response = client.post(
            f"/orders/{order_id}/status", json={"status": "Processing"}, headers=bearer(client, "distributor", 2)
        )

        assert response.status_code == 403
        assert response.json()["error"] == "forbidden_not_your_order"

    def test_unknown_status_value(self, client):
        order_id, _ = place_single_order(client)
        response = client.post(
            f"/orders/{order_id}/status", json={"status": "Lost"}, headers=bearer(client, "distributor", 1)
        )
        assert response.status_code == 400
