from conftest import bearer
from test_orders import place_single_order


class TestPayments:
    def test_single_payment_marks_order_paid(self, client):
        order_id, _ = place_single_order(client, quantity=2, price=4.0)
        shopper = bearer(client, "shopkeeper", 10)

        response = client.post(
            "/payments", json={"order_id": order_id, "amount": 8, "reference": "RCPT-1"}, headers=shopper
        )

        body = response.json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["failed"] == []
        [payment] = body["payments"]
        assert payment["order_id"] == order_id
        assert payment["amount"] == 8.0
        assert payment["status"] == "Success"
        assert client.get(f"/orders/{order_id}", headers=shopper).json()["status"] == "Paid"

    def test_batch_reports_each_failure(self, client):
        paid_id, _ = place_single_order(client, quantity=1, price=5.0)
        short_id, _ = place_single_order(client, quantity=2, price=5.0)
        shopper = bearer(client, "shopkeeper", 10)

        body = client.post(
            "/payments",
            json={
                "orders": [
                    {"order_id": paid_id, "amount": 5},
                    {"order_id": short_id, "amount": 3},
                    {"order_id": 999, "amount": 1},
                ]
            },
            headers=shopper,
        ).json()

        assert [payment["order_id"] for payment in body["payments"]] == [paid_id]
        failures = {failure["order_id"]: failure for failure in body["failed"]}
        assert failures[short_id]["reason"] == "insufficient_amount"
        assert failures[short_id]["due"] == 10.0
        assert failures[short_id]["paid"] == 3.0
        assert failures[999]["reason"] == "not_found"

    def test_cannot_pay_twice(self, client):
        order_id, _ = place_single_order(client, quantity=1, price=5.0)
        shopper = bearer(client, "shopkeeper", 10)
        client.post("/payments", json={"order_id": order_id, "amount": 5}, headers=shopper)

        body = client.post("/payments", json={"order_id": order_id, "amount": 5}, headers=shopper).json()

        assert body["payments"] == []
        assert body["failed"][0]["reason"] == "invalid_status"

    def test_ownership_is_checked(self, client):
        order_id, _ = place_single_order(client, quantity=1, price=5.0)

        stranger = client.post(
            "/payments", json={"order_id": order_id, "amount": 5}, headers=bearer(client, "shopkeeper", 11)
        ).json()
        other_distributor = client.post(
            "/payments", json={"order_id": order_id, "amount": 5}, headers=bearer(client, "distributor", 2)
        ).json()

        assert stranger["failed"][0]["reason"] == "unauthorized_shopkeeper"
        assert other_distributor["failed"][0]["reason"] == "unauthorized_distributor"

    def test_distributor_can_record_payment(self, client):
        order_id, _ = place_single_order(client, quantity=1, price=5.0)

        body = client.post(
            "/payments", json={"order_id": order_id, "amount": 6, "method": "cash"}, headers=bearer(client, "distributor", 1)
        ).json()

        assert body["payments"][0]["amount"] == 6.0

    def test_missing_order_is_invalid(self, client):
        response = client.post("/payments", json={"amount": 5}, headers=bearer(client, "shopkeeper", 10))
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_request"

    def test_requires_token(self, client):
        assert client.post("/payments", json={"order_id": 1, "amount": 5}).status_code == 401
