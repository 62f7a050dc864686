from conftest import bearer
from test_cart import create_product


class TestBrowse:
    def test_filters_and_paging(self, client):
        create_product(client, name="Basmati Rice", quantity=5)
        create_product(client, name="Brown Rice", quantity=0)
        create_product(client, distributor_id=2, name="Black Tea")

        everything = client.get("/inventory").json()
        rice = client.get("/inventory", params={"q": "rice"}).json()
        in_stock = client.get("/inventory", params={"q": "rice", "in_stock_only": True}).json()
        second_distributor = client.get("/inventory", params={"distributor_id": 2}).json()
        paged = client.get("/inventory", params={"limit": 1, "offset": 1}).json()

        assert everything["paging"]["total"] == 3
        assert {item["product_name"] for item in rice["items"]} == {"Basmati Rice", "Brown Rice"}
        assert [item["product_name"] for item in in_stock["items"]] == ["Basmati Rice"]
        assert [item["product_name"] for item in second_distributor["items"]] == ["Black Tea"]
        assert paged["paging"] == {"total": 3, "limit": 1, "offset": 1, "returned": 1}

    def test_inactive_hidden_unless_requested(self, client):
        product_id = create_product(client)
        client.delete(f"/inventory/{product_id}", headers=bearer(client, "distributor", 1))

        assert client.get("/inventory").json()["items"] == []
        shown = client.get("/inventory", params={"include_inactive": True}).json()["items"]
        assert [item["is_active"] for item in shown] == [False]

    def test_limit_is_bounded(self, client):
        response = client.get("/inventory", params={"limit": 500})
        assert response.status_code == 400


class TestProductManagement:
    def test_add_and_get(self, client):
        product_id = create_product(client, price=12.5, quantity=7, name="  Rice  ")

        body = client.get(f"/inventory/{product_id}").json()

        assert body["product_name"] == "Rice"
        assert body["price"] == 12.5
        assert body["quantity"] == 7
        assert body["distributor_id"] == 1

    def test_shopkeeper_cannot_add(self, client):
        response = client.post(
            "/inventory",
            json={"product_name": "Rice", "price": 1, "quantity": 1},
            headers=bearer(client, "shopkeeper", 10),
        )
        assert response.status_code == 401

    def test_blank_name_rejected(self, client):
        response = client.post(
            "/inventory",
            json={"product_name": "   ", "price": 1, "quantity": 1},
            headers=bearer(client, "distributor", 1),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_request"

    def test_restock(self, client):
        product_id = create_product(client, quantity=2)

        response = client.post(
            f"/inventory/{product_id}/restock", json={"amount": 5}, headers=bearer(client, "distributor", 1)
        )

        assert response.json()["quantity"] == 7
        assert client.get(f"/inventory/{product_id}").json()["quantity"] == 7

    def test_restock_other_distributors_product(self, client):
        product_id = create_product(client)

        response = client.post(
            f"/inventory/{product_id}/restock", json={"amount": 5}, headers=bearer(client, "distributor", 2)
        )

        assert response.status_code == 404
        assert response.json()["error"] == "not_found_or_not_owned"

    def test_missing_product(self, client):
        response = client.get("/inventory/404")
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "not_found"}


class TestRemoval:
    def test_hard_delete_clears_cart_lines(self, client):
        product_id = create_product(client)
        shopper = bearer(client, "shopkeeper", 10)
        client.post("/cart/items", json={"product_id": product_id}, headers=shopper)

        response = client.delete(
            f"/inventory/{product_id}", params={"hard": True}, headers=bearer(client, "distributor", 1)
        )

        assert response.json() == {"product_id": product_id, "action": "hard_deleted"}
        assert client.get(f"/inventory/{product_id}").status_code == 404
        assert client.get("/cart", headers=shopper).json()["items"] == []

    def test_hard_delete_refused_when_ordered(self, client):
        product_id = create_product(client)
        shopper = bearer(client, "shopkeeper", 10)
        client.post("/cart/items", json={"product_id": product_id}, headers=shopper)
        client.post("/orders", headers=shopper)

        response = client.delete(
            f"/inventory/{product_id}", params={"hard": True}, headers=bearer(client, "distributor", 1)
        )

        assert response.status_code == 409
        assert response.json()["error"] == "has_references"
        assert response.json()["order_items"] == 1

    def test_soft_delete(self, client):
        product_id = create_product(client)

        response = client.delete(f"/inventory/{product_id}", headers=bearer(client, "distributor", 1))

        assert response.json()["action"] == "soft_deleted"
        assert client.get(f"/inventory/{product_id}").json()["is_active"] is False
