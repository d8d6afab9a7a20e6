"""Integration tests for Cart API endpoints via TestClient."""

import pytest
from fastapi.testclient import TestClient


@pytest.fixture()
def client(catalogue, address_book, gateway):
    from app import app

    return TestClient(app)


ASHA = {"X-Customer-Id": "cust-asha"}
RAVI = {"X-Customer-Id": "cust-ravi"}


class TestCartApi:
    def test_empty_cart(self, client):
        response = client.get("/cart", headers=ASHA)
        assert response.status_code == 200
        assert response.json() == {"customer_id": "cust-asha", "lines": [], "referral_code": None}

    def test_requires_identity(self, client):
        response = client.get("/cart")
        assert response.status_code == 403
        assert response.json()["error"] == "AuthError"

    def test_add_update_remove(self, client):
        response = client.post("/cart/items", json={"item_ref": "kurta", "quantity": 2, "size": "M"}, headers=ASHA)
        assert response.status_code == 200
        assert response.json()["lines"] == [{"item_ref": "kurta", "quantity": 2, "size": "M"}]

        response = client.put("/cart/items/kurta", json={"quantity": 5, "size": "L"}, headers=ASHA)
        assert response.json()["lines"] == [{"item_ref": "kurta", "quantity": 5, "size": "L"}]

        response = client.delete("/cart/items/kurta", headers=ASHA)
        assert response.json()["lines"] == []

    def test_unknown_item_is_404(self, client):
        response = client.post("/cart/items", json={"item_ref": "ghost"}, headers=ASHA)
        assert response.status_code == 404
        assert "item_ref" in response.json()["messages"]

    def test_total_with_referral_and_out_of_stock(self, client):
        client.post("/accounts", json={"username": "Ravi"}, headers=RAVI)
        code = client.post("/accounts/me/affiliate", headers=RAVI).json()["referral_code"]
        client.post("/cart/items", json={"item_ref": "kurta"}, headers=ASHA)
        client.post("/cart/items", json={"item_ref": "dupatta"}, headers=ASHA)

        response = client.get("/cart/total", params={"referral_code": code}, headers=ASHA)

        assert response.status_code == 200
        body = response.json()
        assert body["total_amount"] == 1000
        assert body["discount"] == 100
        assert body["payable_amount"] == 900
        assert [item["item_ref"] for item in body["items"]] == ["kurta"]

    def test_invalid_referral_code_is_400(self, client):
        client.post("/cart/items", json={"item_ref": "kurta"}, headers=ASHA)
        response = client.post("/cart/referral", json={"referral_code": "ghost0000"}, headers=ASHA)
        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"


class TestCheckoutApi:
    def test_checkout_creates_order(self, client, gateway):
        client.post("/cart/items", json={"item_ref": "saree"}, headers=ASHA)

        response = client.post(
            "/cart/checkout", json={"address_id": "addr-asha", "payment_method": "UPI"}, headers=ASHA
        )

        assert response.status_code == 201
        body = response.json()
        assert body["payment_status"] == "Pending"
        assert body["fulfillment_status"] == "Pending"
        assert body["payable_amount"] == 2500
        assert body["gateway_order_id"].startswith("order_fake")
        assert client.get("/cart", headers=ASHA).json()["lines"] == []

    def test_foreign_address_is_400(self, client):
        client.post("/cart/items", json={"item_ref": "saree"}, headers=ASHA)
        response = client.post(
            "/cart/checkout", json={"address_id": "addr-ravi", "payment_method": "UPI"}, headers=ASHA
        )
        assert response.status_code == 400

    def test_unsupported_payment_method_is_400(self, client):
        client.post("/cart/items", json={"item_ref": "saree"}, headers=ASHA)
        response = client.post(
            "/cart/checkout", json={"address_id": "addr-asha", "payment_method": "Barter"}, headers=ASHA
        )
        assert response.status_code == 400

    def test_gateway_failure_is_502(self, client, gateway):
        gateway.configure(should_succeed=False, failure_reason="Gateway down")
        client.post("/cart/items", json={"item_ref": "saree"}, headers=ASHA)

        response = client.post(
            "/cart/checkout", json={"address_id": "addr-asha", "payment_method": "UPI"}, headers=ASHA
        )

        assert response.status_code == 502
        assert response.json()["messages"] == {"gateway": ["Gateway down"]}
        assert len(client.get("/cart", headers=ASHA).json()["lines"]) == 1
