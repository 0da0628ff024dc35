"""Integration tests for cart, checkout and order endpoints via TestClient."""

import pytest
from storefront.config import StorefrontSettings, set_settings

CUSTOMER_ID = "cust-001"


@pytest.fixture()
def cart(client):
    response = client.post("/carts", json={"customer_id": CUSTOMER_ID})
    assert response.status_code == 201
    return response.json()["cart_id"]


def _place(client, address_id, payment_method="paystack", **extra):
    return client.post(
        "/orders",
        json={
            "customer_id": CUSTOMER_ID,
            "customer_email": "wanjiru@example.com",
            "address_id": address_id,
            "payment_method": payment_method,
            **extra,
        },
    )


class TestCartEndpoints:
    def test_add_and_view_cart(self, client, cart, variant):
        response = client.post(
            f"/carts/{cart}/items",
            json={"product_id": variant["product_id"], "variant_id": variant["variant_id"], "quantity": 2},
        )
        assert response.status_code == 200

        body = client.get(f"/carts/{cart}").json()
        assert body["cart_id"] == cart
        assert body["items"][0]["variant_options"] == {"Size": "M"}
        assert body["items"][0]["quantity"] == 2
        assert body["subtotal"] == 3000.0

    def test_adding_more_than_stock_is_a_conflict(self, client, cart, product_id):
        response = client.post(f"/carts/{cart}/items", json={"product_id": product_id, "quantity": 9})

        assert response.status_code == 409
        assert "items" in response.json()["error"]

    def test_update_and_remove_item(self, client, cart, product_id):
        item_id = client.post(f"/carts/{cart}/items", json={"product_id": product_id}).json()["item_id"]

        assert client.put(f"/carts/{cart}/items/{item_id}", json={"quantity": 3}).status_code == 200
        assert client.get(f"/carts/{cart}").json()["items"][0]["quantity"] == 3

        assert client.delete(f"/carts/{cart}/items/{item_id}").status_code == 200
        assert client.get(f"/carts/{cart}").json()["items"] == []

    def test_negative_quantity_is_rejected_by_schema(self, client, cart, product_id):
        item_id = client.post(f"/carts/{cart}/items", json={"product_id": product_id}).json()["item_id"]

        assert client.put(f"/carts/{cart}/items/{item_id}", json={"quantity": -1}).status_code == 422

    def test_clear_cart(self, client, cart, product_id):
        client.post(f"/carts/{cart}/items", json={"product_id": product_id})

        assert client.delete(f"/carts/{cart}/items").status_code == 200
        assert client.get(f"/carts/{cart}").json()["items"] == []

    def test_unknown_cart(self, client):
        assert client.get("/carts/no-such-cart").status_code == 404


class TestPlaceOrderEndpoint:
    def test_place_and_fetch_order(self, client, cart, product_id, address_id):
        client.post(f"/carts/{cart}/items", json={"product_id": product_id})

        response = _place(client, address_id)
        assert response.status_code == 201
        order_number = response.json()["order_number"]

        detail = client.get(f"/orders/{order_number}", params={"customer_id": CUSTOMER_ID}).json()
        order = detail["order"]
        assert order["orderId"] == order_number
        assert order["userId"] == CUSTOMER_ID
        assert order["pricing"] == {
            "subtotal": 1000.0,
            "shipping": 200.0,
            "tax": 160.0,
            "discount": 0.0,
            "total": 1360.0,
        }
        assert order["payment"]["status"] == "pending"
        assert order["shippingDetails"]["address"] == "12 Parklands Road, Westlands"
        assert [stage["status"] for stage in detail["timeline"]] == ["current", "upcoming", "upcoming", "upcoming"]
        assert detail["timeline"][0]["title"] == "Order Placed"

    def test_empty_cart_is_a_bad_request(self, client, cart, address_id):
        response = _place(client, address_id)

        assert response.status_code == 400

    def test_out_of_stock_is_a_conflict(self, client, cart, product_id, address_id):
        client.post(f"/carts/{cart}/items", json={"product_id": product_id, "quantity": 5})
        client.post(f"/admin/products/{product_id}/stock", json={"quantity_change": -4})

        response = _place(client, address_id)

        assert response.status_code == 409
        assert response.json()["error"]["items"] == ["Linen Shirt: requested 5, only 1 available"]

    def test_unknown_voucher_is_not_found(self, client, cart, product_id, address_id):
        client.post(f"/carts/{cart}/items", json={"product_id": product_id})

        response = _place(client, address_id, voucher_code="NOPE")

        assert response.status_code == 404
        assert response.json()["error"] == {"voucher_code": ["Voucher NOPE not found"]}

    def test_invalid_payment_method(self, client, cart, address_id):
        assert _place(client, address_id, payment_method="barter").status_code == 422

    def test_inline_new_address(self, client, cart, product_id, location):
        client.post(f"/carts/{cart}/items", json={"product_id": product_id})

        response = _place(
            client,
            None,
            new_address={
                "recipient_name": "Otieno Ochieng",
                "phone": "+254711000002",
                "street_address": "4 Moi Avenue",
                "country_id": location["country_id"],
                "county_id": location["county_id"],
                "city_id": location["city_id"],
            },
        )

        assert response.status_code == 201
        addresses = client.get(f"/customers/{CUSTOMER_ID}/addresses").json()
        assert [a["street_address"] for a in addresses] == ["4 Moi Avenue"]
        assert addresses[0]["is_default"] is True


class TestOrderEndpoints:
    @pytest.fixture()
    def order_number(self, client, cart, product_id, address_id):
        client.post(f"/carts/{cart}/items", json={"product_id": product_id})
        return _place(client, address_id).json()["order_number"]

    def test_other_customers_cannot_view(self, client, order_number):
        response = client.get(f"/orders/{order_number}", params={"customer_id": "cust-999"})

        assert response.status_code == 403

    def test_unknown_order(self, client):
        assert client.get("/orders/ORD-0000000000").status_code == 404

    def test_order_history(self, client, order_number):
        orders = client.get("/orders", params={"customer_id": CUSTOMER_ID}).json()

        assert [o["order_number"] for o in orders] == [order_number]
        assert orders[0]["status"] == "Pending"
        assert orders[0]["total"] == 1360.0

    def test_initialize_payment(self, client, gateway, order_number):
        response = client.post(f"/orders/{order_number}/payment/initialize")

        assert response.status_code == 200
        assert response.json()["reference"] == order_number
        assert gateway.calls[0]["amount"] == 136000

    def test_gateway_failure_is_bad_gateway(self, client, gateway, order_number):
        gateway.configure(should_succeed=False)

        response = client.post(f"/orders/{order_number}/payment/initialize")

        assert response.status_code == 502
        assert response.json() == {"error": {"payment": ["Declined"]}}

    def test_verify_payment(self, client, gateway, order_number):
        response = client.post(f"/orders/{order_number}/payment/verify", json={"reference": "ref-9"})

        assert response.json() == {"order_number": order_number, "status": "completed", "attempts": None, "message": None}
        detail = client.get(f"/orders/{order_number}").json()
        assert detail["order"]["payment"]["transactionId"] == "ref-9"
        assert [stage["status"] for stage in detail["timeline"]][:2] == ["completed", "current"]

    def test_payment_status_without_waiting(self, client, order_number):
        body = client.get(f"/orders/{order_number}/payment/status").json()

        assert body["status"] == "pending"
        assert body["attempts"] is None

    def test_payment_status_wait_times_out_as_processing(self, client, order_number):
        set_settings(StorefrontSettings(payment_poll_attempts=2, payment_poll_interval=0.0))

        body = client.get(f"/orders/{order_number}/payment/status", params={"wait": True}).json()

        assert body["status"] == "processing"
        assert body["attempts"] == 2
        assert "still processing" in body["message"]

    def test_retry_after_failure(self, client, order_number):
        client.put(f"/admin/orders/{order_number}/payment", json={"status": "failed", "reason": "Declined"})

        assert client.post(f"/orders/{order_number}/payment/retry").status_code == 200
        assert client.get(f"/orders/{order_number}").json()["order"]["payment"]["status"] == "pending"

    def test_retry_without_failure_is_a_bad_request(self, client, order_number):
        assert client.post(f"/orders/{order_number}/payment/retry").status_code == 400

    def test_customer_cancels(self, client, order_number):
        response = client.post(f"/orders/{order_number}/cancel", json={"customer_id": CUSTOMER_ID})

        assert response.status_code == 200
        last_stage = client.get(f"/orders/{order_number}").json()["timeline"][-1]
        assert last_stage["key"] == "cancelled"
        assert last_stage["status"] == "current"

    def test_customer_cannot_cancel_another_customers_order(self, client, order_number):
        response = client.post(f"/orders/{order_number}/cancel", json={"customer_id": "cust-999"})

        assert response.status_code == 403

    def test_admin_status_progression(self, client, order_number):
        for status in ("Processing", "In transit"):
            assert client.put(f"/admin/orders/{order_number}/status", json={"status": status}).status_code == 200

        detail = client.get(f"/orders/{order_number}").json()
        assert detail["order"]["status"] == "In transit"
        assert [s["status"] for s in detail["timeline"]] == ["completed", "completed", "current", "upcoming"]

    def test_admin_invalid_transition(self, client, order_number):
        response = client.put(f"/admin/orders/{order_number}/status", json={"status": "Delivered"})

        assert response.status_code == 400
