"""Integration tests for admin, location, voucher and address endpoints."""

import pytest

CUSTOMER_ID = "cust-001"


def _new_address(location, **overrides):
    body = {
        "recipient_name": "Wanjiru Kamau",
        "phone": "+254700000001",
        "street_address": "12 Parklands Road",
        "country_id": location["country_id"],
        "county_id": location["county_id"],
        "city_id": location["city_id"],
    }
    body.update(overrides)
    return body


class TestCatalogueAdmin:
    def test_create_product_with_variant(self, client):
        product = client.post("/admin/products", json={"name": "Kikoi", "slug": "kikoi", "price": 800.0, "stock": 3})
        assert product.status_code == 201
        product_id = product.json()["id"]

        variant = client.post(
            f"/admin/products/{product_id}/variants",
            json={"price": 850.0, "stock": 2, "options": {"Colour": "Red"}, "sku": "KIK-RED"},
        )
        assert variant.status_code == 201

        cart_id = client.post("/carts", json={"customer_id": CUSTOMER_ID}).json()["cart_id"]
        client.post(
            f"/carts/{cart_id}/items",
            json={"product_id": product_id, "variant_id": variant.json()["id"]},
        )
        item = client.get(f"/carts/{cart_id}").json()["items"][0]
        assert item["unit_price"] == 850.0
        assert item["variant_options"] == {"Colour": "Red"}

    def test_stock_cannot_go_negative(self, client, product_id):
        response = client.post(f"/admin/products/{product_id}/stock", json={"quantity_change": -50})

        assert response.status_code == 400


class TestLocations:
    def test_browse_locations(self, client, location):
        countries = client.get("/locations/countries").json()
        assert [c["name"] for c in countries] == ["Kenya"]

        counties = client.get(f"/locations/countries/{location['country_id']}/counties").json()
        assert [c["name"] for c in counties] == ["Nairobi"]

        cities = client.get(f"/locations/counties/{location['county_id']}/cities").json()
        assert {c["name"]: c["delivery_fee"] for c in cities} == {"CBD Pickup": 0.0, "Westlands": 200.0}

    def test_inactive_cities_are_hidden(self, client, location):
        client.put(f"/admin/locations/cities/{location['pickup_city_id']}", json={"is_active": False})

        cities = client.get(f"/locations/counties/{location['county_id']}/cities").json()

        assert [c["name"] for c in cities] == ["Westlands"]

    def test_create_location_hierarchy(self, client):
        country_id = client.post("/admin/locations/countries", json={"name": "Uganda", "code": "UG"}).json()["id"]
        county_id = client.post(
            "/admin/locations/counties", json={"country_id": country_id, "name": "Kampala"}
        ).json()["id"]

        response = client.post(
            "/admin/locations/cities", json={"county_id": county_id, "name": "Nakasero", "delivery_fee": 350.0}
        )

        assert response.status_code == 201

    def test_duplicate_city_is_a_conflict(self, client, location):
        response = client.post(
            "/admin/locations/cities", json={"county_id": location["county_id"], "name": "Westlands"}
        )

        assert response.status_code == 409


class TestVoucherEndpoints:
    def test_create_and_check_voucher(self, client):
        response = client.post(
            "/admin/vouchers", json={"code": "karibu", "discount_type": "percentage", "discount_value": 15}
        )
        assert response.status_code == 201

        assert client.get("/vouchers/KARIBU").json() == {
            "code": "KARIBU",
            "discount_type": "percentage",
            "discount_value": 15.0,
        }

    def test_deactivated_voucher_is_rejected(self, client):
        voucher_id = client.post(
            "/admin/vouchers", json={"code": "OLD", "discount_type": "fixed", "discount_value": 100}
        ).json()["id"]

        client.put(f"/admin/vouchers/{voucher_id}", json={"is_active": False})

        assert client.get("/vouchers/OLD").status_code == 400

    def test_unknown_voucher_is_not_found(self, client):
        response = client.get("/vouchers/NOPE")

        assert response.status_code == 404
        assert response.json() == {"error": {"voucher_code": ["Voucher NOPE not found"]}}

    def test_clearing_expiry_revives_voucher(self, client):
        voucher_id = client.post(
            "/admin/vouchers",
            json={
                "code": "LAPSED",
                "discount_type": "fixed",
                "discount_value": 50,
                "expires_at": "2020-01-01T00:00:00Z",
            },
        ).json()["id"]
        assert client.get("/vouchers/LAPSED").status_code == 400

        client.put(f"/admin/vouchers/{voucher_id}", json={"discount_value": 60})
        assert client.get("/vouchers/LAPSED").status_code == 400

        client.put(f"/admin/vouchers/{voucher_id}", json={"clear_expiry": True})
        assert client.get("/vouchers/LAPSED").json()["discount_value"] == 60.0

    def test_duplicate_code_is_a_conflict(self, client):
        body = {"code": "TWICE", "discount_type": "fixed", "discount_value": 10}
        client.post("/admin/vouchers", json=body)

        assert client.post("/admin/vouchers", json=body).status_code == 409

    def test_delete_voucher(self, client):
        voucher_id = client.post(
            "/admin/vouchers", json={"code": "BYE", "discount_type": "fixed", "discount_value": 10}
        ).json()["id"]

        assert client.delete(f"/admin/vouchers/{voucher_id}").status_code == 200
        assert client.get("/vouchers/BYE").status_code == 404


class TestAddressEndpoints:
    def test_address_book_lifecycle(self, client, location):
        base = f"/customers/{CUSTOMER_ID}/addresses"
        first = client.post(base, json=_new_address(location)).json()["address_id"]
        second = client.post(base, json=_new_address(location, street_address="4 Moi Avenue")).json()["address_id"]

        client.put(f"{base}/{second}", json={"is_default": True})
        listed = client.get(base).json()
        assert [a["address_id"] for a in listed] == [second, first]
        assert [a["is_default"] for a in listed] == [True, False]

        client.delete(f"{base}/{second}")
        listed = client.get(base).json()
        assert [(a["address_id"], a["is_default"]) for a in listed] == [(first, True)]

    def test_other_customers_address_is_forbidden(self, client, location):
        address_id = client.post(
            "/customers/cust-002/addresses", json=_new_address(location)
        ).json()["address_id"]

        response = client.delete(f"/customers/{CUSTOMER_ID}/addresses/{address_id}")

        assert response.status_code == 403

    def test_unknown_address(self, client):
        assert client.delete(f"/customers/{CUSTOMER_ID}/addresses/missing").status_code == 404


class TestAdminReads:
    @pytest.fixture()
    def order_number(self, product_id, add_to_cart, place_order):
        add_to_cart(product_id)
        return place_order()

    def test_orders_filtered_by_status(self, client, order_number):
        listed = client.get("/admin/orders").json()
        assert [(o["order_number"], o["customer_id"], o["status"]) for o in listed] == [
            (order_number, CUSTOMER_ID, "Pending")
        ]
        assert client.get("/admin/orders", params={"status": "Shipped"}).json() == []

        client.put(f"/admin/orders/{order_number}/status", json={"status": "Cancelled"})

        assert [o["order_number"] for o in client.get("/admin/orders", params={"status": "Cancelled"}).json()] == [
            order_number
        ]
        assert len(client.get("/admin/orders", params={"status": "all"}).json()) == 1

    def test_vouchers_are_listed(self, client):
        client.post("/admin/vouchers", json={"code": "KARIBU", "discount_type": "percentage", "discount_value": 15})
        voucher_id = client.post(
            "/admin/vouchers", json={"code": "OLD", "discount_type": "fixed", "discount_value": 100}
        ).json()["id"]
        client.put(f"/admin/vouchers/{voucher_id}", json={"is_active": False})

        listed = {v["code"]: v for v in client.get("/admin/vouchers").json()}

        assert set(listed) == {"KARIBU", "OLD"}
        assert listed["KARIBU"]["is_active"] is True
        assert listed["OLD"]["is_active"] is False
        assert listed["OLD"]["discount_value"] == 100.0

    def test_analytics_counts_paid_orders(self, client, order_number):
        client.put(
            f"/admin/orders/{order_number}/payment",
            json={"status": "completed", "transaction_reference": "ref-1"},
        )

        body = client.get("/admin/analytics", params={"days": 7}).json()

        assert body["total_revenue"] == 1360.0
        assert body["total_sales"] == 1
        assert body["orders_placed"] == 1
        assert body["orders_cancelled"] == 0
        assert body["active_products"] == 1
        assert [(d["orders_paid"], d["revenue"]) for d in body["revenue_over_time"]] == [(1, 1360.0)]
        assert [o["order_number"] for o in body["recent_orders"]] == [order_number]

    def test_analytics_without_sales(self, client):
        body = client.get("/admin/analytics").json()

        assert body["total_revenue"] == 0.0
        assert body["revenue_over_time"] == []
        assert body["recent_orders"] == []

    @pytest.mark.parametrize("days", [0, 91])
    def test_analytics_window_is_bounded(self, client, days):
        response = client.get("/admin/analytics", params={"days": days})

        assert response.status_code == 400
        assert "days" in response.json()["error"]
