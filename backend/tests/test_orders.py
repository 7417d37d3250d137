"""
Tests for the order lifecycle endpoints.
"""

from unittest.mock import patch

import pytest

from rest_api.models import Customer


def second_restaurant_headers(client, owner_headers) -> dict[str, str]:
    """Owner headers scoped to a freshly created second restaurant."""
    setup = client.post("/api/restaurant/setup", json={"name": "Second Kitchen"}, headers=owner_headers)
    assert setup.status_code == 201, setup.json()

    # New restaurants reach the token claims after a fresh login
    login = client.post("/api/auth/login", json={"email": "owner@demo.com", "password": "owner123"})
    client.cookies.clear()
    return {
        "Authorization": f"Bearer {login.json()['access_token']}",
        "x-restaurant-id": str(setup.json()["id"]),
    }


class TestCreateOrder:
    def test_prices_are_snapshotted_from_catalog(self, client, create_order, demo_products):
        order = create_order()

        assert order["status"] == "PLACED"
        assert order["source"] == "MANUAL"
        assert order["payment_status"] == "PENDING"
        assert order["order_number"].startswith("#ORD-")
        # 1 x 240.00 + 2 x (260.00 - 10%)
        assert order["total_cents"] == 24000 + 2 * 23400
        lines = {i["name_snapshot"]: i for i in order["items"]}
        assert lines["Chicken 65"]["price_snapshot_cents"] == 23400
        assert lines["Chicken 65"]["line_total_cents"] == 46800
        assert all(i["status"] == "PENDING" for i in order["items"])

    def test_order_number_format(self, create_order):
        number = create_order()["order_number"]
        assert len(number) == len("#ORD-K733")
        assert number[-1] == number[-2]

    def test_dine_in_requires_table(self, client, manager_headers, demo_products):
        response = client.post(
            "/api/orders",
            json={"order_type": "DINE_IN", "items": [{"product_id": demo_products[0].id, "quantity": 1}]},
            headers=manager_headers,
        )
        assert response.status_code == 400

    def test_takeaway_without_customer(self, client, waiter_headers, demo_products):
        response = client.post(
            "/api/orders",
            json={"order_type": "TAKEAWAY", "items": [{"product_id": demo_products[0].id, "quantity": 1}]},
            headers=waiter_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["customer_name"] == "Guest"
        assert data["customer_phone"] == "N/A"
        assert data["customer_id"] is None

    def test_unavailable_product(self, client, seeded, manager_headers, demo_products):
        demo_products[0].is_available = False
        seeded.commit()

        response = client.post(
            "/api/orders",
            json={"order_type": "TAKEAWAY", "items": [{"product_id": demo_products[0].id, "quantity": 1}]},
            headers=manager_headers,
        )
        assert response.status_code == 400
        assert "Paneer Tikka" in response.json()["error"]["message"]

    def test_quantity_must_be_positive(self, client, manager_headers, demo_products):
        response = client.post(
            "/api/orders",
            json={"order_type": "TAKEAWAY", "items": [{"product_id": demo_products[0].id, "quantity": 0}]},
            headers=manager_headers,
        )
        assert response.status_code == 422

    def test_customer_is_upserted_by_phone(self, client, seeded, create_order):
        first = create_order()
        second = create_order(customer_name="Ravi K")

        assert first["customer_id"] == second["customer_id"]
        customer = seeded.get(Customer, first["customer_id"])
        assert customer.name == "Ravi K"


class TestListOrders:
    def test_status_filter_is_case_insensitive(self, client, manager_headers, create_order):
        create_order()

        response = client.get("/api/orders", params={"status": "placed"}, headers=manager_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["pagination"]["total"] == 1
        assert data["orders"][0]["status"] == "PLACED"

    def test_unknown_status(self, client, manager_headers):
        response = client.get("/api/orders", params={"status": "LOST"}, headers=manager_headers)
        assert response.status_code == 400

    def test_collection_and_static_paths(self, client, manager_headers, create_order):
        order = create_order()

        response = client.get("/api/orders", headers=manager_headers)
        assert response.status_code == 200
        assert [o["id"] for o in response.json()["orders"]] == [order["id"]]

        response = client.get("/api/orders/stats", headers=manager_headers)
        assert response.status_code == 200

        response = client.get(f"/api/orders/{order['id']}", headers=manager_headers)
        assert response.status_code == 200
        assert response.json()["order_number"] == order["order_number"]

    def test_orders_are_scoped_to_restaurant(self, client, owner_headers, create_order):
        order = create_order()
        headers = second_restaurant_headers(client, owner_headers)

        response = client.get("/api/orders", headers=headers)
        assert response.json()["pagination"]["total"] == 0

        response = client.get(f"/api/orders/{order['id']}", headers=headers)
        assert response.status_code == 403


class TestStatusTransitions:
    def test_status_change_stamps_timestamp(self, client, manager_headers, create_order):
        order = create_order()

        response = client.patch(
            f"/api/orders/{order['id']}/status",
            json={"status": "PREPARING"},
            headers=manager_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "PREPARING"
        assert response.json()["preparing_at"] is not None

    def test_served_marks_every_item(self, client, manager_headers, create_order):
        order = create_order()

        response = client.patch(f"/api/orders/{order['id']}/status", json={"status": "SERVED"}, headers=manager_headers)
        assert all(i["status"] == "SERVED" for i in response.json()["items"])

    def test_complete_requires_served_items(self, client, manager_headers, create_order):
        order = create_order()

        response = client.patch(f"/api/orders/{order['id']}/status", json={"status": "COMPLETED"}, headers=manager_headers)
        assert response.status_code == 400
        assert "items not served" in response.json()["error"]["message"]

    def test_complete_rolls_into_customer_stats(self, client, seeded, manager_headers, create_order):
        order = create_order()
        client.patch(f"/api/orders/{order['id']}/status", json={"status": "SERVED"}, headers=manager_headers)

        response = client.patch(f"/api/orders/{order['id']}/status", json={"status": "COMPLETED"}, headers=manager_headers)
        assert response.status_code == 200

        customer = seeded.get(Customer, order["customer_id"])
        seeded.refresh(customer)
        assert customer.total_orders == 1
        assert customer.total_spent_cents == order["total_cents"]

    def test_cancel_requires_reason(self, client, manager_headers, create_order):
        order = create_order()

        response = client.patch(f"/api/orders/{order['id']}/status", json={"status": "CANCELLED"}, headers=manager_headers)
        assert response.status_code == 400

        response = client.patch(
            f"/api/orders/{order['id']}/status",
            json={"status": "CANCELLED", "cancel_reason": "Customer left"},
            headers=manager_headers,
        )
        assert response.status_code == 200
        assert response.json()["cancel_reason"] == "Customer left"

    @pytest.mark.parametrize("final_status", ["CANCELLED", "COMPLETED"])
    def test_final_orders_are_immutable(self, client, manager_headers, create_order, final_status):
        order = create_order()
        if final_status == "COMPLETED":
            client.patch(f"/api/orders/{order['id']}/payment", json={"payment_method": "CASH"}, headers=manager_headers)
        else:
            client.patch(
                f"/api/orders/{order['id']}/status",
                json={"status": "CANCELLED", "cancel_reason": "Test"},
                headers=manager_headers,
            )

        response = client.patch(f"/api/orders/{order['id']}/status", json={"status": "PREPARING"}, headers=manager_headers)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_STATE"


class TestItems:
    def test_add_items_reopens_ready_order(self, client, manager_headers, create_order, demo_products):
        order = create_order()
        client.patch(f"/api/orders/{order['id']}/status", json={"status": "READY"}, headers=manager_headers)

        response = client.post(
            f"/api/orders/{order['id']}/items",
            json={"items": [{"product_id": demo_products[2].id, "quantity": 1}]},
            headers=manager_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "PREPARING"
        assert len(data["items"]) == 3
        assert data["items"][-1]["status"] == "REORDER"
        assert data["total_cents"] == order["total_cents"] + 18000

    def test_update_item_quantity_recomputes_total(self, client, manager_headers, create_order):
        order = create_order()
        item = order["items"][0]

        response = client.patch(
            f"/api/orders/{order['id']}/items/{item['id']}",
            json={"quantity": 3},
            headers=manager_headers,
        )
        assert response.status_code == 200
        assert response.json()["total_cents"] == order["total_cents"] + 2 * item["price_snapshot_cents"]

    def test_served_item_cannot_go_back(self, client, manager_headers, create_order):
        order = create_order()
        item = order["items"][0]
        client.patch(f"/api/orders/{order['id']}/items/{item['id']}", json={"status": "SERVED"}, headers=manager_headers)

        response = client.patch(
            f"/api/orders/{order['id']}/items/{item['id']}",
            json={"status": "PENDING"},
            headers=manager_headers,
        )
        assert response.status_code == 400

    def test_remove_item(self, client, manager_headers, create_order):
        order = create_order()
        item = order["items"][0]

        response = client.delete(f"/api/orders/{order['id']}/items/{item['id']}", headers=manager_headers)
        assert response.status_code == 200
        assert len(response.json()["items"]) == 1
        assert response.json()["total_cents"] == order["total_cents"] - item["line_total_cents"]

    def test_last_item_cannot_be_removed(self, client, manager_headers, create_order, demo_products):
        order = create_order(items=[{"product_id": demo_products[0].id, "quantity": 1}])

        response = client.delete(
            f"/api/orders/{order['id']}/items/{order['items'][0]['id']}",
            headers=manager_headers,
        )
        assert response.status_code == 400

    def test_unknown_item(self, client, manager_headers, create_order):
        order = create_order()
        response = client.delete(f"/api/orders/{order['id']}/items/99999", headers=manager_headers)
        assert response.status_code == 404


class TestQROrders:
    def test_accept_confirms_and_publishes(self, client, waiter_headers, place_public_order, demo_restaurant):
        order = place_public_order()

        with patch("rest_api.services.domain.order_service.publish_order_event") as publish:
            response = client.post(f"/api/orders/{order['id']}/accept", headers=waiter_headers)

        assert response.status_code == 200
        assert response.json()["status"] == "CONFIRMED"
        assert response.json()["confirmed_at"] is not None
        restaurant_id, event_type, payload = publish.call_args.args
        assert restaurant_id == demo_restaurant.id
        assert event_type == "qr_order_accepted"
        assert payload["order_id"] == order["id"]

    def test_reject_with_default_reason(self, client, waiter_headers, place_public_order):
        order = place_public_order()

        response = client.post(f"/api/orders/{order['id']}/reject", headers=waiter_headers)
        assert response.status_code == 200
        assert response.json()["status"] == "CANCELLED"
        assert response.json()["cancel_reason"] == "Rejected by restaurant"

    def test_reject_with_reason(self, client, waiter_headers, place_public_order):
        order = place_public_order()

        response = client.post(
            f"/api/orders/{order['id']}/reject",
            json={"reason": "Kitchen closed"},
            headers=waiter_headers,
        )
        assert response.json()["cancel_reason"] == "Kitchen closed"

    def test_only_pending_orders_can_be_accepted(self, client, waiter_headers, place_public_order):
        order = place_public_order()
        client.post(f"/api/orders/{order['id']}/accept", headers=waiter_headers)

        response = client.post(f"/api/orders/{order['id']}/accept", headers=waiter_headers)
        assert response.status_code == 400

    def test_manual_orders_cannot_be_accepted(self, client, manager_headers, create_order):
        order = create_order()
        response = client.post(f"/api/orders/{order['id']}/accept", headers=manager_headers)
        assert response.status_code == 400

    @pytest.mark.parametrize("action", ["accept", "reject"])
    def test_other_restaurant_cannot_decide(self, client, owner_headers, place_public_order, action):
        order = place_public_order()
        headers = second_restaurant_headers(client, owner_headers)

        with patch("rest_api.services.domain.order_service.publish_order_event") as publish:
            response = client.post(f"/api/orders/{order['id']}/{action}", headers=headers)

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"
        publish.assert_not_called()

    def test_unknown_order(self, client, waiter_headers):
        response = client.post("/api/orders/999999/accept", headers=waiter_headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


class TestPayment:
    def test_cash_payment_completes_order(self, client, manager_headers, create_order):
        order = create_order()

        response = client.patch(
            f"/api/orders/{order['id']}/payment",
            json={"payment_method": "CASH"},
            headers=manager_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "COMPLETED"
        assert data["payment_status"] == "PAID"
        assert data["paid_at"] is not None
        assert all(i["status"] == "SERVED" for i in data["items"])

    def test_credit_adds_to_customer_balance(self, client, seeded, manager_headers, create_order):
        order = create_order()

        response = client.patch(
            f"/api/orders/{order['id']}/payment",
            json={"payment_method": "CREDIT", "payment_status": "PENDING"},
            headers=manager_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "COMPLETED"
        assert response.json()["paid_at"] is None

        customer = seeded.get(Customer, order["customer_id"])
        seeded.refresh(customer)
        assert customer.credit_balance_cents == order["total_cents"]

    def test_switching_off_credit_releases_balance(self, client, seeded, manager_headers, create_order):
        order = create_order()
        client.patch(
            f"/api/orders/{order['id']}/payment",
            json={"payment_method": "CREDIT", "payment_status": "PENDING"},
            headers=manager_headers,
        )
        client.patch(f"/api/orders/{order['id']}/payment", json={"payment_method": "UPI"}, headers=manager_headers)

        customer = seeded.get(Customer, order["customer_id"])
        seeded.refresh(customer)
        assert customer.credit_balance_cents == 0

    def test_credit_needs_customer(self, client, manager_headers, create_order):
        order = create_order(order_type="TAKEAWAY", table_id=None, customer_phone=None)

        response = client.patch(
            f"/api/orders/{order['id']}/payment",
            json={"payment_method": "CREDIT", "payment_status": "PENDING"},
            headers=manager_headers,
        )
        assert response.status_code == 400

    def test_cancelled_order_cannot_be_paid(self, client, manager_headers, create_order):
        order = create_order()
        client.patch(
            f"/api/orders/{order['id']}/status",
            json={"status": "CANCELLED", "cancel_reason": "Test"},
            headers=manager_headers,
        )

        response = client.patch(f"/api/orders/{order['id']}/payment", json={"payment_method": "CASH"}, headers=manager_headers)
        assert response.status_code == 400


class TestDeleteOrder:
    def test_delete_releases_pending_credit(self, client, seeded, manager_headers, create_order):
        order = create_order()
        client.patch(
            f"/api/orders/{order['id']}/payment",
            json={"payment_method": "CREDIT", "payment_status": "PENDING"},
            headers=manager_headers,
        )

        response = client.delete(f"/api/orders/{order['id']}", headers=manager_headers)
        assert response.status_code == 204

        customer = seeded.get(Customer, order["customer_id"])
        seeded.refresh(customer)
        assert customer.credit_balance_cents == 0
        assert client.get(f"/api/orders/{order['id']}", headers=manager_headers).status_code == 404

    def test_waiter_cannot_delete(self, client, waiter_headers, create_order):
        order = create_order()
        response = client.delete(f"/api/orders/{order['id']}", headers=waiter_headers)
        assert response.status_code == 403
