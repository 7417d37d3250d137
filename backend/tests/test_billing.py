"""
Tests for bills, daily reports and credit (udhaar) settlement.
"""

from rest_api.models import AuditLog, Order


def _pay(client, headers, order_id, method="CASH", status="PAID"):
    response = client.patch(
        f"/api/orders/{order_id}/payment",
        json={"payment_method": method, "payment_status": status},
        headers=headers,
    )
    assert response.status_code == 200
    return response.json()


class TestTableBill:
    def test_newest_open_order(self, client, waiter_headers, create_order, demo_tables):
        create_order()
        newest = create_order()

        response = client.get(f"/api/orders/bills/table/{demo_tables[0].id}", headers=waiter_headers)
        assert response.status_code == 200
        assert response.json()["id"] == newest["id"]

    def test_no_open_order(self, client, manager_headers, create_order, demo_tables):
        order = create_order()
        _pay(client, manager_headers, order["id"])

        response = client.get(f"/api/orders/bills/table/{demo_tables[0].id}", headers=manager_headers)
        assert response.status_code == 404


class TestDailyReports:
    def test_today_lists_completed_orders(self, client, manager_headers, create_order):
        paid = create_order()
        create_order()
        _pay(client, manager_headers, paid["id"])

        response = client.get("/api/orders/bills/today", headers=manager_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["total_cents"] == paid["total_cents"]
        assert data["bills"][0]["id"] == paid["id"]

    def test_other_day_is_empty(self, client, manager_headers, create_order):
        _pay(client, manager_headers, create_order()["id"])

        response = client.get("/api/orders/bills/today", params={"date": "2020-01-01"}, headers=manager_headers)
        assert response.json()["count"] == 0

    def test_stats(self, client, manager_headers, create_order, place_public_order):
        paid = create_order()
        _pay(client, manager_headers, paid["id"])
        place_public_order()

        response = client.get("/api/orders/stats", headers=manager_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total_orders"] == 2
        assert data["by_status"]["COMPLETED"] == 1
        assert data["by_status"]["PLACED"] == 1
        assert data["by_status"]["READY"] == 0
        assert data["total_cents"] == paid["total_cents"]


class TestRevenue:
    def test_revenue_uses_cost_snapshots(self, client, seeded, manager_headers, create_order, demo_products):
        order = create_order()
        # Cost changes after the sale must not rewrite history
        demo_products[0].cost_price_cents = 1
        seeded.commit()
        _pay(client, manager_headers, order["id"])

        response = client.get("/api/orders/revenue", headers=manager_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["orders_count"] == 1
        assert data["revenue_cents"] == order["total_cents"]
        assert data["cost_cents"] == 9000 + 2 * 11000
        assert data["profit_cents"] == order["total_cents"] - 31000

    def test_inverted_range(self, client, manager_headers):
        response = client.get(
            "/api/orders/revenue",
            params={"from_date": "2024-02-01", "to_date": "2024-01-01"},
            headers=manager_headers,
        )
        assert response.status_code == 400

    def test_waiter_cannot_see_revenue(self, client, waiter_headers):
        response = client.get("/api/orders/revenue", headers=waiter_headers)
        assert response.status_code == 403


class TestCredit:
    def _credit_order(self, client, headers, create_order, **overrides):
        order = create_order(**overrides)
        _pay(client, headers, order["id"], method="CREDIT", status="PENDING")
        return order

    def test_credit_customers_sorted_by_balance(self, client, manager_headers, create_order, demo_products):
        small = self._credit_order(
            client, manager_headers, create_order,
            customer_phone="9876500002",
            items=[{"product_id": demo_products[6].id, "quantity": 1}],
        )
        big = self._credit_order(client, manager_headers, create_order)

        response = client.get("/api/orders/analytics/udhaar", headers=manager_headers)
        assert response.status_code == 200
        data = response.json()
        assert [c["id"] for c in data] == [big["customer_id"], small["customer_id"]]
        assert data[1]["credit_balance_cents"] == 4000

    def test_settle_pays_oldest_orders_first(self, client, seeded, manager_headers, create_order, demo_products):
        first = self._credit_order(
            client, manager_headers, create_order,
            items=[{"product_id": demo_products[6].id, "quantity": 1}],
        )
        second = self._credit_order(
            client, manager_headers, create_order,
            items=[{"product_id": demo_products[7].id, "quantity": 1}],
        )

        response = client.post(
            "/api/orders/analytics/settle",
            json={"customer_id": first["customer_id"], "amount_cents": 5000},
            headers=manager_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert data["settled_cents"] == 5000
        assert data["orders_count"] == 1
        assert data["remaining_balance_cents"] == 4000 + 6000 - 5000

        assert seeded.get(Order, first["id"]).payment_status == "PAID"
        assert seeded.get(Order, second["id"]).payment_status == "PENDING"
        assert seeded.query(AuditLog).filter(AuditLog.action == "CREDIT_SETTLEMENT").count() == 1

    def test_settle_is_capped_at_balance(self, client, manager_headers, create_order):
        order = self._credit_order(client, manager_headers, create_order)

        response = client.post(
            "/api/orders/analytics/settle",
            json={"customer_id": order["customer_id"], "amount_cents": 10_000_000},
            headers=manager_headers,
        )
        data = response.json()
        assert data["settled_cents"] == order["total_cents"]
        assert data["remaining_balance_cents"] == 0
        assert data["orders_count"] == 1

    def test_settle_rejects_non_positive_amount(self, client, manager_headers, create_order):
        order = self._credit_order(client, manager_headers, create_order)

        response = client.post(
            "/api/orders/analytics/settle",
            json={"customer_id": order["customer_id"], "amount_cents": 0},
            headers=manager_headers,
        )
        assert response.status_code == 400

    def test_settle_without_credit_is_noop(self, client, manager_headers, create_order):
        order = create_order()

        response = client.post(
            "/api/orders/analytics/settle",
            json={"customer_id": order["customer_id"], "amount_cents": 100},
            headers=manager_headers,
        )
        assert response.status_code == 200
        assert response.json() == {
            "customer_id": order["customer_id"],
            "settled_cents": 0,
            "orders_count": 0,
            "remaining_balance_cents": 0,
        }

    def test_settle_unknown_customer(self, client, manager_headers):
        response = client.post(
            "/api/orders/analytics/settle",
            json={"customer_id": 99999, "amount_cents": 100},
            headers=manager_headers,
        )
        assert response.status_code == 404
