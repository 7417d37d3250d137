"""
Tests for the kitchen display endpoints.
"""

from rest_api.models import AuditLog


def set_status(client, headers, order_id, status):
    response = client.patch(f"/api/orders/{order_id}/status", json={"status": status}, headers=headers)
    assert response.status_code == 200, response.json()


class TestKitchenQueue:
    def test_dashboard(self, client, waiter_headers, manager_headers, create_order, demo_tables):
        placed = create_order()
        preparing = create_order(table_id=demo_tables[1].id)
        served = create_order(table_id=demo_tables[2].id)
        set_status(client, manager_headers, preparing["id"], "PREPARING")
        set_status(client, manager_headers, served["id"], "SERVED")

        response = client.get("/api/kds/dashboard", headers=waiter_headers)
        assert response.status_code == 200
        data = response.json()

        assert data["counts"] == {"placed": 1, "confirmed": 0, "preparing": 1, "ready": 0, "total_active": 2}
        assert [o["id"] for o in data["orders"]] == [placed["id"], preparing["id"]]
        assert data["settings"] == {"sound_enabled": True, "auto_clear_completed_after_seconds": 300}
        assert data["server_time"]

        first, second = data["orders"]
        assert first["elapsed_since_placed"] >= 0
        assert first["elapsed_since_preparing"] is None
        assert second["elapsed_since_preparing"] is not None
        assert [(i["name"], i["quantity"], i["status"]) for i in first["items"]] == [
            ("Paneer Tikka", 1, "PENDING"),
            ("Chicken 65", 2, "PENDING"),
        ]

    def test_oldest_first_within_status(self, client, manager_headers, create_order, demo_tables):
        ready = create_order()
        older = create_order(table_id=demo_tables[1].id)
        newer = create_order(table_id=demo_tables[2].id)
        set_status(client, manager_headers, ready["id"], "READY")

        orders = client.get("/api/kds/orders", headers=manager_headers).json()["orders"]
        assert [o["id"] for o in orders] == [older["id"], newer["id"], ready["id"]]

    def test_status_filter(self, client, manager_headers, create_order, demo_tables):
        create_order()
        preparing = create_order(table_id=demo_tables[1].id)
        set_status(client, manager_headers, preparing["id"], "PREPARING")

        response = client.get("/api/kds/orders", params={"status": "PREPARING"}, headers=manager_headers)
        assert response.status_code == 200
        assert [o["id"] for o in response.json()["orders"]] == [preparing["id"]]

        response = client.get("/api/kds/orders", params={"status": "SERVED"}, headers=manager_headers)
        assert response.status_code == 422

    def test_single_order(self, client, manager_headers, create_order):
        order = create_order(notes="No onion")
        set_status(client, manager_headers, order["id"], "SERVED")

        response = client.get(f"/api/kds/orders/{order['id']}", headers=manager_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["order_number"] == order["order_number"]
        assert data["notes"] == "No onion"
        assert data["status"] == "SERVED"
        assert len(data["items"]) == 2

    def test_unknown_order(self, client, manager_headers):
        response = client.get("/api/kds/orders/999999", headers=manager_headers)
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    def test_requires_token(self, client, seeded):
        assert client.get("/api/kds/dashboard").status_code == 401


class TestKdsSettings:
    def test_manager_updates_settings(self, client, seeded, manager_headers, demo_restaurant):
        response = client.patch(
            "/api/kds/settings",
            json={"auto_clear_completed_after_seconds": 120},
            headers=manager_headers,
        )
        assert response.status_code == 200
        assert response.json() == {"sound_enabled": True, "auto_clear_completed_after_seconds": 120}

        response = client.patch("/api/kds/settings", json={"sound_enabled": False}, headers=manager_headers)
        assert response.json() == {"sound_enabled": False, "auto_clear_completed_after_seconds": 120}

        entries = seeded.query(AuditLog).filter(AuditLog.restaurant_id == demo_restaurant.id).all()
        assert any(e.action == "UPDATE" and e.user_email == "manager@demo.com" for e in entries)

    def test_auto_clear_range(self, client, manager_headers):
        for seconds in (10, 3601):
            response = client.patch(
                "/api/kds/settings",
                json={"auto_clear_completed_after_seconds": seconds},
                headers=manager_headers,
            )
            assert response.status_code == 422

    def test_waiter_reads_but_cannot_update(self, client, waiter_headers):
        response = client.get("/api/kds/settings", headers=waiter_headers)
        assert response.status_code == 200
        assert response.json()["sound_enabled"] is True

        response = client.patch("/api/kds/settings", json={"sound_enabled": False}, headers=waiter_headers)
        assert response.status_code == 403

    def test_realtime_config(self, client, waiter_headers, demo_restaurant):
        response = client.get("/api/kds/realtime-config", headers=waiter_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["channel"] == f"restaurant:{demo_restaurant.id}:pending-orders"
        assert "new_qr_order" in data["events"]
