"""
Tests for restaurant profile, staff and floor endpoints.
"""

from rest_api.models import AuditLog


class TestRestaurantContext:
    """Restaurant scoping through the x-restaurant-id header."""

    def test_header_outside_allowed_restaurants(self, client, owner_headers):
        headers = {**owner_headers, "x-restaurant-id": "999"}
        response = client.get("/api/restaurant/profile", headers=headers)
        assert response.status_code == 403

    def test_malformed_header(self, client, owner_headers):
        headers = {**owner_headers, "x-restaurant-id": "abc"}
        response = client.get("/api/restaurant/profile", headers=headers)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_owner_falls_back_to_first_restaurant(self, client, owner_headers, demo_restaurant):
        headers = {"Authorization": owner_headers["Authorization"]}
        response = client.get("/api/restaurant/profile", headers=headers)
        assert response.status_code == 200
        assert response.json()["id"] == demo_restaurant.id

    def test_waiter_needs_header(self, client, waiter_headers):
        headers = {"Authorization": waiter_headers["Authorization"]}
        response = client.get("/api/restaurant/tables", headers=headers)
        assert response.status_code == 403

    def test_waiter_reads_but_cannot_manage_profile(self, client, waiter_headers):
        response = client.get("/api/restaurant/profile", headers=waiter_headers)
        assert response.status_code == 200
        assert response.json()["slug"] == "demo-kitchen"

        response = client.patch("/api/restaurant/profile", json={"tagline": "Hot and fresh"}, headers=waiter_headers)
        assert response.status_code == 403


class TestProfile:
    def test_get_profile(self, client, manager_headers):
        response = client.get("/api/restaurant/profile", headers=manager_headers)
        assert response.status_code == 200
        assert response.json()["slug"] == "demo-kitchen"

    def test_update_profile_writes_audit_log(self, client, seeded, manager_headers, demo_restaurant):
        response = client.patch(
            "/api/restaurant/profile",
            json={"tagline": "Now open late", "opening_time": "10:00"},
            headers=manager_headers,
        )
        assert response.status_code == 200
        assert response.json()["tagline"] == "Now open late"

        entries = seeded.query(AuditLog).filter(AuditLog.restaurant_id == demo_restaurant.id).all()
        assert any(e.action == "UPDATE" and e.user_email == "manager@demo.com" for e in entries)

    def test_update_profile_rejects_bad_time(self, client, manager_headers):
        response = client.patch("/api/restaurant/profile", json={"closing_time": "25:00"}, headers=manager_headers)
        assert response.status_code == 422

    def test_update_slug(self, client, manager_headers):
        response = client.patch("/api/restaurant/slug", json={"slug": "new-kitchen"}, headers=manager_headers)
        assert response.status_code == 200
        assert response.json()["slug"] == "new-kitchen"

    def test_update_slug_rejects_invalid(self, client, manager_headers):
        response = client.patch("/api/restaurant/slug", json={"slug": "Bad Slug!"}, headers=manager_headers)
        assert response.status_code == 400

    def test_settings_roundtrip(self, client, manager_headers):
        response = client.patch(
            "/api/restaurant/settings",
            json={"currency": "usd", "tax_included": False},
            headers=manager_headers,
        )
        assert response.status_code == 200
        assert response.json()["currency"] == "USD"

        response = client.get("/api/restaurant/settings", headers=manager_headers)
        assert response.json()["tax_included"] is False

    def test_theme_preset_and_overrides(self, client, manager_headers):
        response = client.patch(
            "/api/restaurant/theme",
            json={"preset": "dark", "colors": {"primary": "#ff0000"}},
            headers=manager_headers,
        )
        assert response.status_code == 200
        theme = response.json()
        assert theme["preset"] == "dark"
        assert theme["colors"]["primary"] == "#FF0000"
        assert "classic" in theme["presets"]

    def test_theme_rejects_bad_colour(self, client, manager_headers):
        response = client.patch(
            "/api/restaurant/theme",
            json={"colors": {"primary": "red"}},
            headers=manager_headers,
        )
        assert response.status_code == 400


class TestSetup:
    def test_owner_creates_restaurant(self, client, owner_headers, demo_tenant):
        response = client.post(
            "/api/restaurant/setup",
            json={"name": "Second Kitchen", "phone": "9876543210"},
            headers={"Authorization": owner_headers["Authorization"]},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["slug"] == "second-kitchen"
        assert data["tenant_id"] == demo_tenant.id

    def test_taken_slug(self, client, owner_headers):
        response = client.post(
            "/api/restaurant/setup",
            json={"name": "Copycat", "slug": "demo-kitchen"},
            headers=owner_headers,
        )
        assert response.status_code == 400

    def test_manager_cannot_setup(self, client, manager_headers):
        response = client.post("/api/restaurant/setup", json={"name": "Side Hustle"}, headers=manager_headers)
        assert response.status_code == 403


class TestDashboard:
    def test_dashboard_counts_orders(self, client, manager_headers, place_public_order):
        place_public_order()

        response = client.get("/api/restaurant/dashboard", headers=manager_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["orders_today"] == 1
        assert data["orders_by_status"]["PLACED"] == 1
        assert data["pending_qr_orders"] == 1
        assert data["occupied_tables"] == 1
        assert data["active_tables"] == 8


class TestStaff:
    def test_list_staff(self, client, owner_headers):
        response = client.get("/api/restaurant/staff", headers=owner_headers)
        assert response.status_code == 200
        roles = sorted(s["role"] for s in response.json())
        assert roles == ["MANAGER", "WAITER"]

    def test_create_waiter_without_login(self, client, manager_headers):
        response = client.post(
            "/api/restaurant/staff",
            json={"name": "Kiran", "role": "WAITER", "phone": "9812345670"},
            headers=manager_headers,
        )
        assert response.status_code == 201
        assert response.json()["can_login"] is False

    def test_manager_cannot_create_manager(self, client, manager_headers):
        response = client.post(
            "/api/restaurant/staff",
            json={
                "name": "Other Manager",
                "role": "MANAGER",
                "email": "other@demo.com",
                "phone": "9812345671",
                "password": "password123",
            },
            headers=manager_headers,
        )
        assert response.status_code == 403

    def test_manager_needs_credentials(self, client, owner_headers):
        response = client.post(
            "/api/restaurant/staff",
            json={"name": "New Manager", "role": "MANAGER", "email": "new@demo.com"},
            headers=owner_headers,
        )
        assert response.status_code == 400

    def test_duplicate_email(self, client, owner_headers):
        response = client.post(
            "/api/restaurant/staff",
            json={"name": "Dup", "role": "WAITER", "email": "waiter@demo.com"},
            headers=owner_headers,
        )
        assert response.status_code == 409

    def test_toggle_and_delete(self, client, owner_headers):
        staff = client.get("/api/restaurant/staff", headers=owner_headers).json()
        waiter = next(s for s in staff if s["role"] == "WAITER")

        response = client.patch(f"/api/restaurant/staff/{waiter['id']}/toggle", headers=owner_headers)
        assert response.status_code == 200
        assert response.json()["is_active"] is False

        response = client.delete(f"/api/restaurant/staff/{waiter['id']}", headers=owner_headers)
        assert response.status_code == 204
        response = client.get(f"/api/restaurant/staff/{waiter['id']}", headers=owner_headers)
        assert response.status_code == 404

    def test_disabled_waiter_cannot_login(self, client, owner_headers):
        staff = client.get("/api/restaurant/staff", headers=owner_headers).json()
        waiter = next(s for s in staff if s["role"] == "WAITER")
        client.patch(f"/api/restaurant/staff/{waiter['id']}/toggle", headers=owner_headers)

        response = client.post("/api/auth/login", json={"email": "waiter@demo.com", "password": "waiter123"})
        assert response.status_code == 401


class TestFloor:
    def test_list_halls(self, client, manager_headers):
        response = client.get("/api/restaurant/halls", headers=manager_headers)
        assert response.status_code == 200
        assert [h["name"] for h in response.json()] == ["AC Hall", "Main Hall"]

    def test_create_hall(self, client, manager_headers):
        response = client.post(
            "/api/restaurant/halls",
            json={"name": "Rooftop", "is_ac": False},
            headers=manager_headers,
        )
        assert response.status_code == 201
        assert response.json()["name"] == "Rooftop"

    def test_waiter_lists_tables_with_open_flag(self, client, waiter_headers, place_public_order):
        place_public_order(table_number="T2")

        response = client.get("/api/restaurant/tables", headers=waiter_headers)
        assert response.status_code == 200
        tables = {t["table_number"]: t for t in response.json()}
        assert len(tables) == 8
        assert tables["T2"]["has_open_order"] is True
        assert tables["T1"]["has_open_order"] is False

    def test_filter_tables_by_hall(self, client, manager_headers, demo_halls):
        response = client.get(
            "/api/restaurant/tables",
            params={"hall_id": demo_halls[0].id},
            headers=manager_headers,
        )
        assert [t["table_number"] for t in response.json()] == ["T1", "T2", "T3", "T4"]

    def test_duplicate_table_number(self, client, manager_headers):
        response = client.post(
            "/api/restaurant/tables",
            json={"table_number": "t1"},
            headers=manager_headers,
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "DUPLICATE"

    def test_bulk_create_skips_existing_numbers(self, client, manager_headers):
        response = client.post(
            "/api/restaurant/tables/bulk",
            json={"count": 2, "prefix": "T"},
            headers=manager_headers,
        )
        assert response.status_code == 201
        assert [t["table_number"] for t in response.json()] == ["T9", "T10"]

    def test_table_qr_code(self, client, manager_headers, demo_tables):
        table = demo_tables[0]
        response = client.get(f"/api/restaurant/tables/{table.id}/qrcode", headers=manager_headers)
        assert response.status_code == 200
        assert response.json()["url"].endswith(f"/demo-kitchen?table={table.id}")

    def test_delete_table_keeps_orders(self, client, manager_headers, demo_tables, place_public_order):
        order = place_public_order(table_number="T1")

        response = client.delete(f"/api/restaurant/tables/{demo_tables[0].id}", headers=manager_headers)
        assert response.status_code == 204

        response = client.get(f"/api/orders/{order['id']}", headers=manager_headers)
        assert response.status_code == 200
        assert response.json()["table_id"] is None
        assert response.json()["table_number"] == "T1"
