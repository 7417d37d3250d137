"""
Tests for the platform operator (super-admin) portal.
"""

import pytest


@pytest.fixture
def create_tenant(client, super_admin_headers):
    def _create(**overrides):
        body = {
            "name": "Spice Route",
            "owner_name": "Nisha Rao",
            "owner_email": "nisha@spiceroute.in",
            "owner_password": "spiceroute123",
            **overrides,
        }
        response = client.post("/api/super-admin/tenants", json=body, headers=super_admin_headers)
        assert response.status_code == 201, response.json()
        return response.json()

    return _create


class TestSuperAdminAuth:
    def test_login(self, client, seeded):
        response = client.post(
            "/api/super-admin/auth/login",
            json={"email": "superadmin@demo.com", "password": "superadmin123"},
        )
        assert response.status_code == 200
        assert response.json()["admin"]["email"] == "superadmin@demo.com"

    def test_wrong_password(self, client, seeded):
        response = client.post(
            "/api/super-admin/auth/login",
            json={"email": "superadmin@demo.com", "password": "nope"},
        )
        assert response.status_code == 401

    def test_me(self, client, super_admin_headers):
        response = client.get("/api/super-admin/auth/me", headers=super_admin_headers)
        assert response.status_code == 200
        assert response.json()["name"] == "Platform Admin"

    def test_restaurant_token_is_rejected(self, client, owner_headers):
        response = client.get("/api/super-admin/tenants", headers=owner_headers)
        assert response.status_code == 403

    def test_super_admin_token_cannot_reach_restaurant(self, client, super_admin_headers, demo_restaurant):
        headers = {**super_admin_headers, "x-restaurant-id": str(demo_restaurant.id)}
        response = client.get("/api/orders", headers=headers)
        assert response.status_code == 401


class TestTenants:
    def test_create_tenant_with_owner(self, client, create_tenant):
        tenant = create_tenant()
        assert tenant["slug"] == "spice-route"
        assert tenant["users_count"] == 1
        assert tenant["restaurants_count"] == 0
        assert tenant["is_suspended"] is False

        response = client.post(
            "/api/auth/login",
            json={"email": "nisha@spiceroute.in", "password": "spiceroute123"},
        )
        assert response.status_code == 200
        assert response.json()["user"]["role"] == "OWNER"
        assert response.json()["user"]["allowed_restaurant_ids"] == []

    def test_generated_slug_is_unique(self, create_tenant):
        create_tenant()
        second = create_tenant(owner_email="other@spiceroute.in")
        assert second["slug"] == "spice-route-2"

    def test_taken_slug(self, client, super_admin_headers, create_tenant):
        response = client.post(
            "/api/super-admin/tenants",
            json={
                "name": "Copy",
                "slug": "demo",
                "owner_name": "Copy Owner",
                "owner_email": "copy@demo.in",
                "owner_password": "password123",
            },
            headers=super_admin_headers,
        )
        assert response.status_code == 400

    def test_owner_email_in_use(self, client, super_admin_headers):
        response = client.post(
            "/api/super-admin/tenants",
            json={
                "name": "Copy",
                "owner_name": "Copy Owner",
                "owner_email": "owner@demo.com",
                "owner_password": "password123",
            },
            headers=super_admin_headers,
        )
        assert response.status_code == 409

    def test_short_owner_password(self, client, super_admin_headers):
        response = client.post(
            "/api/super-admin/tenants",
            json={
                "name": "Copy",
                "owner_name": "Copy Owner",
                "owner_email": "copy@demo.in",
                "owner_password": "short",
            },
            headers=super_admin_headers,
        )
        assert response.status_code == 422

    def test_list_and_search(self, client, super_admin_headers, create_tenant):
        create_tenant()

        response = client.get("/api/super-admin/tenants", headers=super_admin_headers)
        assert response.json()["pagination"]["total"] == 2

        response = client.get("/api/super-admin/tenants", params={"search": "spice"}, headers=super_admin_headers)
        assert [t["slug"] for t in response.json()["tenants"]] == ["spice-route"]

    def test_update_tenant(self, client, super_admin_headers, demo_tenant):
        response = client.patch(
            f"/api/super-admin/tenants/{demo_tenant.id}",
            json={"plan": "PREMIUM"},
            headers=super_admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["plan"] == "PREMIUM"

    def test_unknown_tenant(self, client, super_admin_headers):
        response = client.get("/api/super-admin/tenants/99999", headers=super_admin_headers)
        assert response.status_code == 404


class TestSuspension:
    def test_suspend_blocks_login_until_activated(self, client, super_admin_headers, demo_tenant):
        response = client.post(
            f"/api/super-admin/tenants/{demo_tenant.id}/suspend",
            json={"reason": "Unpaid invoice"},
            headers=super_admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["is_suspended"] is True
        assert response.json()["suspension_reason"] == "Unpaid invoice"

        login = {"email": "owner@demo.com", "password": "owner123"}
        assert client.post("/api/auth/login", json=login).status_code == 403

        response = client.post(f"/api/super-admin/tenants/{demo_tenant.id}/activate", headers=super_admin_headers)
        assert response.status_code == 200
        assert response.json()["suspension_reason"] is None
        assert client.post("/api/auth/login", json=login).status_code == 200

    def test_suspend_twice(self, client, super_admin_headers, demo_tenant):
        client.post(f"/api/super-admin/tenants/{demo_tenant.id}/suspend", headers=super_admin_headers)

        response = client.post(f"/api/super-admin/tenants/{demo_tenant.id}/suspend", headers=super_admin_headers)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_STATE"

    def test_activate_active_tenant(self, client, super_admin_headers, demo_tenant):
        response = client.post(f"/api/super-admin/tenants/{demo_tenant.id}/activate", headers=super_admin_headers)
        assert response.status_code == 400


class TestPlatformViews:
    def test_overview(self, client, super_admin_headers, place_public_order):
        place_public_order()

        response = client.get("/api/super-admin/dashboard/overview", headers=super_admin_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["tenants"] == 1
        assert data["active_tenants"] == 1
        assert data["suspended_tenants"] == 0
        assert data["restaurants"] == 1
        assert data["users"] == 3
        assert data["orders"] == 1
        assert data["orders_today"] == 1

    def test_list_restaurants_by_tenant(self, client, super_admin_headers, demo_tenant):
        response = client.get(
            "/api/super-admin/restaurants",
            params={"tenant_id": demo_tenant.id},
            headers=super_admin_headers,
        )
        assert [r["slug"] for r in response.json()] == ["demo-kitchen"]

    def test_audit_log_filters(self, client, super_admin_headers, demo_tenant):
        client.post(f"/api/super-admin/tenants/{demo_tenant.id}/suspend", headers=super_admin_headers)

        response = client.get(
            "/api/super-admin/audit-logs",
            params={"action": "suspend"},
            headers=super_admin_headers,
        )
        assert response.status_code == 200
        logs = response.json()["logs"]
        assert len(logs) == 1
        assert logs[0]["entity_type"] == "TENANT"
        assert logs[0]["tenant_id"] == demo_tenant.id
