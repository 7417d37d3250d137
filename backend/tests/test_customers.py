"""
Tests for customer management endpoints.
"""

import pytest

from rest_api.services.domain.customer_service import normalize_tags


class TestNormalizeTags:
    def test_dedupes_case_insensitively(self):
        assert normalize_tags(["VIP", " vip ", "Regular", ""]) == ["VIP", "Regular"]

    def test_trims_long_tags(self):
        assert normalize_tags(["x" * 40]) == ["x" * 30]


@pytest.fixture
def create_customer(client, manager_headers):
    def _create(**overrides):
        body = {"name": "Meera", "phone": "98765 43210", "tags": ["VIP"], **overrides}
        response = client.post("/api/customers", json=body, headers=manager_headers)
        assert response.status_code == 201, response.json()
        return response.json()

    return _create


class TestCustomerCrud:
    def test_create_normalizes_phone(self, create_customer):
        customer = create_customer()
        assert customer["phone"] == "9876543210"
        assert customer["tags"] == ["VIP"]
        assert customer["credit_balance_cents"] == 0

    def test_invalid_phone(self, client, manager_headers):
        response = client.post(
            "/api/customers",
            json={"name": "Meera", "phone": "12ab"},
            headers=manager_headers,
        )
        assert response.status_code == 400

    def test_duplicate_phone(self, client, manager_headers, create_customer):
        create_customer()
        response = client.post(
            "/api/customers",
            json={"name": "Someone Else", "phone": "9876543210"},
            headers=manager_headers,
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "DUPLICATE"

    def test_recreate_restores_deleted_customer(self, client, manager_headers, create_customer):
        customer = create_customer()
        assert client.delete(f"/api/customers/{customer['id']}", headers=manager_headers).status_code == 204
        assert client.get(f"/api/customers/{customer['id']}", headers=manager_headers).status_code == 404

        restored = create_customer(name="Meera S", tags=[])
        assert restored["id"] == customer["id"]
        assert restored["name"] == "Meera S"

    def test_update_to_taken_phone(self, client, manager_headers, create_customer):
        create_customer()
        other = create_customer(phone="9123456789")

        response = client.patch(
            f"/api/customers/{other['id']}",
            json={"phone": "9876543210"},
            headers=manager_headers,
        )
        assert response.status_code == 400

    def test_replace_tags(self, client, manager_headers, create_customer):
        customer = create_customer()

        response = client.patch(
            f"/api/customers/{customer['id']}/tags",
            json={"tags": ["regular", "Regular", "late-night"]},
            headers=manager_headers,
        )
        assert response.status_code == 200
        assert response.json()["tags"] == ["regular", "late-night"]

    def test_waiter_cannot_manage_customers(self, client, waiter_headers):
        response = client.get("/api/customers", headers=waiter_headers)
        assert response.status_code == 403


class TestCustomerQueries:
    def test_search_by_name_or_phone(self, client, manager_headers, create_customer):
        create_customer()
        create_customer(name="Arjun", phone="9123456789", tags=[])

        response = client.get("/api/customers", params={"search": "arj"}, headers=manager_headers)
        assert [c["name"] for c in response.json()["customers"]] == ["Arjun"]

        response = client.get("/api/customers", params={"search": "98765"}, headers=manager_headers)
        assert [c["name"] for c in response.json()["customers"]] == ["Meera"]

    def test_filter_by_tag(self, client, manager_headers, create_customer):
        create_customer()
        create_customer(name="Arjun", phone="9123456789", tags=["Regular"])

        response = client.get("/api/customers", params={"tag": "VIP"}, headers=manager_headers)
        data = response.json()
        assert data["pagination"]["total"] == 1
        assert data["customers"][0]["name"] == "Meera"

    def test_customer_orders(self, client, manager_headers, create_order):
        order = create_order()

        response = client.get(f"/api/customers/{order['customer_id']}/orders", headers=manager_headers)
        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [order["id"]]
