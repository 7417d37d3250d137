"""
Tests for category and product management.
"""

import pytest

from rest_api.services.domain.product_service import discounted_price_cents


class TestDiscountedPrice:
    @pytest.mark.parametrize(
        "price,discount,expected",
        [
            (26000, 10, 23400),
            (999, 10, 899),
            (1000, 0, 1000),
            (1000, None, 1000),
            (1000, 100, 0),
            (1000, 150, 0),
            (1000, -5, 1000),
        ],
    )
    def test_discounted_price(self, price, discount, expected):
        assert discounted_price_cents(price, discount) == expected


class TestCategories:
    def test_list_in_sort_order(self, client, waiter_headers):
        response = client.get("/api/categories", headers=waiter_headers)
        assert response.status_code == 200
        assert [c["name"] for c in response.json()] == ["Starters", "Main Course", "Beverages"]

    def test_create_appends_to_end(self, client, manager_headers):
        response = client.post("/api/categories", json={"name": "Desserts"}, headers=manager_headers)
        assert response.status_code == 201
        assert response.json()["sort_order"] == 4

    def test_waiter_cannot_create(self, client, waiter_headers):
        response = client.post("/api/categories", json={"name": "Desserts"}, headers=waiter_headers)
        assert response.status_code == 403

    def test_reorder(self, client, manager_headers):
        categories = client.get("/api/categories", headers=manager_headers).json()
        starters, mains, drinks = categories

        response = client.patch(
            "/api/categories/reorder",
            json=[
                {"id": drinks["id"], "sort_order": 1},
                {"id": starters["id"], "sort_order": 2},
                {"id": mains["id"], "sort_order": 3},
            ],
            headers=manager_headers,
        )
        assert response.status_code == 200
        assert [c["name"] for c in response.json()] == ["Beverages", "Starters", "Main Course"]

    def test_reorder_rejects_duplicates(self, client, manager_headers):
        category = client.get("/api/categories", headers=manager_headers).json()[0]
        response = client.patch(
            "/api/categories/reorder",
            json=[{"id": category["id"], "sort_order": 1}, {"id": category["id"], "sort_order": 2}],
            headers=manager_headers,
        )
        assert response.status_code == 400

    def test_reorder_unknown_category(self, client, manager_headers):
        response = client.patch(
            "/api/categories/reorder",
            json=[{"id": 99999, "sort_order": 1}],
            headers=manager_headers,
        )
        assert response.status_code == 404

    def test_delete_uncategorizes_products(self, client, manager_headers):
        category = client.get("/api/categories", headers=manager_headers).json()[0]

        response = client.delete(f"/api/categories/{category['id']}", headers=manager_headers)
        assert response.status_code == 204

        names = [c["name"] for c in client.get("/api/categories", headers=manager_headers).json()]
        assert "Starters" not in names
        products = client.get("/api/products", params={"search": "Paneer"}, headers=manager_headers).json()
        assert products[0]["category_id"] is None


class TestProducts:
    def test_filter_by_category(self, client, waiter_headers):
        category = client.get("/api/categories", headers=waiter_headers).json()[2]

        response = client.get("/api/products", params={"category_id": category["id"]}, headers=waiter_headers)
        assert response.status_code == 200
        assert [p["name"] for p in response.json()] == ["Masala Chai", "Fresh Lime Soda"]

    def test_search_is_case_insensitive(self, client, waiter_headers):
        response = client.get("/api/products", params={"search": "chicken"}, headers=waiter_headers)
        assert sorted(p["name"] for p in response.json()) == ["Butter Chicken", "Chicken 65"]

    def test_filter_by_availability(self, client, manager_headers, demo_products):
        client.patch(
            f"/api/products/{demo_products[0].id}",
            json={"is_available": False},
            headers=manager_headers,
        )

        response = client.get("/api/products", params={"is_available": False}, headers=manager_headers)
        assert [p["name"] for p in response.json()] == ["Paneer Tikka"]

    def test_create_product(self, client, manager_headers):
        category = client.get("/api/categories", headers=manager_headers).json()[0]

        response = client.post(
            "/api/products",
            json={
                "name": "Hara Bhara Kebab",
                "price_cents": 20000,
                "cost_price_cents": 7000,
                "category_id": category["id"],
                "discount_percent": 15,
            },
            headers=manager_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["price_cents"] == 20000
        assert data["discount_percent"] == 15
        assert data["is_available"] is True

    def test_category_must_belong_to_restaurant(self, client, manager_headers):
        response = client.post(
            "/api/products",
            json={"name": "Mystery Dish", "price_cents": 1000, "category_id": 99999},
            headers=manager_headers,
        )
        assert response.status_code == 400

    def test_negative_price_is_rejected(self, client, manager_headers):
        response = client.post(
            "/api/products",
            json={"name": "Free Lunch", "price_cents": -1},
            headers=manager_headers,
        )
        assert response.status_code == 422

    def test_deleted_product_keeps_order_history(self, client, manager_headers, create_order, demo_products):
        order = create_order()

        response = client.delete(f"/api/products/{demo_products[0].id}", headers=manager_headers)
        assert response.status_code == 204

        response = client.get(f"/api/orders/{order['id']}", headers=manager_headers)
        names = [i["name_snapshot"] for i in response.json()["items"]]
        assert "Paneer Tikka" in names

    def test_deleted_product_cannot_be_ordered(self, client, manager_headers, create_order, demo_products):
        client.delete(f"/api/products/{demo_products[0].id}", headers=manager_headers)

        response = client.post(
            "/api/orders",
            json={"order_type": "TAKEAWAY", "items": [{"product_id": demo_products[0].id, "quantity": 1}]},
            headers=manager_headers,
        )
        assert response.status_code == 400
