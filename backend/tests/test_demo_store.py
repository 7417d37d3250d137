"""
Tests for the demo mode store.
"""

import copy
import json
from datetime import datetime, timezone

import pytest

from pos_client.demo_store import (
    DEMO_STORAGE_KEY,
    DemoStore,
    demo_reducer,
    fresh_seed_state,
    load_state,
    make_order_id,
)

NOW = datetime(2025, 2, 1, 12, 0, tzinfo=timezone.utc)
AT = "2025-02-01T12:00:00.000Z"


@pytest.fixture
def state():
    return fresh_seed_state(NOW)


def new_order(**overrides):
    return {
        "id": "ORD-9000",
        "source": "new",
        "customerName": "Guest",
        "customerPhone": "+91 99999 00000",
        "items": [{"id": 1, "name": "Chicken Wrap", "qty": 2, "price": 120}],
        "status": "new",
        "specialInstructions": "",
        "consentWhatsapp": False,
        "receivedAt": AT,
        **overrides,
    }


class TestSeed:
    def test_seed_contents(self, state):
        assert [p["name"] for p in state["products"]][:2] == ["Chicken Wrap", "Chicken Popcorn"]
        assert [o["id"] for o in state["orders"]] == ["ORD-001", "ORD-002", "ORD-003", "ORD-004"]
        assert state["orders"][0]["total"] == 380
        assert state["orders"][0]["receivedAt"] == "2025-02-01T11:54:00.000Z"
        assert state["ui"]["adminPin"] == "123456"
        assert state["tables"] == [{"id": "T1", "name": "T-1", "type": "AC", "capacity": 4, "active": True}]

    def test_make_order_id(self):
        order_id = make_order_id()
        assert order_id.startswith("ORD-")
        assert 0 <= int(order_id[4:]) < 10000


class TestLoadState:
    @pytest.mark.parametrize("raw", [None, "", "{not json", "null", "{}"])
    def test_unusable_input_gives_fresh_seed(self, raw):
        assert load_state(raw, NOW) == fresh_seed_state(NOW)

    def test_partial_state_is_filled_from_seed(self):
        raw = json.dumps({
            "products": [{"id": 9, "name": "Tea", "price": 20, "category": "Drinks"}],
            "customerSettings": {"activeTheme": "dark"},
            "adminPreferences": {"alerts": {"zomato": {"enabled": False}}},
            "staff": "broken",
        })
        state = load_state(raw, NOW)

        assert [p["name"] for p in state["products"]] == ["Tea"]
        assert state["customerSettings"]["activeTheme"] == "dark"
        assert state["customerSettings"]["storeName"] == "Arabian Nights"
        assert state["adminPreferences"]["alerts"]["zomato"] == {"enabled": False}
        assert state["adminPreferences"]["alerts"]["stock"] == {"enabled": True}
        assert state["adminPreferences"]["sidebar"]["showCampaigns"] is True
        assert state["staff"] == []
        assert state["cart"] == []
        assert state["currentTable"] is None


class TestReducer:
    def test_input_state_is_not_mutated(self, state):
        before = copy.deepcopy(state)
        demo_reducer(state, {"type": "TOGGLE_STOCK", "product_id": 1})
        demo_reducer(state, {"type": "CART_ADD", "product_id": 1})
        assert state == before

    def test_unknown_action_returns_same_state(self, state):
        assert demo_reducer(state, {"type": "NOPE"}) is state

    def test_toggle_stock(self, state):
        state = demo_reducer(state, {"type": "TOGGLE_STOCK", "product_id": 2})
        assert state["products"][1]["outOfStock"] is True
        state = demo_reducer(state, {"type": "TOGGLE_STOCK", "product_id": 2})
        assert state["products"][1]["outOfStock"] is False

    def test_add_product_takes_next_id(self, state):
        state = demo_reducer(state, {"type": "ADD_PRODUCT", "payload": {"name": "Lassi", "price": 60, "category": "Drinks"}})
        product = state["products"][-1]
        assert product["id"] == 6
        assert product["outOfStock"] is False
        assert product["isVeg"] is True
        assert product["costPrice"] == 0

    def test_cart(self, state):
        for _ in range(2):
            state = demo_reducer(state, {"type": "CART_ADD", "product_id": 1})
        state = demo_reducer(state, {"type": "CART_ADD", "product_id": 3})
        assert state["cart"] == [{"productId": 1, "qty": 2}, {"productId": 3, "qty": 1}]

        state = demo_reducer(state, {"type": "CART_REMOVE", "product_id": 1})
        state = demo_reducer(state, {"type": "CART_REMOVE", "product_id": 3})
        assert state["cart"] == [{"productId": 1, "qty": 1}]

    def test_place_order_at_table_adds_customer(self, state):
        state = demo_reducer(state, {"type": "CART_ADD", "product_id": 1})
        state = demo_reducer(state, {"type": "PLACE_ORDER", "payload": new_order(tableId="T1")})

        order = state["orders"][0]
        assert order["customerName"] == "T-1 (Guest)"
        assert order["customerPhone"] == "+919999900000"
        assert order["total"] == 240
        assert order["statusHistory"] == [{"at": AT, "status": "new", "note": "Order placed via T-1"}]
        assert state["cart"] == []

        customer = state["customers"][0]
        assert customer["id"] == "C-004"
        assert customer["totalSpent"] == 240
        assert customer["creditBalance"] == 0

    def test_place_order_named_customer_at_counter(self, state):
        state = demo_reducer(state, {"type": "PLACE_ORDER", "payload": new_order(customerName="Meera")})
        assert state["orders"][0]["customerName"] == "Meera"
        assert state["orders"][0]["statusHistory"][0]["note"] == "Order placed via Counter"

    def test_place_order_known_phone_keeps_customers(self, state):
        payload = new_order(customerName="Raj Kumar", customerPhone="+91-9876543210", tableId="T1")
        state = demo_reducer(state, {"type": "PLACE_ORDER", "payload": payload})
        assert len(state["customers"]) == 3
        assert state["orders"][0]["customerName"] == "Raj Kumar • T-1"

    def test_update_order_status_appends_history(self, state):
        state = demo_reducer(state, {
            "type": "UPDATE_ORDER_STATUS", "order_id": "ORD-001", "status": "cooking", "at": AT, "note": "Go",
        })
        order = state["orders"][0]
        assert order["status"] == "cooking"
        assert order["statusHistory"][-1] == {"at": AT, "status": "cooking", "note": "Go"}

    def test_cash_payment_completes_order(self, state):
        state = demo_reducer(state, {"type": "SET_PAYMENT", "order_id": "ORD-003", "method": "cash", "at": AT})
        order = next(o for o in state["orders"] if o["id"] == "ORD-003")
        assert order["status"] == "completed"
        assert order["paidAt"] == AT
        assert order["isCredit"] is False
        assert order["creditAmount"] == 0
        assert state["ui"]["lastPaymentMethod"] == "cash"

    def test_credit_payment_keeps_status(self, state):
        state = demo_reducer(state, {
            "type": "SET_PAYMENT", "order_id": "ORD-001", "method": "credit", "is_credit": True, "at": AT,
        })
        order = state["orders"][0]
        assert order["status"] == "new"
        assert order["paidAt"] is None
        assert order["creditAmount"] == 380

    def test_zero_credit_amount_falls_back_to_total(self, state):
        state = demo_reducer(state, {
            "type": "SET_PAYMENT", "order_id": "ORD-001", "method": "credit",
            "is_credit": True, "credit_amount": 0, "at": AT,
        })
        assert state["orders"][0]["creditAmount"] == 380

    def test_mark_credit_paid_never_goes_negative(self, state):
        state = demo_reducer(state, {"type": "MARK_CREDIT_PAID", "phone": "+91-9111122222", "amount": 1000})
        suresh = next(c for c in state["customers"] if c["id"] == "C-003")
        assert suresh["creditBalance"] == 0

    def test_staff_and_tables(self, state):
        state = demo_reducer(state, {"type": "ADD_STAFF", "payload": {"name": "Kiran", "role": "waiter"}}, now=NOW)
        member = state["staff"][0]
        assert member["id"].startswith("S-")
        assert member["active"] is True
        assert member["joinedAt"] == AT

        state = demo_reducer(state, {"type": "TOGGLE_STAFF", "id": member["id"]})
        assert state["staff"][0]["active"] is False
        state = demo_reducer(state, {"type": "DELETE_STAFF", "id": member["id"]})
        assert state["staff"] == []

        state = demo_reducer(state, {"type": "ADD_TABLE", "payload": {"name": "T-2", "type": "Non-AC", "capacity": 2}})
        assert len(state["tables"]) == 2
        state = demo_reducer(state, {"type": "SET_CURRENT_TABLE", "table_id": "T1"})
        assert state["currentTable"] == "T1"

    def test_update_admin_prefs_merges_sections(self, state):
        state = demo_reducer(state, {"type": "UPDATE_ADMIN_PREFS", "payload": {"sidebar": {"showCampaigns": False}}})
        assert state["adminPreferences"]["sidebar"] == {"showCampaigns": False, "showCustomers": True}
        assert state["adminPreferences"]["alerts"]["zomato"] == {"enabled": True}


class TestDemoStore:
    def test_dispatch_persists_state(self):
        storage = {}
        store = DemoStore(storage, now=lambda: NOW)
        assert json.loads(storage[DEMO_STORAGE_KEY]) == store.state

        store.dispatch({"type": "SET_ADMIN_PIN", "pin": "0000"})
        assert json.loads(storage[DEMO_STORAGE_KEY])["ui"]["adminPin"] == "0000"

    def test_state_survives_reload(self):
        storage = {}
        DemoStore(storage, now=lambda: NOW).dispatch({"type": "DISMISS_BANNER"})

        reloaded = DemoStore(storage, now=lambda: NOW)
        assert reloaded.state["ui"]["demoBannerDismissed"] is True

    def test_clear_demo_storage_reseeds(self):
        storage = {}
        store = DemoStore(storage, now=lambda: NOW)
        store.dispatch({"type": "DELETE_PRODUCT", "product_id": 1})

        state = store.clear_demo_storage()
        assert len(state["products"]) == 5
        assert json.loads(storage[DEMO_STORAGE_KEY]) == fresh_seed_state(NOW)
