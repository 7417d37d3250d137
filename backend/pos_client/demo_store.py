"""
Demo mode store.

Simulates the restaurant backend for sales demos: a reducer over a plain
state dict, persisted as JSON under a fixed storage key. State keeps the
storage format of the web client (camelCase keys) so a saved demo loads in
either place. Actions are dicts with a ``type`` and snake_case arguments:

    store = DemoStore(storage={})
    store.dispatch({"type": "TOGGLE_STOCK", "product_id": 2})
    store.dispatch({"type": "CART_ADD", "product_id": 1})
"""

from __future__ import annotations

import copy
import json
import random
import re
from collections.abc import MutableMapping
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

from shared.config.logging import client_logger as logger

DEMO_STORAGE_KEY = "arabian-nights:demo:v1"

State = dict[str, Any]
Action = dict[str, Any]


def _iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def normalize_phone(phone: Optional[str]) -> str:
    return re.sub(r"\s+", "", phone or "")


def order_total(items: list[dict[str, Any]]) -> float:
    return sum(item["qty"] * item["price"] for item in items)


def make_order_id() -> str:
    return f"ORD-{random.randrange(10000)}"


# =============================================================================
# Seed
# =============================================================================

SEED_PRODUCTS = [
    {"id": 1, "name": "Chicken Wrap", "price": 120, "category": "Wraps", "imageUrl": "/assets/products/chicken-wrap.jpg"},
    {"id": 2, "name": "Chicken Popcorn", "price": 140, "category": "Snacks", "imageUrl": "/assets/products/chicken-popcorn.jpg"},
    {"id": 3, "name": "Chicken Bowl", "price": 150, "category": "Bowls", "imageUrl": "/assets/products/chicken-bowl.jpg"},
    {"id": 4, "name": "Chicken Burger", "price": 110, "category": "Burgers", "imageUrl": "/assets/products/chicken-burger.jpg"},
    {"id": 5, "name": "Chicken Sandwich", "price": 80, "category": "Sandwiches", "imageUrl": "/assets/products/chicken-sandwich.jpg"},
]


def _seed_order(
    ago: Callable[[int], str],
    *,
    history: list[tuple[int, str, Optional[str]]],
    **fields: Any,
) -> dict[str, Any]:
    order = {
        "cookingStartedAt": None,
        "readyAt": None,
        "paidAt": None,
        "paymentMethod": None,
        "isCredit": False,
        "creditAmount": 0,
        **fields,
    }
    order["total"] = order_total(order["items"])
    order["statusHistory"] = []
    for minutes, status, note in history:
        entry = {"at": ago(minutes), "status": status}
        if note:
            entry["note"] = note
        order["statusHistory"].append(entry)
    return order


def _seed_orders(ago: Callable[[int], str]) -> list[dict[str, Any]]:
    return [
        _seed_order(
            ago,
            id="ORD-001",
            source="new",
            customerName="Raj Kumar",
            customerPhone="+91-9876543210",
            items=[
                {"id": 1, "name": "Chicken Wrap", "qty": 2, "price": 120},
                {"id": 2, "name": "Chicken Popcorn", "qty": 1, "price": 140},
            ],
            status="new",
            specialInstructions="No spices",
            consentWhatsapp=True,
            receivedAt=ago(6),
            history=[(6, "new", "Order received")],
        ),
        _seed_order(
            ago,
            id="ORD-002",
            source="zomato",
            customerName="Aisha",
            customerPhone="+91-9000012345",
            items=[
                {"id": 3, "name": "Chicken Bowl", "qty": 1, "price": 150},
                {"id": 2, "name": "Chicken Popcorn", "qty": 1, "price": 140},
            ],
            status="cooking",
            specialInstructions="Extra crispy",
            consentWhatsapp=False,
            receivedAt=ago(42),
            cookingStartedAt=ago(35),
            history=[(42, "new", None), (35, "cooking", "Cooking started")],
        ),
        _seed_order(
            ago,
            id="ORD-003",
            source="new",
            customerName="Suresh",
            customerPhone="+91-9111122222",
            items=[
                {"id": 4, "name": "Chicken Burger", "qty": 2, "price": 110},
                {"id": 5, "name": "Chicken Sandwich", "qty": 1, "price": 80},
            ],
            status="ready",
            specialInstructions="",
            consentWhatsapp=True,
            receivedAt=ago(28),
            cookingStartedAt=ago(23),
            readyAt=ago(5),
            isCredit=True,
            creditAmount=300,
            history=[(28, "new", None), (23, "cooking", None), (5, "ready", "Marked ready")],
        ),
        _seed_order(
            ago,
            id="ORD-004",
            source="zomato",
            customerName="Neha",
            customerPhone="+91-9888877777",
            items=[{"id": 1, "name": "Chicken Wrap", "qty": 1, "price": 120}],
            status="completed",
            specialInstructions="",
            consentWhatsapp=False,
            receivedAt=ago(90),
            cookingStartedAt=ago(84),
            readyAt=ago(72),
            paidAt=ago(70),
            paymentMethod="online",
            history=[(90, "new", None), (84, "cooking", None), (72, "ready", None), (70, "completed", "Paid")],
        ),
    ]


def _seed_customers(ago: Callable[[int], str]) -> list[dict[str, Any]]:
    return [
        {
            "id": "C-001",
            "name": "Raj Kumar",
            "phone": "+91-9876543210",
            "totalOrders": 15,
            "totalSpent": 4500,
            "firstVisit": "2025-01-01T10:00:00.000Z",
            "lastVisit": ago(6),
            "creditBalance": 500,
            "favoriteItem": "Chicken Wrap",
            "notes": "Prefers mild spice.",
        },
        {
            "id": "C-002",
            "name": "Aisha",
            "phone": "+91-9000012345",
            "totalOrders": 3,
            "totalSpent": 820,
            "firstVisit": "2025-01-12T09:30:00.000Z",
            "lastVisit": ago(42),
            "creditBalance": 0,
            "favoriteItem": "Chicken Popcorn",
        },
        {
            "id": "C-003",
            "name": "Suresh",
            "phone": "+91-9111122222",
            "totalOrders": 8,
            "totalSpent": 2150,
            "firstVisit": "2025-01-04T12:10:00.000Z",
            "lastVisit": ago(28),
            "creditBalance": 300,
            "favoriteItem": "Chicken Burger",
        },
    ]


def fresh_seed_state(now: Optional[datetime] = None) -> State:
    """A new demo state. Seed timestamps are relative to ``now``."""
    now = now or _now()

    def ago(minutes: int) -> str:
        return _iso(now - timedelta(minutes=minutes))

    return {
        "products": copy.deepcopy(SEED_PRODUCTS),
        "todaysSpecial": {"productId": 2, "label": "10% OFF TODAY"},
        "orders": _seed_orders(ago),
        "customers": _seed_customers(ago),
        "campaigns": [],
        "ui": {
            "demoBannerDismissed": False,
            "adminSidebarOpen": True,
            "lastPaymentMethod": "cash",
            "adminPin": "123456",
        },
        "customerSettings": {
            "activeTheme": "modern",
            "requireCustomerDetails": True,
            "enablePreOrder": True,
            "showProductDemand": True,
            "storeName": "Arabian Nights",
            "storeLogo": "",
            "bannerImage": "",
        },
        "company": {
            "name": "Arabian Nights",
            "email": "contact@arabiannights.in",
            "phone": "+91 98765 43210",
            "address": "Shop 12, Food Street",
            "city": "Gujarat",
            "zip": "388001",
            "gstin": "",
            "website": "",
            "restaurantType": "Multi-Cuisine",
        },
        "adminPreferences": {
            "sidebar": {"showCampaigns": True, "showCustomers": True},
            "dashboardFields": {
                "showName": True,
                "showNumber": True,
                "showArriveAt": True,
                "showSource": True,
                "showSpecialInstructions": True,
            },
            "alerts": {
                "zomato": {"enabled": True},
                "swiggy": {"enabled": True},
                "walkin": {"enabled": True},
                "reorder": {"enabled": True},
                "stock": {"enabled": True},
            },
        },
        "staff": [],
        "tables": [{"id": "T1", "name": "T-1", "type": "AC", "capacity": 4, "active": True}],
        "cart": [],
        "currentTable": None,
    }


# =============================================================================
# Loading
# =============================================================================

LIST_KEYS = ("staff", "tables", "products", "orders", "customers", "campaigns")


def normalize_loaded_state(raw: Any, now: Optional[datetime] = None) -> State:
    """Fill a stored state with seed defaults for anything missing or malformed."""
    base = fresh_seed_state(now)
    raw = raw if isinstance(raw, dict) else {}

    def section(key: str) -> dict[str, Any]:
        value = raw.get(key)
        return value if isinstance(value, dict) else {}

    prefs = section("adminPreferences")
    state = {**base, **copy.deepcopy(raw)}
    state["customerSettings"] = {**base["customerSettings"], **section("customerSettings")}
    state["company"] = {**base["company"], **section("company")}
    state["adminPreferences"] = {
        name: {**base["adminPreferences"][name], **(prefs.get(name) if isinstance(prefs.get(name), dict) else {})}
        for name in ("sidebar", "dashboardFields", "alerts")
    }
    state["ui"] = {**base["ui"], **section("ui")}
    for key in LIST_KEYS:
        state[key] = copy.deepcopy(raw[key]) if isinstance(raw.get(key), list) else base[key]
    state["cart"] = copy.deepcopy(raw["cart"]) if isinstance(raw.get("cart"), list) else []
    state["currentTable"] = raw.get("currentTable") or None
    state["todaysSpecial"] = raw.get("todaysSpecial") or base["todaysSpecial"]
    return state


def load_state(raw: Optional[str], now: Optional[datetime] = None) -> State:
    """Parse a stored JSON state. Empty or unreadable input gives a fresh seed."""
    if not raw:
        return fresh_seed_state(now)
    try:
        parsed = json.loads(raw)
    except ValueError as e:
        logger.warning("Stored demo state unreadable, reseeding", error=str(e))
        return fresh_seed_state(now)
    if not parsed:
        return fresh_seed_state(now)
    return normalize_loaded_state(parsed, now)


# =============================================================================
# Reducer
# =============================================================================


def _replace(items: list[dict[str, Any]], match: Callable[[dict[str, Any]], bool], update: Callable[[dict[str, Any]], dict[str, Any]]) -> list[dict[str, Any]]:
    return [update(item) if match(item) else item for item in items]


def _place_order(state: State, payload: dict[str, Any]) -> State:
    table_name = None
    table_id = payload.get("tableId")
    if table_id:
        table = next((t for t in state["tables"] if t["id"] == table_id), None)
        if table is not None:
            table_name = table["name"]

    customer_name = payload.get("customerName")
    if table_name:
        if not customer_name or customer_name == "Guest":
            customer_name = f"{table_name} (Guest)"
        else:
            customer_name = f"{customer_name} • {table_name}"

    total = order_total(payload["items"])
    order = {
        **payload,
        "customerName": customer_name,
        "customerPhone": normalize_phone(payload.get("customerPhone")),
        "total": total,
        "statusHistory": [
            {
                "at": payload["receivedAt"],
                "status": payload["status"],
                "note": f"Order placed via {table_name or 'Counter'}",
            }
        ],
    }

    customers = state["customers"]
    phone = order["customerPhone"]
    if not any(normalize_phone(c["phone"]) == phone for c in customers):
        customers = [
            {
                "id": f"C-{len(customers) + 1:03d}",
                "name": order["customerName"],
                "phone": phone,
                "totalOrders": 1,
                "totalSpent": total,
                "firstVisit": order["receivedAt"],
                "lastVisit": order["receivedAt"],
                "favoriteItem": "New",
                "creditBalance": total if order.get("isCredit") else 0,
            },
            *customers,
        ]
    return {**state, "orders": [order, *state["orders"]], "customers": customers, "cart": []}


def _set_payment(state: State, action: Action) -> State:
    is_credit = bool(action.get("is_credit"))
    method = action["method"]
    credit_amount = action.get("credit_amount")

    def pay(order: dict[str, Any]) -> dict[str, Any]:
        amount = credit_amount or order["total"]
        return {
            **order,
            "isCredit": is_credit,
            "creditAmount": max(0, amount) if is_credit else 0,
            "paymentMethod": method,
            "paidAt": None if is_credit else action["at"],
            "status": order["status"] if is_credit else "completed",
        }

    return {
        **state,
        "ui": {**state["ui"], "lastPaymentMethod": method},
        "orders": _replace(state["orders"], lambda o: o["id"] == action["order_id"], pay),
    }


def _cart_add(state: State, product_id: int) -> State:
    if any(i["productId"] == product_id for i in state["cart"]):
        cart = _replace(state["cart"], lambda i: i["productId"] == product_id, lambda i: {**i, "qty": i["qty"] + 1})
    else:
        cart = [*state["cart"], {"productId": product_id, "qty": 1}]
    return {**state, "cart": cart}


def _cart_remove(state: State, product_id: int) -> State:
    existing = next((i for i in state["cart"] if i["productId"] == product_id), None)
    if existing is not None and existing["qty"] > 1:
        cart = _replace(state["cart"], lambda i: i["productId"] == product_id, lambda i: {**i, "qty": i["qty"] - 1})
    else:
        cart = [i for i in state["cart"] if i["productId"] != product_id]
    return {**state, "cart": cart}


def _add_product(state: State, payload: dict[str, Any]) -> State:
    next_id = max((p["id"] for p in state["products"]), default=0) + 1
    product = {
        "id": next_id,
        "name": payload["name"],
        "price": payload["price"],
        "costPrice": payload.get("costPrice", 0),
        "category": payload["category"],
        "imageUrl": payload.get("imageUrl"),
        "outOfStock": False,
        "isVeg": payload.get("isVeg", True),
    }
    return {**state, "products": [*state["products"], product]}


def _update_admin_prefs(state: State, payload: dict[str, Any]) -> State:
    current = state["adminPreferences"]
    prefs = {**current, **payload}
    for name in ("sidebar", "dashboardFields", "alerts"):
        prefs[name] = {**current.get(name, {}), **(payload.get(name) or {})}
    return {**state, "adminPreferences": prefs}


def demo_reducer(state: State, action: Action, now: Optional[datetime] = None) -> State:
    """Return the next state. The input state is never mutated."""
    kind = action.get("type")

    if kind == "RESET":
        return fresh_seed_state(now)
    if kind == "DISMISS_BANNER":
        return {**state, "ui": {**state["ui"], "demoBannerDismissed": True}}
    if kind == "TOGGLE_STOCK":
        return {**state, "products": _replace(
            state["products"], lambda p: p["id"] == action["product_id"], lambda p: {**p, "outOfStock": not p.get("outOfStock")}
        )}
    if kind == "SET_TODAYS_SPECIAL":
        return {**state, "todaysSpecial": {"productId": action["product_id"], "label": action["label"]}}
    if kind == "UPDATE_PRODUCT":
        return {**state, "products": _replace(
            state["products"], lambda p: p["id"] == action["product_id"], lambda p: {**p, **action["patch"]}
        )}
    if kind == "DELETE_PRODUCT":
        return {**state, "products": [p for p in state["products"] if p["id"] != action["product_id"]]}
    if kind == "ADD_PRODUCT":
        return _add_product(state, action["payload"])
    if kind == "SET_ADMIN_PIN":
        return {**state, "ui": {**state["ui"], "adminPin": action["pin"]}}
    if kind == "SEND_CAMPAIGN":
        return {**state, "campaigns": [action["payload"], *state["campaigns"]]}
    if kind == "PLACE_ORDER":
        return _place_order(state, action["payload"])
    if kind == "UPDATE_ORDER_STATUS":
        entry = {"at": action["at"], "status": action["status"]}
        if action.get("note"):
            entry["note"] = action["note"]
        return {**state, "orders": _replace(
            state["orders"],
            lambda o: o["id"] == action["order_id"],
            lambda o: {**o, "status": action["status"], "statusHistory": [*o["statusHistory"], entry]},
        )}
    if kind == "SET_PAYMENT":
        return _set_payment(state, action)
    if kind == "MARK_CREDIT_PAID":
        phone = normalize_phone(action["phone"])
        return {**state, "customers": _replace(
            state["customers"],
            lambda c: normalize_phone(c["phone"]) == phone,
            lambda c: {**c, "creditBalance": max(0, c["creditBalance"] - action["amount"])},
        )}
    if kind == "UPSERT_CUSTOMER_NOTE":
        phone = normalize_phone(action["phone"])
        return {**state, "customers": _replace(
            state["customers"], lambda c: normalize_phone(c["phone"]) == phone, lambda c: {**c, "notes": action["notes"]}
        )}
    if kind == "UPDATE_CUSTOMER_SETTINGS":
        return {**state, "customerSettings": {**state["customerSettings"], **action["payload"]}}
    if kind == "CART_ADD":
        return _cart_add(state, action["product_id"])
    if kind == "CART_REMOVE":
        return _cart_remove(state, action["product_id"])
    if kind == "CART_CLEAR":
        return {**state, "cart": []}
    if kind == "UPDATE_COMPANY":
        return {**state, "company": {**state["company"], **action["payload"]}}
    if kind == "ADD_STAFF":
        member = {
            "id": f"S-{random.randrange(10000)}",
            **action["payload"],
            "active": True,
            "joinedAt": _iso(now or _now()),
        }
        return {**state, "staff": [*state["staff"], member]}
    if kind == "UPDATE_STAFF":
        return {**state, "staff": _replace(state["staff"], lambda s: s["id"] == action["id"], lambda s: {**s, **action["payload"]})}
    if kind == "TOGGLE_STAFF":
        return {**state, "staff": _replace(state["staff"], lambda s: s["id"] == action["id"], lambda s: {**s, "active": not s["active"]})}
    if kind == "DELETE_STAFF":
        return {**state, "staff": [s for s in state["staff"] if s["id"] != action["id"]]}
    if kind == "ADD_TABLE":
        table = {"id": f"T-{random.randrange(10000)}", **action["payload"], "active": True}
        return {**state, "tables": [*state["tables"], table]}
    if kind == "UPDATE_TABLE":
        return {**state, "tables": _replace(state["tables"], lambda t: t["id"] == action["id"], lambda t: {**t, **action["payload"]})}
    if kind == "DELETE_TABLE":
        return {**state, "tables": [t for t in state["tables"] if t["id"] != action["id"]]}
    if kind == "SET_CURRENT_TABLE":
        return {**state, "currentTable": action["table_id"]}
    if kind == "UPDATE_ADMIN_PREFS":
        return _update_admin_prefs(state, action["payload"])

    logger.debug("Unknown demo action ignored", action_type=kind)
    return state


# =============================================================================
# Store
# =============================================================================


class DemoStore:
    """
    Reducer state bound to a storage mapping (a dict, a shelf, ...).

    Every dispatch writes the new state back as JSON under DEMO_STORAGE_KEY.
    """

    def __init__(self, storage: Optional[MutableMapping[str, str]] = None, now: Optional[Callable[[], datetime]] = None):
        self.storage = storage if storage is not None else {}
        self._now = now or _now
        self.state = load_state(self.storage.get(DEMO_STORAGE_KEY), self._now())
        self._persist()

    def _persist(self) -> None:
        self.storage[DEMO_STORAGE_KEY] = json.dumps(self.state, ensure_ascii=False)

    def dispatch(self, action: Action) -> State:
        self.state = demo_reducer(self.state, action, self._now())
        self._persist()
        return self.state

    def reset(self) -> State:
        return self.dispatch({"type": "RESET"})

    def clear_demo_storage(self) -> State:
        """Forget the saved demo and start from a fresh seed."""
        self.storage.pop(DEMO_STORAGE_KEY, None)
        return self.reset()
