"""
Printable HTML for 80mm thermal printers.

Orders are dicts as returned by /api/orders (amounts in cents). Rupee
fields (``total_amount``, ``price_snapshot``) are accepted as a fallback.
"""

from __future__ import annotations

import math
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

from jinja2 import DictLoader, Environment, select_autoescape

RUPEE = "₹"

KITCHEN_SLIP_CSS = """
        @page { margin: 5mm; size: 80mm auto; }
        body { font-family: 'Courier New', monospace; margin: 0; padding: 8px; font-size: 14px; width: 76mm; }
        .header { text-align: center; border-bottom: 2px dashed #000; padding-bottom: 8px; margin-bottom: 8px; }
        .header h1 { font-size: 18px; margin: 0; letter-spacing: 2px; }
        .badge { text-align: center; background: #000; color: #fff; padding: 4px 8px; border-radius: 4px; font-size: 12px; display: inline-block; margin-bottom: 6px; }
        .info { margin-bottom: 8px; }
        .info p { margin: 2px 0; font-size: 13px; }
        .items { border-top: 1px dashed #000; border-bottom: 1px dashed #000; padding: 8px 0; }
        .items table { width: 100%; }
        .footer { text-align: center; margin-top: 8px; font-size: 11px; color: #666; }
"""

BILL_CSS = """
        @page { margin: 5mm; size: 80mm auto; }
        body { font-family: 'Courier New', monospace; margin: 0; padding: 10px; font-size: 12px; width: 76mm; color: #000; }
        .header { text-align: center; margin-bottom: 10px; }
        .header h1 { font-size: 16px; margin: 0; font-weight: bold; text-transform: uppercase; }
        .header p { margin: 2px 0; font-size: 11px; }
        .divider { border-top: 1px dashed #000; margin: 8px 0; }
        .info { margin-bottom: 8px; font-size: 11px; }
        .info p { margin: 2px 0; display: flex; justify-content: space-between; }
        .items table { width: 100%; border-collapse: collapse; }
        .items th { text-align: left; border-bottom: 1px dashed #000; padding: 4px 0; font-size: 11px; }
        .items td { padding: 4px 0; vertical-align: top; font-size: 12px; }
        .totals { margin-top: 8px; }
        .totals p { display: flex; justify-content: space-between; margin: 4px 0; font-size: 12px; }
        .grand-total { font-weight: bold; font-size: 14px; border-top: 1px dashed #000; border-bottom: 1px dashed #000; padding: 6px 0; margin-top: 6px; }
        .footer { text-align: center; margin-top: 15px; font-size: 10px; }
"""


def _group_indian(digits: str) -> str:
    """12345678 -> 1,23,45,678"""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups) + "," + tail


def format_inr(amount: Any) -> str:
    """
    Rupee amount with Indian digit grouping and at most two decimals.

    >>> format_inr(123456.5)
    '₹1,23,456.5'
    """
    if amount is None or isinstance(amount, bool):
        return f"{RUPEE}0"
    if isinstance(amount, float) and not math.isfinite(amount):
        return f"{RUPEE}0"
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        return f"{RUPEE}0"
    if not value.is_finite():
        return f"{RUPEE}0"

    value = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):.2f}".partition(".")
    fraction = fraction.rstrip("0")
    text = _group_indian(whole) + (f".{fraction}" if fraction else "")
    return f"{sign}{RUPEE}{text}"


def _rupees(data: dict[str, Any], cents_key: str, rupee_key: str) -> float:
    if data.get(cents_key) is not None:
        return data[cents_key] / 100
    try:
        return float(data.get(rupee_key) or 0)
    except (TypeError, ValueError):
        return 0.0


def _order_number(order: dict[str, Any]) -> str:
    number = order.get("order_number")
    if number:
        number = str(number)
        return number if number.startswith("#") else f"#{number}"
    if order.get("id") is not None:
        return f"#{str(order['id'])[-4:].upper()}"
    return "#????"


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _table_label(order: dict[str, Any]) -> str:
    table = order.get("table") if isinstance(order.get("table"), dict) else {}
    return _text(order.get("table_number") or table.get("table_number") or "Takeaway")


def _item_name(item: dict[str, Any]) -> str:
    product = item.get("product") if isinstance(item.get("product"), dict) else {}
    return _text(item.get("name_snapshot") or product.get("name") or item.get("name") or "Item")


def _item_quantity(item: dict[str, Any]) -> int:
    try:
        return int(item.get("quantity") or item.get("qty") or 0)
    except (TypeError, ValueError):
        return 0


def _unit_price(item: dict[str, Any]) -> float:
    if item.get("price_snapshot_cents") is not None:
        return item["price_snapshot_cents"] / 100
    return _rupees(item, "unit_price_cents", "price_snapshot" if item.get("price_snapshot") else "unit_price")


def _stamp(now: Optional[datetime]) -> tuple[str, str]:
    now = now or datetime.now()
    return now.strftime("%I:%M %p"), now.strftime("%d %b %Y")


KITCHEN_SLIP_TEMPLATE = """<!DOCTYPE html><html><head><title>{{ title }}</title>
    <style>{{ css | safe }}    </style></head><body>
        <div class="header">
            <div class="badge">{{ badge }}</div>
            <h1>{{ title }}</h1>
        </div>
        <div class="info">
            <p><strong>Order:</strong> {{ order_number }}</p>
            <p><strong>Table:</strong> {{ table }}</p>
            <p><strong>Time:</strong> {{ time_str }}</p>
            <p><strong>Date:</strong> {{ date_str }}</p>
            {% if customer_name %}
            <p><strong>Customer:</strong> {{ customer_name }}</p>
            {% endif %}
            {% if notes %}
            <p><strong>Note:</strong> {{ notes }}</p>
            {% endif %}
        </div>
        <div class="items"><table>
            {% for item in items %}
            <tr><td style="padding:4px 0;font-size:14px;">{{ item.quantity }}x {{ item.name }}</td></tr>
            {% endfor %}
        </table></div>
        <div class="footer"><p>--- Kitchen Copy ---</p></div>
    </body></html>"""

BILL_TEMPLATE = """<!DOCTYPE html><html><head><title>Bill</title>
    <style>{{ css | safe }}    </style></head><body>
        <div class="header">
            <h1>{{ store_name }}</h1>
            {% if address %}
            <p>{{ address }}</p>
            {% endif %}
        </div>

        <div class="divider"></div>

        <div class="info">
            <p><span>Order: {{ order_number }}</span> <span>{{ date_str }} {{ time_str }}</span></p>
            <p><span>Table: {{ table }}</span> <span>Type: {{ order_type }}</span></p>
            <p><span>Customer: {{ customer_name or "Guest" }}</span></p>
        </div>

        <div class="divider"></div>

        <div class="items">
            <table>
                <thead><tr><th>Item</th><th style="text-align:right;">Amount</th></tr></thead>
                <tbody>
                {% for item in items %}
                <tr>
                    <td style="padding:4px 0;">{{ item.quantity }}x {{ item.name }}</td>
                    <td style="text-align:right;">{{ item.amount | inr }}</td>
                </tr>
                {% endfor %}
                </tbody>
            </table>
        </div>

        <div class="divider"></div>

        <div class="totals">
            <p><span>Subtotal</span> <span>{{ subtotal | inr }}</span></p>
            {% if discount > 0 %}
            <p><span>Discount</span> <span>- {{ discount | inr }}</span></p>
            {% endif %}
            <p class="grand-total"><span>TOTAL PAYABLE</span> <span>{{ total | inr }}</span></p>
            <p style="margin-top:8px;"><span>Payment Method</span> <span>{{ payment_method or "PENDING" }}</span></p>
            <p><span>Status</span> <span>{{ payment_status }}</span></p>
        </div>

        <div class="footer">
            <p>Thank you for dining with us!</p>
            <p>Visit Again</p>
        </div>
    </body></html>"""

templates = Environment(
    loader=DictLoader({"kitchen_slip.html": KITCHEN_SLIP_TEMPLATE, "bill.html": BILL_TEMPLATE}),
    autoescape=select_autoescape(["html", "xml"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
templates.filters["inr"] = format_inr


def kitchen_slip_html(order: dict[str, Any], title: str = "KITCHEN ORDER", now: Optional[datetime] = None) -> str:
    """Kitchen copy: order reference, table, time and item quantities. No prices."""
    time_str, date_str = _stamp(now)
    badge = "QR ORDER" if order.get("source") == "QR" else (order.get("order_type") or "ORDER")

    return templates.get_template("kitchen_slip.html").render(
        css=KITCHEN_SLIP_CSS,
        title=_text(title),
        badge=_text(badge),
        order_number=_order_number(order),
        table=_table_label(order),
        time_str=time_str,
        date_str=date_str,
        customer_name=_text(order.get("customer_name")),
        notes=_text(order.get("notes")),
        items=[
            {"quantity": _item_quantity(item), "name": _item_name(item)}
            for item in order.get("items") or []
        ],
    )


def bill_html(
    order: dict[str, Any],
    store_name: str = "Restaurant",
    address: str = "",
    now: Optional[datetime] = None,
) -> str:
    """
    Customer bill. The subtotal is the payable total plus the discount; the
    discount line only appears when there is one.
    """
    time_str, date_str = _stamp(now)
    total = _rupees(order, "total_cents", "total_amount")
    discount = _rupees(order, "discount_cents", "discount_amount")

    return templates.get_template("bill.html").render(
        css=BILL_CSS,
        store_name=_text(store_name),
        address=_text(address),
        order_number=_order_number(order),
        table=_table_label(order),
        order_type=_text(order.get("order_type")),
        customer_name=_text(order.get("customer_name")),
        time_str=time_str,
        date_str=date_str,
        items=[
            {
                "quantity": _item_quantity(item),
                "name": _item_name(item),
                "amount": _unit_price(item) * _item_quantity(item),
            }
            for item in order.get("items") or []
        ],
        subtotal=total + discount,
        discount=discount,
        total=total,
        payment_method=_text(order.get("payment_method")),
        payment_status=_text(order.get("payment_status")),
    )
