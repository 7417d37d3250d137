"""
Tests for thermal printer HTML and rupee formatting.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from pos_client.printing import bill_html, format_inr, kitchen_slip_html

NOW = datetime(2025, 2, 1, 19, 5)


@pytest.fixture
def order():
    return {
        "id": 42,
        "order_number": "#ORD-AB11",
        "table_number": "T3",
        "customer_name": "Asha",
        "order_type": "DINE_IN",
        "source": "QR",
        "total_cents": 70800,
        "payment_method": "UPI",
        "payment_status": "PAID",
        "items": [
            {"name_snapshot": "Paneer Tikka", "price_snapshot_cents": 24000, "quantity": 1},
            {"name_snapshot": "Chicken 65", "price_snapshot_cents": 23400, "quantity": 2},
        ],
    }


class TestFormatInr:
    @pytest.mark.parametrize(
        "amount,expected",
        [
            (0, "₹0"),
            (999, "₹999"),
            (1000, "₹1,000"),
            (100000, "₹1,00,000"),
            (12345678, "₹1,23,45,678"),
            (123456.5, "₹1,23,456.5"),
            (10.005, "₹10.01"),
            (240.0, "₹240"),
            ("1500.25", "₹1,500.25"),
            (Decimal("-1234.5"), "-₹1,234.5"),
        ],
    )
    def test_formats(self, amount, expected):
        assert format_inr(amount) == expected

    @pytest.mark.parametrize("amount", [None, True, float("nan"), float("inf"), "abc", ""])
    def test_invalid_amounts_are_zero(self, amount):
        assert format_inr(amount) == "₹0"


class TestKitchenSlip:
    def test_contents(self, order):
        html = kitchen_slip_html(order, now=NOW)

        assert "QR ORDER" in html
        assert "<strong>Order:</strong> #ORD-AB11" in html
        assert "<strong>Table:</strong> T3" in html
        assert "07:05 PM" in html
        assert "01 Feb 2025" in html
        assert "2x Chicken 65" in html
        assert "--- Kitchen Copy ---" in html
        assert "₹" not in html

    def test_fallbacks(self):
        html = kitchen_slip_html(
            {"id": "abcdef", "order_type": "TAKEAWAY", "items": [{"name": "Chai", "qty": 3}]},
            title="REORDER",
            now=NOW,
        )
        assert "#CDEF" in html
        assert "<strong>Table:</strong> Takeaway" in html
        assert "TAKEAWAY" in html
        assert "3x Chai" in html
        assert "<h1>REORDER</h1>" in html

    def test_order_number_without_hash(self, order):
        order["order_number"] = "ORD-AB11"
        assert "#ORD-AB11" in kitchen_slip_html(order, now=NOW)
        assert "##" not in kitchen_slip_html({**order, "order_number": "#X"}, now=NOW)

    def test_text_is_escaped(self, order):
        order["customer_name"] = "<script>alert(1)</script>"
        order["notes"] = "Less oil & salt"
        html = kitchen_slip_html(order, now=NOW)
        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "Less oil &amp; salt" in html


class TestBill:
    def test_totals(self, order):
        html = bill_html(order, store_name="Demo Kitchen", address="12 MG Road", now=NOW)

        assert "<h1>Demo Kitchen</h1>" in html
        assert "<p>12 MG Road</p>" in html
        assert "₹468" in html
        assert "<span>Subtotal</span> <span>₹708</span>" in html
        assert "<span>TOTAL PAYABLE</span> <span>₹708</span>" in html
        assert "Discount" not in html
        assert "<span>UPI</span>" in html
        assert "Thank you for dining with us!" in html

    def test_discount_line(self, order):
        order["discount_cents"] = 5000
        html = bill_html(order, now=NOW)
        assert "<span>Subtotal</span> <span>₹758</span>" in html
        assert "<span>- ₹50</span>" in html

    def test_rupee_fallbacks(self):
        html = bill_html(
            {
                "total_amount": 150.5,
                "items": [{"name": "Wrap", "qty": 1, "price_snapshot": "150.5"}],
            },
            now=NOW,
        )
        assert "<span>TOTAL PAYABLE</span> <span>₹150.5</span>" in html
        assert "Customer: Guest" in html
        assert "<span>PENDING</span>" in html
        assert "Table: Takeaway" in html

    def test_non_string_fields(self):
        order = {
            "id": 7,
            "order_number": 1042,
            "table_number": 5,
            "customer_name": 9876500001,
            "notes": 0,
            "order_type": "DINE_IN",
            "total_cents": 12000,
            "items": [{"name": 65, "quantity": "2", "price_snapshot_cents": 6000}],
        }

        slip = kitchen_slip_html(order, now=NOW)
        assert "<strong>Table:</strong> 5" in slip
        assert "<strong>Customer:</strong> 9876500001" in slip
        assert "2x 65" in slip

        bill = bill_html(order, now=NOW)
        assert "Order: #1042" in bill
        assert "Table: 5" in bill
        assert "<span>TOTAL PAYABLE</span> <span>₹120</span>" in bill

    def test_styles_are_not_escaped(self, order):
        assert "font-family: 'Courier New', monospace" in bill_html(order, now=NOW)
        assert "font-family: 'Courier New', monospace" in kitchen_slip_html(order, now=NOW)
