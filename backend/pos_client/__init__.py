"""
Staff-side client for the restaurant POS API.

- api_client: httpx client with restaurant scoping and token refresh
- qr_notification: auto-accepting QR order notifications
- order_events: Redis listener feeding the notification queue
- demo_store: storage-backed reducer for demo mode
- printing: kitchen slip and bill HTML
"""

from .api_client import ApiClient, ApiError, ApiResponse, TokenRefreshError
from .qr_notification import QROrderNotification, QROrderPayload, QROrderQueue
from .order_events import OrderEventListener
from .demo_store import DemoStore, demo_reducer, fresh_seed_state, load_state, make_order_id
from .printing import bill_html, format_inr, kitchen_slip_html

__all__ = [
    "ApiClient",
    "ApiError",
    "ApiResponse",
    "TokenRefreshError",
    "QROrderNotification",
    "QROrderPayload",
    "QROrderQueue",
    "OrderEventListener",
    "DemoStore",
    "demo_reducer",
    "fresh_seed_state",
    "load_state",
    "make_order_id",
    "bill_html",
    "format_inr",
    "kitchen_slip_html",
]
