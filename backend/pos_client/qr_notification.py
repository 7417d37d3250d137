"""
QR order notifications for the staff portals.

A notification counts down and auto-accepts the order when the countdown
runs out, unless staff accepted or rejected it first. The queue keeps one
notification per order and drops it once dismissed.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

from shared.config.logging import client_logger as logger

AUTO_ACCEPT_DISMISS_DELAY = 0.5
MANUAL_DISMISS_DELAY = 0.3

AcceptCallback = Callable[[int, bool], Union[None, Awaitable[None]]]
OrderCallback = Callable[[int], Union[None, Awaitable[None]]]
DismissCallback = Callable[[], Union[None, Awaitable[None]]]


async def _call(callback: Optional[Callable[..., Any]], *args: Any) -> None:
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


@dataclass(frozen=True)
class QROrderPayload:
    order_id: int
    order_number: str
    table_number: Optional[str]
    customer_name: str
    total_amount: float
    items_count: int
    timestamp: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "QROrderPayload":
        """Build from a ``new_qr_order`` event body. Money falls back to cents."""
        total = data.get("total_amount")
        if total is None:
            total = (data.get("total_cents") or 0) / 100
        return cls(
            order_id=int(data["order_id"]),
            order_number=str(data.get("order_number") or ""),
            table_number=data.get("table_number"),
            customer_name=data.get("customer_name") or "",
            total_amount=float(total),
            items_count=int(data.get("items_count") or 0),
            timestamp=str(data.get("timestamp") or ""),
        )


class QROrderNotification:
    """
    Countdown for one incoming QR order.

    Usage:
        notification = QROrderNotification(payload, on_accept=accept_order, on_reject=reject_order)
        notification.start()
        ...
        await notification.accept()
    """

    def __init__(
        self,
        payload: QROrderPayload,
        on_accept: AcceptCallback,
        on_reject: OrderCallback,
        on_dismiss: Optional[DismissCallback] = None,
        auto_accept_seconds: int = 5,
        tick_seconds: float = 1.0,
    ):
        self.payload = payload
        self.on_accept = on_accept
        self.on_reject = on_reject
        self.on_dismiss = on_dismiss
        self.auto_accept_seconds = auto_accept_seconds
        self.tick_seconds = tick_seconds
        self.time_left = auto_accept_seconds
        self.is_processing = False
        self.dismissed = False
        self.auto_accepted = False
        self._countdown: asyncio.Task | None = None
        self._dismiss_task: asyncio.Task | None = None

    @property
    def order_id(self) -> int:
        return self.payload.order_id

    @property
    def progress(self) -> float:
        """Remaining countdown as a percentage."""
        if self.auto_accept_seconds <= 0:
            return 0.0
        return self.time_left / self.auto_accept_seconds * 100

    def start(self) -> None:
        if self._countdown is None:
            self._countdown = asyncio.create_task(self._run_countdown())

    def stop(self) -> None:
        if self._countdown is not None and not self._countdown.done():
            self._countdown.cancel()

    async def _run_countdown(self) -> None:
        while True:
            await asyncio.sleep(self.tick_seconds)
            if self.time_left <= 1:
                if not self.is_processing:
                    self.is_processing = True
                    self.auto_accepted = True
                    logger.info("QR order auto-accepted", order_id=self.order_id)
                    await _call(self.on_accept, self.order_id, True)
                    self._schedule_dismiss(AUTO_ACCEPT_DISMISS_DELAY)
                return
            self.time_left -= 1

    async def accept(self) -> None:
        """Accept before the countdown ends. No-op once processing."""
        if self.is_processing:
            return
        self.is_processing = True
        self.stop()
        await _call(self.on_accept, self.order_id, False)
        self._schedule_dismiss(MANUAL_DISMISS_DELAY)

    async def reject(self) -> None:
        if self.is_processing:
            return
        self.is_processing = True
        self.stop()
        await _call(self.on_reject, self.order_id)
        self._schedule_dismiss(MANUAL_DISMISS_DELAY)

    def _schedule_dismiss(self, delay: float) -> None:
        self._dismiss_task = asyncio.create_task(self._dismiss_after(delay))

    async def _dismiss_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self.dismissed = True
        await _call(self.on_dismiss)

    async def wait_closed(self) -> None:
        """Wait until the notification has been dismissed."""
        if self._countdown is not None:
            await asyncio.gather(self._countdown, return_exceptions=True)
        if self._dismiss_task is not None:
            await self._dismiss_task

    def close(self) -> None:
        """
        Cancel pending work without calling any callback. A countdown that
        is already inside the accept callback is left to finish.
        """
        if not self.is_processing:
            self.stop()
        if self._dismiss_task is not None and not self._dismiss_task.done():
            self._dismiss_task.cancel()


class QROrderQueue:
    """Active notifications, one per order id."""

    def __init__(
        self,
        on_accept: AcceptCallback,
        on_reject: OrderCallback,
        auto_accept_seconds: int = 5,
        tick_seconds: float = 1.0,
    ):
        self.on_accept = on_accept
        self.on_reject = on_reject
        self.auto_accept_seconds = auto_accept_seconds
        self.tick_seconds = tick_seconds
        self._active: dict[int, QROrderNotification] = {}

    def __len__(self) -> int:
        return len(self._active)

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._active

    @property
    def notifications(self) -> list[QROrderNotification]:
        return list(self._active.values())

    def get(self, order_id: int) -> Optional[QROrderNotification]:
        return self._active.get(order_id)

    def push(self, payload: QROrderPayload) -> Optional[QROrderNotification]:
        """Show a notification for the order. Returns None for a duplicate."""
        if payload.order_id in self._active:
            logger.debug("Duplicate QR order notification ignored", order_id=payload.order_id)
            return None

        def dismiss() -> None:
            self._active.pop(payload.order_id, None)

        notification = QROrderNotification(
            payload,
            on_accept=self.on_accept,
            on_reject=self.on_reject,
            on_dismiss=dismiss,
            auto_accept_seconds=self.auto_accept_seconds,
            tick_seconds=self.tick_seconds,
        )
        self._active[payload.order_id] = notification
        notification.start()
        return notification

    def remove(self, order_id: int) -> None:
        """Drop a notification, e.g. when another device handled the order."""
        notification = self._active.pop(order_id, None)
        if notification is not None:
            notification.close()

    def clear(self) -> None:
        for notification in self._active.values():
            notification.close()
        self._active.clear()
