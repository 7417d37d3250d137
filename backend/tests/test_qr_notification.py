"""
Tests for QR order notifications and the pending-orders event channel.
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from pos_client.order_events import OrderEventListener
from pos_client.qr_notification import QROrderNotification, QROrderPayload, QROrderQueue
from shared.config.settings import settings
from shared.infrastructure.redis import OrderEvent, channel_pending_orders, publish_order_event

TICK = 0.01


@pytest.fixture(autouse=True)
def fast_dismiss(monkeypatch):
    monkeypatch.setattr("pos_client.qr_notification.AUTO_ACCEPT_DISMISS_DELAY", 0)
    monkeypatch.setattr("pos_client.qr_notification.MANUAL_DISMISS_DELAY", 0)


def make_payload(order_id: int = 1) -> QROrderPayload:
    return QROrderPayload(
        order_id=order_id,
        order_number="#ORD-AB11",
        table_number="T1",
        customer_name="Asha",
        total_amount=480.0,
        items_count=1,
        timestamp="2024-01-01T10:00:00+00:00",
    )


class TestPayload:
    def test_amount_falls_back_to_cents(self):
        payload = QROrderPayload.from_dict({"order_id": "5", "total_cents": 12345})
        assert payload.order_id == 5
        assert payload.total_amount == 123.45
        assert payload.table_number is None

    def test_missing_order_id(self):
        with pytest.raises(KeyError):
            QROrderPayload.from_dict({"total_amount": 10})


class TestNotification:
    @pytest.mark.asyncio
    async def test_auto_accepts_when_countdown_ends(self):
        on_accept = AsyncMock()
        on_reject = AsyncMock()
        notification = QROrderNotification(
            make_payload(), on_accept, on_reject, auto_accept_seconds=3, tick_seconds=TICK
        )
        assert notification.progress == 100

        notification.start()
        await notification.wait_closed()

        on_accept.assert_awaited_once_with(1, True)
        on_reject.assert_not_called()
        assert notification.auto_accepted is True
        assert notification.dismissed is True
        assert notification.time_left == 1

    @pytest.mark.asyncio
    async def test_manual_accept_stops_countdown(self):
        on_accept = MagicMock()
        dismissed = MagicMock()
        notification = QROrderNotification(
            make_payload(), on_accept, MagicMock(), on_dismiss=dismissed, auto_accept_seconds=100, tick_seconds=TICK
        )
        notification.start()

        await notification.accept()
        await notification.accept()
        await notification.wait_closed()

        on_accept.assert_called_once_with(1, False)
        dismissed.assert_called_once_with()
        assert notification.auto_accepted is False

    @pytest.mark.asyncio
    async def test_reject_blocks_auto_accept(self):
        on_accept = MagicMock()
        on_reject = MagicMock()
        notification = QROrderNotification(
            make_payload(), on_accept, on_reject, auto_accept_seconds=2, tick_seconds=TICK
        )
        notification.start()

        await notification.reject()
        await notification.wait_closed()
        await asyncio.sleep(TICK * 5)

        on_reject.assert_called_once_with(1)
        on_accept.assert_not_called()


class TestQueue:
    @pytest.mark.asyncio
    async def test_duplicate_orders_are_ignored(self):
        queue = QROrderQueue(MagicMock(), MagicMock(), auto_accept_seconds=100, tick_seconds=TICK)

        assert queue.push(make_payload(1)) is not None
        assert queue.push(make_payload(1)) is None
        queue.push(make_payload(2))

        assert len(queue) == 2
        assert 1 in queue
        queue.clear()
        assert len(queue) == 0

    @pytest.mark.asyncio
    async def test_dismissed_notification_leaves_queue(self):
        on_accept = MagicMock()
        queue = QROrderQueue(on_accept, MagicMock(), auto_accept_seconds=100, tick_seconds=TICK)
        notification = queue.push(make_payload(1))

        await notification.accept()
        await notification.wait_closed()

        assert 1 not in queue
        on_accept.assert_called_once_with(1, False)

    @pytest.mark.asyncio
    async def test_remove_cancels_without_callbacks(self):
        on_accept = MagicMock()
        queue = QROrderQueue(on_accept, MagicMock(), auto_accept_seconds=2, tick_seconds=TICK)
        queue.push(make_payload(1))

        queue.remove(1)
        await asyncio.sleep(TICK * 5)

        assert len(queue) == 0
        on_accept.assert_not_called()

    @pytest.mark.asyncio
    async def test_remove_during_auto_accept_lets_callback_finish(self):
        steps = []
        queue = None

        async def on_accept(order_id, auto):
            steps.append("accepting")
            queue.remove(order_id)
            await asyncio.sleep(0)
            steps.append("accepted")

        queue = QROrderQueue(on_accept, MagicMock(), auto_accept_seconds=1, tick_seconds=TICK)
        notification = queue.push(make_payload(1))

        await notification.wait_closed()

        assert steps == ["accepting", "accepted"]
        assert notification.auto_accepted is True
        assert 1 not in queue


class TestOrderEventListener:
    def _event(self, event_type: str, restaurant_id: int = 11, **data) -> str:
        return OrderEvent(type=event_type, restaurant_id=restaurant_id, data=data).to_json()

    @pytest.mark.asyncio
    async def test_new_order_is_queued(self):
        queue = QROrderQueue(MagicMock(), MagicMock(), auto_accept_seconds=100, tick_seconds=TICK)
        listener = OrderEventListener(11, queue, client=MagicMock())

        event = listener.handle_message(self._event("new_qr_order", order_id=5, total_cents=24000))

        assert event.type == "new_qr_order"
        assert queue.get(5).payload.total_amount == 240.0
        queue.clear()

    @pytest.mark.asyncio
    async def test_decision_elsewhere_clears_notification(self):
        queue = QROrderQueue(MagicMock(), MagicMock(), auto_accept_seconds=100, tick_seconds=TICK)
        listener = OrderEventListener(11, queue, client=MagicMock())
        listener.handle_message(self._event("new_qr_order", order_id=5))

        listener.handle_message(self._event("qr_order_rejected", order_id=5, reason="Closed"))

        assert 5 not in queue

    @pytest.mark.asyncio
    async def test_other_restaurants_and_garbage_are_ignored(self):
        queue = QROrderQueue(MagicMock(), MagicMock(), auto_accept_seconds=100, tick_seconds=TICK)
        listener = OrderEventListener(11, queue, client=MagicMock())

        assert listener.handle_message(self._event("new_qr_order", restaurant_id=12, order_id=5)) is None
        assert listener.handle_message("not json") is None
        assert listener.handle_message(json.dumps({"type": "new_qr_order", "restaurant_id": 0})) is None
        assert listener.handle_message(self._event("new_qr_order")) is None
        assert len(queue) == 0

    @pytest.mark.asyncio
    async def test_malformed_event_data_is_ignored(self):
        queue = QROrderQueue(MagicMock(), MagicMock(), auto_accept_seconds=100, tick_seconds=TICK)
        listener = OrderEventListener(11, queue, client=MagicMock())
        listener.handle_message(self._event("new_qr_order", order_id=5))

        for data in ("oops", [5], 5):
            raw = json.dumps({"type": "qr_order_accepted", "restaurant_id": 11, "data": data})
            assert listener.handle_message(raw) is None
        assert listener.handle_message(self._event("qr_order_accepted", order_id="five")) is None

        assert 5 in queue
        queue.clear()

    def test_event_data_must_be_an_object(self):
        with pytest.raises(ValueError):
            OrderEvent.from_json(json.dumps({"type": "qr_order_accepted", "restaurant_id": 1, "data": "oops"}))

    def test_channel_name(self):
        listener = OrderEventListener(11, MagicMock(), client=MagicMock())
        assert listener.channel == channel_pending_orders(11) == "restaurant:11:pending-orders"


class TestPublishOrderEvent:
    def test_disabled_publisher_is_noop(self, monkeypatch):
        monkeypatch.setattr(settings, "order_events_enabled", False)
        with patch("shared.infrastructure.redis.order_events.get_redis_sync_client") as get_client:
            assert publish_order_event(11, "new_qr_order", {"order_id": 1}) == 0
        get_client.assert_not_called()

    def test_publishes_envelope_on_restaurant_channel(self, monkeypatch):
        monkeypatch.setattr(settings, "order_events_enabled", True)
        with patch("shared.infrastructure.redis.order_events.get_redis_sync_client") as get_client:
            get_client.return_value.publish.return_value = 2
            assert publish_order_event(11, "qr_order_accepted", {"order_id": 1}) == 2

        channel, raw = get_client.return_value.publish.call_args.args
        assert channel == "restaurant:11:pending-orders"
        event = OrderEvent.from_json(raw)
        assert event.type == "qr_order_accepted"
        assert event.restaurant_id == 11
        assert event.data == {"order_id": 1}
        assert event.ts

    def test_redis_failure_is_logged_not_raised(self, monkeypatch):
        monkeypatch.setattr(settings, "order_events_enabled", True)
        with patch("shared.infrastructure.redis.order_events.get_redis_sync_client") as get_client:
            get_client.return_value.publish.side_effect = ConnectionError("redis down")
            assert publish_order_event(11, "new_qr_order", {"order_id": 1}) == 0
