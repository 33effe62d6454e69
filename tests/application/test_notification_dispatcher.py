"""Tests for the notification dispatcher's fan-out and retry behaviour."""

import pytest

from selfdrop.application.notification_dispatcher import (
    Channel,
    NotificationDispatcher,
    NotificationEvent,
)
from selfdrop.domain.model.notification import NotificationInbox, NotificationType
from tests.fakes import RecordingSubscriber


def _event(order_id: int | None = 7) -> NotificationEvent:
    return NotificationEvent(
        type=NotificationType.ORDER_CONFIRMED,
        title="Order Confirmed",
        message=f"Order #{order_id} has been confirmed",
        order_id=order_id,
    )


class TestFanOut:

    def test_operators_and_order_channel_both_receive(self):
        dispatcher = NotificationDispatcher()
        operator = RecordingSubscriber()
        customer = RecordingSubscriber()
        dispatcher.subscribe(Channel.operators(), operator)
        dispatcher.subscribe(Channel.for_order(7), customer)

        notification = dispatcher.publish(_event())

        assert operator.received == [notification]
        assert customer.received == [notification]

    def test_event_without_order_reaches_only_operators(self):
        dispatcher = NotificationDispatcher()
        operator = RecordingSubscriber()
        customer = RecordingSubscriber()
        dispatcher.subscribe(Channel.operators(), operator)
        dispatcher.subscribe(Channel.for_order(7), customer)

        dispatcher.publish(_event(order_id=None))

        assert len(operator.received) == 1
        assert customer.received == []

    def test_publish_assigns_unique_ids(self):
        dispatcher = NotificationDispatcher()
        first = dispatcher.publish(_event())
        second = dispatcher.publish(_event())
        assert first.id != second.id

    def test_unsubscribe_stops_delivery(self):
        dispatcher = NotificationDispatcher()
        subscriber = RecordingSubscriber()
        subscription = dispatcher.subscribe(Channel.for_order(7), subscriber)
        dispatcher.unsubscribe(subscription)
        dispatcher.unsubscribe(subscription)

        dispatcher.publish(_event())

        assert subscriber.received == []
        assert dispatcher.subscriber_count(Channel.for_order(7)) == 0


class TestRetries:

    def test_transient_failure_is_retried(self):
        dispatcher = NotificationDispatcher(max_attempts=3)
        subscriber = RecordingSubscriber(failures=2)
        dispatcher.subscribe(Channel.operators(), subscriber)

        dispatcher.publish(_event())

        assert subscriber.attempts == 3
        assert len(subscriber.received) == 1

    def test_persistent_failure_is_dropped_without_raising(self):
        dispatcher = NotificationDispatcher(max_attempts=2)
        broken = RecordingSubscriber(failures=10)
        healthy = RecordingSubscriber()
        dispatcher.subscribe(Channel.operators(), broken)
        dispatcher.subscribe(Channel.operators(), healthy)

        notification = dispatcher.publish(_event())

        assert broken.attempts == 2
        assert broken.received == []
        assert healthy.received == [notification]

    def test_redeliver_counts_accepting_subscribers(self):
        dispatcher = NotificationDispatcher(max_attempts=1)
        dispatcher.subscribe(Channel.operators(), RecordingSubscriber())
        dispatcher.subscribe(Channel.operators(), RecordingSubscriber(failures=1))
        notification = dispatcher.publish(_event())
        assert dispatcher.redeliver(notification) == 2

    def test_max_attempts_must_be_positive(self):
        with pytest.raises(ValueError):
            NotificationDispatcher(max_attempts=0)


def test_redelivery_is_absorbed_by_inbox():
    dispatcher = NotificationDispatcher()
    inbox = NotificationInbox()
    dispatcher.subscribe(Channel.for_order(7), inbox)

    notification = dispatcher.publish(_event())
    dispatcher.redeliver(notification)

    assert len(inbox.notifications) == 1
    assert inbox.unread_count == 1
