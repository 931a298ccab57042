# -*- coding: utf-8 -*-
"""Unit tests for NotificationAlertSink."""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, cast
from unittest.mock import Mock

import pytest

from nft_monitor.exceptions import DeliveryError
from nft_monitor.models.alert_event import AlertEvent, AlertKind
from nft_monitor.notifications import NotificationMessage
from nft_monitor.services.alerts import AlertSink, NotificationAlertSink


def _event() -> AlertEvent:
    return AlertEvent.create(
        kind=AlertKind.SUPPLY_THRESHOLD_REACHED,
        target_id="c1",
        chain="ethereum",
        dedup_key="supply:c1:threshold:10",
        title="t",
        message="m",
        payload={"count": 11, "threshold": 10},
    )


async def test_alert_is_converted_and_enqueued() -> None:
    service = SimpleNamespace(notify=Mock(return_value=True))
    sink = NotificationAlertSink(cast(Any, service))

    await sink.on_alert(_event())

    message = service.notify.call_args.args[0]
    assert isinstance(message, NotificationMessage)
    assert message.event_type == "supply_threshold_reached"
    assert message.payload is not None
    assert message.payload["count"] == 11
    assert message.payload["dedup_key"] == "supply:c1:threshold:10"
    assert message.payload["chain"] == "ethereum"


async def test_rejected_alert_raises_delivery_error() -> None:
    sink = NotificationAlertSink(cast(Any, SimpleNamespace(notify=Mock(return_value=False))))

    with pytest.raises(DeliveryError) as exc_info:
        await sink.on_alert(_event())

    assert exc_info.value.dedup_key == "supply:c1:threshold:10"


async def test_uninitialized_service_raises_delivery_error() -> None:
    service = SimpleNamespace(notify=Mock(side_effect=RuntimeError("NotificationService not initialized")))
    sink = NotificationAlertSink(cast(Any, service))

    with pytest.raises(DeliveryError):
        await sink.on_alert(_event())


def test_sink_satisfies_protocol() -> None:
    assert isinstance(NotificationAlertSink(cast(Any, SimpleNamespace(notify=Mock()))), AlertSink)
