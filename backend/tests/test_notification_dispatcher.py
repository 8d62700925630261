# backend/tests/test_notification_dispatcher.py

import logging
from typing import Dict, List, Optional

import pytest

from app.notifications.dispatcher import NotificationDispatcher
from app.notifications.schemas import (
    MulticastRequest,
    MulticastResponse,
    NotificationPayload,
    SendOutcome,
)
from app.notifications.transport import LoggingPushTransport, PushTransportError


class FakeTransport:
    """
    送信要求を記録し、トークンごとに決めた結果を返すフェイク。

    failures: token -> error_code
    """

    def __init__(self, failures: Optional[Dict[str, str]] = None) -> None:
        self.failures = failures or {}
        self.requests: List[MulticastRequest] = []

    def send_multicast(self, request: MulticastRequest) -> MulticastResponse:
        self.requests.append(request)
        responses = []
        for token in request.tokens:
            if token in self.failures:
                responses.append(SendOutcome(success=False, error_code=self.failures[token]))
            else:
                responses.append(SendOutcome(success=True, message_id=f"id-{token}"))
        ok = sum(1 for r in responses if r.success)
        return MulticastResponse(
            success_count=ok,
            failure_count=len(responses) - ok,
            responses=responses,
        )


def _payload() -> NotificationPayload:
    return NotificationPayload(
        title="PetKeeper Lite: Rex",
        body="Passeio - Ana",
        data={"type": "new_task", "petId": "p1"},
    )


def test_dispatch_empty_tokens_skips_transport() -> None:
    transport = FakeTransport()
    dispatcher = NotificationDispatcher(transport)

    result = dispatcher.dispatch([], _payload())

    assert result.sent_count == 0
    assert result.failure_count == 0
    assert transport.requests == []


def test_dispatch_sends_single_multicast_with_all_tokens() -> None:
    transport = FakeTransport()
    dispatcher = NotificationDispatcher(transport)

    result = dispatcher.dispatch(["t1", "t2", "t3"], _payload())

    assert len(transport.requests) == 1
    request = transport.requests[0]
    assert request.tokens == ["t1", "t2", "t3"]
    assert request.title == "PetKeeper Lite: Rex"
    assert request.body == "Passeio - Ana"
    assert request.data == {"type": "new_task", "petId": "p1"}
    assert request.dry_run is False
    assert result.sent_count == 3


def test_dispatch_partial_failure_is_reported_not_raised(caplog) -> None:
    transport = FakeTransport(failures={"t2": "unregistered"})
    dispatcher = NotificationDispatcher(transport)

    with caplog.at_level(logging.INFO, logger="app.notifications.dispatcher"):
        result = dispatcher.dispatch(["t1", "t2", "t3"], _payload())

    assert result.sent_count == 2
    assert result.failure_count == 1
    assert result.failed_tokens == ["t2"]
    failed = [o for o in result.outcomes if not o.success]
    assert failed[0].error_code == "unregistered"

    error_records = [r for r in caplog.records if r.levelno == logging.ERROR]
    assert len(error_records) == 1
    assert "t2" in error_records[0].getMessage()
    assert "unregistered" in error_records[0].getMessage()

    info_records = [
        r for r in caplog.records if r.levelno == logging.INFO and "2 of 3" in r.getMessage()
    ]
    assert info_records


def test_dispatch_maps_outcomes_positionally() -> None:
    transport = FakeTransport(failures={"a": "invalid-argument", "c": "internal"})
    dispatcher = NotificationDispatcher(transport)

    result = dispatcher.dispatch(["a", "b", "c"], _payload())

    assert [(o.token, o.success, o.error_code) for o in result.outcomes] == [
        ("a", False, "invalid-argument"),
        ("b", True, None),
        ("c", False, "internal"),
    ]


def test_dispatch_transport_failure_propagates() -> None:
    class DownTransport:
        def send_multicast(self, request):
            raise PushTransportError("unreachable")

    dispatcher = NotificationDispatcher(DownTransport())

    with pytest.raises(PushTransportError):
        dispatcher.dispatch(["t1"], _payload())


def test_logging_transport_reports_every_token_delivered(caplog) -> None:
    logger = logging.getLogger("test_logger_push")
    transport = LoggingPushTransport(logger_=logger)
    dispatcher = NotificationDispatcher(transport)

    with caplog.at_level(logging.INFO, logger="test_logger_push"):
        result = dispatcher.dispatch(["t1", "t2"], _payload())

    assert result.sent_count == 2
    assert any("Passeio - Ana" in r.getMessage() for r in caplog.records)
