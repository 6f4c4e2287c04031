from __future__ import annotations

import json
import logging

import httpx
import pytest
from httpx import MockTransport, Request, Response

from daas.domain.access import (
    DecisionMadeEvent,
    HttpNotifier,
    LoggingNotifier,
    NoopNotifier,
    describe_decision,
)

APPROVED_EVENT = DecisionMadeEvent(
    request_id=7, requester_id=1, approver_id=3, approved=True, comment="approved for Q review"
)
REJECTED_EVENT = DecisionMadeEvent(
    request_id=8, requester_id=2, approver_id=4, approved=False, comment=""
)


def test_describe_decision_includes_comment_only_when_present() -> None:
    assert describe_decision(APPROVED_EVENT) == (
        "Access Request #7 has been APPROVED with comment: approved for Q review"
    )
    assert describe_decision(REJECTED_EVENT) == "Access Request #8 has been REJECTED"


@pytest.mark.asyncio
async def test_logging_notifier_writes_decision(caplog) -> None:
    caplog.set_level(logging.INFO, logger="daas.notifications")

    await LoggingNotifier().notify(REJECTED_EVENT)

    record = next(r for r in caplog.records if r.name == "daas.notifications")
    assert record.getMessage() == "Access Request #8 has been REJECTED"
    assert record.decision == "REJECTED"
    assert record.approver_id == 4


@pytest.mark.asyncio
async def test_noop_notifier_accepts_events() -> None:
    assert await NoopNotifier().notify(APPROVED_EVENT) is None


@pytest.mark.anyio
async def test_http_notifier_posts_event_payload() -> None:
    received: list[dict] = []

    def notification_service(request: Request) -> Response:
        assert request.method == "POST"
        assert request.url.path == "/notifications/access-decisions"
        received.append(json.loads(request.content.decode("utf-8")))
        return Response(status_code=202, json={"accepted": True})

    async with httpx.AsyncClient(transport=MockTransport(notification_service)) as client:
        notifier = HttpNotifier(base_url="http://notify.test/", client=client)
        await notifier.notify(APPROVED_EVENT)

    assert received == [
        {
            "request_id": 7,
            "requester_id": 1,
            "approver_id": 3,
            "approved": True,
            "comment": "approved for Q review",
            "message": "Access Request #7 has been APPROVED with comment: approved for Q review",
        }
    ]


@pytest.mark.anyio
async def test_http_notifier_raises_on_server_error() -> None:
    def broken_service(request: Request) -> Response:
        return Response(status_code=503, json={"error": "down"})

    async with httpx.AsyncClient(transport=MockTransport(broken_service)) as client:
        notifier = HttpNotifier(base_url="http://notify.test", client=client)
        with pytest.raises(httpx.HTTPStatusError):
            await notifier.notify(REJECTED_EVENT)


def test_container_picks_notifier_from_settings() -> None:
    from daas.api.core.container import Container
    from daas.config import Settings

    disabled = Container(settings=Settings(notifications_enabled=False, notification_base_url="http://notify:8002"))
    with_service = Container(settings=Settings(notification_base_url="http://notify:8002"))
    without_service = Container(settings=Settings(notification_base_url=None))

    assert isinstance(with_service.notifier, HttpNotifier)
    assert isinstance(without_service.notifier, LoggingNotifier)
    assert isinstance(disabled.notifier, NoopNotifier)
