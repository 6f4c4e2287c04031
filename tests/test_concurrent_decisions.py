from __future__ import annotations

import asyncio
import threading

import pytest

from daas.core.errors import ConflictError
from daas.domain.access import AccessRequest, AccessRequestService, AccessType, RequestStatus

from tests.fixtures.barrier_store import BarrierStore
from tests.fixtures.notifiers import RecordingNotifier
from tests.fixtures.sample_data import ADMIN, APPROVER, REPORT, REQUESTER, make_store


def test_simultaneous_deciders_yield_one_success_and_one_conflict() -> None:
    # Arrange: both callers read the same PENDING snapshot before either writes
    inner = make_store()
    request = inner.save_new_access_request(
        AccessRequest(
            requester_id=REQUESTER.id,
            document_id=REPORT.id,
            reason="quarterly review",
            access_type=AccessType.READ,
        )
    )
    notifier = RecordingNotifier()
    service = AccessRequestService(store=BarrierStore(inner, parties=2), notifier=notifier)

    outcomes: dict[int, object] = {}

    def decide(approver_id: int, approved: bool) -> None:
        try:
            outcomes[approver_id] = asyncio.run(
                service.record_decision(
                    request_id=request.id,
                    approver_id=approver_id,
                    approved=approved,
                    comment="",
                )
            )
        except Exception as exc:
            outcomes[approver_id] = exc

    threads = [
        threading.Thread(target=decide, args=(APPROVER.id, True)),
        threading.Thread(target=decide, args=(ADMIN.id, False)),
    ]

    # Act
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    # Assert
    conflicts = [o for o in outcomes.values() if isinstance(o, ConflictError)]
    successes = [o for o in outcomes.values() if not isinstance(o, Exception)]
    assert len(conflicts) == 1
    assert len(successes) == 1
    assert inner.decision_count() == 1

    winner = successes[0]
    stored = inner.get_access_request(request.id)
    assert stored.status == winner.status
    assert stored.status in (RequestStatus.APPROVED, RequestStatus.REJECTED)
    assert len(notifier.events) == 1
