from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker

from daas.core.errors import ConflictError, StaleRecordError
from daas.db.connection import create_db_engine, init_db
from daas.db.models import DecisionRecord, UserRecord
from daas.db.repository import SqlAlchemyEntityStore
from daas.db.seed import seed_database
from daas.domain.access import (
    AccessRequest,
    AccessRequestService,
    AccessType,
    Decision,
    RequestStatus,
    UserRole,
)

from tests.fixtures.notifiers import RecordingNotifier


@pytest.fixture
def session_factory(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'daas.sqlite3'}")
    init_db(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    with factory() as db:
        seed_database(db)
    yield factory
    engine.dispose()


def _decision_count(factory) -> int:
    with factory() as db:
        return db.scalar(select(func.count()).select_from(DecisionRecord))


def test_seed_inserts_demo_rows_once(session_factory) -> None:
    with session_factory() as db:
        seed_database(db)  # second run is a no-op
        store = SqlAlchemyEntityStore(db)

        users = store.list_users()
        assert [u.name for u in users] == ["John Doe", "Jane Smith", "Bob Johnson", "Alice Brown"]
        assert [u.role for u in users] == [
            UserRole.USER, UserRole.USER, UserRole.APPROVER, UserRole.ADMIN,
        ]
        assert len(store.list_documents()) == 4
        assert len(store.list_pending_access_requests()) == 2
        assert db.scalar(select(func.count()).select_from(UserRecord)) == 4


def test_save_and_read_back_access_request(session_factory) -> None:
    with session_factory() as db:
        store = SqlAlchemyEntityStore(db)
        created = store.save_new_access_request(
            AccessRequest(
                requester_id=1,
                document_id=3,
                reason="roadmap planning",
                access_type=AccessType.EDIT,
            )
        )

    with session_factory() as db:
        loaded = SqlAlchemyEntityStore(db).get_access_request(created.id)

    assert loaded.id == created.id
    assert loaded.status == RequestStatus.PENDING
    assert loaded.access_type == AccessType.EDIT
    assert loaded.version == 1
    assert loaded.requested_at.tzinfo is not None


def test_update_with_stale_version_is_refused(session_factory) -> None:
    with session_factory() as db:
        store = SqlAlchemyEntityStore(db)
        request = store.get_access_request(1)
        request.status = RequestStatus.APPROVED
        updated = store.update_access_request(request)
        assert updated.version == 2

        stale = store.get_access_request(1)
        stale.version = 1
        stale.status = RequestStatus.REJECTED
        with pytest.raises(StaleRecordError):
            store.update_access_request(stale)

        assert store.get_access_request(1).status == RequestStatus.APPROVED


def test_transaction_rolls_back_decision_when_update_is_stale(session_factory) -> None:
    # Two sessions read the same pending request; the slower one must leave no trace
    with session_factory() as db_a, session_factory() as db_b:
        store_a = SqlAlchemyEntityStore(db_a)
        store_b = SqlAlchemyEntityStore(db_b)
        seen_by_a = store_a.get_access_request(1)
        seen_by_b = store_b.get_access_request(1)

        with store_a.transaction():
            store_a.save_new_decision(Decision(access_request_id=1, approver_id=3, approved=True))
            seen_by_a.status = RequestStatus.APPROVED
            store_a.update_access_request(seen_by_a)

        with pytest.raises(StaleRecordError):
            with store_b.transaction():
                store_b.save_new_decision(Decision(access_request_id=1, approver_id=4, approved=False))
                seen_by_b.status = RequestStatus.REJECTED
                store_b.update_access_request(seen_by_b)

    assert _decision_count(session_factory) == 1
    with session_factory() as db:
        store = SqlAlchemyEntityStore(db)
        assert store.get_access_request(1).status == RequestStatus.APPROVED
        assert store.get_decision_for_request(1).approver_id == 3


@pytest.mark.asyncio
async def test_service_on_sql_store_maps_lost_race_to_conflict(session_factory) -> None:
    with session_factory() as db_a, session_factory() as db_b:
        winner = AccessRequestService(store=SqlAlchemyEntityStore(db_a), notifier=RecordingNotifier())
        store_b = SqlAlchemyEntityStore(db_b)
        loser_notifier = RecordingNotifier()
        loser = AccessRequestService(store=store_b, notifier=loser_notifier)

        # Loser's store reads PENDING, then the winner commits before it writes
        snapshot = store_b.get_access_request(2)
        original_get = store_b.get_access_request

        def stale_get(request_id: int):
            return snapshot if request_id == 2 else original_get(request_id)

        store_b.get_access_request = stale_get

        await winner.record_decision(request_id=2, approver_id=3, approved=True, comment="")
        with pytest.raises(ConflictError):
            await loser.record_decision(request_id=2, approver_id=4, approved=False, comment="")

    assert _decision_count(session_factory) == 1
    assert loser_notifier.events == []


def test_batch_lookups_return_rows_keyed_by_id(session_factory) -> None:
    with session_factory() as db:
        store = SqlAlchemyEntityStore(db)
        with store.transaction():
            store.save_new_decision(Decision(access_request_id=2, approver_id=4, approved=False))
            request = store.get_access_request(2)
            request.status = RequestStatus.REJECTED
            store.update_access_request(request)

        found_users = store.get_users([1, 3, 99])
        found_documents = store.get_documents({2})
        found_decisions = store.get_decisions_for_requests([1, 2])

    assert sorted(found_users) == [1, 3]
    assert found_users[3].name == "Bob Johnson"
    assert found_documents[2].title == "Employee Handbook"
    assert list(found_decisions) == [2]
    assert found_decisions[2].approver_id == 4
    assert store.get_users([]) == {}
