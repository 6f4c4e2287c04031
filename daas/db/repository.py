# ============================================================
# DB access layer
# ============================================================
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Iterable, Iterator, Mapping

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from daas.core.errors import StaleRecordError
from daas.domain.access.entities import (
    AccessRequest,
    Decision,
    Document,
    RequestStatus,
    User,
)
from daas.db.models import (
    access_requests_table as access_requests,
    decisions_table as decisions,
    documents_table as documents,
    users_table as users,
)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_user(row: Mapping[str, Any]) -> User:
    return User(id=row["id"], name=row["name"], email=row["email"], role=row["role"])


def _to_document(row: Mapping[str, Any]) -> Document:
    return Document(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        created_at=_as_utc(row["created_at"]),
    )


def _to_access_request(row: Mapping[str, Any]) -> AccessRequest:
    return AccessRequest(
        id=row["id"],
        requester_id=row["requester_id"],
        document_id=row["document_id"],
        reason=row["reason"],
        access_type=row["access_type"],
        status=row["status"],
        requested_at=_as_utc(row["requested_at"]),
        version=row["version"],
    )


def _to_decision(row: Mapping[str, Any]) -> Decision:
    return Decision(
        id=row["id"],
        access_request_id=row["access_request_id"],
        approver_id=row["approver_id"],
        approved=row["approved"],
        comment=row["comment"],
        decided_at=_as_utc(row["decided_at"]),
    )


class SqlAlchemyEntityStore:
    """
    EntityStore over a SQLAlchemy Session.

    Writes commit immediately unless they run inside ``transaction()``,
    in which case the block commits or rolls back as a whole.
    """

    def __init__(self, db: Session):
        self.db = db
        self._in_transaction = False

    # --- lookups ---------------------------------------------------------------

    def get_user(self, user_id: int) -> User | None:
        """Get a user by id"""
        row = self.db.execute(
            select(users).where(users.c.id == user_id)
        ).mappings().first()
        return _to_user(row) if row else None

    def get_document(self, document_id: int) -> Document | None:
        """Get a document by id"""
        row = self.db.execute(
            select(documents).where(documents.c.id == document_id)
        ).mappings().first()
        return _to_document(row) if row else None

    def get_access_request(self, request_id: int) -> AccessRequest | None:
        """Get an access request by id"""
        row = self.db.execute(
            select(access_requests).where(access_requests.c.id == request_id)
        ).mappings().first()
        return _to_access_request(row) if row else None

    def get_decision_for_request(self, request_id: int) -> Decision | None:
        row = self.db.execute(
            select(decisions).where(decisions.c.access_request_id == request_id)
        ).mappings().first()
        return _to_decision(row) if row else None

    def get_users(self, user_ids: Iterable[int]) -> dict[int, User]:
        ids = set(user_ids)
        if not ids:
            return {}
        result = self.db.execute(select(users).where(users.c.id.in_(ids)))
        return {row["id"]: _to_user(row) for row in result.mappings()}

    def get_documents(self, document_ids: Iterable[int]) -> dict[int, Document]:
        ids = set(document_ids)
        if not ids:
            return {}
        result = self.db.execute(select(documents).where(documents.c.id.in_(ids)))
        return {row["id"]: _to_document(row) for row in result.mappings()}

    def get_decisions_for_requests(self, request_ids: Iterable[int]) -> dict[int, Decision]:
        ids = set(request_ids)
        if not ids:
            return {}
        result = self.db.execute(
            select(decisions).where(decisions.c.access_request_id.in_(ids))
        )
        return {row["access_request_id"]: _to_decision(row) for row in result.mappings()}

    def list_users(self) -> list[User]:
        result = self.db.execute(select(users).order_by(users.c.id))
        return [_to_user(row) for row in result.mappings()]

    def list_documents(self) -> list[Document]:
        result = self.db.execute(select(documents).order_by(documents.c.id))
        return [_to_document(row) for row in result.mappings()]

    def list_access_requests(self) -> list[AccessRequest]:
        return self._select_requests()

    def list_access_requests_for_requester(self, user_id: int) -> list[AccessRequest]:
        return self._select_requests(access_requests.c.requester_id == user_id)

    def list_pending_access_requests(self) -> list[AccessRequest]:
        return self._select_requests(access_requests.c.status == RequestStatus.PENDING)

    # --- writes ----------------------------------------------------------------

    def save_new_access_request(self, access_request: AccessRequest) -> AccessRequest:
        """Insert a new access request"""
        result = self.db.execute(
            insert(access_requests).values(
                requester_id=access_request.requester_id,
                document_id=access_request.document_id,
                reason=access_request.reason,
                access_type=access_request.access_type,
                status=access_request.status,
                requested_at=access_request.requested_at,
                version=1,
            )
        )
        new_id = result.inserted_primary_key[0]
        self._commit()
        return replace(access_request, id=new_id, version=1)

    def update_access_request(self, access_request: AccessRequest) -> AccessRequest:
        """Write the new status, guarded by the version read earlier"""
        result = self.db.execute(
            update(access_requests)
            .where(
                access_requests.c.id == access_request.id,
                access_requests.c.version == access_request.version,
            )
            .values(status=access_request.status, version=access_request.version + 1)
        )
        if result.rowcount != 1:
            self._rollback()
            raise StaleRecordError(
                f"Access request {access_request.id} changed since it was read"
            )
        self._commit()
        return replace(access_request, version=access_request.version + 1)

    def save_new_decision(self, decision: Decision) -> Decision:
        """Insert a decision; a second decision for the same request is refused"""
        try:
            result = self.db.execute(
                insert(decisions).values(
                    access_request_id=decision.access_request_id,
                    approver_id=decision.approver_id,
                    approved=decision.approved,
                    comment=decision.comment,
                    decided_at=decision.decided_at,
                )
            )
        except IntegrityError as exc:
            self._rollback()
            raise StaleRecordError(
                f"Access request {decision.access_request_id} already has a decision"
            ) from exc
        new_id = result.inserted_primary_key[0]
        self._commit()
        return replace(decision, id=new_id)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._in_transaction:
            yield
            return

        self._in_transaction = True
        try:
            yield
            self.db.commit()
        except BaseException:
            self.db.rollback()
            raise
        finally:
            self._in_transaction = False

    # --- helpers ---------------------------------------------------------------

    def _select_requests(self, *conditions) -> list[AccessRequest]:
        query = select(access_requests).order_by(access_requests.c.id)
        if conditions:
            query = query.where(*conditions)
        result = self.db.execute(query)
        return [_to_access_request(row) for row in result.mappings()]

    def _commit(self) -> None:
        if not self._in_transaction:
            self.db.commit()

    def _rollback(self) -> None:
        if not self._in_transaction:
            self.db.rollback()
