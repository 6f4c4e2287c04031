import itertools
import threading
from contextlib import contextmanager
from dataclasses import replace
from typing import Iterable, Iterator

from daas.core.errors import StaleRecordError
from .entities import AccessRequest, Decision, Document, RequestStatus, User


class InMemoryEntityStore:
    """
    EntityStore kept in process memory.

    Every read and write returns a copy so callers never share mutable
    state with the store. ``transaction()`` holds the store lock for the
    whole block and restores the previous contents if the block raises.
    """

    def __init__(
        self,
        users: list[User] | None = None,
        documents: list[Document] | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._users: dict[int, User] = {u.id: u for u in users or []}
        self._documents: dict[int, Document] = {d.id: d for d in documents or []}
        self._requests: dict[int, AccessRequest] = {}
        self._decisions: dict[int, Decision] = {}
        self._request_ids = itertools.count(1)
        self._decision_ids = itertools.count(1)

    # --- lookups ---------------------------------------------------------------

    def get_user(self, user_id: int) -> User | None:
        with self._lock:
            return self._users.get(user_id)

    def get_document(self, document_id: int) -> Document | None:
        with self._lock:
            return self._documents.get(document_id)

    def get_access_request(self, request_id: int) -> AccessRequest | None:
        with self._lock:
            found = self._requests.get(request_id)
            return replace(found) if found is not None else None

    def get_decision_for_request(self, request_id: int) -> Decision | None:
        with self._lock:
            for decision in self._decisions.values():
                if decision.access_request_id == request_id:
                    return decision
        return None

    def get_users(self, user_ids: Iterable[int]) -> dict[int, User]:
        with self._lock:
            return {i: self._users[i] for i in set(user_ids) if i in self._users}

    def get_documents(self, document_ids: Iterable[int]) -> dict[int, Document]:
        with self._lock:
            return {i: self._documents[i] for i in set(document_ids) if i in self._documents}

    def get_decisions_for_requests(self, request_ids: Iterable[int]) -> dict[int, Decision]:
        wanted = set(request_ids)
        with self._lock:
            return {
                d.access_request_id: d
                for d in self._decisions.values()
                if d.access_request_id in wanted
            }

    def list_users(self) -> list[User]:
        with self._lock:
            return sorted(self._users.values(), key=lambda u: u.id)

    def list_documents(self) -> list[Document]:
        with self._lock:
            return sorted(self._documents.values(), key=lambda d: d.id)

    def list_access_requests(self) -> list[AccessRequest]:
        return self._select_requests(lambda r: True)

    def list_access_requests_for_requester(self, user_id: int) -> list[AccessRequest]:
        return self._select_requests(lambda r: r.requester_id == user_id)

    def list_pending_access_requests(self) -> list[AccessRequest]:
        return self._select_requests(lambda r: r.status == RequestStatus.PENDING)

    def decision_count(self) -> int:
        with self._lock:
            return len(self._decisions)

    # --- writes ----------------------------------------------------------------

    def save_new_access_request(self, access_request: AccessRequest) -> AccessRequest:
        with self._lock:
            stored = replace(access_request, id=next(self._request_ids), version=1)
            self._requests[stored.id] = stored
            return replace(stored)

    def update_access_request(self, access_request: AccessRequest) -> AccessRequest:
        with self._lock:
            current = self._requests.get(access_request.id)
            if current is None or current.version != access_request.version:
                raise StaleRecordError(
                    f"Access request {access_request.id} changed since it was read"
                )
            stored = replace(access_request, version=current.version + 1)
            self._requests[stored.id] = stored
            return replace(stored)

    def save_new_decision(self, decision: Decision) -> Decision:
        with self._lock:
            if self.get_decision_for_request(decision.access_request_id) is not None:
                raise StaleRecordError(
                    f"Access request {decision.access_request_id} already has a decision"
                )
            stored = replace(decision, id=next(self._decision_ids))
            self._decisions[stored.id] = stored
            return stored

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            requests_snapshot = dict(self._requests)
            decisions_snapshot = dict(self._decisions)
            try:
                yield
            except BaseException:
                self._requests = requests_snapshot
                self._decisions = decisions_snapshot
                raise

    def _select_requests(self, predicate) -> list[AccessRequest]:
        with self._lock:
            return [
                replace(r)
                for r in sorted(self._requests.values(), key=lambda r: r.id)
                if predicate(r)
            ]
