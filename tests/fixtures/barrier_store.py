# ------------------------------------------------------------------------------
# Store wrapper that lines up concurrent readers
# ------------------------------------------------------------------------------
import threading

from daas.domain.access import InMemoryEntityStore


class BarrierStore:
    """
    Delegates to an InMemoryEntityStore, but every get_access_request call
    waits until ``parties`` callers have read the request. This forces
    concurrent deciders to all see the same PENDING snapshot before any of
    them writes.
    """

    def __init__(self, inner: InMemoryEntityStore, parties: int) -> None:
        self._inner = inner
        self._barrier = threading.Barrier(parties)

    def get_access_request(self, request_id: int):
        found = self._inner.get_access_request(request_id)
        self._barrier.wait(timeout=5)
        return found

    def __getattr__(self, name):
        return getattr(self._inner, name)


class CountingStore:
    """Delegates to an InMemoryEntityStore and counts single-row lookups."""

    def __init__(self, inner: InMemoryEntityStore) -> None:
        self._inner = inner
        self.single_lookups = 0

    def get_user(self, user_id: int):
        self.single_lookups += 1
        return self._inner.get_user(user_id)

    def get_document(self, document_id: int):
        self.single_lookups += 1
        return self._inner.get_document(document_id)

    def get_decision_for_request(self, request_id: int):
        self.single_lookups += 1
        return self._inner.get_decision_for_request(request_id)

    def __getattr__(self, name):
        return getattr(self._inner, name)
