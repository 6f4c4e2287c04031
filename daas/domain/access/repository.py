# ============================================================
# Entity store contract
# ============================================================
from contextlib import AbstractContextManager
from typing import Iterable, Protocol

from .entities import AccessRequest, Decision, Document, User


class EntityStore(Protocol):
    def get_user(self, user_id: int) -> User | None:
        """Get a user by id"""
        ...

    def get_document(self, document_id: int) -> Document | None:
        """Get a document by id"""
        ...

    def get_access_request(self, request_id: int) -> AccessRequest | None:
        """Get an access request by id"""
        ...

    def get_decision_for_request(self, request_id: int) -> Decision | None:
        """Get the decision recorded for an access request, if any"""
        ...

    def get_users(self, user_ids: Iterable[int]) -> dict[int, User]:
        """Get several users at once, keyed by id; missing ids are left out"""
        ...

    def get_documents(self, document_ids: Iterable[int]) -> dict[int, Document]:
        ...

    def get_decisions_for_requests(self, request_ids: Iterable[int]) -> dict[int, Decision]:
        """Get the decisions for several requests, keyed by access request id"""
        ...

    def list_users(self) -> list[User]:
        ...

    def list_documents(self) -> list[Document]:
        ...

    def list_access_requests(self) -> list[AccessRequest]:
        ...

    def list_access_requests_for_requester(self, user_id: int) -> list[AccessRequest]:
        ...

    def list_pending_access_requests(self) -> list[AccessRequest]:
        ...

    def save_new_access_request(self, access_request: AccessRequest) -> AccessRequest:
        """Persist a new access request and return it with its id assigned"""
        ...

    def update_access_request(self, access_request: AccessRequest) -> AccessRequest:
        """Persist a status change.

        The write is conditional on ``access_request.version`` matching the
        stored version; raises StaleRecordError otherwise. Returns the request
        carrying its new version.
        """
        ...

    def save_new_decision(self, decision: Decision) -> Decision:
        """Persist a new decision and return it with its id assigned"""
        ...

    def transaction(self) -> AbstractContextManager[None]:
        """Group the writes made inside the block into one atomic unit"""
        ...
