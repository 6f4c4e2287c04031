"""Access request lifecycle: creation, decisions, and read-side views.

A request starts PENDING and moves exactly once to APPROVED or REJECTED.
Recording a decision runs these checks in order, stopping at the first
failure and writing nothing:

1. the request exists
2. the request is still pending
3. the approver exists
4. the approver's role may decide

The decision row and the status change are then written in one store
transaction. The status update is conditional on the version read during the
checks, so a concurrent decider loses with ConflictError and its decision
row is rolled back. The notification goes out only after the commit; a
failing or slow notifier is logged and never undoes the decision.
"""

from __future__ import annotations

import asyncio
import logging

from daas.core.errors import (
    AccessRequestError,
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    StaleRecordError,
)
from daas.observability.tracing import Span, log_event, new_trace_id

from .entities import (
    AccessRequest,
    AccessRequestView,
    AccessType,
    Decision,
    DecisionMadeEvent,
    DecisionView,
    Document,
    RequestStatus,
    User,
)
from .notifier import Notifier
from .policy import DEFAULT_DECISION_POLICY, DecisionPolicy
from .repository import EntityStore

# Strong references for fire-and-forget notification tasks
_background_tasks: set[asyncio.Task] = set()


class AccessRequestService:
    """Typed operations over access requests, backed by an EntityStore."""

    def __init__(
        self,
        *,
        store: EntityStore,
        notifier: Notifier,
        policy: DecisionPolicy | None = None,
        notification_timeout: float = 5.0,
        notify_in_background: bool = False,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._policy = policy or DEFAULT_DECISION_POLICY
        self._notification_timeout = notification_timeout
        self._notify_in_background = notify_in_background

    # -------------------------
    # COMMANDS
    # -------------------------

    async def create_request(
        self,
        *,
        requester_id: int,
        document_id: int,
        reason: str,
        access_type: AccessType | str,
    ) -> AccessRequestView:
        """File a new PENDING access request.

        Raises:
            NotFoundError: requester or document does not exist.
            InvalidArgumentError: empty reason or unknown access type.
        """
        trace_id = new_trace_id()

        requester = self._store.get_user(requester_id)
        if requester is None:
            raise NotFoundError("user", requester_id)

        document = self._store.get_document(document_id)
        if document is None:
            raise NotFoundError("document", document_id)

        if reason is None or not reason.strip():
            raise InvalidArgumentError("reason")

        try:
            access_type = AccessType(access_type)
        except ValueError as exc:
            raise InvalidArgumentError("access_type", f"unknown value {access_type!r}") from exc

        created = self._store.save_new_access_request(
            AccessRequest(
                requester_id=requester.id,
                document_id=document.id,
                reason=reason.strip(),
                access_type=access_type,
                status=RequestStatus.PENDING,
            )
        )

        log_event(
            "access_request.created",
            trace_id=trace_id,
            request_id=created.id,
            requester_id=requester.id,
            document_id=document.id,
            access_type=access_type.value,
        )
        return self._build_view(created, requester=requester, document=document)

    async def record_decision(
        self,
        *,
        request_id: int,
        approver_id: int,
        approved: bool,
        comment: str = "",
        notify_in_background: bool | None = None,
    ) -> AccessRequestView:
        """Approve or reject a pending request and notify about it.

        Raises:
            NotFoundError: request or approver does not exist.
            ConflictError: request already decided, including by a concurrent call.
            ForbiddenError: approver lacks an approving role.
        """
        trace_id = new_trace_id()
        span = Span(name="access_request.record_decision", trace_id=trace_id)
        span.attributes.update({"request_id": request_id, "approver_id": approver_id})

        try:
            access_request = self._store.get_access_request(request_id)
            if access_request is None:
                raise NotFoundError("access request", request_id)

            if not access_request.is_pending:
                raise ConflictError(request_id)

            approver = self._store.get_user(approver_id)
            if approver is None:
                raise NotFoundError("approver", approver_id)

            self._policy.assert_can_decide(approver)
        except AccessRequestError as exc:
            span.end()
            log_event(
                "access_request.decision.rejected",
                trace_id=trace_id,
                span=span,
                level=logging.WARNING,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise

        decision = Decision(
            access_request_id=access_request.id,
            approver_id=approver.id,
            approved=approved,
            comment=comment or "",
        )
        access_request.status = RequestStatus.APPROVED if approved else RequestStatus.REJECTED

        try:
            with self._store.transaction():
                decision = self._store.save_new_decision(decision)
                access_request = self._store.update_access_request(access_request)
        except StaleRecordError as exc:
            span.end()
            log_event(
                "access_request.decision.conflict",
                trace_id=trace_id,
                span=span,
                level=logging.WARNING,
                error=str(exc),
            )
            raise ConflictError(request_id) from exc

        span.end()
        log_event(
            "access_request.decided",
            trace_id=trace_id,
            span=span,
            request_id=access_request.id,
            status=access_request.status.value,
        )

        event = DecisionMadeEvent(
            request_id=access_request.id,
            requester_id=access_request.requester_id,
            approver_id=approver.id,
            approved=decision.approved,
            comment=decision.comment,
        )
        if notify_in_background is None:
            notify_in_background = self._notify_in_background
        await self._publish(event, trace_id=trace_id, in_background=notify_in_background)

        return self._build_view(access_request, decision=decision, approver=approver)

    # -------------------------
    # QUERIES
    # -------------------------

    def list_requests(
        self,
        *,
        user_id: int | None = None,
        pending_only: bool = False,
    ) -> list[AccessRequestView]:
        if pending_only:
            requests = self._store.list_pending_access_requests()
        elif user_id is not None:
            requests = self._store.list_access_requests_for_requester(user_id)
        else:
            requests = self._store.list_access_requests()
        return self._build_views(requests)

    def get_request(self, request_id: int) -> AccessRequestView:
        access_request = self._store.get_access_request(request_id)
        if access_request is None:
            raise NotFoundError("access request", request_id)
        return self._build_view(access_request)

    def list_users(self) -> list[User]:
        return self._store.list_users()

    def get_user(self, user_id: int) -> User:
        user = self._store.get_user(user_id)
        if user is None:
            raise NotFoundError("user", user_id)
        return user

    def list_documents(self) -> list[Document]:
        return self._store.list_documents()

    def get_document(self, document_id: int) -> Document:
        document = self._store.get_document(document_id)
        if document is None:
            raise NotFoundError("document", document_id)
        return document

    # -------------------------
    # INTERNALS
    # -------------------------

    async def _publish(self, event: DecisionMadeEvent, *, trace_id: str, in_background: bool) -> None:
        if in_background:
            task = asyncio.create_task(self._deliver(event, trace_id=trace_id))
            _background_tasks.add(task)
            task.add_done_callback(_background_tasks.discard)
            return
        await self._deliver(event, trace_id=trace_id)

    async def _deliver(self, event: DecisionMadeEvent, *, trace_id: str) -> None:
        try:
            await asyncio.wait_for(
                self._notifier.notify(event),
                timeout=self._notification_timeout,
            )
        except Exception as exc:
            # The decision is already committed; delivery problems are reported only.
            log_event(
                "notification.failed",
                trace_id=trace_id,
                level=logging.ERROR,
                request_id=event.request_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return

        log_event(
            "notification.sent",
            trace_id=trace_id,
            request_id=event.request_id,
            decision=event.outcome,
        )

    def _build_views(self, requests: list[AccessRequest]) -> list[AccessRequestView]:
        # Resolve names with one lookup per entity kind, not per row
        decisions = self._store.get_decisions_for_requests(
            r.id for r in requests if not r.is_pending
        )
        people = self._store.get_users(
            {r.requester_id for r in requests}
            | {d.approver_id for d in decisions.values()}
        )
        documents = self._store.get_documents({r.document_id for r in requests})

        views = []
        for r in requests:
            decision = decisions.get(r.id)
            views.append(
                self._build_view(
                    r,
                    requester=people.get(r.requester_id),
                    document=documents.get(r.document_id),
                    decision=decision,
                    approver=people.get(decision.approver_id) if decision else None,
                )
            )
        return views

    def _build_view(
        self,
        access_request: AccessRequest,
        *,
        requester: User | None = None,
        document: Document | None = None,
        decision: Decision | None = None,
        approver: User | None = None,
    ) -> AccessRequestView:
        requester = requester or self._store.get_user(access_request.requester_id)
        if requester is None:
            raise NotFoundError("user", access_request.requester_id)

        document = document or self._store.get_document(access_request.document_id)
        if document is None:
            raise NotFoundError("document", access_request.document_id)

        if decision is None and not access_request.is_pending:
            decision = self._store.get_decision_for_request(access_request.id)

        decision_view = None
        if decision is not None:
            approver = approver or self._store.get_user(decision.approver_id)
            if approver is None:
                raise NotFoundError("approver", decision.approver_id)
            decision_view = DecisionView(
                id=decision.id,
                approver_id=approver.id,
                approver_name=approver.name,
                approved=decision.approved,
                comment=decision.comment,
                decided_at=decision.decided_at,
            )

        return AccessRequestView(
            id=access_request.id,
            requester_id=requester.id,
            requester_name=requester.name,
            document_id=document.id,
            document_title=document.title,
            reason=access_request.reason,
            access_type=access_request.access_type,
            status=access_request.status,
            requested_at=access_request.requested_at,
            decision=decision_view,
        )
