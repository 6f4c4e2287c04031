# ============================================================
# Business/domain entities
# ============================================================
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class UserRole(str, Enum):
    USER = "USER"
    APPROVER = "APPROVER"
    ADMIN = "ADMIN"


class AccessType(str, Enum):
    READ = "READ"
    EDIT = "EDIT"


class RequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class User:
    id: int
    name: str
    email: str
    role: UserRole


@dataclass(frozen=True)
class Document:
    id: int
    title: str
    description: str = ""
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class AccessRequest:
    """A user's request for access to a document.

    ``version`` is the optimistic concurrency token; stores bump it on every
    update and refuse updates carrying an older value.
    """
    requester_id: int
    document_id: int
    reason: str
    access_type: AccessType
    status: RequestStatus = RequestStatus.PENDING
    requested_at: datetime = field(default_factory=utcnow)
    id: Optional[int] = None
    version: int = 1

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING


@dataclass(frozen=True)
class Decision:
    access_request_id: int
    approver_id: int
    approved: bool
    comment: str = ""
    decided_at: datetime = field(default_factory=utcnow)
    id: Optional[int] = None


@dataclass(frozen=True)
class DecisionView:
    id: int
    approver_id: int
    approver_name: str
    approved: bool
    comment: str
    decided_at: datetime


@dataclass(frozen=True)
class AccessRequestView:
    """Read-side projection of a request with resolved names."""
    id: int
    requester_id: int
    requester_name: str
    document_id: int
    document_title: str
    reason: str
    access_type: AccessType
    status: RequestStatus
    requested_at: datetime
    decision: Optional[DecisionView] = None


@dataclass(frozen=True)
class DecisionMadeEvent:
    request_id: int
    requester_id: int
    approver_id: int
    approved: bool
    comment: str

    @property
    def outcome(self) -> str:
        return RequestStatus.APPROVED.value if self.approved else RequestStatus.REJECTED.value
