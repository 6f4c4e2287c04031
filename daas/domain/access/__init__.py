"""This module handles document access requests and their approval decisions."""
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
    UserRole,
)
from .policy import DecisionPolicy, DEFAULT_DECISION_POLICY, can_decide
from .repository import EntityStore
from .in_memory_store import InMemoryEntityStore
from .notifier import Notifier, describe_decision
from .logging_notifier import LoggingNotifier
from .http_notifier import HttpNotifier
from .noop_notifier import NoopNotifier
from .service import AccessRequestService
