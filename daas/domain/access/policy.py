"""Who may rule on an access request.

Role is the only criterion. An approver deciding a request they filed
themselves is allowed; whether that should be blocked is an open product
question, so it is not enforced here.
"""

from __future__ import annotations

from dataclasses import dataclass

from daas.core.errors import ForbiddenError
from .entities import User, UserRole


@dataclass(frozen=True)
class DecisionPolicy:
    decider_roles: frozenset[UserRole] = frozenset({UserRole.APPROVER, UserRole.ADMIN})

    def can_decide(self, actor: User) -> bool:
        return actor.role in self.decider_roles

    def assert_can_decide(self, actor: User) -> None:
        if not self.can_decide(actor):
            raise ForbiddenError(actor.id)


DEFAULT_DECISION_POLICY = DecisionPolicy()


def can_decide(actor: User) -> bool:
    """Return True when ``actor`` holds an approving role."""
    return DEFAULT_DECISION_POLICY.can_decide(actor)
