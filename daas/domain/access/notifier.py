from typing import Protocol

from .entities import DecisionMadeEvent


class Notifier(Protocol):
    async def notify(self, event: DecisionMadeEvent) -> None:
        ...


def describe_decision(event: DecisionMadeEvent) -> str:
    message = f"Access Request #{event.request_id} has been {event.outcome}"
    if event.comment:
        message += f" with comment: {event.comment}"
    return message
