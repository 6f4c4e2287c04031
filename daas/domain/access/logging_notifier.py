from daas.observability.logging import get_logger

from .entities import DecisionMadeEvent
from .notifier import describe_decision


class LoggingNotifier:
    """
    Notifier that writes each decision to the application log.

    Stands in for email / chat delivery in local and demo setups.
    """

    def __init__(self, logger_name: str = "daas.notifications") -> None:
        self._logger = get_logger(logger_name)

    async def notify(self, event: DecisionMadeEvent) -> None:
        self._logger.info(
            describe_decision(event),
            extra={
                "request_id": event.request_id,
                "requester_id": event.requester_id,
                "approver_id": event.approver_id,
                "decision": event.outcome,
            },
        )
