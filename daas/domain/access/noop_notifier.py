from .entities import DecisionMadeEvent


class NoopNotifier:
    async def notify(self, event: DecisionMadeEvent) -> None:
        return None
