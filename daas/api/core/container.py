# --------------------------------
# DI container
# --------------------------------
from functools import lru_cache

from daas.config import Settings, settings as default_settings
from daas.domain.access import (
    DEFAULT_DECISION_POLICY,
    DecisionPolicy,
    HttpNotifier,
    LoggingNotifier,
    NoopNotifier,
    Notifier,
)


class Container:
    def __init__(self, settings: Settings | None = None, notifier: Notifier | None = None):
        self._settings = settings or default_settings
        self._policy = DEFAULT_DECISION_POLICY
        self._notifier = notifier or self._build_notifier(self._settings)

    @staticmethod
    def _build_notifier(settings: Settings) -> Notifier:
        if not settings.notifications_enabled:
            return NoopNotifier()
        if settings.notification_base_url:
            return HttpNotifier(
                base_url=settings.notification_base_url,
                timeout=settings.notification_timeout_seconds,
            )
        return LoggingNotifier()

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def policy(self) -> DecisionPolicy:
        return self._policy

    @property
    def notifier(self) -> Notifier:
        return self._notifier


@lru_cache
def get_container():
    return Container()
