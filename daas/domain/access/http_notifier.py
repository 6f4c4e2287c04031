"""Notifier that hands decisions to an HTTP notification service."""

from __future__ import annotations

from dataclasses import asdict

import httpx

from .entities import DecisionMadeEvent
from .notifier import describe_decision


class HttpNotifier:
    """POST each decision event to ``{base_url}/notifications/access-decisions``.

    Retries and fan-out (email, chat, audit) are the receiving service's job;
    a non-2xx response is raised to the caller as ``httpx.HTTPStatusError``.
    """

    ENDPOINT = '/notifications/access-decisions'

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 5.0,
    ) -> None:
        """Create an HTTP notifier.

        Args:
            base_url: Base URL of the notification service (e.g. http://notify-svc:8002).
            client: Optional injected httpx client for testing / transport control.
            timeout: Per-request timeout in seconds.
        """
        self._base_url = base_url.rstrip('/')
        self._client = client
        self._timeout = timeout

    async def notify(self, event: DecisionMadeEvent) -> None:
        url = f'{self._base_url}{self.ENDPOINT}'
        payload = {**asdict(event), 'message': describe_decision(event)}

        if self._client is not None:
            resp = await self._client.post(url, json=payload, timeout=self._timeout)
            resp.raise_for_status()
            return

        async with httpx.AsyncClient() as client:
            resp = await client.post(url, json=payload, timeout=self._timeout)
            resp.raise_for_status()
