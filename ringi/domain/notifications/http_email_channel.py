"""E-mail delivery through an internal HTTP mail relay."""

from __future__ import annotations

import logging

import httpx

from ringi.observability.tracing import log_event

from .entities import Notification


class HttpEmailChannel:
    """Send e-mail by posting to ``<base_url>/tools/send-email``.

    Delivery is best effort: transport errors and non-2xx responses are
    logged and reported as ``False``, never raised.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.Client | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Create an HTTP e-mail channel.

        Args:
            base_url: Base URL of the mail relay (e.g. http://mail-relay:8001/v1).
            client: Optional injected httpx client for testing / transport control.
            timeout: Per-request timeout in seconds.
        """
        self._base_url = base_url.rstrip("/")
        self._client = client
        self._timeout = timeout

    def _post(self, payload: dict) -> httpx.Response:
        url = f"{self._base_url}/tools/send-email"
        if self._client is not None:
            return self._client.post(url, json=payload, timeout=self._timeout)
        with httpx.Client() as client:
            return client.post(url, json=payload, timeout=self._timeout)

    def send(self, notification: Notification) -> bool:
        payload = {
            "to": notification.to,
            "cc": list(notification.cc),
            "subject": notification.subject,
            "body": notification.body,
        }
        try:
            resp = self._post(payload)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            log_event(
                "notification.failed",
                level=logging.WARNING,
                channel="http",
                kind=notification.kind.value,
                to=notification.to,
                error=str(exc),
            )
            return False

        log_event(
            "notification.sent",
            channel="http",
            kind=notification.kind.value,
            to=notification.to,
            subject=notification.subject,
        )
        return True
