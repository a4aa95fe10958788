from __future__ import annotations

import logging
from typing import Optional

import httpx

from authcore.domain.ports.notifier import NotifierPort

logger = logging.getLogger(__name__)


class HttpSmtpNotifier(NotifierPort):
    """
    Posts rendered messages to an HTTP mail relay.
    Delivery problems are logged and reported as False, never raised.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 5.0,
        send_path: str = "/send",
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._send_path = send_path if send_path.startswith("/") else f"/{send_path}"
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(timeout=timeout)

    async def send(self, *, to: str, subject: str, body: str) -> bool:
        url = f"{self._base_url}{self._send_path}"
        payload = {"to": to, "subject": subject, "body": body}

        try:
            resp = await self._client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.warning("mail relay unreachable", extra={"error": str(e)})
            return False
        if not (200 <= resp.status_code < 300):
            logger.warning(
                "mail relay rejected message",
                extra={"status_code": resp.status_code, "body": resp.text[:200]},
            )
            return False
        return True

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
