from __future__ import annotations

from typing import Protocol


class NotifierPort(Protocol):
    async def send(self, *, to: str, subject: str, body: str) -> bool:
        """Deliver a rendered message. Never raises; returns False on failure."""
