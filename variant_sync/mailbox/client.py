"""
Mailbox client: one GET per poll against the capture mailbox.

The client keeps no state between calls. A failed request raises
MailboxUnreachable and the caller simply polls again on its next tick.
"""

import logging

import httpx
from pydantic import ValidationError

from models import RawCapture
from variant_sync.config import SyncConfig
from variant_sync.errors import MailboxUnreachable

logger = logging.getLogger(__name__)


class MailboxClient:
    def __init__(
        self,
        config: SyncConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or SyncConfig.from_env()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=self.config.request_timeout)

    async def poll(self) -> RawCapture | None:
        """Return the mailbox's current capture, or None when it holds nothing."""
        params = {}
        if self.config.session_token:
            params["sessionToken"] = self.config.session_token

        try:
            response = await self._http.get(self.config.mailbox_url, params=params)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise MailboxUnreachable(
                f"Mailbox request failed: {exc}",
                details={"url": self.config.mailbox_url},
            ) from exc

        try:
            body = response.json()
        except ValueError:
            logger.warning("Mailbox returned a non-JSON body (status %s)", response.status_code)
            return None
        if not isinstance(body, dict):
            logger.warning("Mailbox returned %s instead of an object", type(body).__name__)
            return None

        try:
            capture = RawCapture.model_validate(body)
        except ValidationError as exc:
            logger.warning("Mailbox returned a malformed capture: %s", exc)
            return None

        if capture.is_empty():
            return None
        logger.debug(
            "Mailbox delivered %d variant(s), image=%s",
            len(capture.variants or {}),
            bool(capture.image),
        )
        return capture

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()
