"""
Forward a lead to the external intake webhook.

One POST per call under a wall-clock deadline covering connect, redirects and
the full body. Failures are reported, not retried: forwarding is at-most-once
and there is no deduplication.
"""

import asyncio
import logging
from typing import Any
from urllib.parse import quote

import httpx

from chat_gateway.config import Settings
from chat_gateway.errors import LeadForwardError, LeadWebhookNotConfigured
from chat_gateway.schemas.lead import LeadSubmission

logger = logging.getLogger(__name__)


def webhook_target(url: str, token: str = "") -> str:
    """Append token=... to the webhook URL, leaving the existing query untouched."""
    if not token:
        return url
    return f"{url}{'&' if '?' in url else '?'}token={quote(token, safe='')}"


class LeadForwarder:
    def __init__(
        self,
        webhook_url: str,
        *,
        token: str = "",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.webhook_url = webhook_url
        self.token = token
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs) -> "LeadForwarder":
        return cls(
            settings.lead_webhook_url,
            token=settings.lead_webhook_token,
            timeout=settings.lead_timeout_seconds,
            **kwargs,
        )

    async def forward(self, lead: LeadSubmission) -> Any:
        """POST the normalized lead and return the upstream body (JSON, text or None)."""
        if not self.webhook_url:
            logger.error("LEAD_WEBHOOK_URL not configured.")
            raise LeadWebhookNotConfigured()

        payload = lead.outbound_payload()
        try:
            response = await asyncio.wait_for(self._post(payload), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error("Lead forward error: timed out after %ss", self.timeout)
            raise LeadForwardError(f"timed out after {self.timeout}s") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Lead forward error: %s", e)
            raise LeadForwardError(str(e) or type(e).__name__) from e

        logger.info(
            "Lead forwarded: status=%s phone_digits=%d",
            response.status_code,
            len(payload["phone"]),
        )
        return _response_body(response)

    async def _post(self, payload: dict) -> httpx.Response:
        # httpx timeouts apply per phase; the caller's wait_for bounds the total
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            response = await client.post(
                webhook_target(self.webhook_url, self.token),
                json=payload,
            )
            response.raise_for_status()
            return response


def _response_body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
