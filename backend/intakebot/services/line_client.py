"""
LINE Messaging Client — Webhook signature checks and reply delivery.
"""
import base64
import hashlib
import hmac
from typing import Any, Dict, Optional

import httpx

from intakebot.config import get_settings
from intakebot.schemas.schemas import TextReply
from intakebot.utils.logger import log


class LineAPIError(Exception):
    """Raised when the LINE reply endpoint cannot be reached or rejects a reply."""


def compute_signature(body: bytes, channel_secret: str) -> str:
    """Base64 HMAC-SHA256 of the raw request body, as LINE sends in X-Line-Signature."""
    digest = hmac.new(channel_secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def to_line_message(reply: TextReply) -> Dict[str, Any]:
    """Render a reply descriptor as a LINE text message object."""
    message: Dict[str, Any] = {"type": reply.type, "text": reply.text}
    if reply.quick_replies:
        message["quickReply"] = {
            "items": [
                {"type": "action", "action": {"type": "message", "label": o.label, "text": o.text}}
                for o in reply.quick_replies
            ]
        }
    return message


class LineMessagingClient:
    """Thin wrapper over the LINE reply API."""

    def __init__(self, settings=None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings or get_settings()
        self._transport = transport

    def verify_signature(self, body: bytes, signature: Optional[str]) -> bool:
        """
        Check the X-Line-Signature header against the channel secret.

        Returns:
            True only when a secret is configured and the signature matches.
        """
        secret = self.settings.LINE_CHANNEL_SECRET
        if not secret:
            log("LINE", "LINE_CHANNEL_SECRET not configured - rejecting webhook")
            return False
        if not signature:
            log("LINE", "Webhook signature missing")
            return False

        expected = compute_signature(body, secret)
        return hmac.compare_digest(signature, expected)

    async def reply(self, reply_token: str, reply: TextReply) -> bool:
        """
        Send one reply message using a single-use reply token.

        Returns:
            True if LINE accepted the reply, False if sending is disabled.

        Raises:
            LineAPIError: on transport failure or a non-2xx answer.
        """
        token = self.settings.LINE_CHANNEL_ACCESS_TOKEN
        if not token:
            log("LINE", f"LINE_CHANNEL_ACCESS_TOKEN not configured - reply not sent: {reply.text!r}")
            return False

        url = f"{self.settings.LINE_API_BASE}/v2/bot/message/reply"
        headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
        payload = {"replyToken": reply_token, "messages": [to_line_message(reply)]}

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.REPLY_TIMEOUT_SECONDS,
                transport=self._transport,
            ) as client:
                response = await client.post(url, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise LineAPIError(f"LINE reply request failed: {e}") from e

        if response.status_code >= 400:
            raise LineAPIError(f"LINE reply rejected: HTTP {response.status_code} {response.text}")
        return True
