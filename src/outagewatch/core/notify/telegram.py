"""
Telegram Bot API notifier using httpx.
"""

from __future__ import annotations

import httpx

from outagewatch.core.config.models import TELEGRAM_MESSAGE_LIMIT, TelegramConfig
from outagewatch.core.logging import get_logger

from .base import DisabledNotifier, Notifier, NotifyError, split_message

logger = get_logger("notify.telegram")


class TelegramNotifier(Notifier):
    """Send messages to one chat through the ``sendMessage`` endpoint."""

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        *,
        api_url: str = "https://api.telegram.org",
        parse_mode: str = "HTML",
        disable_web_page_preview: bool = True,
        timeout: float = 15.0,
        max_message_length: int = TELEGRAM_MESSAGE_LIMIT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.chat_id = chat_id
        self.parse_mode = parse_mode
        self.disable_web_page_preview = disable_web_page_preview
        self.max_message_length = max_message_length
        self._endpoint = f"{api_url.rstrip('/')}/bot{bot_token}/sendMessage"
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @classmethod
    def from_config(
        cls,
        config: TelegramConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "TelegramNotifier":
        if not config.enabled:
            raise ValueError("Telegram bot_token and chat_id are required")
        return cls(
            config.bot_token or "",
            config.chat_id or "",
            api_url=config.api_url,
            parse_mode=config.parse_mode,
            disable_web_page_preview=config.disable_web_page_preview,
            timeout=config.timeout_seconds,
            max_message_length=config.max_message_length,
            transport=transport,
        )

    @property
    def name(self) -> str:
        return "telegram"

    async def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            )
        return self._client

    async def send(self, message: str) -> None:
        """Send a message, split into several if it exceeds Telegram's limit.

        Raises:
            NotifyError: On transport failure or a rejected message
        """
        chunks = split_message(message, self.max_message_length)
        for index, chunk in enumerate(chunks, start=1):
            await self._send_one(chunk)
            if len(chunks) > 1:
                logger.debug("Sent message part %d/%d", index, len(chunks))
        logger.info("Successfully sent message to Telegram")

    async def _send_one(self, text: str) -> None:
        client = await self._ensure_client()
        payload = {
            "chat_id": self.chat_id,
            "text": text,
            "parse_mode": self.parse_mode,
            "disable_web_page_preview": self.disable_web_page_preview,
        }

        try:
            response = await client.post(self._endpoint, json=payload)
        except httpx.HTTPError as e:
            # The endpoint embeds the bot token, keep it out of the message
            raise NotifyError(f"Telegram request failed: {type(e).__name__}", cause=e) from e

        description = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            description = body.get("description")

        if response.status_code >= 400 or (isinstance(body, dict) and body.get("ok") is False):
            raise NotifyError(
                f"Telegram rejected message ({response.status_code}): {description or 'no description'}",
                status_code=response.status_code,
            )

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None


def build_notifier(config: TelegramConfig) -> Notifier:
    """Telegram notifier when configured, otherwise a logging no-op."""
    if not config.enabled:
        return DisabledNotifier("Telegram bot token or chat id is not configured")
    return TelegramNotifier.from_config(config)
