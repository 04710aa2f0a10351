"""Telegram Bot API client for delivering alert messages."""

import asyncio
import time
from collections.abc import Sequence
from typing import Any

import httpx
import structlog

from alertgram.config import Settings
from alertgram.metrics import DELIVERY_DURATION
from alertgram.models.delivery import DeliveryOutcome, DeliveryStatus

logger = structlog.get_logger(__name__)

PARSE_MODE = "Markdown"


class TelegramError(Exception):
    """Exception raised for Telegram API errors."""

    def __init__(self, message: str, response: httpx.Response | None = None) -> None:
        super().__init__(message)
        self.response = response


class TelegramClient:
    """Client for sending messages through the Telegram Bot API."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Telegram client.

        Args:
            settings: Application settings holding the bot token and API URL.
            transport: Optional httpx transport, used to stub the Bot API.
        """
        self.url = settings.send_message_url
        self.timeout = settings.telegram_timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            transport=self._transport,
        )

    async def send_message(
        self,
        client: httpx.AsyncClient,
        chat_id: str,
        text: str,
    ) -> httpx.Response:
        """
        Send a Markdown message to one chat.

        Args:
            client: The HTTP client to send with
            chat_id: Destination chat id, must be an integer
            text: The message text

        Returns:
            The successful API response

        Raises:
            TelegramError: If the API rejects the message or the request fails
        """
        try:
            numeric_id = int(chat_id)
        except ValueError as e:
            raise TelegramError(f"Invalid chat id: {chat_id!r}") from e

        payload = {
            "chat_id": numeric_id,
            "text": text,
            "parse_mode": PARSE_MODE,
        }

        try:
            response = await client.post(self.url, json=payload)
        except httpx.TimeoutException as e:
            raise TelegramError(f"Telegram request timed out after {self.timeout}s") from e
        except httpx.RequestError as e:
            raise TelegramError(f"Telegram request failed: {e!r}") from e

        if not response.is_success:
            raise TelegramError(
                f"Telegram API error: {response.status_code}",
                response=response,
            )

        return response

    async def _deliver(
        self,
        client: httpx.AsyncClient,
        chat_id: str,
        text: str,
    ) -> DeliveryOutcome:
        log = logger.bind(chat_id=chat_id)
        log.info("Sending message to chat")

        try:
            response = await self.send_message(client, chat_id, text)
        except TelegramError as e:
            log.error("Message delivery failed", error=str(e))
            if e.response is None:
                return DeliveryOutcome(
                    chat_id=chat_id,
                    status=DeliveryStatus.REJECTED,
                    reason=str(e),
                )
            return _outcome_from_response(chat_id, e.response, DeliveryStatus.REJECTED, str(e))

        log.info("Message delivered", code=response.status_code)
        return _outcome_from_response(chat_id, response, DeliveryStatus.FULFILLED)

    async def broadcast(self, text: str, chat_ids: Sequence[str]) -> list[DeliveryOutcome]:
        """
        Send the message to every chat concurrently.

        Every delivery runs to completion regardless of the others; the
        returned outcomes are in the same order as ``chat_ids``.

        Args:
            text: The message text
            chat_ids: Destination chat ids

        Returns:
            One outcome per chat id
        """
        async with self._client() as client:
            settled = await asyncio.gather(
                *(self._timed_deliver(client, chat_id, text) for chat_id in chat_ids),
                return_exceptions=True,
            )

        outcomes: list[DeliveryOutcome] = []
        for chat_id, result in zip(chat_ids, settled):
            if isinstance(result, BaseException):
                logger.error("Unexpected delivery error", chat_id=chat_id, error=repr(result))
                outcomes.append(
                    DeliveryOutcome(
                        chat_id=chat_id,
                        status=DeliveryStatus.REJECTED,
                        reason=repr(result),
                    )
                )
            else:
                outcomes.append(result)

        return outcomes

    async def _timed_deliver(
        self,
        client: httpx.AsyncClient,
        chat_id: str,
        text: str,
    ) -> DeliveryOutcome:
        start = time.perf_counter()
        try:
            return await self._deliver(client, chat_id, text)
        finally:
            DELIVERY_DURATION.observe(time.perf_counter() - start)


def _outcome_from_response(
    chat_id: str,
    response: httpx.Response,
    status: DeliveryStatus,
    reason: str | None = None,
) -> DeliveryOutcome:
    body: Any
    try:
        body = response.json()
    except ValueError:
        body = response.text

    return DeliveryOutcome(
        chat_id=chat_id,
        status=status,
        code=response.status_code,
        headers=dict(response.headers),
        body=body,
        reason=reason,
    )
