"""Email notification webhook client with exponential backoff retry logic"""

import httpx
import asyncio
from typing import Dict, Any
from moneywise.config import settings
from moneywise.domain.exceptions import NotificationDeliveryError
from moneywise.infrastructure.observability.metrics import (
    notification_latency_histogram,
    notification_failure_counter,
)


class NotificationClient:
    """Client for sending emails through the notification service"""

    def __init__(
        self,
        webhook_url: str | None = None,
        max_retries: int | None = None,
        backoff_base: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.webhook_url = webhook_url or settings.notification_webhook_url
        self.max_retries = max_retries or settings.webhook_max_retries
        self.backoff_base = settings.webhook_backoff_base if backoff_base is None else backoff_base
        self.transport = transport

    async def send_email(self, user_id: str, subject: str, message: str) -> None:
        """
        Ask the notification service to email a user.

        The service resolves the user's address from the user id.

        Retry strategy:
        - Exponential backoff: 1s, 2s, 4s, 8s (base * 2^(attempt-1))
        - Retries on 5xx/4xx errors and network failures
        - Tracks latency histogram and failure counter

        Raises:
            NotificationDeliveryError: After the final failed attempt
        """
        payload: Dict[str, Any] = {"userId": user_id, "subject": subject, "message": message}

        attempt = 0
        async with httpx.AsyncClient(transport=self.transport) as client:
            while attempt < self.max_retries:
                try:
                    with notification_latency_histogram.time():
                        response = await client.post(
                            self.webhook_url,
                            json=payload,
                            timeout=settings.http_timeout_seconds,
                        )
                        response.raise_for_status()
                        return  # Success

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    notification_failure_counter.inc()

                    if attempt >= self.max_retries:
                        raise NotificationDeliveryError(
                            f"Email delivery failed after {attempt} attempts: {e}"
                        ) from e

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)
