"""Unit tests for the exchange rate and notification clients"""

import httpx
import json
import pytest
from moneywise.domain.exceptions import (
    CurrencyConversionError,
    NotificationDeliveryError,
    ValidationError,
)
from moneywise.infrastructure.clients.currency import CurrencyClient
from moneywise.infrastructure.clients.notifier import NotificationClient


def _rates_transport(calls: list) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        return httpx.Response(200, json={"result": "success", "rates": {"LKR": 1, "USD": 0.5}})

    return httpx.MockTransport(handler)


async def test_currency_client_converts_both_ways():
    calls = []
    client = CurrencyClient(api_base="https://rates.test/latest", base_currency="LKR", transport=_rates_transport(calls))

    assert await client.to_base(10, "USD") == 20.0
    assert await client.from_base(20, "usd") == 10.0
    assert calls == ["https://rates.test/latest/LKR"]  # fetched once per client


async def test_currency_client_base_currency_is_noop():
    calls = []
    client = CurrencyClient(api_base="https://rates.test/latest", base_currency="LKR", transport=_rates_transport(calls))

    assert await client.to_base(12.341, "LKR") == 12.34
    assert await client.to_base(10, None) == 10.0
    assert calls == []


async def test_currency_client_unknown_code():
    client = CurrencyClient(api_base="https://rates.test/latest", base_currency="LKR", transport=_rates_transport([]))

    with pytest.raises(ValidationError) as exc_info:
        await client.to_base(10, "XYZ")
    assert exc_info.value.message == "Unsupported currency code: XYZ"


async def test_currency_client_http_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(503))
    client = CurrencyClient(api_base="https://rates.test/latest", base_currency="LKR", transport=transport)

    with pytest.raises(CurrencyConversionError):
        await client.to_base(10, "USD")


async def test_currency_client_invalid_payload():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"result": "error"}))
    client = CurrencyClient(api_base="https://rates.test/latest", base_currency="LKR", transport=transport)

    with pytest.raises(CurrencyConversionError):
        await client.get_rates()


async def test_notification_client_posts_payload():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(json.loads(request.content))
        return httpx.Response(202)

    client = NotificationClient(
        webhook_url="https://mail.test/send",
        max_retries=3,
        backoff_base=0,
        transport=httpx.MockTransport(handler),
    )

    await client.send_email("user_1", "Goal Completed!", "Well done")

    assert requests == [{"userId": "user_1", "subject": "Goal Completed!", "message": "Well done"}]


async def test_notification_client_retries_then_fails():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(500)

    client = NotificationClient(
        webhook_url="https://mail.test/send",
        max_retries=2,
        backoff_base=0,
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(NotificationDeliveryError):
        await client.send_email("user_1", "Subject", "Body")
    assert len(attempts) == 2


async def test_notification_client_recovers_after_transient_failure():
    responses = iter([httpx.Response(502), httpx.Response(200)])

    client = NotificationClient(
        webhook_url="https://mail.test/send",
        max_retries=3,
        backoff_base=0,
        transport=httpx.MockTransport(lambda request: next(responses)),
    )

    await client.send_email("user_1", "Subject", "Body")
