"""Exchange rate API client for converting amounts to and from the base currency"""

import httpx
from typing import Dict, Optional
from moneywise.domain.exceptions import CurrencyConversionError, ValidationError
from moneywise.domain.ledger import money
from moneywise.config import settings
from moneywise.infrastructure.observability.metrics import (
    currency_latency_histogram,
    currency_failures_counter,
)


class CurrencyClient:
    """
    Client for an external exchange rate API.

    Rates are quoted per unit of base currency ({"rates": {"USD": 0.0033}}),
    so to_base divides by the rate and from_base multiplies. Rates are
    fetched once per client instance; one instance serves one request.
    """

    def __init__(
        self,
        api_base: str | None = None,
        base_currency: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_base = api_base or settings.exchange_rate_api_base
        self.base_currency = (base_currency or settings.base_currency).upper()
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport
        self._rates: Optional[Dict[str, float]] = None

    async def get_rates(self) -> Dict[str, float]:
        """
        Fetch rates relative to the base currency.

        Raises:
            CurrencyConversionError: On timeout, HTTP errors, or invalid response
        """
        if self._rates is not None:
            return self._rates

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with currency_latency_histogram.time():
                    response = await client.get(f"{self.api_base}/{self.base_currency}")
                response.raise_for_status()
                data = response.json()

                self._rates = {code.upper(): float(rate) for code, rate in data["rates"].items()}
                return self._rates

            except httpx.TimeoutException as e:
                currency_failures_counter.inc()
                raise CurrencyConversionError(f"Exchange rate API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                currency_failures_counter.inc()
                raise CurrencyConversionError(f"Exchange rate API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                currency_failures_counter.inc()
                raise CurrencyConversionError(f"Exchange rate API unreachable: {e}") from e
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                currency_failures_counter.inc()
                raise CurrencyConversionError(f"Invalid rate data from exchange rate API: {e}") from e

    async def get_rate(self, currency: str) -> float:
        """
        Units of `currency` per one unit of base currency.

        Raises:
            ValidationError: Currency code unknown to the rate API
        """
        rates = await self.get_rates()
        rate = rates.get(currency.upper())
        if not rate:
            raise ValidationError(f"Unsupported currency code: {currency}")
        return rate

    def _is_base(self, currency: Optional[str]) -> bool:
        return not currency or currency.upper() == self.base_currency

    async def to_base(self, amount: float, currency: Optional[str] = None) -> float:
        if self._is_base(currency):
            return money(amount)
        return money(amount / await self.get_rate(currency))

    async def from_base(self, amount: float, currency: Optional[str] = None) -> float:
        if self._is_base(currency):
            return money(amount)
        return money(amount * await self.get_rate(currency))
