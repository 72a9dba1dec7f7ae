"""
Live Pricing
============
Fetches unit prices from the Azure Retail Prices API.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Optional

import httpx
import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from p3_estimator.config import settings

logger = structlog.get_logger()

API_VERSION = "2023-01-01-preview"

PriceItem = dict[str, Any]


@dataclass(frozen=True)
class LivePrices:
    """
    Unit prices found in the retail price list.

    A field is ``None`` if no meter matched or every query for it failed;
    ``errors`` holds the messages of failed queries.
    """

    ptu_usd_per_hour: Optional[Decimal] = None
    copilot_credit_usd: Optional[Decimal] = None
    errors: tuple[str, ...] = ()


def primary_region_item(items: list[PriceItem]) -> PriceItem:
    """Item billed in its primary meter region, else the first item."""
    return next((i for i in items if i.get("isPrimaryMeterRegion")), items[0])


def message_meter_item(items: list[PriceItem]) -> PriceItem:
    """Message-based meter, else the first item."""
    return next(
        (i for i in items if "message" in str(i.get("meterName", "")).lower()),
        items[0],
    )


class RetailPriceFetcher:
    """
    Client for the public Azure Retail Prices API.

    Each unit price has an ordered list of OData filters; the first filter
    returning a non-zero price wins. Result pages are followed up to
    ``max_pages``. Transient HTTP failures are retried with exponential
    backoff. A query that still fails is logged and skipped, so the other
    price can still be found. Only when every query fails is the last
    error raised.
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        url: Optional[str] = None,
        region: Optional[str] = None,
        ptu_filters: Optional[list[str]] = None,
        copilot_filters: Optional[list[str]] = None,
        max_pages: Optional[int] = None,
        retry_attempts: Optional[int] = None,
        wait_multiplier: float = 1.0,
    ):
        self.url = url or settings.live_pricing_url
        self._client = client or httpx.Client(
            timeout=settings.live_pricing_timeout,
            headers={"User-Agent": "p3-estimator/1.0.0"},
        )
        self.region = region or settings.live_pricing_region
        self.ptu_filters = ptu_filters or settings.live_pricing_ptu_filters
        self.copilot_filters = copilot_filters or settings.live_pricing_copilot_filters
        self.max_pages = max_pages or settings.live_pricing_max_pages
        self.retry_attempts = retry_attempts or settings.live_pricing_retry_attempts
        self.wait_multiplier = wait_multiplier

    def fetch(self) -> LivePrices:
        """Fetch both unit prices."""
        failures: list[httpx.HTTPError] = []
        attempts = 0

        found: dict[str, Optional[Decimal]] = {}
        targets: list[tuple[str, list[str], Callable[[list[PriceItem]], PriceItem]]] = [
            ("ptu_usd_per_hour", self.ptu_filters, primary_region_item),
            ("copilot_credit_usd", self.copilot_filters, message_meter_item),
        ]

        for field, filters, select in targets:
            found[field] = None
            for meter_filter in filters:
                attempts += 1
                try:
                    items = self.fetch_items(meter_filter)
                except httpx.HTTPError as e:
                    logger.error("Retail price query failed", filter=meter_filter, error=str(e))
                    failures.append(e)
                    continue

                price = Decimal(str(select(items).get("unitPrice", 0))) if items else None
                if price:
                    found[field] = price
                    break
                logger.warning("No retail price found for meter", filter=meter_filter)

        if failures and len(failures) == attempts:
            raise failures[-1]

        prices = LivePrices(
            ptu_usd_per_hour=found["ptu_usd_per_hour"],
            copilot_credit_usd=found["copilot_credit_usd"],
            errors=tuple(str(e) for e in failures),
        )
        logger.info(
            "Fetched live unit prices",
            region=self.region,
            ptu_usd_per_hour=str(prices.ptu_usd_per_hour),
            copilot_credit_usd=str(prices.copilot_credit_usd),
            failed_queries=len(failures),
        )
        return prices

    def fetch_items(self, meter_filter: str) -> list[PriceItem]:
        """All price items matching ``meter_filter``, following ``NextPageLink``."""
        retrying = Retrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_exponential(multiplier=self.wait_multiplier, max=10),
            retry=retry_if_exception_type((httpx.HTTPError, httpx.TimeoutException)),
            reraise=True,
        )

        items: list[PriceItem] = []
        url: Optional[str] = self.url
        params: Optional[dict[str, str]] = {
            "$filter": meter_filter.format(region=self.region),
            "api-version": API_VERSION,
        }
        pages = 0

        while url and pages < self.max_pages:
            data: dict[str, Any] = retrying(self._get, url, params)
            items.extend(data.get("Items") or [])
            # The next link carries the full query
            url = data.get("NextPageLink")
            params = None
            pages += 1

        return items

    def _get(self, url: str, params: Optional[dict[str, str]]) -> dict[str, Any]:
        response = self._client.get(url, params=params)
        response.raise_for_status()
        return response.json()

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "RetailPriceFetcher":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
