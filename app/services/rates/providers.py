from __future__ import annotations

"""Concrete rate providers and factory.

'static' returns the built-in default rates (offline use, tests); 'external-http'
reads the public jsDelivr hosted currency feed for base USD.
"""
import logging
from typing import Callable, Dict, Optional, Type

from pydantic import ValidationError

from app.core.config import Settings
from app.models.constants import FIELD_DEFAULTS
from app.models.rates import UsdRatesFeed
from app.services.currency_sync import ExchangeRates
from app.services.http_client import HttpError, get_json
from .base import RateFetchError, RateProvider

logger = logging.getLogger("app.rates")

DEFAULT_USD_TO_SGD = float(FIELD_DEFAULTS["usdToSgdRate"])
DEFAULT_USD_TO_IDR = float(FIELD_DEFAULTS["usdToIdrRate"])


class StaticRateProvider(RateProvider):
    name = "static"

    def __init__(
        self,
        usd_to_sgd: float = DEFAULT_USD_TO_SGD,
        usd_to_idr: float = DEFAULT_USD_TO_IDR,
    ):
        self._rates = ExchangeRates(usd_to_sgd=usd_to_sgd, usd_to_idr=usd_to_idr)

    def fetch_usd_rates(self) -> ExchangeRates:  # type: ignore[override]
        return self._rates


class ExternalHTTPRateProvider(RateProvider):
    """Single GET of ``<feed>/usd.json``; no parameters, no auth."""

    name = "external-http"

    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        retries: int = 1,
        fetch: Optional[Callable[..., Dict]] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.retries = retries
        self._fetch = fetch or get_json

    def fetch_usd_rates(self) -> ExchangeRates:  # type: ignore[override]
        try:
            data = self._fetch(self.url, timeout=self.timeout, retries=self.retries)
        except HttpError as e:
            raise RateFetchError(str(e)) from e
        try:
            feed = UsdRatesFeed.model_validate(data)
        except ValidationError as e:
            raise RateFetchError(f"malformed rate feed: {e.errors()}") from e
        rates = ExchangeRates(usd_to_sgd=feed.usd.sgd, usd_to_idr=feed.usd.idr)
        logger.info(
            "fetched usd rates",
            extra={
                "fields": {
                    "feed_date": feed.date,
                    "usd_to_sgd": rates.usd_to_sgd,
                    "usd_to_idr": rates.usd_to_idr,
                }
            },
        )
        return rates


_PROVIDER_REGISTRY: Dict[str, Type[RateProvider]] = {
    "static": StaticRateProvider,
    "external-http": ExternalHTTPRateProvider,
}


def make_rate_provider(kind: str, settings: Optional[Settings] = None) -> RateProvider:
    cls = _PROVIDER_REGISTRY.get(kind)
    if not cls:
        raise ValueError(f"Unknown rate provider kind '{kind}'")
    if cls is ExternalHTTPRateProvider:
        if settings is None:
            raise ValueError("external-http provider requires settings")
        return ExternalHTTPRateProvider(
            url=settings.exchange_api_url,
            timeout=settings.http_timeout_seconds,
            retries=settings.http_retries,
        )
    return cls()
