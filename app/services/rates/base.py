from __future__ import annotations

"""Rate provider abstraction.

A provider answers one question: what are the current USD based rates for
SGD and IDR. Providers are synchronous; callers on the event loop run them
in a worker thread.
"""
from abc import ABC, abstractmethod

from app.services.currency_sync import ExchangeRates


class RateFetchError(Exception):
    """Rates could not be obtained (network failure or malformed feed)."""


class RateProvider(ABC):
    name: str = "abstract"

    @abstractmethod
    def fetch_usd_rates(self) -> ExchangeRates:
        """Return USD->SGD and USD->IDR rates or raise RateFetchError."""
        raise NotImplementedError
