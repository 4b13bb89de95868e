"""Currency synchronizer for the price and buffer triples.

A triple holds one logical amount in SGD, USD and IDR plus the currency the
user edited last (``active``). The active member is authoritative: when a
rate changes, the triple is re-derived from it instead of from USD, so a
rate edit never overwrites the user's last deliberate input.

Rates are USD based (1 USD = ``usd_to_sgd`` SGD = ``usd_to_idr`` IDR). A zero
rate is not rejected; division follows IEEE semantics (``inf``/``nan``) and
the non-finite value propagates to the outputs.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from app.models.constants import IDR, SGD, USD


@dataclass(frozen=True)
class ExchangeRates:
    usd_to_sgd: float
    usd_to_idr: float

    def rate_for(self, currency: str) -> float:
        """Units of ``currency`` per 1 USD."""
        if currency == SGD:
            return self.usd_to_sgd
        if currency == IDR:
            return self.usd_to_idr
        if currency == USD:
            return 1.0
        raise ValueError(f"unsupported currency '{currency}'")


@dataclass
class CurrencyTriple:
    sgd: float
    usd: float
    idr: float
    active: str = USD

    def get(self, currency: str) -> float:
        return {SGD: self.sgd, USD: self.usd, IDR: self.idr}[currency]

    def as_dict(self) -> dict:
        return {"SGD": self.sgd, "USD": self.usd, "IDR": self.idr, "active": self.active}


def ieee_divide(value: float, divisor: float) -> float:
    """``value / divisor`` without ZeroDivisionError: x/0 is +-inf, 0/0 is nan."""
    if divisor == 0:
        if value == 0 or math.isnan(value):
            return math.nan
        sign = math.copysign(1.0, value) * math.copysign(1.0, divisor)
        return math.copysign(math.inf, sign)
    return value / divisor


def _derive_from(triple: CurrencyTriple, currency: str, rates: ExchangeRates) -> None:
    """Recompute the other members from ``triple.<currency>``."""
    if currency == USD:
        usd = triple.usd
    else:
        usd = ieee_divide(triple.get(currency), rates.rate_for(currency))
        triple.usd = usd
    if currency != SGD:
        triple.sgd = usd * rates.usd_to_sgd
    if currency != IDR:
        triple.idr = usd * rates.usd_to_idr


def set_value(
    triple: CurrencyTriple, currency: str, value: float, rates: ExchangeRates
) -> CurrencyTriple:
    """Record a user edit of one member and re-derive the other two."""
    if currency == SGD:
        triple.sgd = value
    elif currency == USD:
        triple.usd = value
    elif currency == IDR:
        triple.idr = value
    else:
        raise ValueError(f"unsupported currency '{currency}'")
    triple.active = currency
    _derive_from(triple, currency, rates)
    return triple


def reproject(triple: CurrencyTriple, rates: ExchangeRates) -> CurrencyTriple:
    _derive_from(triple, triple.active, rates)
    return triple


def on_rates_changed(
    triples: Iterable[CurrencyTriple], rates: ExchangeRates
) -> None:
    # each triple keeps its own active member
    for triple in triples:
        reproject(triple, rates)


def to_usd(triple: CurrencyTriple, rates: ExchangeRates) -> float:
    """USD value of the triple, converted from its active member."""
    if triple.active == USD:
        return triple.usd
    return ieee_divide(triple.get(triple.active), rates.rate_for(triple.active))
