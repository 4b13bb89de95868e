"""Projection of a USD tax breakdown into the selected display currency.

Projection is a single multiplication per field; USD is returned untouched
(the same object comes back).
The IDR equivalent of the grand total is always computed, and only flagged
for display when the breakdown is not already shown in IDR.
"""

from __future__ import annotations

from dataclasses import dataclass

from app.models.constants import IDR, USD
from app.services.currency_sync import ExchangeRates
from app.services.tax_calculator import TaxBreakdown


@dataclass(frozen=True)
class DisplayBreakdown:
    currency: str
    rate: float
    tax_relief: float
    breakdown: TaxBreakdown
    idr_equivalent: float
    show_idr_equivalent: bool


def idr_equivalent(breakdown: TaxBreakdown, rates: ExchangeRates) -> float:
    return breakdown.total_with_buffer * rates.usd_to_idr


def project_breakdown(
    breakdown: TaxBreakdown,
    tax_relief: float,
    currency: str,
    rates: ExchangeRates,
) -> DisplayBreakdown:
    rate = rates.rate_for(currency)
    if currency == USD:
        projected = breakdown
        relief = tax_relief
    else:
        projected = breakdown.map(lambda v: v * rate)
        relief = tax_relief * rate
    return DisplayBreakdown(
        currency=currency,
        rate=rate,
        tax_relief=relief,
        breakdown=projected,
        idr_equivalent=idr_equivalent(breakdown, rates),
        show_idr_equivalent=currency != IDR,
    )
