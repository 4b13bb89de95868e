"""Calculator state and the user-facing operations on it.

Every operation mutates the state, then the caller re-evaluates the whole
view with ``evaluate``. There is no incremental recomputation: the tax
breakdown is a pure function of (price in USD, tax relief, buffer in USD) and
is recomputed from scratch each time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from app.models.constants import CURRENCIES
from app.services.currency_sync import (
    CurrencyTriple,
    ExchangeRates,
    on_rates_changed,
    set_value,
    to_usd,
)
from app.services.display import DisplayBreakdown, project_breakdown
from app.services.tax_calculator import TaxBreakdown, compute_tax

logger = logging.getLogger("app.calculator")


@dataclass
class CalculatorState:
    price: CurrencyTriple
    buffer: CurrencyTriple
    rates: ExchangeRates
    tax_relief: float
    display_currency: str

    def triples(self) -> tuple[CurrencyTriple, CurrencyTriple]:
        return (self.price, self.buffer)


@dataclass(frozen=True)
class CalculatorView:
    state: CalculatorState
    price_usd: float
    buffer_usd: float
    breakdown: TaxBreakdown
    display: DisplayBreakdown


def _check_currency(currency: str) -> str:
    currency = currency.upper()
    if currency not in CURRENCIES:
        raise ValueError(f"unsupported currency '{currency}'")
    return currency


def edit_price(state: CalculatorState, currency: str, value: float) -> None:
    set_value(state.price, _check_currency(currency), value, state.rates)
    logger.debug("price edited", extra={"fields": {"currency": currency, "value": value}})


def edit_buffer(state: CalculatorState, currency: str, value: float) -> None:
    set_value(state.buffer, _check_currency(currency), value, state.rates)
    logger.debug("buffer edited", extra={"fields": {"currency": currency, "value": value}})


def apply_rates(state: CalculatorState, rates: ExchangeRates) -> None:
    """Replace the rates and re-project both triples from their active member."""
    state.rates = rates
    on_rates_changed(state.triples(), rates)


def edit_rates(
    state: CalculatorState,
    usd_to_sgd: Optional[float] = None,
    usd_to_idr: Optional[float] = None,
) -> None:
    rates = ExchangeRates(
        usd_to_sgd=state.rates.usd_to_sgd if usd_to_sgd is None else usd_to_sgd,
        usd_to_idr=state.rates.usd_to_idr if usd_to_idr is None else usd_to_idr,
    )
    if rates.usd_to_sgd == 0 or rates.usd_to_idr == 0:
        logger.warning("zero exchange rate entered; derived amounts become non-finite")
    apply_rates(state, rates)


def select_display_currency(state: CalculatorState, currency: str) -> None:
    state.display_currency = _check_currency(currency)


def evaluate(state: CalculatorState) -> CalculatorView:
    price_usd = state.price.usd
    buffer_usd = to_usd(state.buffer, state.rates)
    breakdown = compute_tax(price_usd, state.tax_relief, buffer_usd)
    display = project_breakdown(
        breakdown, state.tax_relief, state.display_currency, state.rates
    )
    return CalculatorView(
        state=state,
        price_usd=price_usd,
        buffer_usd=buffer_usd,
        breakdown=breakdown,
        display=display,
    )
