"""Persisted calculator fields backed by the metadata table.

Each field is stored under ``calculator-imei:<field>`` as text. All accessors
are resilient: a missing or unreadable value falls back to its default from
``FIELD_DEFAULTS``.

Keys:
  - priceSGD / priceUSD / priceIDR: price triple
  - bufferSGD / bufferUSD / bufferIDR: buffer triple
  - usdToSgdRate / usdToIdrRate: exchange rates
  - taxRelieve: tax relief in USD (not editable from the form)
  - activeInput / activeBufferInput: active member of each triple
  - selectedCurrency: display currency

NOTE: state is written with a single ``set_values`` call so both triples,
their active markers and the rates land in one transaction.
"""

from __future__ import annotations

from typing import Dict, Mapping, Protocol

from app.models.constants import CURRENCIES, FIELD_DEFAULTS, FIELD_PREFIX
from app.services.calculator import CalculatorState
from app.services.currency_sync import CurrencyTriple, ExchangeRates, on_rates_changed


class _KeyValueStore(Protocol):  # duck-typed Database
    def get_values(self, keys) -> Dict[str, str]: ...  # noqa: D401

    def set_values(self, values: Mapping[str, str]) -> None: ...  # noqa: D401

    def delete_values(self, keys) -> int: ...  # noqa: D401


def field_key(name: str) -> str:
    return f"{FIELD_PREFIX}{name}"


ALL_KEYS = tuple(field_key(name) for name in FIELD_DEFAULTS)

# ------------- Low level helpers -----------------


def _get_float(raw: Mapping[str, str], name: str) -> float:
    val = raw.get(field_key(name))
    if val is None:
        return float(FIELD_DEFAULTS[name])
    try:
        return float(val)
    except ValueError:
        return float(FIELD_DEFAULTS[name])


def _get_currency(raw: Mapping[str, str], name: str) -> str:
    val = (raw.get(field_key(name)) or "").upper()
    return val if val in CURRENCIES else str(FIELD_DEFAULTS[name])


def _fmt_float(value: float) -> str:
    # repr round-trips exactly, including inf and nan
    return repr(float(value))


# ------------- State load / save -----------------


def load_state(db: _KeyValueStore) -> CalculatorState:
    raw = db.get_values(ALL_KEYS)
    rates = ExchangeRates(
        usd_to_sgd=_get_float(raw, "usdToSgdRate"),
        usd_to_idr=_get_float(raw, "usdToIdrRate"),
    )
    price = CurrencyTriple(
        sgd=_get_float(raw, "priceSGD"),
        usd=_get_float(raw, "priceUSD"),
        idr=_get_float(raw, "priceIDR"),
        active=_get_currency(raw, "activeInput"),
    )
    buffer = CurrencyTriple(
        sgd=_get_float(raw, "bufferSGD"),
        usd=_get_float(raw, "bufferUSD"),
        idr=_get_float(raw, "bufferIDR"),
        active=_get_currency(raw, "activeBufferInput"),
    )
    # stored defaults are not mutually consistent; surface a consistent state
    on_rates_changed((price, buffer), rates)
    return CalculatorState(
        price=price,
        buffer=buffer,
        rates=rates,
        tax_relief=_get_float(raw, "taxRelieve"),
        display_currency=_get_currency(raw, "selectedCurrency"),
    )


def dump_state(state: CalculatorState) -> Dict[str, str]:
    fields_: Dict[str, str] = {
        "priceSGD": _fmt_float(state.price.sgd),
        "priceUSD": _fmt_float(state.price.usd),
        "priceIDR": _fmt_float(state.price.idr),
        "bufferSGD": _fmt_float(state.buffer.sgd),
        "bufferUSD": _fmt_float(state.buffer.usd),
        "bufferIDR": _fmt_float(state.buffer.idr),
        "usdToSgdRate": _fmt_float(state.rates.usd_to_sgd),
        "usdToIdrRate": _fmt_float(state.rates.usd_to_idr),
        "taxRelieve": _fmt_float(state.tax_relief),
        "activeInput": state.price.active,
        "activeBufferInput": state.buffer.active,
        "selectedCurrency": state.display_currency,
    }
    return {field_key(k): v for k, v in fields_.items()}


def save_state(db: _KeyValueStore, state: CalculatorState) -> None:
    db.set_values(dump_state(state))


def reset_state(db: _KeyValueStore) -> CalculatorState:
    """Forget every stored field so the defaults apply again."""
    db.delete_values(ALL_KEYS)
    return load_state(db)


__all__ = [
    "ALL_KEYS",
    "field_key",
    "load_state",
    "dump_state",
    "save_state",
    "reset_state",
]
