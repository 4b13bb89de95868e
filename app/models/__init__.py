"""Pydantic request/response models for the IMEI tax calculator."""

from .constants import CURRENCIES, FIELD_DEFAULTS, LOCALES  # re-export
from .calculator import (
    AmountEditIn,
    CalculatorOut,
    DisplayCurrencyIn,
    RatesIn,
    RefreshOut,
    TaxQueryOut,
)
from .rates import UsdRatesFeed

__all__ = [
    "CURRENCIES",
    "FIELD_DEFAULTS",
    "LOCALES",
    "AmountEditIn",
    "CalculatorOut",
    "DisplayCurrencyIn",
    "RatesIn",
    "RefreshOut",
    "TaxQueryOut",
    "UsdRatesFeed",
]
