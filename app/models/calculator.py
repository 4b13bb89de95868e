from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.models.constants import CURRENCIES
from app.services.money import finite_or_none, parse_amount


def _valid_currency(v: str) -> str:
    v = str(v).upper()
    if v not in CURRENCIES:
        raise ValueError("unsupported currency")
    return v


class AmountEditIn(BaseModel):
    """Edit of one member of the price or buffer triple.

    ``value`` accepts numbers or text; unparseable text is treated as 0, the
    same way the HTML form treats it.
    """

    currency: str = Field(..., description="SGD, USD or IDR")
    value: float = Field(..., description="New amount in `currency`")

    @field_validator("currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        return _valid_currency(v)

    @field_validator("value", mode="before")
    @classmethod
    def coerce_value(cls, v: object) -> float:
        return parse_amount(v)


class RatesIn(BaseModel):
    """Partial rate edit; omitted rates keep their current value."""

    usd_to_sgd: Optional[float] = Field(None, description="SGD per 1 USD")
    usd_to_idr: Optional[float] = Field(None, description="IDR per 1 USD")

    @field_validator("usd_to_sgd", "usd_to_idr", mode="before")
    @classmethod
    def coerce_rate(cls, v: object) -> Optional[float]:
        return None if v is None else parse_amount(v)


class DisplayCurrencyIn(BaseModel):
    currency: str

    @field_validator("currency")
    @classmethod
    def valid_currency(cls, v: str) -> str:
        return _valid_currency(v)


# Non-finite amounts (zero rates) serialize as null
Amount = Optional[float]


class TripleOut(BaseModel):
    SGD: Amount
    USD: Amount
    IDR: Amount
    active: str

    @classmethod
    def from_triple(cls, triple) -> "TripleOut":
        return cls(
            SGD=finite_or_none(triple.sgd),
            USD=finite_or_none(triple.usd),
            IDR=finite_or_none(triple.idr),
            active=triple.active,
        )


class RatesOut(BaseModel):
    usd_to_sgd: Amount
    usd_to_idr: Amount


class BreakdownOut(BaseModel):
    price_after_relief: Amount
    pph_amount: Amount
    import_price: Amount
    custom_import_tax: Amount
    ppn_amount: Amount
    pph22_amount: Amount
    total_tax: Amount
    total_with_buffer: Amount

    @classmethod
    def from_breakdown(cls, breakdown) -> "BreakdownOut":
        return cls(**{k: finite_or_none(v) for k, v in breakdown.as_dict().items()})


class DisplayOut(BaseModel):
    currency: str
    rate: Amount
    tax_relief: Amount
    breakdown: BreakdownOut
    idr_equivalent: Amount
    show_idr_equivalent: bool


class CalculatorOut(BaseModel):
    price: TripleOut
    buffer: TripleOut
    rates: RatesOut
    tax_relief: Amount
    display_currency: str
    buffer_usd: Amount
    breakdown_usd: BreakdownOut
    display: DisplayOut

    @classmethod
    def from_view(cls, view) -> "CalculatorOut":
        state = view.state
        display = view.display
        return cls(
            price=TripleOut.from_triple(state.price),
            buffer=TripleOut.from_triple(state.buffer),
            rates=RatesOut(
                usd_to_sgd=finite_or_none(state.rates.usd_to_sgd),
                usd_to_idr=finite_or_none(state.rates.usd_to_idr),
            ),
            tax_relief=finite_or_none(state.tax_relief),
            display_currency=state.display_currency,
            buffer_usd=finite_or_none(view.buffer_usd),
            breakdown_usd=BreakdownOut.from_breakdown(view.breakdown),
            display=DisplayOut(
                currency=display.currency,
                rate=finite_or_none(display.rate),
                tax_relief=finite_or_none(display.tax_relief),
                breakdown=BreakdownOut.from_breakdown(display.breakdown),
                idr_equivalent=finite_or_none(display.idr_equivalent),
                show_idr_equivalent=display.show_idr_equivalent,
            ),
        )


class RefreshOut(BaseModel):
    status: str
    message: str
    state: CalculatorOut


class TaxQueryOut(BaseModel):
    price_usd: Amount
    tax_relief: Amount
    buffer_usd: Amount
    breakdown: BreakdownOut
