from __future__ import annotations
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class UsdQuotes(BaseModel):
    """The two quotes the calculator reads; the other few hundred are ignored."""

    model_config = ConfigDict(extra="ignore")

    sgd: float
    idr: float

    @field_validator("sgd", "idr")
    @classmethod
    def positive(cls, v: float) -> float:
        if not v > 0:
            raise ValueError("rate must be positive")
        return v


class UsdRatesFeed(BaseModel):
    """Body of the public currency feed for base USD.

    Example: ``{"date": "2025-01-31", "usd": {"sgd": 1.35, "idr": 16300.5, ...}}``.
    """

    date: Optional[str] = None
    usd: UsdQuotes
