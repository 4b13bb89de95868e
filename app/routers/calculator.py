"""Calculator JSON API.

Each mutating endpoint loads the persisted state, applies exactly one
operation, saves every field in one write and answers with the freshly
evaluated state (the refresh fetches its rates before loading):
    - GET  /calculator                   -> current state + breakdowns
    - PUT  /calculator/price             -> {currency, value}
    - PUT  /calculator/buffer            -> {currency, value}
    - PUT  /calculator/rates             -> {usd_to_sgd?, usd_to_idr?}
    - PUT  /calculator/display-currency  -> {currency}
    - POST /calculator/rates/refresh     -> fetch rates from the provider
    - POST /calculator/reset             -> back to the stored defaults
    - GET  /calculator/tax               -> stateless pipeline evaluation
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from app.db.dal import Database
from app.models.calculator import (
    AmountEditIn,
    BreakdownOut,
    CalculatorOut,
    DisplayCurrencyIn,
    RatesIn,
    RefreshOut,
    TaxQueryOut,
)
from app.routers.deps import get_db, get_rate_provider
from app.services import calculator as calc
from app.services.field_store import load_state, reset_state, save_state
from app.services.money import finite_or_none
from app.services.rate_refresh import refresh_rates
from app.services.rates.base import RateProvider
from app.services.tax_calculator import DEFAULT_TAX_RELIEF, compute_tax

router = APIRouter(prefix="/calculator", tags=["calculator"])


def _respond(state: calc.CalculatorState) -> CalculatorOut:
    return CalculatorOut.from_view(calc.evaluate(state))


@router.get("", response_model=CalculatorOut, summary="Current calculator state")
async def get_calculator(db: Database = Depends(get_db)):
    return _respond(load_state(db))


@router.put("/price", response_model=CalculatorOut, summary="Edit the price")
async def put_price(payload: AmountEditIn, db: Database = Depends(get_db)):
    state = load_state(db)
    calc.edit_price(state, payload.currency, payload.value)
    save_state(db, state)
    return _respond(state)


@router.put("/buffer", response_model=CalculatorOut, summary="Edit the buffer")
async def put_buffer(payload: AmountEditIn, db: Database = Depends(get_db)):
    state = load_state(db)
    calc.edit_buffer(state, payload.currency, payload.value)
    save_state(db, state)
    return _respond(state)


@router.put("/rates", response_model=CalculatorOut, summary="Edit exchange rates")
async def put_rates(payload: RatesIn, db: Database = Depends(get_db)):
    if payload.usd_to_sgd is None and payload.usd_to_idr is None:
        raise HTTPException(status_code=400, detail="no rate supplied")
    state = load_state(db)
    calc.edit_rates(state, payload.usd_to_sgd, payload.usd_to_idr)
    save_state(db, state)
    return _respond(state)


@router.put(
    "/display-currency",
    response_model=CalculatorOut,
    summary="Select the currency of the tax breakdown",
)
async def put_display_currency(
    payload: DisplayCurrencyIn, db: Database = Depends(get_db)
):
    state = load_state(db)
    calc.select_display_currency(state, payload.currency)
    save_state(db, state)
    return _respond(state)


@router.post(
    "/rates/refresh",
    response_model=RefreshOut,
    summary="Fetch today's rates from the configured provider",
)
async def post_refresh(
    db: Database = Depends(get_db),
    provider: RateProvider = Depends(get_rate_provider),
):
    result = await refresh_rates(db, provider)
    return RefreshOut(
        status="ok" if result.ok else "failed",
        message=result.message,
        state=_respond(result.state),
    )


@router.post("/reset", response_model=CalculatorOut, summary="Restore defaults")
async def post_reset(db: Database = Depends(get_db)):
    return _respond(reset_state(db))


@router.get("/tax", response_model=TaxQueryOut, summary="Evaluate the tax pipeline")
async def get_tax(
    price_usd: float = Query(..., description="Device price in USD"),
    buffer_usd: float = Query(0.0, description="Buffer in USD"),
    tax_relief: float = Query(DEFAULT_TAX_RELIEF, ge=0, description="Tax relief in USD"),
):
    breakdown = compute_tax(price_usd, tax_relief, buffer_usd)
    return TaxQueryOut(
        price_usd=finite_or_none(price_usd),
        tax_relief=finite_or_none(tax_relief),
        buffer_usd=finite_or_none(buffer_usd),
        breakdown=BreakdownOut.from_breakdown(breakdown),
    )
