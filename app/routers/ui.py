from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from app.db.dal import Database
from app.models.constants import CURRENCIES, LOCALES, t
from app.routers.deps import get_app_settings, get_db, get_rate_provider
from app.services import calculator as calc
from app.services.field_store import load_state, reset_state, save_state
from app.services.money import format_amount, format_input, parse_amount
from app.services.rate_refresh import notice_message, refresh_rates, NOTICE_OK
from app.services.rates.base import RateProvider

router = APIRouter(tags=["ui"])

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["amount"] = format_amount
templates.env.filters["plain"] = format_input
templates.env.globals["t"] = t

# (label key, breakdown attribute) in display order
BREAKDOWN_ROWS = (
    ("priceAfterTaxRelieveLabel", "price_after_relief"),
    ("pphAmountLabel", "pph_amount"),
    ("importPriceLabel", "import_price"),
    ("customImportTaxLabel", "custom_import_tax"),
    ("ppnAmountLabel", "ppn_amount"),
    ("pph22AmountLabel", "pph22_amount"),
    ("totalTaxAmountLabel", "total_tax"),
)


def _redirect(notice: Optional[str] = None) -> RedirectResponse:
    url = "/ui" if not notice else f"/ui?notice={notice}"
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


def _form_currency(currency: str) -> str:
    currency = currency.strip().upper()
    if currency not in CURRENCIES:
        raise HTTPException(status_code=400, detail=f"unsupported currency '{currency}'")
    return currency


def _page_context(
    request: Request, state: calc.CalculatorState, notice: Optional[str]
) -> Dict[str, Any]:
    view = calc.evaluate(state)
    display = view.display
    rows = [
        {"label": f"{t(label)} ({display.currency})", "value": getattr(display.breakdown, attr)}
        for label, attr in BREAKDOWN_ROWS
    ]
    return {
        "request": request,
        "version": get_app_settings(request).version,
        "locales": LOCALES,
        "currencies": CURRENCIES,
        "state": state,
        "view": view,
        "display": display,
        "relief_label": f"{t('taxRelieveLabel')} ({display.currency})",
        "total_label": f"{t('totalPriceWithBufferLabel')} ({display.currency})",
        "rows": rows,
        "notice_ok": notice == NOTICE_OK,
        "notice_message": notice_message(notice or ""),
    }


@router.get("/ui", response_class=HTMLResponse)
async def ui_calculator(
    request: Request, notice: Optional[str] = None, db: Database = Depends(get_db)
):
    state = load_state(db)
    return templates.TemplateResponse(
        request, "calculator.html", _page_context(request, state, notice)
    )


@router.post("/ui/price", response_class=RedirectResponse)
async def ui_price_submit(
    currency: str = Form(...),
    value: str = Form(""),
    db: Database = Depends(get_db),
):
    state = load_state(db)
    calc.edit_price(state, _form_currency(currency), parse_amount(value))
    save_state(db, state)
    return _redirect()


@router.post("/ui/buffer", response_class=RedirectResponse)
async def ui_buffer_submit(
    currency: str = Form(...),
    value: str = Form(""),
    db: Database = Depends(get_db),
):
    state = load_state(db)
    calc.edit_buffer(state, _form_currency(currency), parse_amount(value))
    save_state(db, state)
    return _redirect()


@router.post("/ui/rates", response_class=RedirectResponse)
async def ui_rates_submit(
    usd_to_sgd: Optional[str] = Form(None),
    usd_to_idr: Optional[str] = Form(None),
    db: Database = Depends(get_db),
):
    state = load_state(db)
    calc.edit_rates(
        state,
        usd_to_sgd=None if usd_to_sgd is None else parse_amount(usd_to_sgd),
        usd_to_idr=None if usd_to_idr is None else parse_amount(usd_to_idr),
    )
    save_state(db, state)
    return _redirect()


@router.post("/ui/display-currency", response_class=RedirectResponse)
async def ui_display_currency_submit(
    currency: str = Form(...), db: Database = Depends(get_db)
):
    state = load_state(db)
    calc.select_display_currency(state, _form_currency(currency))
    save_state(db, state)
    return _redirect()


@router.post("/ui/rates/refresh", response_class=RedirectResponse)
async def ui_rates_refresh(
    db: Database = Depends(get_db),
    provider: RateProvider = Depends(get_rate_provider),
):
    result = await refresh_rates(db, provider)
    return _redirect(result.notice)


@router.post("/ui/reset", response_class=RedirectResponse)
async def ui_reset(db: Database = Depends(get_db)):
    reset_state(db)
    return _redirect()
