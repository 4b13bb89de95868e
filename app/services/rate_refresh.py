"""Refresh exchange rates from the configured provider.

The provider call blocks (urllib), so it runs in Starlette's threadpool. Only
once the rates are in hand is the persisted state loaded, re-projected and
saved, with no await in between, so edits saved while the fetch was in flight
are kept. A failed refresh is reported as a notice and leaves the stored state
untouched; it is never raised to the caller and never retried automatically.
Overlapping refreshes are prevented by the form disabling its button while a
refresh is in flight, not by a lock here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from starlette.concurrency import run_in_threadpool

from app.db.dal import Database
from app.models.constants import t
from app.services.calculator import CalculatorState, apply_rates
from app.services.field_store import load_state, save_state
from app.services.rates.base import RateFetchError, RateProvider

logger = logging.getLogger("app.rates")

NOTICE_OK = "refresh-ok"
NOTICE_FAILED = "refresh-failed"


@dataclass(frozen=True)
class RefreshResult:
    ok: bool
    notice: str
    message: str
    state: CalculatorState


def notice_message(notice: str) -> str | None:
    if notice == NOTICE_OK:
        return t("exchangeRate.sync.successMessage")
    if notice == NOTICE_FAILED:
        return t("exchangeRate.sync.failedMessage")
    return None


async def refresh_rates(db: Database, provider: RateProvider) -> RefreshResult:
    try:
        rates = await run_in_threadpool(provider.fetch_usd_rates)
    except RateFetchError as e:
        logger.warning(
            "rate refresh failed", extra={"fields": {"provider": provider.name, "error": str(e)}}
        )
        return RefreshResult(
            False, NOTICE_FAILED, notice_message(NOTICE_FAILED) or "", load_state(db)
        )
    state = load_state(db)
    apply_rates(state, rates)
    save_state(db, state)
    logger.info(
        "rates refreshed",
        extra={
            "fields": {
                "provider": provider.name,
                "usd_to_sgd": rates.usd_to_sgd,
                "usd_to_idr": rates.usd_to_idr,
            }
        },
    )
    return RefreshResult(True, NOTICE_OK, notice_message(NOTICE_OK) or "", state)
