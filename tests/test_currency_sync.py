import math

import pytest

from app.services.currency_sync import (
    CurrencyTriple,
    ExchangeRates,
    ieee_divide,
    on_rates_changed,
    reproject,
    set_value,
    to_usd,
)

RATES = ExchangeRates(usd_to_sgd=1.33, usd_to_idr=15000.0)


def assert_consistent(triple: CurrencyTriple, rates: ExchangeRates) -> None:
    assert triple.sgd == pytest.approx(triple.usd * rates.usd_to_sgd, rel=1e-9)
    assert triple.idr == pytest.approx(triple.usd * rates.usd_to_idr, rel=1e-9)


def test_consistency_holds_after_every_edit():
    triple = CurrencyTriple(sgd=0.0, usd=0.0, idr=0.0, active="USD")
    edits = [
        ("SGD", 1000.0),
        ("USD", 42.5),
        ("IDR", 11_250_000.0),
        ("SGD", 0.0),
        ("IDR", 1.0),
        ("USD", -20.0),
    ]
    for currency, value in edits:
        set_value(triple, currency, value, RATES)
        assert triple.active == currency
        assert triple.get(currency) == value
        assert_consistent(triple, RATES)


def test_edit_in_sgd_derives_usd_then_idr():
    triple = CurrencyTriple(sgd=0.0, usd=0.0, idr=0.0)
    set_value(triple, "SGD", 133.0, RATES)
    assert triple.usd == pytest.approx(100.0)
    assert triple.idr == pytest.approx(1_500_000.0)


def test_round_trip_via_usd_is_a_fixed_point():
    triple = CurrencyTriple(sgd=0.0, usd=0.0, idr=0.0)
    set_value(triple, "SGD", 1234.56, RATES)
    sgd, usd, idr = triple.sgd, triple.usd, triple.idr

    set_value(triple, "USD", usd, RATES)
    assert triple.usd == usd
    assert triple.sgd == pytest.approx(sgd, rel=1e-9)
    assert triple.idr == idr


def test_rate_change_keeps_active_usd_value():
    triple = CurrencyTriple(sgd=133.0, usd=100.0, idr=1_500_000.0, active="USD")
    new_rates = ExchangeRates(usd_to_sgd=1.40, usd_to_idr=15000.0)
    on_rates_changed([triple], new_rates)
    assert triple.usd == 100.0
    assert triple.sgd == pytest.approx(140.0)
    assert triple.idr == pytest.approx(1_500_000.0)


def test_rate_change_reprojects_from_active_sgd():
    triple = CurrencyTriple(sgd=0.0, usd=0.0, idr=0.0)
    set_value(triple, "SGD", 140.0, RATES)
    reproject(triple, ExchangeRates(usd_to_sgd=1.40, usd_to_idr=16000.0))
    assert triple.sgd == 140.0
    assert triple.usd == pytest.approx(100.0)
    assert triple.idr == pytest.approx(1_600_000.0)


def test_rate_change_reprojects_from_active_idr():
    triple = CurrencyTriple(sgd=0.0, usd=0.0, idr=0.0)
    set_value(triple, "IDR", 1_500_000.0, RATES)
    reproject(triple, ExchangeRates(usd_to_sgd=1.33, usd_to_idr=12000.0))
    assert triple.idr == 1_500_000.0
    assert triple.usd == pytest.approx(125.0)
    assert triple.sgd == pytest.approx(166.25)


def test_triples_reproject_independently():
    price = CurrencyTriple(sgd=0.0, usd=0.0, idr=0.0)
    buffer = CurrencyTriple(sgd=0.0, usd=0.0, idr=0.0)
    set_value(price, "SGD", 1330.0, RATES)
    set_value(buffer, "USD", 50.0, RATES)

    new_rates = ExchangeRates(usd_to_sgd=1.40, usd_to_idr=15000.0)
    on_rates_changed([price, buffer], new_rates)

    assert price.sgd == 1330.0
    assert price.usd == pytest.approx(950.0)
    assert buffer.usd == 50.0
    assert buffer.sgd == pytest.approx(70.0)
    assert_consistent(price, new_rates)
    assert_consistent(buffer, new_rates)


def test_to_usd_converts_from_active_member():
    buffer = CurrencyTriple(sgd=0.0, usd=0.0, idr=0.0)
    set_value(buffer, "IDR", 750_000.0, RATES)
    assert to_usd(buffer, RATES) == pytest.approx(50.0)
    assert to_usd(buffer, RATES) == pytest.approx(buffer.usd)


def test_zero_rate_yields_non_finite_without_raising():
    zero = ExchangeRates(usd_to_sgd=0.0, usd_to_idr=15000.0)
    triple = CurrencyTriple(sgd=0.0, usd=0.0, idr=0.0)
    set_value(triple, "SGD", 100.0, zero)
    assert math.isinf(triple.usd)
    assert math.isinf(triple.idr)

    set_value(triple, "SGD", 0.0, zero)
    assert math.isnan(triple.usd)
    assert math.isnan(triple.idr)


def test_ieee_divide_signs():
    assert ieee_divide(5.0, 0.0) == math.inf
    assert ieee_divide(-5.0, 0.0) == -math.inf
    assert math.isnan(ieee_divide(0.0, 0.0))
    assert ieee_divide(10.0, 4.0) == 2.5


def test_unknown_currency_rejected():
    triple = CurrencyTriple(sgd=0.0, usd=0.0, idr=0.0)
    with pytest.raises(ValueError):
        set_value(triple, "EUR", 1.0, RATES)
