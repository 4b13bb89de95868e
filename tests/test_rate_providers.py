import asyncio
import http.client
import urllib.error

import pytest

from app.core.config import Settings
from app.models.constants import FIELD_DEFAULTS
from app.services import http_client
from app.services.calculator import edit_price
from app.services.field_store import load_state, save_state
from app.services.http_client import HttpError, get_json
from app.services.rate_refresh import NOTICE_FAILED, NOTICE_OK, refresh_rates
from app.services.rates.base import RateFetchError
from app.services.rates.providers import (
    ExternalHTTPRateProvider,
    StaticRateProvider,
    make_rate_provider,
)
from tests.fakes import (
    EditingRateProvider,
    FailingRateProvider,
    FakeResponse,
    FixedRateProvider,
    fake_urlopen,
)

FEED = {"date": "2025-01-31", "usd": {"sgd": 1.35, "idr": 16300.5, "eur": 0.96}}


def _provider_returning(payload):
    def fetch(url, timeout, retries):
        return payload

    return ExternalHTTPRateProvider(url="https://feed.example/usd.json", fetch=fetch)


def test_external_provider_parses_usd_feed():
    rates = _provider_returning(FEED).fetch_usd_rates()
    assert rates.usd_to_sgd == 1.35
    assert rates.usd_to_idr == 16300.5


@pytest.mark.parametrize(
    "payload",
    [
        {"usd": {"sgd": 1.35}},
        {"usd": {"sgd": 0, "idr": 16000}},
        {"eur": {"sgd": 1.4, "idr": 17000}},
        {"usd": "oops"},
    ],
)
def test_external_provider_rejects_malformed_feed(payload):
    with pytest.raises(RateFetchError):
        _provider_returning(payload).fetch_usd_rates()


def test_external_provider_wraps_http_errors():
    def fetch(url, timeout, retries):
        raise HttpError("HTTP 503", status=503)

    provider = ExternalHTTPRateProvider(url="https://feed.example/usd.json", fetch=fetch)
    with pytest.raises(RateFetchError):
        provider.fetch_usd_rates()


def test_static_provider_matches_field_defaults():
    rates = StaticRateProvider().fetch_usd_rates()
    assert rates.usd_to_sgd == FIELD_DEFAULTS["usdToSgdRate"]
    assert rates.usd_to_idr == FIELD_DEFAULTS["usdToIdrRate"]


def test_make_rate_provider():
    settings = Settings(
        exchange_rate_provider="external-http",
        exchange_api_url="https://x.example/usd.json",
    )
    provider = make_rate_provider("external-http", settings)
    assert isinstance(provider, ExternalHTTPRateProvider)
    assert provider.url == "https://x.example/usd.json"
    assert isinstance(make_rate_provider("static"), StaticRateProvider)
    with pytest.raises(ValueError):
        make_rate_provider("carrier-pigeon")


def test_get_json_retries_server_errors(monkeypatch):
    calls = []

    def failing(url, timeout):
        calls.append(url)
        raise HttpError("HTTP 502", status=502)

    monkeypatch.setattr(http_client, "_fetch_once", failing)
    with pytest.raises(HttpError):
        get_json("https://feed.example", retries=2, backoff=0)
    assert len(calls) == 3


def test_get_json_does_not_retry_client_errors(monkeypatch):
    calls = []

    def not_found(url, timeout):
        calls.append(url)
        raise HttpError("HTTP 404", status=404)

    monkeypatch.setattr(http_client, "_fetch_once", not_found)
    with pytest.raises(HttpError) as exc:
        get_json("https://feed.example", retries=2, backoff=0)
    assert exc.value.status == 404
    assert len(calls) == 1


def test_external_provider_ignores_unrelated_quotes():
    feed = {"date": "2025-01-31", "usd": {"sgd": 1.35, "idr": 16300.5, "xyz": None, "abc": "n/a"}}
    rates = _provider_returning(feed).fetch_usd_rates()
    assert (rates.usd_to_sgd, rates.usd_to_idr) == (1.35, 16300.5)


@pytest.mark.parametrize(
    "urlopen",
    [
        fake_urlopen(error=urllib.error.URLError("name resolution failed")),
        fake_urlopen(error=http.client.BadStatusLine("garbage")),
        fake_urlopen(FakeResponse(read_error=http.client.IncompleteRead(b'{"usd": {'))),
        fake_urlopen(FakeResponse(body=b"<html>maintenance</html>")),
        fake_urlopen(FakeResponse(body=b"[1.35, 16300.5]")),
        fake_urlopen(FakeResponse(body=b"\xff\xfe")),
    ],
    ids=["url-error", "bad-status-line", "truncated-body", "not-json", "json-array", "not-utf8"],
)
def test_get_json_wraps_transport_and_decode_failures(monkeypatch, urlopen):
    monkeypatch.setattr(http_client.urllib.request, "urlopen", urlopen)
    with pytest.raises(HttpError):
        get_json("https://feed.example/usd.json", retries=0)


def test_get_json_returns_object(monkeypatch):
    monkeypatch.setattr(
        http_client.urllib.request,
        "urlopen",
        fake_urlopen(FakeResponse(body=b'{"usd": {"sgd": 1.35}}')),
    )
    assert get_json("https://feed.example/usd.json", retries=0) == {"usd": {"sgd": 1.35}}


def test_truncated_feed_is_a_failed_refresh(db, monkeypatch):
    monkeypatch.setattr(
        http_client.urllib.request,
        "urlopen",
        fake_urlopen(FakeResponse(read_error=http.client.IncompleteRead(b"{"))),
    )
    provider = ExternalHTTPRateProvider(url="https://feed.example/usd.json", retries=0)
    result = asyncio.run(refresh_rates(db, provider))
    assert not result.ok
    assert result.notice == NOTICE_FAILED


def test_refresh_success_reprojects_from_active_members(db):
    state = load_state(db)
    edit_price(state, "USD", 100.0)
    save_state(db, state)
    result = asyncio.run(refresh_rates(db, FixedRateProvider(1.40, 16000.0)))
    assert result.ok
    assert result.notice == NOTICE_OK
    for current in (result.state, load_state(db)):
        assert current.rates.usd_to_sgd == 1.40
        assert current.price.usd == 100.0
        assert current.price.sgd == pytest.approx(140.0)
        assert current.buffer.usd == 50.0
        assert current.buffer.idr == pytest.approx(800_000.0)


def test_refresh_keeps_edit_saved_during_fetch(db):
    provider = EditingRateProvider(db, 1.40, 16000.0, price_usd=2000.0)
    result = asyncio.run(refresh_rates(db, provider))
    assert result.ok
    price = load_state(db).price
    assert price.active == "USD"
    assert price.usd == 2000.0
    assert price.sgd == pytest.approx(2800.0)
    assert price.idr == pytest.approx(32_000_000.0)


def test_refresh_failure_leaves_state_untouched(db):
    before = load_state(db)
    snapshot = (before.rates, before.price.sgd, before.price.usd, before.price.idr)
    result = asyncio.run(refresh_rates(db, FailingRateProvider()))
    assert not result.ok
    assert result.notice == NOTICE_FAILED
    assert "Failed to update exchange rate" in result.message
    after = load_state(db)
    assert (after.rates, after.price.sgd, after.price.usd, after.price.idr) == snapshot
    assert result.state.rates == before.rates
