"""Shared fixtures: isolated SQLite files and app instances per test."""
from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.db.dal import Database
from app.db.migrate import apply_migrations
from app.main import create_app
from app.routers.deps import get_rate_provider
from app.services.rates.base import RateProvider


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "calculator.sqlite3"


@pytest.fixture()
def db(db_path: Path) -> Database:
    apply_migrations(db_path)
    return Database(db_path)


@pytest.fixture()
def settings(tmp_path: Path, db_path: Path) -> Settings:
    return Settings(
        data_dir=tmp_path,
        db_path=db_path,
        exchange_rate_provider="static",
        debug=False,
    )


@pytest.fixture()
def app(settings: Settings):
    return create_app(settings_override=settings)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def use_provider(app):
    """Swap the rate provider dependency for the duration of a test."""

    def _use(provider: RateProvider) -> RateProvider:
        app.dependency_overrides[get_rate_provider] = lambda: provider
        return provider

    yield _use
    app.dependency_overrides.clear()
