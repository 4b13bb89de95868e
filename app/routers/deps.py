"""Shared FastAPI dependencies.

Settings come from ``app.state.settings`` (set by ``create_app``) so a test
app built with ``settings_override`` never touches the cached global settings.
"""

from fastapi import Request

from app.core.config import Settings
from app.db.dal import Database
from app.services.rates.base import RateProvider
from app.services.rates.providers import make_rate_provider


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Database:
    return Database(get_app_settings(request).db_path)


def get_rate_provider(request: Request) -> RateProvider:
    settings = get_app_settings(request)
    return make_rate_provider(settings.exchange_rate_provider, settings)
