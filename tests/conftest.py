"""Shared fixtures: settings, an in-memory database and stubbed HTTP."""

import os
import sys

import httpx
import pytest

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from linkvault.core.db import init_db, reset_db  # noqa: E402
from linkvault.core.settings import Settings, get_settings  # noqa: E402
from linkvault.repositories.saved_item_store import SqlAlchemySavedItemStore  # noqa: E402
from linkvault.services.http import HttpService  # noqa: E402


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def test_settings() -> Settings:
    """Settings with defaults only, ignoring any local .env file."""
    return Settings(_env_file=None, database_url="sqlite://")


@pytest.fixture
def make_http(test_settings):
    """Build an HttpService whose requests are answered by ``handler``."""

    def _make(handler) -> HttpService:
        return HttpService(settings=test_settings, transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def test_db():
    """Fresh in-memory SQLite database behind the global session factory."""
    reset_db()
    engine = init_db("sqlite://")
    yield engine
    reset_db()


@pytest.fixture
def store(test_db) -> SqlAlchemySavedItemStore:
    return SqlAlchemySavedItemStore()


@pytest.fixture
def http_for_hosts(make_http):
    """HttpService answering by request host; unknown hosts get a 404.

    A route is either a response or a callable taking the request.
    """

    def _make(routes: dict) -> HttpService:
        def handler(request: httpx.Request) -> httpx.Response:
            route = routes.get(request.url.host)
            if route is None:
                return httpx.Response(404)
            return route(request) if callable(route) else route

        return make_http(handler)

    return _make
