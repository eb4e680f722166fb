import os
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from crypto_stats.domain.policies.symbol_policy import SymbolPolicy
from crypto_stats.domain.ports.price_store_port import IPriceStore
from crypto_stats.infrastructure.config.settings import Settings
from crypto_stats.infrastructure.entrypoints.fastapi_app import create_app
from crypto_stats.infrastructure.persistence.sqlalchemy_price_store import SqlAlchemyPriceStore

PRICES_DIR = os.path.join(os.path.dirname(__file__), "resources", "prices")
FORBIDDEN = "ETH,SOL,SHIB"


@pytest.fixture
def prices_dir():
    return PRICES_DIR


@pytest.fixture
def settings(prices_dir):
    """Settings pointing at the CSV fixtures, with background behaviour switched off."""
    return Settings(
        DATABASE_URL="sqlite://",
        FORBIDDEN_SYMBOLS=FORBIDDEN,
        TIMEZONE="UTC",
        SOURCE_DIR=prices_dir,
        INGEST_ON_STARTUP=True,
        SCHEDULE_ENABLED=False,
        RATE_LIMIT_ENABLED=False,
    )


@pytest.fixture
def store():
    """A fresh in-memory store per test."""
    return SqlAlchemyPriceStore.from_url("sqlite://")


@pytest.fixture
def policy():
    return SymbolPolicy(FORBIDDEN.split(","))


@pytest.fixture
def mock_store():
    """IPriceStore double; every aggregate returns None unless a test says otherwise."""
    store = MagicMock(spec=IPriceStore)
    store.max_price.return_value = None
    store.min_price.return_value = None
    store.earliest_price.return_value = None
    store.latest_price.return_value = None
    store.distinct_symbols.return_value = []
    store.list_points.return_value = []
    return store


@pytest.fixture
def client(settings, store):
    """TestClient with the startup ingestion already run over the CSV fixtures."""
    app = create_app(settings=settings, store=store)
    with TestClient(app) as test_client:
        yield test_client
