"""
Shared fixtures: in-memory stores, deterministic engines, API client
"""
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from powermarket.bidding.optimizer import BidOptimizer
from powermarket.config import Settings
from powermarket.data.models import Observation
from powermarket.data.store import ObservationStore
from powermarket.forecast.engine import ForecastEngine
from powermarket.forecast.noise import ZeroNoise
from powermarket.main import create_app
from powermarket.services.pipeline import MarketPipeline


def make_observations(prices, start=datetime(2025, 5, 1), step=timedelta(minutes=15)):
    return [
        Observation(timestamp=start + i * step, price=p, load=1000.0 + i, demand=900.0, supply=1100.0)
        for i, p in enumerate(prices)
    ]


@pytest.fixture
def raw_rows():
    """Rows as exported by the trading platform (Chinese headers)"""
    base = datetime(2025, 5, 31, 23, 0)
    return [
        {"时间": (base + timedelta(minutes=15 * i)).isoformat(), "电价": 300.0 + i * 10,
         "负荷": 1200.0, "需求": 1100.0, "供应": 1300.0}
        for i in range(8)
    ]


@pytest.fixture
def store():
    return ObservationStore(make_observations([100.0, 110.0, 90.0, 105.0]))


@pytest.fixture
def engine():
    return ForecastEngine(noise=ZeroNoise())


@pytest.fixture
def optimizer():
    return BidOptimizer()


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=str(tmp_path), source_files=["may.csv", "june.csv"], load_on_startup=False)


@pytest.fixture
def pipeline(store, engine, optimizer, settings):
    return MarketPipeline(store=store, forecast_engine=engine, optimizer=optimizer, settings=settings)


@pytest.fixture
def client(settings, pipeline):
    app = create_app(settings=settings, pipeline=pipeline)
    with TestClient(app) as client:
        yield client
