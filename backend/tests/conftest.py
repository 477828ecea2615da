"""Shared test fixtures: a fixed clock, a stub base fare lookup and a temporary datastore."""

from datetime import datetime, timedelta
from typing import Optional

import pytest

from train_estimator.database import DatabaseManager
from train_estimator.models import Passenger, TripDetails, TripRequest
from train_estimator.services.price_estimator import PriceEstimator

NOW = datetime(2026, 10, 19, 10, 0, 0)
BASE_FARE = 20.0


class StubPriceLookup:
    """Returns a fixed base fare and records every call."""

    def __init__(self, price: Optional[float] = BASE_FARE):
        self.price = price
        self.calls = []

    async def get_price(self, from_city, to_city, when):
        self.calls.append((from_city, to_city, when))
        return self.price


def make_request(*passengers: Passenger, when: datetime = None,
                 from_city: str = "Bordeaux", to_city: str = "Paris") -> TripRequest:
    """Build a trip request departing 31 days after NOW unless told otherwise."""
    if when is None:
        when = NOW + timedelta(days=31)
    return TripRequest(
        details=TripDetails(from_city=from_city, to_city=to_city, when=when),
        passengers=list(passengers)
    )


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def price_lookup() -> StubPriceLookup:
    return StubPriceLookup()


@pytest.fixture
def estimator(price_lookup: StubPriceLookup) -> PriceEstimator:
    return PriceEstimator(price_lookup)


@pytest.fixture
def adult() -> Passenger:
    return Passenger(age=28)


@pytest.fixture
def db_manager(tmp_path) -> DatabaseManager:
    """Datastore backed by a temporary SQLite file, seeded with default fares."""
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'fares.db'}")
    manager.init_default_fares()
    return manager
