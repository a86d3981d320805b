"""
Test configuration and fixtures for the property lookup backend tests.
Provides environment setup, a controllable clock, provider fakes and a test client.
"""

import copy
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient

# Set test environment variables before importing app
os.environ["ENVIRONMENT"] = "test"
os.environ["RENTCAST_API_KEY"] = "test-rentcast-key"
os.environ["LOG_FORMAT"] = "console"
os.environ.pop("DATABASE_URL", None)

from property_lookup.clients.base.interfaces import PropertyDataProvider
from property_lookup.dependencies.property import (
    get_property_cache,
    get_property_lookup_service,
)
from property_lookup.main import app
from property_lookup.services.property.lookup_service import PropertyLookupService
from property_lookup.services.repositories.property_cache_repository import (
    InMemoryPropertyCache,
)

SAMPLE_ADDRESS = "11760 Baltimore Ave, Beltsville, MD 20705"


class FakeClock:
    """Settable clock shared by the cache store and the lookup service."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeProvider(PropertyDataProvider):
    """Provider double recording every address it is asked for."""

    def __init__(self, record: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None):
        self.record = record
        self.error = error
        self.calls: List[str] = []

    async def fetch_by_address(self, address: str) -> Dict[str, Any]:
        self.calls.append(address)
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.record)


def make_rentcast_record() -> Dict[str, Any]:
    return {
        "id": "11760-Baltimore-Ave,-Beltsville,-MD-20705",
        "formattedAddress": SAMPLE_ADDRESS,
        "addressLine1": "11760 Baltimore Ave",
        "city": "Beltsville",
        "state": "MD",
        "zipCode": "20705",
        "county": "Prince George's",
        "latitude": 39.0412,
        "longitude": -76.9076,
        "propertyType": "Single Family",
        "bedrooms": 3,
        "bathrooms": 2,
        "squareFootage": 1850,
        "lotSize": 7405,
        "yearBuilt": 1962,
        "assessorID": "21-1234567",
        "legalDescription": "LOT 12 BLK C BELTSVILLE HEIGHTS",
        "subdivision": "Beltsville Heights",
        "zoning": "R55",
        "lastSaleDate": "2019-06-14T00:00:00.000Z",
        "lastSalePrice": 410000,
        "features": {"floorCount": 2, "basement": True, "garageSpaces": 1, "garage": True},
        "taxAssessments": {
            "2021": {"year": 2021, "value": 300000, "land": 100000, "improvements": 200000},
            "2023": {"year": 2023, "value": 340000, "land": 110000, "improvements": 230000},
            "2022": {"year": 2022, "value": 320000, "land": 105000, "improvements": 215000},
        },
        "propertyTaxes": {
            "2021": {"year": 2021, "total": 3900},
            "2023": {"year": 2023, "total": 4300},
            "2022": {"year": 2022, "total": 4100},
        },
        "history": {
            "2019-06-14": {"event": "Sale", "date": "2019-06-14T00:00:00.000Z", "price": 410000}
        },
        "owner": {"names": ["Jane Doe", "John Doe"], "type": "Individual"},
        "ownerOccupied": True,
    }


@pytest.fixture
def rentcast_record() -> Dict[str, Any]:
    return make_rentcast_record()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_cache(clock) -> InMemoryPropertyCache:
    return InMemoryPropertyCache(clock=clock)


@pytest.fixture
def fake_provider(rentcast_record) -> FakeProvider:
    return FakeProvider(record=rentcast_record)


@pytest.fixture
def lookup_service(fake_provider, memory_cache, clock) -> PropertyLookupService:
    return PropertyLookupService(provider=fake_provider, cache=memory_cache, clock=clock)


@pytest.fixture
def client(lookup_service, memory_cache) -> Generator[TestClient, None, None]:
    """Test client with the lookup service and cache store overridden."""
    app.dependency_overrides[get_property_lookup_service] = lambda: lookup_service
    app.dependency_overrides[get_property_cache] = lambda: memory_cache

    test_client = TestClient(app)
    yield test_client

    app.dependency_overrides.clear()
