"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Sample sampling events (electrofishing, gill net, empty)
- The species reference table
- A fresh in-memory event store
- FastAPI test client wired to the in-memory store
"""
from datetime import date, datetime
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from fishsurvey.api.dependencies import get_species_table
from fishsurvey.domain.models import (
    EnvironmentalReadings,
    EventLocation,
    FishObservation,
    NetSet,
    SamplingEvent,
    SetLocation,
    Transect,
)
from fishsurvey.domain.species import SpeciesTable
from fishsurvey.infrastructure.event_store import InMemoryEventStore, get_event_store
from fishsurvey.infrastructure.report_generator_client import (
    ReportGeneratorClient,
    get_report_generator_client,
)
from fishsurvey.main import app, limiter


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def species_table() -> SpeciesTable:
    """The built-in species reference table."""
    return SpeciesTable.default()


@pytest.fixture
def set_location() -> SetLocation:
    return SetLocation(start_utm_e=493000.0, end_utm_n=4487000.0)


@pytest.fixture
def electrofishing_location() -> EventLocation:
    return EventLocation(
        lake="Horsetooth Reservoir",
        location="South Bay",
        date=date(2024, 6, 12),
        observers=["J. Smith", "A. Lee"],
        gear="electrofishing",
        field_notes="Calm, clear water",
    )


@pytest.fixture
def empty_event(electrofishing_location) -> SamplingEvent:
    """An event with no sets and no fish."""
    return SamplingEvent(location=electrofishing_location)


@pytest.fixture
def electrofishing_event(electrofishing_location, set_location) -> SamplingEvent:
    """
    Two 30-minute transects (1 hour total effort).

    Transect 1: three largemouth bass (300/310/320 mm) and one tiger trout.
    Transect 2: a batch of five bluegill at 200 g each and one unidentified fish.
    """
    return SamplingEvent(
        location=electrofishing_location,
        environmental=EnvironmentalReadings(ph=7.8, temp_water_c=20.0, conductivity=250.0),
        sets=[
            Transect(
                set_id=1,
                effort_time_seconds=1800,
                location=set_location,
                fish=[
                    FishObservation(species="LMB", length=300, weight=350, stomach_content="Fish"),
                    FishObservation(species="LMB", length=310, weight=380, stomach_content="Fish"),
                    FishObservation(species="LMB", length=320, weight=420, stomach_content="Crayfish"),
                    FishObservation(species="TGT", length=300, weight=500, sex="F", fat_index="2"),
                ],
            ),
            Transect(
                set_id=2,
                effort_time_seconds=1800,
                location=set_location,
                fish=[
                    FishObservation(species="BLG", length=150, weight=200, count=5),
                    FishObservation(species=None, notes="escaped"),
                ],
            ),
        ],
    )


@pytest.fixture
def gillnet_event(set_location) -> SamplingEvent:
    """One pulled 12-hour net and one net still soaking."""
    return SamplingEvent(
        location=EventLocation(
            lake="Carter Lake",
            date=date(2024, 10, 3),
            observers="B. Jones, C. Diaz",
            gear="gillnet",
        ),
        sets=[
            NetSet(
                set_id=1,
                location=set_location,
                set_datetime=datetime(2024, 10, 2, 18, 0),
                pull_datetime=datetime(2024, 10, 3, 6, 0),
                fish=[
                    FishObservation(species="WAE", length=420, weight=700),
                    FishObservation(species="WAE", length=510, weight=1300),
                    FishObservation(species="CC", length=600, weight=3000),
                ],
            ),
            NetSet(
                set_id=2,
                location=set_location,
                set_datetime=datetime(2024, 10, 2, 19, 0),
            ),
        ],
    )


# ============================================================
# Infrastructure Fixtures
# ============================================================

@pytest.fixture
def event_store() -> InMemoryEventStore:
    """A fresh, empty in-memory event store."""
    return InMemoryEventStore()


@pytest.fixture
def mock_report_client():
    """Create a mock report generator client."""
    return AsyncMock(spec=ReportGeneratorClient)


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client(event_store, mock_report_client, species_table):
    """
    Create a synchronous test client for FastAPI.

    The event store and report generator are replaced with per-test
    instances and rate limiting is switched off.
    """
    app.dependency_overrides[get_event_store] = lambda: event_store
    app.dependency_overrides[get_report_generator_client] = lambda: mock_report_client
    app.dependency_overrides[get_species_table] = lambda: species_table
    limiter.enabled = False
    try:
        yield TestClient(app)
    finally:
        limiter.enabled = True
        app.dependency_overrides.clear()
