"""
Dependency injection for FastAPI.
"""
from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from fishsurvey.config import settings
from fishsurvey.domain.species import SpeciesTable
from fishsurvey.infrastructure.event_store import EventStore, get_event_store
from fishsurvey.infrastructure.report_generator_client import (
    ReportGeneratorClient,
    get_report_generator_client,
)
from fishsurvey.services.application.event_service import EventService


@lru_cache
def get_species_table() -> SpeciesTable:
    """
    Dependency factory for the species reference table.

    Returns:
        The table loaded from ``settings.species_table_path``, or the
        built-in table when no path is configured
    """
    if settings.species_table_path:
        return SpeciesTable.from_json(settings.species_table_path)
    return SpeciesTable.default()


def get_event_service(
    store: Annotated[EventStore, Depends(get_event_store)],
    report_client: Annotated[ReportGeneratorClient, Depends(get_report_generator_client)],
    species_table: Annotated[SpeciesTable, Depends(get_species_table)],
) -> EventService:
    """
    Dependency factory for EventService.

    Args:
        store: Event store (injected)
        report_client: Report generator client (injected)
        species_table: Species reference table (injected)

    Returns:
        EventService instance
    """
    return EventService(store=store, report_client=report_client, species_table=species_table)


# Type aliases for cleaner route signatures
EventServiceDep = Annotated[EventService, Depends(get_event_service)]
SpeciesTableDep = Annotated[SpeciesTable, Depends(get_species_table)]
