"""
Application service: orchestration layer for sampling event operations.
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional

from fishsurvey.domain.metrics_models import EventAnalysis, LengthFrequency
from fishsurvey.domain.models import (
    EnvironmentalReadings,
    EventLocation,
    FishObservation,
    SamplingEvent,
    SetLocation,
)
from fishsurvey.domain.report_models import ReportOptions, ReportPayload
from fishsurvey.domain.species import SpeciesTable
from fishsurvey.infrastructure.event_store import EventQuery, EventStore, StoredEvent
from fishsurvey.infrastructure.report_generator_client import (
    GeneratedReport,
    ReportGeneratorClient,
)
from fishsurvey.services.domain import event_editor, metrics_engine, report_assembler
from fishsurvey.services.domain.length_frequency import length_frequency

logger = logging.getLogger(__name__)


def analyze_event(
    event: SamplingEvent,
    species_table: SpeciesTable,
    include_length_frequency: bool = True,
) -> EventAnalysis:
    """
    Compute every metrics table for an event snapshot.

    Args:
        event: Sampling event snapshot
        species_table: Reference table for condition and size structure
        include_length_frequency: Also build a histogram per species

    Returns:
        EventAnalysis with all tables
    """
    species = metrics_engine.species_codes(event)
    histograms = None
    if include_length_frequency:
        histograms = {}
        for code in species:
            histogram = length_frequency(event, code, species_table)
            if histogram is not None:
                histograms[code] = histogram

    return EventAnalysis(
        catch_summary=metrics_engine.catch_summary(event),
        abundance_condition=metrics_engine.abundance_condition(event, species_table),
        angler_abundance=metrics_engine.angler_abundance(event),
        diet_composition=metrics_engine.diet_composition(event),
        size_structure=metrics_engine.proportional_size_distribution(event, species_table),
        event_metrics=metrics_engine.event_metrics(event),
        species=species,
        length_frequency=histograms,
    )


class EventService:
    """
    Application service for sampling event operations.

    Loads snapshots from the event store, hands them to the domain
    services and saves edited snapshots back under the same ID. No
    metrics or edit rules live here.
    """

    def __init__(
        self,
        store: EventStore,
        report_client: ReportGeneratorClient,
        species_table: SpeciesTable,
    ):
        """
        Initialize the service with dependencies.

        Args:
            store: Event persistence
            report_client: Word/PDF report generator client
            species_table: Species reference table
        """
        self.store = store
        self.report_client = report_client
        self.species_table = species_table

    # ------------------------------------------------------------
    # Events
    # ------------------------------------------------------------

    async def create_event(
        self,
        location: EventLocation,
        environmental: Optional[EnvironmentalReadings] = None,
    ) -> StoredEvent:
        event = event_editor.create_event(location, environmental)
        event_id = await self.store.save(event)
        logger.info(f"Created event {event_id} for {location.lake} on {location.date}")
        return StoredEvent(event_id=event_id, event=event)

    async def get_event(self, event_id: str) -> SamplingEvent:
        return await self.store.load(event_id)

    async def list_events(self, filters: EventQuery) -> List[StoredEvent]:
        return await self.store.query(filters)

    async def _edit(self, event_id: str, edit, *args, **kwargs) -> SamplingEvent:
        event = await self.store.load(event_id)
        try:
            updated = edit(event, *args, **kwargs)
        except event_editor.EventEditError as e:
            logger.warning(f"Rejected {edit.__name__} on event {event_id}: {e}")
            raise
        await self.store.save(updated, event_id)
        return updated

    async def add_transect(
        self, event_id: str, effort_time_seconds: float, location: SetLocation
    ) -> SamplingEvent:
        return await self._edit(event_id, event_editor.add_transect, effort_time_seconds, location)

    async def add_net_set(
        self, event_id: str, set_datetime: datetime, location: SetLocation
    ) -> SamplingEvent:
        return await self._edit(event_id, event_editor.add_net_set, set_datetime, location)

    async def pull_net(
        self,
        event_id: str,
        set_id: int,
        pull_datetime: datetime,
        location: Optional[SetLocation] = None,
    ) -> SamplingEvent:
        return await self._edit(event_id, event_editor.pull_net, set_id, pull_datetime, location)

    async def remove_set(self, event_id: str, set_id: int) -> SamplingEvent:
        return await self._edit(event_id, event_editor.remove_set, set_id)

    async def add_fish(self, event_id: str, set_id: int, fish: FishObservation) -> SamplingEvent:
        return await self._edit(event_id, event_editor.add_fish, set_id, fish)

    async def update_fish(
        self, event_id: str, set_id: int, index: int, fish: FishObservation
    ) -> SamplingEvent:
        return await self._edit(event_id, event_editor.update_fish, set_id, index, fish)

    async def delete_fish(self, event_id: str, set_id: int, indices: Iterable[int]) -> SamplingEvent:
        return await self._edit(event_id, event_editor.delete_fish, set_id, list(indices))

    async def finalize_event(self, event_id: str) -> SamplingEvent:
        event = await self._edit(event_id, event_editor.finalize_event)
        logger.info(f"Finalized event {event_id}")
        return event

    # ------------------------------------------------------------
    # Analysis & export
    # ------------------------------------------------------------

    async def analyze(self, event_id: str) -> EventAnalysis:
        event = await self.store.load(event_id)
        return analyze_event(event, self.species_table)

    async def get_length_frequency(self, event_id: str, species_code: str) -> Optional[LengthFrequency]:
        event = await self.store.load(event_id)
        return length_frequency(event, species_code, self.species_table)

    async def export_rows(self, event_id: str) -> dict:
        """
        Spreadsheet-ready sheets for an event.

        Returns:
            Dict with the file name stem and one list of rows per sheet
        """
        event = await self.store.load(event_id)
        return {
            "basename": report_assembler.export_basename(event),
            "full_dataset": report_assembler.full_dataset_rows(event),
            "catch_summary": report_assembler.catch_summary_rows(
                metrics_engine.catch_summary(event)
            ),
            "abundance_condition": report_assembler.abundance_condition_rows(
                metrics_engine.abundance_condition(event, self.species_table)
            ),
            "angler_abundance": report_assembler.angler_abundance_rows(
                metrics_engine.angler_abundance(event)
            ),
        }

    async def build_report_payload(
        self, event_id: str, options: Optional[ReportOptions] = None
    ) -> ReportPayload:
        event = await self.store.load(event_id)
        return report_assembler.build_report_payload(event, self.species_table, options)

    async def generate_report(
        self, event_id: str, options: Optional[ReportOptions] = None
    ) -> GeneratedReport:
        """
        Assemble the report payload for an event and render it.

        Args:
            event_id: Stored event ID
            options: Narrative fields, target species and format

        Returns:
            GeneratedReport with the rendered document

        Raises:
            EventNotFoundError: If the event does not exist
            ExternalServiceError: If the generator fails
        """
        payload = await self.build_report_payload(event_id, options)
        return await self.report_client.generate(payload)
