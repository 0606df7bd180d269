"""
API router for sampling event endpoints.
"""
from datetime import date
from typing import Annotated, List, Optional

from fastapi import APIRouter, HTTPException, Path, Query, Response

from fishsurvey.api.dependencies import EventServiceDep
from fishsurvey.api.v1.models.requests import (
    AddNetSetRequest,
    AddTransectRequest,
    CreateEventRequest,
    PullNetRequest,
)
from fishsurvey.api.v1.models.responses import (
    EventListResponse,
    EventResponse,
    ExportRowsResponse,
)
from fishsurvey.domain.metrics_models import EventAnalysis, LengthFrequency
from fishsurvey.domain.models import FishObservation
from fishsurvey.domain.report_models import ReportOptions
from fishsurvey.infrastructure.event_store import EventQuery

router = APIRouter(
    prefix="/events",
    tags=["events"],
)

EventId = Annotated[str, Path(description="Unique identifier of the stored event")]
SetId = Annotated[int, Path(ge=1, description="Set number within the event")]


@router.post(
    "",
    response_model=EventResponse,
    status_code=201,
    summary="Start a sampling event",
)
async def create_event(request: CreateEventRequest, event_service: EventServiceDep) -> EventResponse:
    stored = await event_service.create_event(request.location, request.environmental)
    return EventResponse(event_id=stored.event_id, event=stored.event)


@router.get(
    "",
    response_model=EventListResponse,
    summary="List sampling events",
    description="List stored events, optionally filtered by season, lake and an inclusive date range.",
)
async def list_events(
    event_service: EventServiceDep,
    season: Annotated[Optional[str], Query(description="Season (year), e.g. 2024")] = None,
    lake: Annotated[Optional[str], Query(description="Exact lake name")] = None,
    date_from: Annotated[Optional[date], Query(description="Earliest event date")] = None,
    date_to: Annotated[Optional[date], Query(description="Latest event date")] = None,
) -> EventListResponse:
    stored = await event_service.list_events(
        EventQuery(season=season, lake=lake, date_from=date_from, date_to=date_to)
    )
    return EventListResponse(
        count=len(stored),
        events=[EventResponse(event_id=s.event_id, event=s.event) for s in stored],
    )


@router.get("/{event_id}", response_model=EventResponse, summary="Get a sampling event")
async def get_event(event_id: EventId, event_service: EventServiceDep) -> EventResponse:
    event = await event_service.get_event(event_id)
    return EventResponse(event_id=event_id, event=event)


# ============================================================
# Sets
# ============================================================

@router.post("/{event_id}/transects", response_model=EventResponse, summary="Add a transect")
async def add_transect(
    event_id: EventId,
    request: AddTransectRequest,
    event_service: EventServiceDep,
) -> EventResponse:
    event = await event_service.add_transect(event_id, request.effort_time_seconds, request.location)
    return EventResponse(event_id=event_id, event=event)


@router.post("/{event_id}/net-sets", response_model=EventResponse, summary="Set a net")
async def add_net_set(
    event_id: EventId,
    request: AddNetSetRequest,
    event_service: EventServiceDep,
) -> EventResponse:
    event = await event_service.add_net_set(event_id, request.set_datetime, request.location)
    return EventResponse(event_id=event_id, event=event)


@router.post(
    "/{event_id}/sets/{set_id}/pull",
    response_model=EventResponse,
    summary="Pull a pending net",
)
async def pull_net(
    event_id: EventId,
    set_id: SetId,
    request: PullNetRequest,
    event_service: EventServiceDep,
) -> EventResponse:
    event = await event_service.pull_net(event_id, set_id, request.pull_datetime, request.location)
    return EventResponse(event_id=event_id, event=event)


@router.delete("/{event_id}/sets/{set_id}", response_model=EventResponse, summary="Remove a set")
async def remove_set(event_id: EventId, set_id: SetId, event_service: EventServiceDep) -> EventResponse:
    event = await event_service.remove_set(event_id, set_id)
    return EventResponse(event_id=event_id, event=event)


# ============================================================
# Fish
# ============================================================

@router.post(
    "/{event_id}/sets/{set_id}/fish",
    response_model=EventResponse,
    summary="Record a fish or a batch of fish",
)
async def add_fish(
    event_id: EventId,
    set_id: SetId,
    fish: FishObservation,
    event_service: EventServiceDep,
) -> EventResponse:
    event = await event_service.add_fish(event_id, set_id, fish)
    return EventResponse(event_id=event_id, event=event)


@router.put(
    "/{event_id}/sets/{set_id}/fish/{index}",
    response_model=EventResponse,
    summary="Replace a fish entry",
)
async def update_fish(
    event_id: EventId,
    set_id: SetId,
    index: Annotated[int, Path(ge=0, description="Position of the entry on the set")],
    fish: FishObservation,
    event_service: EventServiceDep,
) -> EventResponse:
    event = await event_service.update_fish(event_id, set_id, index, fish)
    return EventResponse(event_id=event_id, event=event)


@router.delete(
    "/{event_id}/sets/{set_id}/fish",
    response_model=EventResponse,
    summary="Delete fish entries",
)
async def delete_fish(
    event_id: EventId,
    set_id: SetId,
    index: Annotated[List[int], Query(description="Positions of the entries to delete")],
    event_service: EventServiceDep,
) -> EventResponse:
    event = await event_service.delete_fish(event_id, set_id, index)
    return EventResponse(event_id=event_id, event=event)


@router.post("/{event_id}/finalize", response_model=EventResponse, summary="Finalize an event")
async def finalize_event(event_id: EventId, event_service: EventServiceDep) -> EventResponse:
    event = await event_service.finalize_event(event_id)
    return EventResponse(event_id=event_id, event=event)


# ============================================================
# Analysis & export
# ============================================================

@router.get(
    "/{event_id}/analysis",
    response_model=EventAnalysis,
    response_model_by_alias=True,
    summary="All metrics tables for an event",
)
async def analyze_event(event_id: EventId, event_service: EventServiceDep) -> EventAnalysis:
    return await event_service.analyze(event_id)


@router.get(
    "/{event_id}/length-frequency/{species}",
    response_model=LengthFrequency,
    summary="Length-frequency histogram for one species",
    responses={404: {"description": "Event not found or no measured fish of the species"}},
)
async def get_length_frequency(
    event_id: EventId,
    species: Annotated[str, Path(description="Species code, e.g. LMB")],
    event_service: EventServiceDep,
) -> LengthFrequency:
    histogram = await event_service.get_length_frequency(event_id, species)
    if histogram is None:
        raise HTTPException(
            status_code=404,
            detail=f"No length data for species '{species}' in event '{event_id}'",
        )
    return histogram


@router.get(
    "/{event_id}/export/rows",
    response_model=ExportRowsResponse,
    summary="Spreadsheet rows for an event",
)
async def export_rows(event_id: EventId, event_service: EventServiceDep) -> ExportRowsResponse:
    return ExportRowsResponse(**await event_service.export_rows(event_id))


@router.post(
    "/{event_id}/report",
    summary="Render the monitoring report",
    description="Assemble the report payload for the event and render it as Word or PDF.",
    responses={
        200: {"content": {"application/pdf": {}}, "description": "Rendered document"},
        404: {"description": "Event not found"},
        502: {"description": "Report generator failure"},
    },
)
async def generate_report(
    event_id: EventId,
    event_service: EventServiceDep,
    options: Optional[ReportOptions] = None,
) -> Response:
    report = await event_service.generate_report(event_id, options)
    return Response(
        content=report.content,
        media_type=report.media_type,
        headers={"Content-Disposition": f'attachment; filename="{report.filename}"'},
    )
