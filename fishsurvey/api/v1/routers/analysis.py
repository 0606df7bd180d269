"""
API router for stateless analysis of posted event snapshots.
"""
from fastapi import APIRouter

from fishsurvey.api.dependencies import SpeciesTableDep
from fishsurvey.domain.metrics_models import EventAnalysis
from fishsurvey.domain.models import SamplingEvent
from fishsurvey.services.application.event_service import analyze_event

router = APIRouter(
    prefix="/analysis",
    tags=["analysis"],
)


@router.post(
    "",
    response_model=EventAnalysis,
    response_model_by_alias=True,
    summary="Analyze an event snapshot",
    description="""
    Compute every metrics table for an event posted in the request body.

    Nothing is stored. Older snapshots using the field sheet column names
    (spp, fats, effort_time_sec, pH, cond, tdS, salts) are accepted.
    """,
)
async def analyze(event: SamplingEvent, species_table: SpeciesTableDep) -> EventAnalysis:
    return analyze_event(event, species_table)
