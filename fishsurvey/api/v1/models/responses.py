"""
API response models using Pydantic.
"""
from typing import Any, List

from pydantic import BaseModel, Field

from fishsurvey.domain.models import SamplingEvent


class EventResponse(BaseModel):
    """A stored sampling event."""
    event_id: str = Field(description="Unique identifier of the stored event")
    event: SamplingEvent

    model_config = {
        "json_schema_extra": {
            "example": {
                "event_id": "3f2c9a0e6b5d4e1f8a7b6c5d4e3f2a1b",
                "event": {
                    "location": {
                        "lake": "Horsetooth Reservoir",
                        "location": "South Bay",
                        "date": "2024-06-12",
                        "observers": ["J. Smith"],
                        "gear": "electrofishing",
                        "field_notes": "",
                    },
                    "sets": [],
                    "is_finalized": False,
                    "season": "2024",
                },
            }
        }
    }


class EventListResponse(BaseModel):
    """Response model for the event listing endpoint."""
    count: int = Field(description="Number of events matching the filters")
    events: List[EventResponse]


class ExportRowsResponse(BaseModel):
    """Spreadsheet-ready sheets for an event."""
    basename: str = Field(description="File name stem, e.g. Horsetooth_Reservoir_20240612")
    full_dataset: List[List[Any]]
    catch_summary: List[List[Any]]
    abundance_condition: List[List[Any]]
    angler_abundance: List[List[Any]]
