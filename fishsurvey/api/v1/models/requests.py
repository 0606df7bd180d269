"""
API request models using Pydantic.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from fishsurvey.domain.models import EnvironmentalReadings, EventLocation, SetLocation


class CreateEventRequest(BaseModel):
    """Request body for starting a new sampling event."""
    location: EventLocation
    environmental: Optional[EnvironmentalReadings] = None

    model_config = {
        "json_schema_extra": {
            "example": {
                "location": {
                    "lake": "Horsetooth Reservoir",
                    "location": "South Bay",
                    "date": "2024-06-12",
                    "observers": ["J. Smith", "A. Lee"],
                    "gear": "electrofishing",
                },
                "environmental": {"ph": 7.8, "temp_water_c": 18.5},
            }
        }
    }


class AddTransectRequest(BaseModel):
    effort_time_seconds: float = Field(gt=0, description="Electrofishing time in seconds")
    location: SetLocation


class AddNetSetRequest(BaseModel):
    set_datetime: datetime = Field(description="When the net was deployed")
    location: SetLocation


class PullNetRequest(BaseModel):
    pull_datetime: datetime = Field(description="When the net was retrieved")
    location: Optional[SetLocation] = Field(
        default=None, description="Corrected coordinates; the set location is kept when omitted"
    )
