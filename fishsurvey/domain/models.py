"""
Domain models for sampling events, sets and fish observations.

An event is a tree: one lake visit holds an ordered list of sets
(electrofishing transects or net deployments), each holding the fish
recorded on it. The tree is validated here, at the boundary, so the
calculators can trust its shape. Older snapshots written with the field
sheet column names (``spp``, ``fats``, ``effort_time_sec``, ``pH``...) are
accepted as well.
"""
from datetime import date, datetime
from typing import Annotated, Iterator, Literal, Optional, Tuple, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from fishsurvey.utils.geo_projection import utm_to_latlon
from fishsurvey.utils.safe_math import EFFORT_FALLBACK_HOURS
from fishsurvey.utils.units import SECONDS_PER_HOUR

GearType = Literal["electrofishing", "gillnet", "fyke_net"]


class EventLocation(BaseModel):
    """Where, when and by whom an event was sampled."""
    lake: str
    location: str = Field(default="", description="Sub-location on the lake")
    date: date
    observers: list[str] = Field(default_factory=list)
    gear: GearType
    field_notes: str = ""

    @field_validator("observers", mode="before")
    @classmethod
    def split_observers(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [name.strip() for name in value.split(",") if name.strip()]
        return value

    @field_validator("location", "field_notes", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else value


class EnvironmentalReadings(BaseModel):
    """Optional water-quality and electrofishing readings."""
    ph: Optional[float] = Field(default=None, validation_alias=AliasChoices("ph", "pH"))
    temp_water_c: Optional[float] = Field(default=None, description="Water temperature in °C")
    conductivity: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("conductivity", "cond")
    )
    tds: Optional[float] = Field(
        default=None,
        validation_alias=AliasChoices("tds", "tdS"),
        description="Total dissolved solids",
    )
    salinity: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("salinity", "salts")
    )
    amps: Optional[float] = None


class SetLocation(BaseModel):
    """UTM easting/northing recorded for a set."""
    start_utm_e: float
    end_utm_n: float

    def to_latlon(self, zone: int, northern: bool = True) -> Tuple[float, float]:
        """(latitude, longitude) of the recorded point."""
        return utm_to_latlon(self.start_utm_e, self.end_utm_n, zone, northern)


class FishObservation(BaseModel):
    """One measured fish, or a batch of identical unmeasured fish."""
    species: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("species", "spp")
    )
    length: Optional[float] = Field(default=None, description="Total length in mm")
    weight: Optional[float] = Field(default=None, description="Weight in g")
    count: int = Field(default=1, ge=1)
    sex: Optional[str] = None
    stomach_content: Optional[str] = None
    fat_index: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("fat_index", "fats")
    )
    notes: Optional[str] = None

    @field_validator("species", mode="before")
    @classmethod
    def blank_species(cls, value):
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @field_validator("fat_index", mode="before")
    @classmethod
    def fat_index_as_text(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class SetBase(BaseModel):
    set_id: int = Field(ge=1)
    location: SetLocation
    fish: list[FishObservation] = Field(default_factory=list)

    @property
    def is_pending(self) -> bool:
        return False

    @property
    def total_fish(self) -> int:
        """Number of fish on the set, counting batch entries by their count."""
        return sum(observation.count for observation in self.fish)

    @property
    def effort_or_soak_hours(self) -> Optional[float]:
        """Hours fished; None for a set kind that records no effort."""
        return None

    @computed_field
    @property
    def cpue(self) -> Optional[float]:
        """
        Fish per hour for this set.

        A set without effort or soak time divides by one hour instead.
        Pending net sets have no CPUE until they are pulled.
        """
        if self.is_pending:
            return None
        hours = self.effort_or_soak_hours or EFFORT_FALLBACK_HOURS
        return round(self.total_fish / hours, 2)


class Transect(SetBase):
    """A timed electrofishing pass."""
    type: Literal["transect"] = "transect"
    effort_time_seconds: float = Field(
        ge=0, validation_alias=AliasChoices("effort_time_seconds", "effort_time_sec")
    )

    @computed_field
    @property
    def effort_time_hours(self) -> float:
        return self.effort_time_seconds / SECONDS_PER_HOUR

    @property
    def soak_time_hours(self) -> Optional[float]:
        return None

    @property
    def effort_or_soak_hours(self) -> Optional[float]:
        return self.effort_time_hours


class NetSet(SetBase):
    """A gill or fyke net deployment; pending until the net is pulled."""
    type: Literal["net_set"] = "net_set"
    set_datetime: datetime
    pull_datetime: Optional[datetime] = None

    @model_validator(mode="after")
    def pull_after_set(self) -> "NetSet":
        if self.pull_datetime is None:
            return self
        if (self.set_datetime.tzinfo is None) != (self.pull_datetime.tzinfo is None):
            raise ValueError("set_datetime and pull_datetime must both include a timezone or neither")
        if self.pull_datetime < self.set_datetime:
            raise ValueError("pull_datetime cannot be earlier than set_datetime")
        return self

    @property
    def is_pending(self) -> bool:
        return self.pull_datetime is None

    @property
    def effort_time_hours(self) -> Optional[float]:
        return None

    @computed_field
    @property
    def soak_time_hours(self) -> Optional[float]:
        if self.pull_datetime is None:
            return None
        return (self.pull_datetime - self.set_datetime).total_seconds() / SECONDS_PER_HOUR

    @property
    def effort_or_soak_hours(self) -> Optional[float]:
        return self.soak_time_hours


SamplingSet = Annotated[Union[Transect, NetSet], Field(discriminator="type")]


class SamplingEvent(BaseModel):
    """One lake visit and everything recorded during it."""
    location: EventLocation
    environmental: EnvironmentalReadings = Field(default_factory=EnvironmentalReadings)
    gear_type: Optional[GearType] = None
    sets: list[SamplingSet] = Field(default_factory=list)
    is_finalized: bool = False
    sets_created: int = Field(
        default=0,
        ge=0,
        description="Sets ever created; the next set is numbered sets_created + 1",
    )

    @field_validator("environmental", mode="before")
    @classmethod
    def default_environmental(cls, value):
        return {} if value is None else value

    @model_validator(mode="after")
    def fill_derived(self) -> "SamplingEvent":
        if self.gear_type is None:
            self.gear_type = self.location.gear
        highest_id = max((s.set_id for s in self.sets), default=0)
        self.sets_created = max(self.sets_created, highest_id)
        return self

    @computed_field
    @property
    def season(self) -> str:
        return f"{self.location.date.year:04d}"

    def get_set(self, set_id: int) -> Optional[Union[Transect, NetSet]]:
        for sampling_set in self.sets:
            if sampling_set.set_id == set_id:
                return sampling_set
        return None

    def iter_observations(self) -> Iterator[FishObservation]:
        """All fish observations across sets, in set then entry order."""
        for sampling_set in self.sets:
            yield from sampling_set.fish
