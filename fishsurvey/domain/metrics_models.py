"""
Row types produced by the metrics engine.

Rows serialize with camelCase keys (``numberPercent``, ``usedKFactor``...)
so they can be handed to chart and export consumers unchanged.
"""
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# A CPUE cell is either a rounded rate or the "N/A" sentinel.
CpueValue = Union[float, str]


class MetricsRow(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CatchSummaryRow(MetricsRow):
    """Share of the catch held by one species."""
    species: str
    number: int
    number_percent: float
    biomass_kg: float
    biomass_percent: float


class AbundanceConditionRow(MetricsRow):
    """Abundance and body condition of one species, metric units."""
    species: str
    count: int
    cpue: CpueValue
    mean_length_mm: float
    range_length_mm: str
    mean_weight_g: float
    range_weight_g: str
    mean_condition: Union[float, str] = Field(
        description="Mean relative weight (Wr) or Fulton K, '-' when no fish had both length and weight"
    )
    used_k_factor: bool


class AnglerAbundanceRow(MetricsRow):
    """Abundance of one species in angler units (inches, pounds)."""
    species: str
    count: int
    cpue: CpueValue
    length_range_in: str
    mean_length_in: float
    weight_range_lb: str
    mean_weight_lb: float


class LengthFrequency(MetricsRow):
    """One-inch length-frequency histogram for a species."""
    species: str
    species_name: str
    bin_labels: list[str]
    bin_edges: list[int]
    counts: list[int]
    n: int
    size_markers: dict[str, float] = Field(
        default_factory=dict,
        description="Size-category boundaries in inches (stock, quality, preferred, memorable, trophy)",
    )


class DietCompositionRow(MetricsRow):
    content: str
    count: int
    percent: float


class SizeStructureRow(MetricsRow):
    """Proportional size distribution indices for one species."""
    species: str
    stock_count: int
    psd: Union[int, str]
    psd_p: Union[int, str]
    psd_m: Union[int, str]
    psd_t: Union[int, str]


class EventMetrics(MetricsRow):
    """Event-wide totals."""
    total_fish: int
    total_effort_hours: float
    cpue: CpueValue
    set_count: int
    pending_sets: int


class EventAnalysis(MetricsRow):
    """Every table computed for an event, as returned by the API."""
    catch_summary: list[CatchSummaryRow]
    abundance_condition: list[AbundanceConditionRow]
    angler_abundance: list[AnglerAbundanceRow]
    diet_composition: list[DietCompositionRow]
    size_structure: list[SizeStructureRow]
    event_metrics: EventMetrics
    species: list[str]
    length_frequency: Optional[dict[str, LengthFrequency]] = None
