"""
Domain service: biological metrics over a sampling event.

Every function here is a pure function of the event snapshot it receives.
Nothing is cached between calls and the event is never modified.

Batch entries (one observation with ``count`` > 1) stand for ``count``
identical fish: they add ``count`` to abundance, ``weight * count`` to
biomass, and their length/weight/condition values are repeated ``count``
times before means and ranges are taken.

Incomplete field data never raises. Missing measurements are left out of
the aggregates they would feed, and undefined divisions resolve to the
sentinels documented in ``fishsurvey.utils.safe_math``.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

import numpy as np

from fishsurvey.domain.metrics_models import (
    AbundanceConditionRow,
    AnglerAbundanceRow,
    CatchSummaryRow,
    CpueValue,
    DietCompositionRow,
    EventMetrics,
    SizeStructureRow,
)
from fishsurvey.domain.models import SamplingEvent
from fishsurvey.domain.species import SpeciesTable
from fishsurvey.utils.safe_math import (
    NO_RANGE,
    NOT_AVAILABLE,
    format_range,
    is_measured,
    rounded_or,
    safe_divide,
    safe_percent,
)
from fishsurvey.utils.units import (
    grams_to_kilograms,
    grams_to_pounds,
    mm_to_inches,
)

logger = logging.getLogger(__name__)

UNKNOWN_DIET = "Unknown"


@dataclass
class SpeciesMeasurements:
    """Raw measurements collected for one species."""
    count: int = 0
    biomass_g: float = 0.0
    lengths: List[float] = field(default_factory=list)
    length_counts: List[int] = field(default_factory=list)
    weights: List[float] = field(default_factory=list)
    weight_counts: List[int] = field(default_factory=list)
    paired: List[tuple[float, float]] = field(default_factory=list)
    paired_counts: List[int] = field(default_factory=list)

    def expanded_lengths(self) -> np.ndarray:
        """Lengths (mm) with batch entries repeated by their count."""
        return np.repeat(np.asarray(self.lengths, dtype=float), np.asarray(self.length_counts, dtype=int))

    def expanded_weights(self) -> np.ndarray:
        """Weights (g) with batch entries repeated by their count."""
        return np.repeat(np.asarray(self.weights, dtype=float), np.asarray(self.weight_counts, dtype=int))


def collect_species_measurements(event: SamplingEvent) -> Dict[str, SpeciesMeasurements]:
    """
    Group every fish observation in the event by species.

    Observations without a species code are skipped.

    Args:
        event: Sampling event snapshot

    Returns:
        Mapping of species code to its measurements, in first-seen order
    """
    grouped: Dict[str, SpeciesMeasurements] = {}
    for observation in event.iter_observations():
        if not observation.species:
            continue
        stats = grouped.setdefault(observation.species, SpeciesMeasurements())
        stats.count += observation.count

        has_length = is_measured(observation.length)
        has_weight = is_measured(observation.weight)
        if has_length:
            stats.lengths.append(observation.length)
            stats.length_counts.append(observation.count)
        if has_weight:
            stats.weights.append(observation.weight)
            stats.weight_counts.append(observation.count)
            stats.biomass_g += observation.weight * observation.count
        if has_length and has_weight:
            stats.paired.append((observation.length, observation.weight))
            stats.paired_counts.append(observation.count)
    return grouped


# ============================================================
# Effort & CPUE
# ============================================================

def total_effort_hours(event: SamplingEvent) -> float:
    """
    Sum of effort (transects) or soak time (net sets) over all sets.

    Pending net sets and sets without effort contribute zero.
    """
    total = 0.0
    for sampling_set in event.sets:
        hours = sampling_set.effort_or_soak_hours
        if hours is not None and math.isfinite(hours):
            total += hours
    return total


def total_fish(event: SamplingEvent) -> int:
    """Fish recorded in the event, batch entries counted by their count."""
    return sum(sampling_set.total_fish for sampling_set in event.sets)


def cpue(count: int, effort_hours: float) -> CpueValue:
    """Fish per hour rounded to two decimals, or "N/A" when effort is zero."""
    return rounded_or(safe_divide(count, effort_hours, default=NOT_AVAILABLE), 2)


def event_metrics(event: SamplingEvent) -> EventMetrics:
    """Event-wide fish total, effort and CPUE."""
    fish = total_fish(event)
    effort = total_effort_hours(event)
    return EventMetrics(
        total_fish=fish,
        total_effort_hours=round(effort, 2),
        cpue=cpue(fish, effort),
        set_count=len(event.sets),
        pending_sets=sum(1 for s in event.sets if s.is_pending),
    )


# ============================================================
# Condition indices
# ============================================================

# These accept scalars or arrays. A length large enough to overflow the
# denominator yields NaN instead of raising; callers drop non-finite values.

def standard_weight(length_mm, a: float, b: float):
    """Standard weight (g) from the log10 length-weight regression."""
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        return np.power(10.0, a + b * np.log10(np.asarray(length_mm, dtype=float)))


def relative_weight(length_mm, weight_g, a: float, b: float):
    """Relative weight Wr: observed weight as a percentage of standard weight."""
    standard = standard_weight(length_mm, a, b)
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        wr = np.asarray(weight_g, dtype=float) / standard * 100
    return np.where(np.isfinite(standard), wr, np.nan)


def fulton_k(length_mm, weight_g):
    """Fulton's condition factor K for lengths in mm and weights in g."""
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        cubed = np.power(np.asarray(length_mm, dtype=float), 3.0)
        k = np.asarray(weight_g, dtype=float) / cubed * 100000
    return np.where(np.isfinite(cubed), k, np.nan)


def _mean(values: np.ndarray, digits: int) -> float:
    if values.size == 0:
        return 0
    return round(float(np.mean(values)), digits)


# ============================================================
# Tables
# ============================================================

def catch_summary(event: SamplingEvent) -> List[CatchSummaryRow]:
    """
    Number and biomass share of each species in the catch.

    Args:
        event: Sampling event snapshot

    Returns:
        One row per observed species
    """
    grouped = collect_species_measurements(event)
    total_count = sum(stats.count for stats in grouped.values())
    total_biomass = sum(stats.biomass_g for stats in grouped.values())

    rows = [
        CatchSummaryRow(
            species=species,
            number=stats.count,
            number_percent=safe_percent(stats.count, total_count),
            biomass_kg=round(grams_to_kilograms(stats.biomass_g), 2),
            biomass_percent=safe_percent(stats.biomass_g, total_biomass),
        )
        for species, stats in grouped.items()
    ]
    logger.debug(f"Catch summary: {len(rows)} species, {total_count} fish, {total_biomass:.1f} g")
    return rows


def abundance_condition(
    event: SamplingEvent,
    species_table: SpeciesTable,
) -> List[AbundanceConditionRow]:
    """
    Abundance, size and condition of each species.

    Condition is relative weight when the species has standard weight
    coefficients in the reference table and Fulton's K otherwise. The
    choice is made once per species.

    Args:
        event: Sampling event snapshot
        species_table: Reference table supplying the regression coefficients

    Returns:
        One row per observed species
    """
    grouped = collect_species_measurements(event)
    effort = total_effort_hours(event)

    rows = []
    for species, stats in grouped.items():
        lengths = stats.expanded_lengths()
        weights = stats.expanded_weights()

        paired = np.asarray(stats.paired, dtype=float).reshape(-1, 2)
        coefficients = species_table.regression(species)
        if coefficients is not None:
            a, b = coefficients
            condition = relative_weight(paired[:, 0], paired[:, 1], a, b)
        else:
            condition = fulton_k(paired[:, 0], paired[:, 1])
        condition_values = np.repeat(condition, np.asarray(stats.paired_counts, dtype=int))
        finite = np.isfinite(condition_values)
        if not finite.all():
            logger.debug(f"Dropping {np.count_nonzero(~finite)} non-finite condition values for {species}")
            condition_values = condition_values[finite]

        rows.append(AbundanceConditionRow(
            species=species,
            count=stats.count,
            cpue=cpue(stats.count, effort),
            mean_length_mm=_mean(lengths, 1),
            range_length_mm=format_range(lengths),
            mean_weight_g=_mean(weights, 1),
            range_weight_g=format_range(weights),
            mean_condition=_mean(condition_values, 1) if condition_values.size else NO_RANGE,
            used_k_factor=coefficients is None,
        ))
    return rows


def angler_abundance(event: SamplingEvent) -> List[AnglerAbundanceRow]:
    """
    Abundance and size of each species in inches and pounds.

    Conversion happens before aggregation, so means and ranges are taken
    over the converted values.
    """
    grouped = collect_species_measurements(event)
    effort = total_effort_hours(event)

    rows = []
    for species, stats in grouped.items():
        lengths_in = mm_to_inches(stats.expanded_lengths())
        weights_lb = grams_to_pounds(stats.expanded_weights())
        rows.append(AnglerAbundanceRow(
            species=species,
            count=stats.count,
            cpue=cpue(stats.count, effort),
            length_range_in=format_range(lengths_in, digits=1),
            mean_length_in=_mean(lengths_in, 1),
            weight_range_lb=format_range(weights_lb, digits=2),
            mean_weight_lb=_mean(weights_lb, 2),
        ))
    return rows


def diet_composition(event: SamplingEvent) -> List[DietCompositionRow]:
    """
    Tally of stomach contents across all fish.

    Fish without a recorded stomach content are tallied as "Unknown".
    """
    tally: Dict[str, int] = {}
    for observation in event.iter_observations():
        content = (observation.stomach_content or "").strip() or UNKNOWN_DIET
        tally[content] = tally.get(content, 0) + observation.count

    total = sum(tally.values())
    return [
        DietCompositionRow(content=content, count=count, percent=safe_percent(count, total))
        for content, count in tally.items()
    ]


def _size_index(numerator: int, stock_count: int) -> Union[int, str]:
    value = safe_divide(numerator * 100, stock_count, default=NO_RANGE)
    return NO_RANGE if value == NO_RANGE else int(round(value))


def proportional_size_distribution(
    event: SamplingEvent,
    species_table: SpeciesTable,
) -> List[SizeStructureRow]:
    """
    PSD, PSD-P, PSD-M and PSD-T for species with size-category lengths.

    Each index is the percentage of stock-length fish that also reach the
    quality, preferred, memorable or trophy length. Species without stock
    and quality lengths in the reference table are left out; an index whose
    threshold is missing, or a species with no stock-length fish, reports
    "-".
    """
    rows = []
    for species, stats in collect_species_measurements(event).items():
        reference = species_table.get(species)
        if reference is None or reference.stock is None or reference.quality is None:
            continue
        lengths = stats.expanded_lengths()
        stock_count = int(np.count_nonzero(lengths >= reference.stock))

        def index_for(threshold: Optional[float]) -> Union[int, str]:
            if threshold is None:
                return NO_RANGE
            return _size_index(int(np.count_nonzero(lengths >= threshold)), stock_count)

        rows.append(SizeStructureRow(
            species=species,
            stock_count=stock_count,
            psd=index_for(reference.quality),
            psd_p=index_for(reference.preferred),
            psd_m=index_for(reference.memorable),
            psd_t=index_for(reference.trophy),
        ))
    return rows


def species_codes(event: SamplingEvent) -> List[str]:
    """Distinct species codes recorded in the event, first-seen order."""
    return list(dict.fromkeys(
        observation.species for observation in event.iter_observations() if observation.species
    ))
