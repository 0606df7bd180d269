"""
Domain service: flatten events and metrics tables for export.

Spreadsheet exports are lists of rows (lists of cells) ready for any
workbook writer. The Word/PDF report is a ``ReportPayload`` in the shape
the external generator expects.
"""
import re
from typing import Any, List, Optional, Sequence

from fishsurvey.domain.metrics_models import (
    AbundanceConditionRow,
    AnglerAbundanceRow,
    CatchSummaryRow,
    SizeStructureRow,
)
from fishsurvey.domain.models import NetSet, SamplingEvent, Transect
from fishsurvey.domain.report_models import (
    ReportAbundanceRow,
    ReportCatchRow,
    ReportMethods,
    ReportOptions,
    ReportPayload,
)
from fishsurvey.domain.species import SpeciesTable
from fishsurvey.services.domain import metrics_engine
from fishsurvey.utils.safe_math import NO_RANGE, NOT_AVAILABLE
from fishsurvey.utils.units import celsius_to_fahrenheit

Row = List[Any]

SET_HEADERS = [
    "Lake", "Observers", "Month", "Day", "Year", "Gear", "Transect #",
    "Effort_time (sec)", "Effort_time (min)", "Effort_time (hr)", "CPUE",
    "Start UTM_E", "End UTM_N", "Location", "Cond", "pH", "tdS", "Salts",
    "Temp_Water_C", "AMPS",
]
FISH_HEADERS = ["SPP", "Count", "TL_mm", "WT_g", "Sex", "Stomach Content", "Fats", "Notes"]
CATCH_SUMMARY_HEADERS = ["Species", "Number", "Number (%)", "Biomass (kg)", "Biomass (%)"]
ABUNDANCE_CONDITION_HEADERS = [
    "Species", "Count", "CPUE", "Mean TL", "Range TL", "Mean WT", "Range WT",
    "Mean Condition", "Condition Index",
]
ANGLER_ABUNDANCE_HEADERS = [
    "Species", "Count", "CPUE", "Range TL (in)", "Mean TL (in)", "Range WT (lb)", "Mean WT (lb)",
]

GEAR_LABELS = {
    "electrofishing": "Electrofishing",
    "gillnet": "Gill net",
    "fyke_net": "Fyke net",
}


def _or_na(value: Any) -> Any:
    return NOT_AVAILABLE if value is None or value == "" else value


def _or_blank(value: Any) -> Any:
    return "" if value is None else value


def export_basename(event: SamplingEvent) -> str:
    """File name stem for exports, e.g. ``Horsetooth_Reservoir_20240612``."""
    lake = re.sub(r"\s+", "_", event.location.lake.strip()) or "UnknownLake"
    return f"{lake}_{event.location.date:%Y%m%d}"


def _set_row(event: SamplingEvent, sampling_set) -> Row:
    location = event.location
    environmental = event.environmental
    if isinstance(sampling_set, Transect):
        seconds = sampling_set.effort_time_seconds
        effort = [seconds, round(seconds / 60, 2), round(sampling_set.effort_time_hours, 2)]
    else:
        soak = sampling_set.soak_time_hours
        effort = [NOT_AVAILABLE, NOT_AVAILABLE, NOT_AVAILABLE if soak is None else round(soak, 2)]
    return [
        _or_na(location.lake),
        _or_na(", ".join(location.observers)),
        location.date.month,
        location.date.day,
        location.date.year,
        _or_na(location.gear),
        sampling_set.set_id,
        *effort,
        _or_na(sampling_set.cpue),
        sampling_set.location.start_utm_e,
        sampling_set.location.end_utm_n,
        _or_na(location.location),
        _or_na(environmental.conductivity),
        _or_na(environmental.ph),
        _or_na(environmental.tds),
        _or_na(environmental.salinity),
        _or_na(environmental.temp_water_c),
        _or_na(environmental.amps),
    ]


def full_dataset_rows(event: SamplingEvent) -> List[Row]:
    """
    Raw field data, one block per set.

    Each block is the set header, the set row, the fish header, one row
    per fish entry and a blank separator row.
    """
    rows: List[Row] = []
    for sampling_set in event.sets:
        rows.append(list(SET_HEADERS))
        rows.append(_set_row(event, sampling_set))
        rows.append(list(FISH_HEADERS))
        for fish in sampling_set.fish:
            rows.append([
                _or_na(fish.species),
                fish.count,
                _or_blank(fish.length),
                _or_blank(fish.weight),
                _or_blank(fish.sex),
                _or_blank(fish.stomach_content),
                _or_blank(fish.fat_index),
                _or_blank(fish.notes),
            ])
        rows.append([])
    return rows


def catch_summary_rows(rows: Sequence[CatchSummaryRow]) -> List[Row]:
    return [list(CATCH_SUMMARY_HEADERS)] + [
        [r.species, r.number, r.number_percent, r.biomass_kg, r.biomass_percent]
        for r in rows
    ]


def abundance_condition_rows(rows: Sequence[AbundanceConditionRow]) -> List[Row]:
    return [list(ABUNDANCE_CONDITION_HEADERS)] + [
        [
            r.species, r.count, r.cpue, r.mean_length_mm, r.range_length_mm,
            r.mean_weight_g, r.range_weight_g, r.mean_condition,
            "K" if r.used_k_factor else "Wr",
        ]
        for r in rows
    ]


def angler_abundance_rows(rows: Sequence[AnglerAbundanceRow]) -> List[Row]:
    return [list(ANGLER_ABUNDANCE_HEADERS)] + [
        [
            r.species, r.count, r.cpue, r.length_range_in, r.mean_length_in,
            r.weight_range_lb, r.mean_weight_lb,
        ]
        for r in rows
    ]


def describe_effort(event: SamplingEvent) -> str:
    """Human-readable effort line for the report methods table."""
    transects = [s for s in event.sets if isinstance(s, Transect)]
    nets = [s for s in event.sets if isinstance(s, NetSet)]
    hours = metrics_engine.total_effort_hours(event)
    parts = []
    if transects:
        parts.append(f"{len(transects)} transect{'s' if len(transects) != 1 else ''}")
    if nets:
        pending = sum(1 for n in nets if n.is_pending)
        label = f"{len(nets)} net set{'s' if len(nets) != 1 else ''}"
        if pending:
            label += f" ({pending} pending)"
        parts.append(label)
    if not parts:
        return "No sets recorded"
    return f"{', '.join(parts)}; {hours:.2f} h"


def _water_temp(event: SamplingEvent) -> str:
    temp_f = celsius_to_fahrenheit(event.environmental.temp_water_c)
    return NOT_AVAILABLE if temp_f is None else f"{temp_f:.1f}"


def build_report_payload(
    event: SamplingEvent,
    species_table: SpeciesTable,
    options: Optional[ReportOptions] = None,
) -> ReportPayload:
    """
    Assemble the monitoring report payload for an event.

    Args:
        event: Sampling event snapshot
        species_table: Reference table for condition and size structure
        options: Narrative fields, target species and output format

    Returns:
        ReportPayload ready to send to the generator
    """
    options = options or ReportOptions()
    target_species = options.target_species or metrics_engine.species_codes(event)

    abundance = {r.species: r for r in metrics_engine.abundance_condition(event, species_table)}
    size_structure = {
        r.species: r for r in metrics_engine.proportional_size_distribution(event, species_table)
    }

    abundance_table = []
    for species in target_species:
        row = abundance.get(species)
        if row is None:
            continue
        psd: Optional[SizeStructureRow] = size_structure.get(species)
        abundance_table.append(ReportAbundanceRow(
            species=species,
            cpue=row.cpue,
            mean_tl=row.mean_length_mm,
            range_tl=row.range_length_mm,
            mean_wr=row.mean_condition,
            psd=psd.psd if psd else NO_RANGE,
            psd_p=psd.psd_p if psd else NO_RANGE,
            psd_m=psd.psd_m if psd else NO_RANGE,
            psd_t=psd.psd_t if psd else NO_RANGE,
        ))

    catch_rows = [
        ReportCatchRow(
            species=r.species,
            number=r.number,
            pct_number=r.number_percent,
            biomass=r.biomass_kg,
            pct_biomass=r.biomass_percent,
        )
        for r in metrics_engine.catch_summary(event)
    ]

    return ReportPayload(
        reservoir=event.location.lake,
        dates=options.dates or event.location.date.isoformat(),
        stocking_strategy=options.stocking_strategy,
        methods=ReportMethods(
            gear=GEAR_LABELS.get(event.location.gear, event.location.gear),
            effort=describe_effort(event),
            temp=_water_temp(event),
            notes=event.location.field_notes,
            target_species=list(target_species),
        ),
        abundance_table=abundance_table,
        catch_summary=catch_rows,
        comments=options.comments,
        suggestions=options.suggestions,
        format=options.format,
    )
