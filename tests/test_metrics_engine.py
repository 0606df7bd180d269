"""
Unit tests for the metrics engine.

Tests cover:
- Effort aggregation and CPUE sentinels
- Catch summary percentages and batch biomass
- Abundance & condition with Wr / Fulton K fallback
- Angler-unit conversion
- Diet composition and proportional size distribution
- Graceful handling of empty and incomplete events
"""
from datetime import date

import numpy as np
import pytest

from fishsurvey.domain.models import (
    EventLocation,
    FishObservation,
    SamplingEvent,
    SetLocation,
    Transect,
)
from fishsurvey.services.domain import metrics_engine
from fishsurvey.utils.safe_math import NO_RANGE, NOT_AVAILABLE


def _transect_event(*fish: FishObservation, seconds: float = 3600) -> SamplingEvent:
    return SamplingEvent(
        location=EventLocation(lake="Test Lake", date=date(2024, 5, 1), gear="electrofishing"),
        sets=[
            Transect(
                set_id=1,
                effort_time_seconds=seconds,
                location=SetLocation(start_utm_e=0, end_utm_n=0),
                fish=list(fish),
            )
        ],
    )


def _row(rows, species):
    return next(r for r in rows if r.species == species)


# ============================================================
# Effort & CPUE Tests
# ============================================================

class TestEffortAndCpue:
    """Tests for effort aggregation and CPUE."""

    def test_total_effort_sums_transects(self, electrofishing_event):
        """Two 30-minute transects should give one hour of effort."""
        assert metrics_engine.total_effort_hours(electrofishing_event) == pytest.approx(1.0)

    def test_pending_net_contributes_zero_effort(self, gillnet_event):
        """Only the pulled 12-hour net should count towards effort."""
        assert metrics_engine.total_effort_hours(gillnet_event) == pytest.approx(12.0)

    def test_total_fish_includes_unidentified(self, electrofishing_event):
        """Fish without a species still count towards the event total."""
        assert metrics_engine.total_fish(electrofishing_event) == 10

    def test_event_metrics(self, gillnet_event):
        """Event metrics should report totals, CPUE and pending sets."""
        metrics = metrics_engine.event_metrics(gillnet_event)

        assert metrics.total_fish == 3
        assert metrics.total_effort_hours == 12.0
        assert metrics.cpue == 0.25
        assert metrics.set_count == 2
        assert metrics.pending_sets == 1

    def test_zero_effort_event_cpue_is_not_available(self, species_table):
        """An event whose sets have no effort reports "N/A", not infinity."""
        event = _transect_event(FishObservation(species="LMB", length=300), seconds=0)

        assert metrics_engine.event_metrics(event).cpue == NOT_AVAILABLE
        assert metrics_engine.abundance_condition(event, species_table)[0].cpue == NOT_AVAILABLE
        assert metrics_engine.angler_abundance(event)[0].cpue == NOT_AVAILABLE

    def test_cpue_rounds_to_two_decimals(self):
        assert metrics_engine.cpue(1, 3.0) == 0.33

    def test_cpue_zero_effort(self):
        assert metrics_engine.cpue(5, 0) == NOT_AVAILABLE


# ============================================================
# Catch Summary Tests
# ============================================================

class TestCatchSummary:
    """Tests for the catch summary table."""

    def test_rows_per_species_in_first_seen_order(self, electrofishing_event):
        """One row per identified species, unidentified fish skipped."""
        rows = metrics_engine.catch_summary(electrofishing_event)

        assert [r.species for r in rows] == ["LMB", "TGT", "BLG"]

    def test_number_percent_sums_to_100(self, electrofishing_event):
        rows = metrics_engine.catch_summary(electrofishing_event)

        assert sum(r.number_percent for r in rows) == pytest.approx(100, abs=0.2)
        assert _row(rows, "BLG").number_percent == 55.6

    def test_batch_entry_biomass(self):
        """A count=5, 200 g batch entry contributes 1000 g."""
        rows = metrics_engine.catch_summary(
            _transect_event(FishObservation(species="BC", weight=200, count=5))
        )

        assert rows[0].number == 5
        assert rows[0].biomass_kg == 1.0
        assert rows[0].biomass_percent == 100.0

    def test_biomass_percentages(self, electrofishing_event):
        rows = metrics_engine.catch_summary(electrofishing_event)

        assert _row(rows, "LMB").biomass_kg == 1.15
        assert _row(rows, "LMB").biomass_percent == 43.4
        assert _row(rows, "TGT").biomass_percent == 18.9
        assert _row(rows, "BLG").biomass_percent == 37.7

    def test_unweighed_fish_give_zero_biomass_percent(self):
        """Without any weights, biomass percentages are 0 instead of NaN."""
        rows = metrics_engine.catch_summary(_transect_event(FishObservation(species="LMB", length=300)))

        assert rows[0].biomass_kg == 0
        assert rows[0].biomass_percent == 0

    def test_camel_case_serialization(self, electrofishing_event):
        row = metrics_engine.catch_summary(electrofishing_event)[0]

        assert set(row.model_dump(by_alias=True)) == {
            "species", "number", "numberPercent", "biomassKg", "biomassPercent"
        }


# ============================================================
# Abundance & Condition Tests
# ============================================================

class TestAbundanceCondition:
    """Tests for the abundance and condition table."""

    def test_length_statistics(self, electrofishing_event, species_table):
        """Lengths 300/310/320 give mean 310.0 and range "300-320"."""
        row = _row(metrics_engine.abundance_condition(electrofishing_event, species_table), "LMB")

        assert row.count == 3
        assert row.cpue == 3.0
        assert row.mean_length_mm == 310.0
        assert row.range_length_mm == "300-320"
        assert row.mean_weight_g == 383.3
        assert row.range_weight_g == "350-420"

    def test_species_with_coefficients_uses_relative_weight(self, electrofishing_event, species_table):
        row = _row(metrics_engine.abundance_condition(electrofishing_event, species_table), "LMB")

        assert row.used_k_factor is False
        assert 85 < row.mean_condition < 95

    def test_species_without_coefficients_uses_k_factor(self, electrofishing_event, species_table):
        """Tiger trout has no regression: 300 mm / 500 g gives K = 1.85."""
        row = _row(metrics_engine.abundance_condition(electrofishing_event, species_table), "TGT")

        assert row.used_k_factor is True
        assert row.mean_condition == 1.9

    def test_unknown_species_uses_k_factor(self, species_table):
        rows = metrics_engine.abundance_condition(
            _transect_event(FishObservation(species="XYZ", length=300, weight=500)), species_table
        )

        assert rows[0].used_k_factor is True

    def test_batch_entries_repeat_measurements(self, electrofishing_event, species_table):
        row = _row(metrics_engine.abundance_condition(electrofishing_event, species_table), "BLG")

        assert row.count == 5
        assert row.mean_weight_g == 200.0
        assert row.range_length_mm == "150-150"

    def test_no_paired_measurements(self, species_table):
        """Condition is "-" when no fish has both length and weight."""
        rows = metrics_engine.abundance_condition(
            _transect_event(
                FishObservation(species="LMB", length=300),
                FishObservation(species="LMB", weight=400),
            ),
            species_table,
        )

        assert rows[0].mean_condition == NO_RANGE
        assert rows[0].range_length_mm == "300-300"
        assert rows[0].range_weight_g == "400-400"

    def test_unmeasured_species(self, species_table):
        """A species with no measurements reports zero means and "-" ranges."""
        rows = metrics_engine.abundance_condition(
            _transect_event(FishObservation(species="LMB", count=2)), species_table
        )

        assert rows[0].count == 2
        assert rows[0].mean_length_mm == 0
        assert rows[0].range_length_mm == NO_RANGE
        assert rows[0].range_weight_g == NO_RANGE

    def test_nonpositive_measurements_ignored(self, species_table):
        rows = metrics_engine.abundance_condition(
            _transect_event(
                FishObservation(species="LMB", length=0, weight=-1),
                FishObservation(species="LMB", length=300, weight=400),
            ),
            species_table,
        )

        assert rows[0].count == 2
        assert rows[0].mean_length_mm == 300.0

    def test_overflowing_length_left_out_of_k_factor(self, species_table):
        """A mistyped 1e110 mm length leaves no usable K value."""
        rows = metrics_engine.abundance_condition(
            _transect_event(FishObservation(species="CC", length=1e110, weight=5)), species_table
        )

        assert rows[0].used_k_factor is True
        assert rows[0].mean_condition == NO_RANGE
        assert rows[0].count == 1

    def test_overflowing_length_left_out_of_relative_weight(self, species_table):
        rows = metrics_engine.abundance_condition(
            _transect_event(
                FishObservation(species="LMB", length=1e110, weight=5),
                FishObservation(species="LMB", length=300, weight=350),
            ),
            species_table,
        )

        assert rows[0].used_k_factor is False
        expected = metrics_engine.relative_weight(300, 350, -5.528, 3.273)
        assert rows[0].mean_condition == round(float(expected), 1)


class TestConditionFormulas:
    """Tests for the condition index formulas."""

    def test_fulton_k(self):
        assert metrics_engine.fulton_k(300, 500) == pytest.approx(1.85185, rel=1e-4)

    def test_relative_weight_of_standard_fish_is_100(self):
        a, b = -5.528, 3.273
        weight = metrics_engine.standard_weight(300, a, b)

        assert metrics_engine.relative_weight(300, weight, a, b) == pytest.approx(100)

    def test_overflow_gives_nan(self):
        assert np.isnan(metrics_engine.fulton_k(1e110, 5))
        assert np.isnan(metrics_engine.relative_weight(1e110, 5, -5.528, 3.273))

    def test_vectorised(self):
        k = metrics_engine.fulton_k(np.array([300.0, 100.0]), np.array([500.0, 10.0]))

        assert k.tolist() == pytest.approx([1.85185, 1.0], rel=1e-4)


# ============================================================
# Angler Abundance Tests
# ============================================================

class TestAnglerAbundance:
    """Tests for the angler-unit abundance table."""

    def test_converts_before_aggregating(self, electrofishing_event):
        row = _row(metrics_engine.angler_abundance(electrofishing_event), "LMB")

        assert row.length_range_in == "11.8-12.6"
        assert row.mean_length_in == 12.2
        assert row.weight_range_lb == "0.77-0.93"
        assert row.mean_weight_lb == 0.85

    def test_unmeasured_species(self):
        rows = metrics_engine.angler_abundance(_transect_event(FishObservation(species="LMB")))

        assert rows[0].length_range_in == NO_RANGE
        assert rows[0].weight_range_lb == NO_RANGE
        assert rows[0].mean_length_in == 0


# ============================================================
# Diet & Size Structure Tests
# ============================================================

class TestDietComposition:
    """Tests for the stomach content tally."""

    def test_tally_with_unknown(self, electrofishing_event):
        rows = metrics_engine.diet_composition(electrofishing_event)

        assert [(r.content, r.count, r.percent) for r in rows] == [
            ("Fish", 2, 20.0),
            ("Crayfish", 1, 10.0),
            ("Unknown", 7, 70.0),
        ]


class TestProportionalSizeDistribution:
    """Tests for PSD indices."""

    def test_indices(self, electrofishing_event, species_table):
        rows = metrics_engine.proportional_size_distribution(electrofishing_event, species_table)

        # Tiger trout has no size categories
        assert [r.species for r in rows] == ["LMB", "BLG"]
        lmb = rows[0]
        assert lmb.stock_count == 3
        assert lmb.psd == 100
        assert lmb.psd_p == 0
        assert lmb.psd_t == 0

    def test_no_stock_length_fish(self, species_table):
        rows = metrics_engine.proportional_size_distribution(
            _transect_event(FishObservation(species="LMB", length=100)), species_table
        )

        assert rows[0].stock_count == 0
        assert rows[0].psd == NO_RANGE

    def test_mixed_sizes(self, gillnet_event, species_table):
        """Walleye 420 and 510 mm: both stock and quality, one preferred."""
        rows = metrics_engine.proportional_size_distribution(gillnet_event, species_table)
        walleye = _row(rows, "WAE")

        assert walleye.stock_count == 2
        assert walleye.psd == 100
        assert walleye.psd_p == 50
        assert walleye.psd_m == 0


# ============================================================
# Empty Event Tests
# ============================================================

class TestEmptyEvent:
    """Every calculator should degrade gracefully on an event with no fish."""

    def test_tables_are_empty(self, empty_event, species_table):
        assert metrics_engine.catch_summary(empty_event) == []
        assert metrics_engine.abundance_condition(empty_event, species_table) == []
        assert metrics_engine.angler_abundance(empty_event) == []
        assert metrics_engine.diet_composition(empty_event) == []
        assert metrics_engine.proportional_size_distribution(empty_event, species_table) == []
        assert metrics_engine.species_codes(empty_event) == []

    def test_event_metrics(self, empty_event):
        metrics = metrics_engine.event_metrics(empty_event)

        assert metrics.total_fish == 0
        assert metrics.cpue == NOT_AVAILABLE


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
