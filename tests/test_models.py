"""
Unit tests for the sampling event models.
"""
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from fishsurvey.domain.models import (
    EnvironmentalReadings,
    FishObservation,
    NetSet,
    SamplingEvent,
    SetBase,
    SetLocation,
    Transect,
)
from fishsurvey.domain.species import SpeciesTable


class TestLegacyFieldNames:
    """Snapshots written with field sheet column names should still load."""

    def test_legacy_event_document(self):
        event = SamplingEvent.model_validate({
            "location": {
                "lake": "Boyd Lake",
                "date": "2023-09-14",
                "observers": "A. Lee, B. Jones",
                "gear": "electrofishing",
            },
            "environmental": {"pH": 8.1, "cond": 410, "tdS": 260, "salts": 0.2},
            "sets": [{
                "type": "transect",
                "set_id": 1,
                "effort_time_sec": 900,
                "location": {"start_utm_e": 1, "end_utm_n": 2},
                "fish": [{"spp": "WAE", "length": 400, "fats": 3}],
            }],
        })

        assert event.location.observers == ["A. Lee", "B. Jones"]
        assert event.environmental.ph == 8.1
        assert event.environmental.conductivity == 410
        assert event.environmental.salinity == 0.2
        assert event.sets[0].effort_time_seconds == 900
        assert event.sets[0].fish[0].species == "WAE"
        assert event.sets[0].fish[0].fat_index == "3"

    def test_null_environmental(self):
        event = SamplingEvent.model_validate({
            "location": {"lake": "X", "date": "2024-01-01", "gear": "gillnet"},
            "environmental": None,
        })

        assert event.environmental == EnvironmentalReadings()


class TestSamplingEvent:
    """Tests for derived event fields."""

    def test_season_and_gear_type(self, electrofishing_event):
        assert electrofishing_event.season == "2024"
        assert electrofishing_event.gear_type == "electrofishing"

    def test_sets_created_covers_existing_ids(self, gillnet_event):
        assert gillnet_event.sets_created == 2

    def test_get_set(self, gillnet_event):
        assert gillnet_event.get_set(2).set_id == 2
        assert gillnet_event.get_set(9) is None

    def test_json_round_trip(self, gillnet_event):
        restored = SamplingEvent.model_validate(gillnet_event.model_dump(mode="json"))

        assert restored == gillnet_event

    def test_invalid_gear_rejected(self):
        with pytest.raises(ValidationError):
            SamplingEvent.model_validate(
                {"location": {"lake": "X", "date": "2024-01-01", "gear": "trawl"}}
            )


class TestSets:
    """Tests for set effort and CPUE."""

    def test_transect_cpue_counts_batches(self, set_location):
        transect = Transect(
            set_id=1,
            effort_time_seconds=1800,
            location=set_location,
            fish=[FishObservation(species="BLG", count=5), FishObservation(species="LMB")],
        )

        assert transect.effort_time_hours == 0.5
        assert transect.cpue == 12.0

    def test_zero_effort_set_falls_back_to_one_hour(self, set_location):
        transect = Transect(
            set_id=1, effort_time_seconds=0, location=set_location, fish=[FishObservation()]
        )

        assert transect.cpue == 1.0

    def test_pending_net_has_no_cpue(self, set_location):
        net = NetSet(set_id=1, location=set_location, set_datetime=datetime(2024, 1, 1, 18))

        assert net.is_pending
        assert net.soak_time_hours is None
        assert net.cpue is None

    def test_pulled_net_soak_time(self, gillnet_event):
        net = gillnet_event.get_set(1)

        assert net.soak_time_hours == 12.0
        assert net.cpue == 0.25

    def test_pull_before_set_rejected(self, set_location):
        with pytest.raises(ValidationError):
            NetSet(
                set_id=1,
                location=set_location,
                set_datetime=datetime(2024, 1, 2),
                pull_datetime=datetime(2024, 1, 1),
            )

    def test_mixed_timezones_rejected(self, set_location):
        with pytest.raises(ValidationError):
            NetSet(
                set_id=1,
                location=set_location,
                set_datetime=datetime(2024, 1, 1),
                pull_datetime=datetime(2024, 1, 2, tzinfo=timezone.utc),
            )

    def test_fish_count_must_be_positive(self):
        with pytest.raises(ValidationError):
            FishObservation(species="LMB", count=0)

    def test_blank_species_is_none(self):
        assert FishObservation(species="  ").species is None

    def test_base_set_reports_no_effort(self, set_location):
        sampling_set = SetBase(set_id=1, location=set_location)

        assert sampling_set.effort_or_soak_hours is None
        assert sampling_set.cpue == 0.0


class TestSpeciesTable:
    """Tests for the species reference table."""

    def test_regression_lookup(self):
        table = SpeciesTable.default()

        assert table.regression("LMB") == (-5.528, 3.273)
        assert table.regression("TGT") is None
        assert table.regression("NOPE") is None

    def test_display_name_falls_back_to_code(self):
        table = SpeciesTable.default()

        assert table.display_name("WAE") == "Walleye"
        assert table.display_name("ZZZ") == "ZZZ"

    def test_from_json(self, tmp_path):
        path = tmp_path / "species.json"
        path.write_text('{"ABC": {"name": "Test Fish", "a": -5.0, "b": 3.0, "stock": 100, "quality": 200}}')

        table = SpeciesTable.from_json(str(path))

        assert list(table) == ["ABC"]
        assert table["ABC"].size_categories == {"stock": 100, "quality": 200}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
