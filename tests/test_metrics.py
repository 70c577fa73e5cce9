# Vayu: standardised air quality indices, aggregates and trends
# Copyright (C) 2025 Ruaraidh Dobson, South London Scientific

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

"""
Tests for the vayu.metrics package.

Tests cover:
- Breakpoint interpolation (in range, below, gaps, extrapolation)
- Unit conversion and per-pollutant sub-indices
- Pollutant name standardisation
- Category classification
- Composite resolution and tie-breaking
- The breakpoint registry and its versioning rules
"""

import math

import pytest

from vayu import metrics
from vayu.config import DEFAULT_CONFIG
from vayu.metrics import indices
from vayu.metrics.base import (
    POLLUTANT_PRIORITY,
    Breakpoint,
    Pollutant,
    Reading,
    calculate_aqi_from_breakpoints,
    category_severity,
    classify,
    composite_for_reading,
    convert_concentration,
    pollutant_sub_index,
    resolve_composite,
    round_half_up,
    standardise_pollutant,
)
from vayu.metrics.indices import us_epa

# =============================================================================
# Rounding
# =============================================================================


class TestRoundHalfUp:
    """Halves always go up, unlike the built-in round()."""

    def test_half_goes_up(self):
        assert round_half_up(50.5) == 51
        assert round_half_up(0.5) == 1

    def test_below_half_goes_down(self):
        assert round_half_up(50.49) == 50

    def test_integers_unchanged(self):
        assert round_half_up(42) == 42


# =============================================================================
# Breakpoint Interpolation
# =============================================================================


class TestBreakpointCalculation:
    """Tests for the generic breakpoint calculation."""

    @pytest.fixture
    def simple_breakpoints(self):
        return (
            Breakpoint(low_conc=0, high_conc=10, low_aqi=0, high_aqi=50),
            Breakpoint(low_conc=11, high_conc=20, low_aqi=51, high_aqi=100),
        )

    def test_low_end(self, simple_breakpoints):
        assert calculate_aqi_from_breakpoints(0, simple_breakpoints) == 0

    def test_high_end_inclusive(self, simple_breakpoints):
        assert calculate_aqi_from_breakpoints(10, simple_breakpoints) == 50

    def test_midpoint(self, simple_breakpoints):
        assert calculate_aqi_from_breakpoints(5, simple_breakpoints) == 25

    def test_below_table_is_zero(self, simple_breakpoints):
        assert calculate_aqi_from_breakpoints(-1, simple_breakpoints) == 0

    def test_gap_between_breakpoints_is_zero(self, simple_breakpoints):
        assert calculate_aqi_from_breakpoints(10.5, simple_breakpoints) == 0

    def test_extrapolates_above_table(self, simple_breakpoints):
        # Slope of the last breakpoint is 49/9
        assert calculate_aqi_from_breakpoints(29, simple_breakpoints) == 149

    @pytest.mark.parametrize(
        "value", [None, float("nan"), float("inf"), float("-inf"), "12", True]
    )
    def test_non_numbers_are_zero(self, value, simple_breakpoints):
        assert calculate_aqi_from_breakpoints(value, simple_breakpoints) == 0

    def test_empty_table_is_zero(self):
        assert calculate_aqi_from_breakpoints(5, ()) == 0


class TestUSEPA:
    """Sub-indices against the registered US_EPA tables."""

    def test_pm25_top_of_good(self):
        assert pollutant_sub_index(12.0, Pollutant.PM2_5) == 50

    def test_pm25_bottom_of_moderate(self):
        assert pollutant_sub_index(12.1, Pollutant.PM2_5) == 51

    def test_pm25_table_edges(self):
        assert pollutant_sub_index(35.4, Pollutant.PM2_5) == 100
        assert pollutant_sub_index(55.4, Pollutant.PM2_5) == 150
        assert pollutant_sub_index(500.4, Pollutant.PM2_5) == 500

    def test_pm25_gap_is_zero(self):
        assert pollutant_sub_index(12.05, Pollutant.PM2_5) == 0

    def test_pm25_extrapolates_above_500(self):
        result = pollutant_sub_index(600, Pollutant.PM2_5)
        assert result == 579
        assert result > 500

    def test_infinite_concentration_is_zero(self):
        assert pollutant_sub_index(float("inf"), Pollutant.PM2_5) == 0
        assert pollutant_sub_index(float("-inf"), Pollutant.CO) == 0

    def test_half_point_rounds_up(self):
        table = (Breakpoint(low_conc=0, high_conc=100, low_aqi=0, high_aqi=100),)
        assert calculate_aqi_from_breakpoints(50.5, table) == 51
        assert calculate_aqi_from_breakpoints(50.25, table) == 50

    def test_missing_value_is_zero(self):
        assert pollutant_sub_index(None, Pollutant.PM2_5) == 0
        assert pollutant_sub_index(float("nan"), Pollutant.O3) == 0

    def test_ozone_is_converted_before_lookup(self):
        # 140 µg/m³ * 0.5 = 70 ppb, top of the moderate band
        assert pollutant_sub_index(140, Pollutant.O3) == 100

    def test_pm10(self):
        assert pollutant_sub_index(54, Pollutant.PM10) == 50
        assert pollutant_sub_index(300, Pollutant.PM10) == 173

    def test_every_pollutant_has_a_table(self):
        tables = indices.get_breakpoints("US_EPA")
        assert set(tables) == set(POLLUTANT_PRIORITY)

    def test_tables_are_immutable(self):
        assert isinstance(us_epa.PM25_BREAKPOINTS, tuple)
        assert isinstance(indices.get_breakpoints("us_epa")[Pollutant.CO], tuple)


# =============================================================================
# Unit Conversion
# =============================================================================


class TestUnitConversion:
    """Tests for the µg/m³ to table-unit conversion."""

    def test_gas_factors(self):
        assert convert_concentration(100, Pollutant.O3) == pytest.approx(50)
        assert convert_concentration(100, Pollutant.NO2) == pytest.approx(53)
        assert convert_concentration(100, Pollutant.SO2) == pytest.approx(38)
        assert convert_concentration(1000, Pollutant.CO) == pytest.approx(0.873)

    def test_particulates_unchanged(self):
        assert convert_concentration(42.0, Pollutant.PM2_5) == 42.0
        assert convert_concentration(42.0, Pollutant.PM10) == 42.0

    def test_none_passes_through(self):
        assert convert_concentration(None, Pollutant.O3) is None

    def test_nan_passes_through(self):
        assert math.isnan(convert_concentration(float("nan"), Pollutant.O3))

    def test_custom_factors(self):
        assert convert_concentration(10, Pollutant.O3, {Pollutant.O3: 2.0}) == 20


# =============================================================================
# Pollutant Standardisation
# =============================================================================


class TestPollutantStandardisation:
    """Tests for pollutant name standardisation."""

    def test_wire_names(self):
        assert standardise_pollutant("pm2_5") is Pollutant.PM2_5
        assert standardise_pollutant("ozone") is Pollutant.O3
        assert standardise_pollutant("carbon_monoxide") is Pollutant.CO

    def test_labels_and_aliases(self):
        assert standardise_pollutant("PM2.5") is Pollutant.PM2_5
        assert standardise_pollutant("PM25") is Pollutant.PM2_5
        assert standardise_pollutant("O3") is Pollutant.O3
        assert standardise_pollutant("Sulfur Dioxide") is Pollutant.SO2

    def test_member_passes_through(self):
        assert standardise_pollutant(Pollutant.NO2) is Pollutant.NO2

    def test_unknown_pollutant(self):
        assert standardise_pollutant("benzene") is None

    def test_label(self):
        assert Pollutant.PM2_5.label == "PM2.5"
        assert str(Pollutant.NO2) == "NO2"


# =============================================================================
# Category Classification
# =============================================================================


class TestClassify:
    """Boundaries belong to the lower category."""

    @pytest.mark.parametrize(
        "aqi,expected",
        [
            (0, "good"),
            (50, "good"),
            (51, "moderate"),
            (100, "moderate"),
            (101, "sensitive"),
            (150, "sensitive"),
            (151, "unhealthy"),
            (200, "unhealthy"),
            (201, "very-unhealthy"),
            (300, "very-unhealthy"),
            (301, "hazardous"),
            (500, "hazardous"),
            (579, "hazardous"),
        ],
    )
    def test_boundaries(self, aqi, expected):
        assert classify(aqi) == expected

    def test_severity_is_ordered(self):
        ranks = [category_severity(classify(a)) for a in (10, 60, 120, 180, 250, 400)]
        assert ranks == sorted(ranks)
        assert ranks[0] == 0
        assert ranks[-1] == 5

    def test_unknown_category(self):
        with pytest.raises(ValueError, match="Unknown AQI category"):
            category_severity("terrible")


# =============================================================================
# Composite Resolution
# =============================================================================


class TestResolveComposite:
    """Tests for combining sub-indices into one AQI."""

    def test_max_wins(self):
        sub_indices = dict(zip(POLLUTANT_PRIORITY, [42, 0, 78, 0, 0, 0]))
        result = resolve_composite(sub_indices)

        assert result.aqi == 78
        assert result.category == "moderate"
        assert result.dominant_pollutant is Pollutant.O3

    def test_nothing_computable(self):
        result = resolve_composite({p: 0 for p in POLLUTANT_PRIORITY})

        assert result.aqi == 0
        assert result.dominant_pollutant is None
        assert not result.is_valid

    def test_empty_mapping(self):
        assert resolve_composite({}).aqi == 0

    def test_ties_follow_priority(self):
        result = resolve_composite({Pollutant.CO: 80, Pollutant.NO2: 80})
        assert result.dominant_pollutant is Pollutant.NO2

        result = resolve_composite({Pollutant.O3: 80, Pollutant.PM2_5: 80})
        assert result.dominant_pollutant is Pollutant.PM2_5

    def test_reading_includes_pm10_by_default(self):
        reading = Reading(timestamp="2024-01-01T00:00", pm2_5=6.0, pm10=300)
        result = composite_for_reading(reading)

        assert result.aqi == 173
        assert result.dominant_pollutant is Pollutant.PM10

    def test_reading_with_exclusion(self):
        reading = Reading(timestamp="2024-01-01T00:00", pm2_5=6.0, pm10=300)
        result = composite_for_reading(reading, exclude=[Pollutant.PM10])

        assert result.aqi == 25
        assert result.dominant_pollutant is Pollutant.PM2_5


# =============================================================================
# Registry
# =============================================================================


@pytest.fixture
def isolated_registry(monkeypatch):
    """Run a test against a copy of the index registry."""
    monkeypatch.setattr(indices, "_INDICES", dict(indices._INDICES))
    monkeypatch.setattr(indices, "_BREAKPOINTS", dict(indices._BREAKPOINTS))


def _info(version):
    return {**us_epa.INDEX_INFO, "version": version}


class TestIndexRegistry:
    """Tests for breakpoint registration and lookup."""

    def test_us_epa_registered(self):
        assert "US_EPA" in metrics.list_indices()
        assert metrics.get_index_info("US_EPA")["version"] == "2012.1"

    def test_unknown_index_info(self):
        assert metrics.get_index_info("NOPE") is None

    def test_unknown_index_breakpoints(self):
        with pytest.raises(ValueError, match="Unknown index"):
            indices.get_breakpoints("NOPE")

    def test_unknown_index_in_config(self):
        config = DEFAULT_CONFIG.override(version="test-nope", index="NOPE")
        with pytest.raises(ValueError, match="Unknown index"):
            pollutant_sub_index(12.0, Pollutant.PM2_5, config)

    def test_same_version_rejected(self, isolated_registry):
        with pytest.raises(ValueError, match="already registered"):
            indices.register_index("US_EPA", _info("2012.1"), us_epa.BREAKPOINTS)

    def test_new_version_replaces_with_warning(self, isolated_registry):
        tables = dict(us_epa.BREAKPOINTS)
        tables[Pollutant.PM2_5] = (
            Breakpoint(low_conc=0.0, high_conc=9.0, low_aqi=0, high_aqi=50),
            Breakpoint(low_conc=9.1, high_conc=35.4, low_aqi=51, high_aqi=100),
        )

        with pytest.warns(UserWarning, match="replaced"):
            indices.register_index("US_EPA", _info("2024.1"), tables)

        assert metrics.get_index_info("US_EPA")["version"] == "2024.1"
        assert pollutant_sub_index(9.0, Pollutant.PM2_5) == 50

    def test_missing_pollutant_rejected(self, isolated_registry):
        tables = dict(us_epa.BREAKPOINTS)
        del tables[Pollutant.CO]

        with pytest.raises(ValueError, match="no breakpoints"):
            indices.register_index("PARTIAL", _info("1"), tables)

    def test_overlapping_table_rejected(self, isolated_registry):
        tables = dict(us_epa.BREAKPOINTS)
        tables[Pollutant.PM2_5] = (
            Breakpoint(low_conc=0, high_conc=10, low_aqi=0, high_aqi=50),
            Breakpoint(low_conc=10, high_conc=20, low_aqi=51, high_aqi=100),
        )

        with pytest.raises(ValueError, match="overlapping"):
            indices.register_index("OVERLAP", _info("1"), tables)

    def test_malformed_breakpoint_rejected(self, isolated_registry):
        tables = dict(us_epa.BREAKPOINTS)
        tables[Pollutant.O3] = (
            Breakpoint(low_conc=0, high_conc=10, low_aqi=50, high_aqi=50),
        )

        with pytest.raises(ValueError, match="malformed"):
            indices.register_index("BAD", _info("1"), tables)


# =============================================================================
# Timeseries
# =============================================================================


class TestAqiTimeseries:
    """Tests for the per-reading AQI table."""

    def test_columns_and_values(self):
        readings = [
            Reading(timestamp="2024-01-01T00:00", pm2_5=12.0, ozone=140),
            Reading(timestamp="2024-01-01T01:00"),
        ]
        result = metrics.aqi_timeseries(readings)

        assert list(result.columns[:2]) == ["timestamp", "pm2_5_aqi"]
        assert result.loc[0, "pm2_5_aqi"] == 50
        assert result.loc[0, "ozone_aqi"] == 100
        assert result.loc[0, "aqi"] == 100
        assert result.loc[0, "dominant_pollutant"] == "O3"
        assert result.loc[1, "aqi"] == 0
        assert result.loc[1, "dominant_pollutant"] is None
        assert result["dominant_pollutant"].dtype == object

    def test_exclusion_only_affects_composite(self):
        readings = [Reading(timestamp="2024-01-01T00:00", pm2_5=6.0, pm10=300)]
        result = metrics.aqi_timeseries(readings, exclude=[Pollutant.PM10])

        assert result.loc[0, "pm10_aqi"] == 173
        assert result.loc[0, "aqi"] == 25

    def test_empty(self):
        result = metrics.aqi_timeseries([])
        assert result.empty
        assert "aqi" in result.columns
