# Vayu: standardised air quality indices, aggregates and trends
# Copyright (C) 2025 Ruaraidh Dobson, South London Scientific

# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Base types, constants, and utilities for AQI calculations.

This module provides the foundation of the engine: the closed set of
pollutants and their tie-break priority, breakpoint interpolation, unit
conversion, the category classifier and the composite index resolver.

Everything here is a pure function of its inputs. The only shared data are
the immutable breakpoint tables held by the index registry.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from numbers import Real
from typing import TYPE_CHECKING, TypedDict

if TYPE_CHECKING:
    from ..config import EngineConfig

# =============================================================================
# Pollutants
# =============================================================================


class Pollutant(str, Enum):
    """The six pollutants the engine understands, keyed by their wire names."""

    PM2_5 = "pm2_5"
    PM10 = "pm10"
    O3 = "ozone"
    NO2 = "nitrogen_dioxide"
    SO2 = "sulphur_dioxide"
    CO = "carbon_monoxide"

    @property
    def label(self) -> str:
        """Display label, e.g. "PM2.5"."""
        return _LABELS[self]

    def __str__(self) -> str:
        return self.label


_LABELS = {
    Pollutant.PM2_5: "PM2.5",
    Pollutant.PM10: "PM10",
    Pollutant.O3: "O3",
    Pollutant.NO2: "NO2",
    Pollutant.SO2: "SO2",
    Pollutant.CO: "CO",
}

# Single tie-break order, shared by the composite resolver and trend analyzer
POLLUTANT_PRIORITY: tuple[Pollutant, ...] = (
    Pollutant.PM2_5,
    Pollutant.PM10,
    Pollutant.O3,
    Pollutant.NO2,
    Pollutant.SO2,
    Pollutant.CO,
)

# Map common pollutant names to standard forms
POLLUTANT_ALIASES = {
    # PM2.5 variants
    "pm2.5": Pollutant.PM2_5,
    "pm25": Pollutant.PM2_5,
    "pm 2.5": Pollutant.PM2_5,
    "fine particulate": Pollutant.PM2_5,
    # PM10 variants
    "pm 10": Pollutant.PM10,
    "coarse particulate": Pollutant.PM10,
    # Ozone variants
    "o3": Pollutant.O3,
    # Nitrogen dioxide variants
    "no2": Pollutant.NO2,
    "nitrogen dioxide": Pollutant.NO2,
    # Sulphur dioxide variants
    "so2": Pollutant.SO2,
    "sulfur dioxide": Pollutant.SO2,
    "sulphur dioxide": Pollutant.SO2,
    "sulfur_dioxide": Pollutant.SO2,
    # Carbon monoxide variants
    "co": Pollutant.CO,
    "carbon monoxide": Pollutant.CO,
}


def standardise_pollutant(pollutant: "str | Pollutant") -> Pollutant | None:
    """
    Standardise a pollutant name to its enumeration member.

    Accepts wire names ("pm2_5", "ozone"), display labels ("PM2.5", "O3")
    and the aliases in POLLUTANT_ALIASES, case-insensitively.

    Args:
        pollutant: Pollutant name in any common format

    Returns:
        Pollutant member, or None if not recognised
    """
    if isinstance(pollutant, Pollutant):
        return pollutant

    key = pollutant.strip().lower()
    try:
        return Pollutant(key)
    except ValueError:
        return POLLUTANT_ALIASES.get(key)


# =============================================================================
# Types
# =============================================================================


class Breakpoint(TypedDict):
    """A single AQI breakpoint definition."""

    low_conc: float  # Low concentration bound (inclusive)
    high_conc: float  # High concentration bound (inclusive)
    low_aqi: int  # Low AQI bound
    high_aqi: int  # High AQI bound


class IndexInfo(TypedDict):
    """Metadata about a breakpoint calibration."""

    name: str  # Full name of the index
    short_name: str  # Abbreviated name
    version: str  # Calibration version; bump when any table changes
    scale_min: int  # Minimum possible value
    description: str  # Brief description
    url: str  # Reference URL


@dataclass(frozen=True)
class Reading:
    """
    One timestamped set of up to six concentrations for one location.

    Concentrations are raw provider values (µg/m³). ``None`` means the sensor
    reported nothing for that hour, which is not the same as zero.
    """

    timestamp: str | None
    pm2_5: float | None = None
    pm10: float | None = None
    ozone: float | None = None
    nitrogen_dioxide: float | None = None
    sulphur_dioxide: float | None = None
    carbon_monoxide: float | None = None

    def get(self, pollutant: Pollutant) -> float | None:
        return getattr(self, pollutant.value)

    def concentrations(self) -> dict[Pollutant, float | None]:
        return {p: self.get(p) for p in POLLUTANT_PRIORITY}

    def non_null_count(self) -> int:
        """Number of pollutants with a reported value."""
        return sum(1 for p in POLLUTANT_PRIORITY if self.get(p) is not None)


@dataclass(frozen=True)
class CompositeResult:
    """Combined AQI for one reading."""

    aqi: int  # 0 when no sub-index was computable
    category: str
    dominant_pollutant: Pollutant | None

    @property
    def is_valid(self) -> bool:
        return self.aqi > 0


# =============================================================================
# Rounding
# =============================================================================


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves going up.

    Python's built-in round() uses banker's rounding (round(50.5) == 50),
    which would shift every half-point AQI down a step.
    """
    return int(math.floor(value + 0.5))


# =============================================================================
# Unit Conversion
# =============================================================================

# Multipliers from the provider's µg/m³ to the units the gas tables use.
# O3, NO2 and SO2 end up in ppb, CO in ppm. PM is used as measured.
CONVERSION_FACTORS: dict[Pollutant, float] = {
    Pollutant.O3: 0.5,
    Pollutant.NO2: 0.53,
    Pollutant.SO2: 0.38,
    Pollutant.CO: 0.000873,
}


def is_concentration(value) -> bool:
    """True for a real, finite number. Booleans are not concentrations."""
    if value is None or isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


def convert_concentration(
    value: float | None,
    pollutant: Pollutant,
    factors: Mapping[Pollutant, float] = CONVERSION_FACTORS,
) -> float | None:
    """
    Apply the pollutant's unit-conversion factor to a raw concentration.

    Args:
        value: Raw concentration as reported by the provider
        pollutant: Pollutant the value belongs to
        factors: Conversion factors by pollutant; missing entries mean 1.0

    Returns:
        Converted concentration, or the input unchanged if it is not a number
    """
    if not is_concentration(value):
        return value
    return value * factors.get(pollutant, 1.0)


# =============================================================================
# Breakpoint Interpolation
# =============================================================================


def _interpolate(concentration: float, bp: Breakpoint) -> int:
    aqi_range = bp["high_aqi"] - bp["low_aqi"]
    conc_range = bp["high_conc"] - bp["low_conc"]

    if conc_range == 0:
        # Edge case: single-point breakpoint
        return bp["low_aqi"]

    return round_half_up(
        (aqi_range / conc_range) * (concentration - bp["low_conc"]) + bp["low_aqi"]
    )


def calculate_aqi_from_breakpoints(
    concentration: float | None,
    breakpoints: "Iterable[Breakpoint]",
) -> int:
    """
    Calculate a sub-index using linear interpolation between breakpoints.

    This is the standard EPA-style calculation:

    AQI = ((high_aqi - low_aqi) / (high_conc - low_conc)) * (conc - low_conc) + low_aqi

    Above the top of the table the last breakpoint's slope is extended, so
    there is no upper cap. Values below the table, in the gap between two
    breakpoints, or that are not numbers at all give 0 ("not computable").

    Args:
        concentration: Pollutant concentration (already in table units)
        breakpoints: Breakpoint definitions, sorted by concentration

    Returns:
        Non-negative integer sub-index
    """
    breakpoints = tuple(breakpoints)
    if not breakpoints or not is_concentration(concentration):
        return 0

    if concentration < breakpoints[0]["low_conc"]:
        return 0

    for bp in breakpoints:
        if bp["low_conc"] <= concentration <= bp["high_conc"]:
            return _interpolate(concentration, bp)

    last = breakpoints[-1]
    if concentration > last["high_conc"]:
        return _interpolate(concentration, last)

    # Falls between two breakpoints
    return 0


# Shorter alias used throughout the engine
sub_index = calculate_aqi_from_breakpoints


def pollutant_sub_index(
    value: float | None,
    pollutant: Pollutant,
    config: "EngineConfig | None" = None,
) -> int:
    """
    Convert one raw concentration into its pollutant's sub-index.

    Args:
        value: Raw concentration as reported by the provider
        pollutant: Pollutant the value belongs to
        config: Engine configuration (defaults to DEFAULT_CONFIG)

    Returns:
        Non-negative integer sub-index
    """
    from ..config import DEFAULT_CONFIG
    from .indices import get_breakpoints

    config = config or DEFAULT_CONFIG
    converted = convert_concentration(value, pollutant, config.conversion_factors)
    return calculate_aqi_from_breakpoints(
        converted, get_breakpoints(config.index)[pollutant]
    )


# =============================================================================
# Category Classification
# =============================================================================

# Upper bound (inclusive) of each category; anything above is hazardous
CATEGORY_LIMITS = (
    (50, "good"),
    (100, "moderate"),
    (150, "sensitive"),
    (200, "unhealthy"),
    (300, "very-unhealthy"),
)

CATEGORY_ORDER: tuple[str, ...] = tuple(c for _, c in CATEGORY_LIMITS) + (
    "hazardous",
)


def classify(aqi: float) -> str:
    """
    Map an AQI value onto its severity category.

    Boundaries belong to the lower category: 50 is "good", 51 "moderate".
    """
    for limit, category in CATEGORY_LIMITS:
        if aqi <= limit:
            return category
    return "hazardous"


def category_severity(category: str) -> int:
    """Rank of a category, 0 for "good" up to 5 for "hazardous"."""
    try:
        return CATEGORY_ORDER.index(category)
    except ValueError:
        raise ValueError(
            f"Unknown AQI category '{category}'. Expected one of {list(CATEGORY_ORDER)}"
        ) from None


# =============================================================================
# Composite Index
# =============================================================================


def resolve_composite(sub_indices: Mapping[Pollutant, int]) -> CompositeResult:
    """
    Combine per-pollutant sub-indices into one AQI.

    Zero means "not computable", so non-positive values are ignored. The
    overall AQI is the largest remaining sub-index; the dominant pollutant is
    the one that owns it, ties going to the earlier entry of
    POLLUTANT_PRIORITY.

    Args:
        sub_indices: Sub-index by pollutant; missing pollutants are ignored

    Returns:
        CompositeResult, with aqi 0 and no dominant pollutant when nothing
        was computable
    """
    best: Pollutant | None = None
    best_value = 0

    for pollutant in POLLUTANT_PRIORITY:
        value = sub_indices.get(pollutant, 0)
        if value > best_value:
            best, best_value = pollutant, value

    return CompositeResult(
        aqi=best_value,
        category=classify(best_value),
        dominant_pollutant=best,
    )


def reading_sub_indices(
    reading: Reading,
    config: "EngineConfig | None" = None,
    exclude: Iterable[Pollutant] = (),
) -> dict[Pollutant, int]:
    """Sub-index of every pollutant in a reading, skipping ``exclude``."""
    excluded = set(exclude)
    return {
        pollutant: pollutant_sub_index(reading.get(pollutant), pollutant, config)
        for pollutant in POLLUTANT_PRIORITY
        if pollutant not in excluded
    }


def composite_for_reading(
    reading: Reading,
    config: "EngineConfig | None" = None,
    exclude: Iterable[Pollutant] = (),
) -> CompositeResult:
    """Composite AQI of a single reading."""
    return resolve_composite(reading_sub_indices(reading, config, exclude))
