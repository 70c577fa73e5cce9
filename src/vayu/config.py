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
Engine configuration.

Every constant that changes a derived number lives in EngineConfig. The
default instance holds the standard constants; alternatives must be
created through EngineConfig.override() with a new version string so that
results computed under different constants can always be told apart.

Example:
    >>> from vayu.config import DEFAULT_CONFIG
    >>> lenient = DEFAULT_CONFIG.override(version="1.1-lenient", trend_split_threshold=25)
"""

from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import Mapping

from .metrics.base import CONVERSION_FACTORS, Pollutant

# (increasing above, decreasing below) on raw pollutant averages
TREND_THRESHOLDS: Mapping[Pollutant, tuple[float, float]] = MappingProxyType(
    {
        Pollutant.PM2_5: (35, 12),
        Pollutant.PM10: (150, 54),
        Pollutant.O3: (70, 50),
        Pollutant.NO2: (100, 53),
        Pollutant.SO2: (75, 35),
        Pollutant.CO: (9, 4),
    }
)

# Used for pollutants without their own pair, or when no pollutant is named
FALLBACK_TREND_THRESHOLDS = (100, 50)


@dataclass(frozen=True)
class EngineConfig:
    """
    Versioned constants for the AQI engine.

    Attributes:
        version: Identifies this set of constants
        index: Key of the breakpoint calibration in the index registry
        conversion_factors: Raw µg/m³ to table units, per gas
        trend_thresholds: Pollutant-level (increasing, decreasing) thresholds
        fallback_trend_thresholds: Thresholds for unlisted pollutants
        confidence_base: Confidence for a same-day forecast before the bonus
        confidence_decay_per_day: Points lost for each day further out
        confidence_bonus_cap: Largest bonus from sample count
        confidence_samples_per_point: Samples needed for one bonus point
        confidence_floor: Lowest confidence ever reported
        confidence_ceiling: Highest confidence ever reported
        trend_split_threshold: Mean difference between halves that counts as a trend
        min_trend_points: Daily points needed before a location trend is computed
        daily_excluded_pollutants: Pollutants left out of daily AQI values
    """

    version: str = "1.0"
    index: str = "US_EPA"
    conversion_factors: Mapping[Pollutant, float] = field(
        default_factory=lambda: MappingProxyType(dict(CONVERSION_FACTORS))
    )
    trend_thresholds: Mapping[Pollutant, tuple[float, float]] = field(
        default_factory=lambda: TREND_THRESHOLDS
    )
    fallback_trend_thresholds: tuple[float, float] = FALLBACK_TREND_THRESHOLDS
    confidence_base: float = 85
    confidence_decay_per_day: float = 5
    confidence_bonus_cap: float = 10
    confidence_samples_per_point: float = 2
    confidence_floor: float = 50
    confidence_ceiling: float = 95
    trend_split_threshold: float = 15
    min_trend_points: int = 3
    daily_excluded_pollutants: tuple[Pollutant, ...] = (Pollutant.PM10,)

    def override(self, version: str, **changes) -> "EngineConfig":
        """
        Return a copy with some constants changed.

        Args:
            version: Version string for the new configuration; must differ
                from this one
            **changes: Field values to replace

        Raises:
            ValueError: If the version is unchanged or a field is unknown
        """
        if not version or version == self.version:
            raise ValueError(
                f"Overriding engine constants requires a new version "
                f"(current version is {self.version!r})"
            )

        known = {f.name for f in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown configuration fields: {sorted(unknown)}")

        for name in ("conversion_factors", "trend_thresholds"):
            if name in changes:
                changes[name] = MappingProxyType(dict(changes[name]))
        if "daily_excluded_pollutants" in changes:
            changes["daily_excluded_pollutants"] = tuple(
                changes["daily_excluded_pollutants"]
            )

        return replace(self, version=version, **changes)


DEFAULT_CONFIG = EngineConfig()
