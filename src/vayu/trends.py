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
Rule-based trend labels.

Three independent rules, all deterministic:

1. pollutant_trend(): an average concentration against fixed per-pollutant
   thresholds.
2. location_trend(): first half against second half of a location's daily
   AQI series.
3. dominant_trend(): plurality vote over location trends.

Example:
    >>> location_trend([40, 45, 50, 90, 95, 100])
    'increasing'
    >>> dominant_trend(["increasing"] * 3 + ["decreasing", "stable"]).percentage
    60
"""

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Literal

from .config import DEFAULT_CONFIG, EngineConfig
from .metrics.base import POLLUTANT_PRIORITY, Pollutant, round_half_up, standardise_pollutant

TrendLabel = Literal["increasing", "decreasing", "stable"]

INCREASING = "increasing"
DECREASING = "decreasing"
STABLE = "stable"
UNKNOWN = "unknown"

# Vote tie-break order
TREND_ORDER: tuple[str, ...] = (INCREASING, DECREASING, STABLE)


@dataclass(frozen=True)
class DominantTrend:
    """Winning location trend and its share of the locations."""

    trend: str
    count: int
    total: int
    percentage: int


def _thresholds(
    pollutant: "str | Pollutant | None", config: EngineConfig
) -> tuple[float, float]:
    if pollutant is None:
        return config.fallback_trend_thresholds
    standard = standardise_pollutant(pollutant)
    return config.trend_thresholds.get(standard, config.fallback_trend_thresholds)


def pollutant_trend(
    value: float | None,
    pollutant: "str | Pollutant | None" = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> str:
    """
    Trend label for an average pollutant concentration.

    Args:
        value: Average raw concentration
        pollutant: Pollutant name; unlisted or missing names use the
            fallback thresholds
        config: Engine constants

    Returns:
        "increasing" above the high threshold, "decreasing" below the low
        one, "stable" in between, "unknown" for 0 or None (no data)
    """
    if value is None or value == 0:
        return UNKNOWN

    high, low = _thresholds(pollutant, config)
    if value > high:
        return INCREASING
    if value < low:
        return DECREASING
    return STABLE


def pollutant_trends(
    averages: Mapping["str | Pollutant", float | None],
    config: EngineConfig = DEFAULT_CONFIG,
) -> dict[Pollutant, str]:
    """pollutant_trend() for each known pollutant, in priority order."""
    standard = {standardise_pollutant(k): v for k, v in averages.items()}
    return {
        p: pollutant_trend(standard[p], p, config)
        for p in POLLUTANT_PRIORITY
        if p in standard
    }


def split_halves(values: Sequence[float]) -> tuple[list[float], list[float]]:
    """
    Split a series into first and second halves.

    With an odd length the middle element belongs to both halves.
    """
    n = len(values)
    return list(values[: math.ceil(n / 2)]), list(values[n // 2 :])


def location_trend(
    daily_aqi: Sequence[float],
    config: EngineConfig = DEFAULT_CONFIG,
) -> TrendLabel:
    """
    Trend of a location's daily AQI series.

    Args:
        daily_aqi: Daily AQI values ordered by date
        config: Engine constants

    Returns:
        "increasing" or "decreasing" when the second half's mean differs
        from the first half's by more than config.trend_split_threshold,
        otherwise "stable" (also for series shorter than
        config.min_trend_points)
    """
    if len(daily_aqi) < config.min_trend_points:
        return STABLE

    first, second = split_halves(daily_aqi)
    difference = sum(second) / len(second) - sum(first) / len(first)

    if difference > config.trend_split_threshold:
        return INCREASING
    if difference < -config.trend_split_threshold:
        return DECREASING
    return STABLE


def dominant_trend(labels: Iterable[str]) -> DominantTrend:
    """
    Plurality vote over location trends.

    Ties go to the first label in TREND_ORDER. With no labels the result is
    "stable" at 0%.
    """
    labels = list(labels)
    counts = {trend: 0 for trend in TREND_ORDER}
    for label in labels:
        if label in counts:
            counts[label] += 1

    winner, best = STABLE, 0
    for trend in TREND_ORDER:
        if counts[trend] > best:
            winner, best = trend, counts[trend]

    percentage = round_half_up(100 * best / len(labels)) if labels else 0
    return DominantTrend(trend=winner, count=best, total=len(labels), percentage=percentage)
