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
Weekly report synthesis.

The numbers come from the engine (composites, daily aggregates, trends);
this module only gathers them and fills in text templates. Locations whose
input is None had no data available and are left out of every statistic.
"""

import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from logging import getLogger

import pandas as pd

from .aggregation import WeeklySeries, weekly_series
from .config import DEFAULT_CONFIG, EngineConfig
from .metrics.base import (
    POLLUTANT_PRIORITY,
    Pollutant,
    Reading,
    classify,
    composite_for_reading,
    pollutant_sub_index,
    round_half_up,
)
from .trends import DominantTrend, dominant_trend, location_trend, pollutant_trend

logger = getLogger(__name__)

ReadingsByLocation = Mapping[str, Sequence[Reading] | None]

RECOMMENDATIONS = [
    "Use air purifiers with HEPA filters in homes and offices",
    "Wear N95 masks when air quality is poor",
    "Keep windows closed during peak pollution hours (early morning and evening)",
    "Use air quality monitors indoors to track pollution levels",
    "Avoid strenuous outdoor activities when AQI exceeds 150",
    "Limit outdoor exposure for children and elderly during poor air quality days",
    "Avoid areas with active construction",
]

STANDING_FACTORS = [
    "Vehicle emissions from major roads",
    "Construction activities in developing sectors",
    "Industrial emissions from nearby areas",
]

TREND_DESCRIPTIONS = {
    "increasing": "worsening air quality",
    "decreasing": "improving air quality",
    "stable": "consistent air quality",
}


@dataclass(frozen=True)
class PollutantBreakdown:
    """Week-long raw concentration statistics for one pollutant."""

    pollutant: Pollutant
    average: float
    max: float
    trend: str


@dataclass(frozen=True)
class SummaryStats:
    """Hourly composite AQI statistics across all locations."""

    average_aqi: int
    highest_aqi: int
    lowest_aqi: int
    reading_count: int

    @property
    def category(self) -> str:
        return classify(self.average_aqi)


@dataclass(frozen=True)
class AqiReport:
    id: str
    week_starting: str
    week_ending: str
    summary: str
    factors: list[str]
    recommendations: list[str]
    trend_analysis: str
    pollutant_breakdown: dict[Pollutant, PollutantBreakdown]
    dominant_trend: DominantTrend
    location_trends: dict[str, str] = field(default_factory=dict)
    summary_stats: SummaryStats | None = None


def _available(readings_by_location: ReadingsByLocation) -> dict[str, Sequence[Reading]]:
    return {k: v for k, v in readings_by_location.items() if v is not None}


def _round2(value: float) -> float:
    return round_half_up(value * 100) / 100


# =============================================================================
# Numbers
# =============================================================================


def pollutant_breakdown(
    readings_by_location: ReadingsByLocation,
    config: EngineConfig = DEFAULT_CONFIG,
) -> dict[Pollutant, PollutantBreakdown]:
    """
    Average and maximum raw concentration of each pollutant over all readings.

    Pollutants without a single value report 0/0 and an "unknown" trend.
    """
    readings = [r for rs in _available(readings_by_location).values() for r in rs]
    frame = pd.DataFrame(
        [{p.value: r.get(p) for p in POLLUTANT_PRIORITY} for r in readings],
        columns=[p.value for p in POLLUTANT_PRIORITY],
    )

    breakdown = {}
    for pollutant in POLLUTANT_PRIORITY:
        values = pd.to_numeric(frame[pollutant.value], errors="coerce").dropna()
        if values.empty:
            breakdown[pollutant] = PollutantBreakdown(pollutant, 0, 0, "unknown")
            continue

        average = values.sum() / len(values)
        breakdown[pollutant] = PollutantBreakdown(
            pollutant=pollutant,
            average=_round2(average),
            max=_round2(values.max()),
            trend=pollutant_trend(average, pollutant, config),
        )
    return breakdown


def summary_stats(
    readings_by_location: ReadingsByLocation,
    config: EngineConfig = DEFAULT_CONFIG,
) -> SummaryStats | None:
    """
    Average, highest and lowest hourly composite AQI across all locations.

    Uses the same pollutant exclusions as the daily aggregates. Returns
    None when no reading has a computable AQI.
    """
    values = []
    for readings in _available(readings_by_location).values():
        for reading in readings:
            composite = composite_for_reading(
                reading, config, exclude=config.daily_excluded_pollutants
            )
            if composite.is_valid:
                values.append(composite.aqi)

    if not values:
        return None

    return SummaryStats(
        average_aqi=round_half_up(sum(values) / len(values)),
        highest_aqi=max(values),
        lowest_aqi=min(values),
        reading_count=len(values),
    )


def contributing_factors(
    readings_by_location: ReadingsByLocation,
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[str]:
    """
    Factors behind the week's air quality.

    Flags high pollution when any hourly PM2.5 sub-index exceeds 150, and
    persistent moderate pollution when more than half of a location's PM2.5
    hours fall in the moderate band.
    """
    high = False
    persistent_moderate = False

    for readings in _available(readings_by_location).values():
        sub_indices = [
            pollutant_sub_index(r.pm2_5, Pollutant.PM2_5, config)
            for r in readings
            if r.pm2_5 is not None
        ]
        if any(s > 150 for s in sub_indices):
            high = True
        moderate = sum(1 for s in sub_indices if 51 <= s <= 100)
        if moderate > len(sub_indices) * 0.5:
            persistent_moderate = True

    factors = []
    if high:
        factors.append("High pollution levels detected in multiple areas")
    if persistent_moderate:
        factors.append("Persistent moderate pollution levels throughout the week")
    return factors + STANDING_FACTORS


def location_trends(series_by_location: Mapping[str, WeeklySeries]) -> dict[str, str]:
    """Location trend of each series' daily average AQI."""
    return {
        location: location_trend([day.average_aqi for day in series.days])
        for location, series in series_by_location.items()
    }


# =============================================================================
# Text
# =============================================================================


def summary_text(stats: SummaryStats | None, region: str = "the region") -> str:
    if stats is None:
        return (
            f"No valid air quality data was available for {region} this week. "
            "Please check back later for updated information."
        )

    spread = stats.highest_aqi - stats.lowest_aqi
    if spread > 100:
        variation = "significant fluctuations"
    elif spread > 50:
        variation = "moderate variations"
    else:
        variation = "relatively stable conditions"

    if stats.average_aqi > 150:
        outlook = "significant air quality challenges"
    elif stats.average_aqi > 100:
        outlook = "moderate air quality concerns"
    else:
        outlook = "generally acceptable air quality"

    return (
        f"The average Air Quality Index (AQI) across {region} this week was "
        f"{stats.average_aqi}, categorized as {stats.category}. The highest recorded "
        f"AQI was {stats.highest_aqi} and the lowest was {stats.lowest_aqi}, "
        f"indicating {variation}. The data suggests {outlook} in the region."
    )


def trend_text(dominant: DominantTrend, region: str = "the region") -> str:
    return (
        f"Air quality trends show a {dominant.trend} pattern ({dominant.percentage}% "
        f"of locations) indicating {TREND_DESCRIPTIONS[dominant.trend]} across most "
        f"of {region}. This is likely due to a combination of seasonal weather "
        "patterns, local emission sources, and regional pollution factors."
    )


# =============================================================================
# Report
# =============================================================================


def build_report(
    readings_by_location: ReadingsByLocation,
    week_starting: str,
    week_ending: str,
    config: EngineConfig = DEFAULT_CONFIG,
    region: str = "the region",
    series_by_location: Mapping[str, WeeklySeries] | None = None,
    report_id: str | None = None,
) -> AqiReport:
    """
    Assemble the weekly report.

    Args:
        readings_by_location: Hourly readings per location; None marks a
            location with no input available
        week_starting: First day of the week (ISO date)
        week_ending: Last day of the week (ISO date)
        config: Engine constants
        region: Name used in the narrative text
        series_by_location: Precomputed weekly series (computed here if omitted)
        report_id: Report identifier (defaults to a millisecond timestamp)

    Returns:
        AqiReport
    """
    available = _available(readings_by_location)
    if series_by_location is None:
        series_by_location = {
            location: weekly_series(location, readings, config)
            for location, readings in available.items()
        }
    else:
        series_by_location = {
            k: v for k, v in series_by_location.items() if k in available
        }

    trends = location_trends(series_by_location)
    dominant = dominant_trend(trends.values())
    stats = summary_stats(available, config)

    logger.info(
        f"Built report for {len(available)} of {len(readings_by_location)} locations "
        f"({dominant.trend}, {dominant.percentage}%)"
    )

    return AqiReport(
        id=report_id or f"report-{int(time.time() * 1000)}",
        week_starting=week_starting,
        week_ending=week_ending,
        summary=summary_text(stats, region),
        factors=contributing_factors(available, config),
        recommendations=list(RECOMMENDATIONS),
        trend_analysis=trend_text(dominant, region),
        pollutant_breakdown=pollutant_breakdown(available, config),
        dominant_trend=dominant,
        location_trends=trends,
        summary_stats=stats,
    )
