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
Temporal aggregation of hourly readings.

Readings are bucketed by the calendar date written in their timestamp, each
reading is reduced to its composite AQI, and readings with no computable
AQI are discarded before any statistic is taken. A day left with no valid
readings does not appear in the output at all.

Example:
    >>> from vayu.normalise import readings_from_hourly
    >>> days = aggregate_by_day(readings_from_hourly(payload["hourly"]))
    >>> [(d.date, d.average_aqi, d.category) for d in days]
"""

import re
from dataclasses import dataclass
from datetime import date
from logging import getLogger
from typing import NamedTuple, Sequence

import pandas as pd

from .config import DEFAULT_CONFIG, EngineConfig
from .forecast import forecast_confidence
from .metrics.base import (
    Pollutant,
    Reading,
    classify,
    composite_for_reading,
    round_half_up,
)
from .normalise import readings_from_hourly
from .types import HourlyPayload

# Calendar date first; rejects pandas keywords such as "now" and "today"
_ISO_DATE = re.compile(r"\s*\d{4}-\d{2}-\d{2}")

logger = getLogger(__name__)


# =============================================================================
# Result records
# =============================================================================


@dataclass(frozen=True)
class DailyAggregate:
    """AQI statistics for one calendar day."""

    date: date
    average_aqi: int
    max_aqi: int
    min_aqi: int
    dominant_pollutant: Pollutant | None
    category: str


@dataclass(frozen=True)
class ForecastPoint:
    """Forecast AQI for one calendar day."""

    date: date
    aqi: int
    category: str
    confidence: float


@dataclass(frozen=True)
class WeeklySeries:
    """Daily aggregates for one location plus their overall average."""

    location: str
    days: tuple[DailyAggregate, ...]
    average_aqi: int | None  # None when the location has no valid day
    dropped_readings: int = 0

    @property
    def has_data(self) -> bool:
        return bool(self.days)


# =============================================================================
# Bucketing
# =============================================================================


class DayBuckets(NamedTuple):
    """Per-call accumulator: one row per reading with a usable timestamp."""

    frame: pd.DataFrame
    readings: list[Reading]
    dropped: int


def parse_day(timestamp) -> date | None:
    """
    Calendar date of an ISO-8601 timestamp, as written (no zone conversion).

    Returns None for missing or unparseable timestamps. Relative keywords
    pandas would accept ("now", "today") are not timestamps.
    """
    if not timestamp or not isinstance(timestamp, (str, date)):
        return None
    if isinstance(timestamp, str) and not _ISO_DATE.match(timestamp):
        return None
    try:
        stamp = pd.Timestamp(timestamp)
    except (ValueError, TypeError):
        return None
    if pd.isna(stamp):
        return None
    return stamp.date()


def bucket_by_day(
    readings: Sequence[Reading],
    config: EngineConfig = DEFAULT_CONFIG,
) -> DayBuckets:
    """
    Assign readings to calendar days and compute their composite AQI.

    Readings whose timestamp is missing or cannot be parsed are skipped and
    counted in DayBuckets.dropped.

    Returns:
        DayBuckets whose frame has columns day, aqi, completeness and
        position (index into DayBuckets.readings)
    """
    rows = []
    kept: list[Reading] = []
    dropped = 0

    for reading in readings:
        day = parse_day(reading.timestamp)
        if day is None:
            dropped += 1
            continue

        composite = composite_for_reading(
            reading, config, exclude=config.daily_excluded_pollutants
        )
        rows.append(
            {
                "day": day,
                "aqi": composite.aqi,
                "completeness": reading.non_null_count(),
                "position": len(kept),
            }
        )
        kept.append(reading)

    if dropped:
        logger.warning(
            f"Dropped {dropped} of {len(readings)} readings with missing or "
            f"unparseable timestamps"
        )

    frame = pd.DataFrame(rows, columns=["day", "aqi", "completeness", "position"])
    return DayBuckets(frame=frame, readings=kept, dropped=dropped)


def _daily_statistics(buckets: DayBuckets) -> pd.DataFrame:
    """Sum, count, min and max of valid AQIs per day, sorted by day."""
    valid = buckets.frame[buckets.frame["aqi"] > 0]
    return valid.groupby("day", sort=True)["aqi"].agg(["sum", "count", "min", "max"])


def _day_sizes(buckets: DayBuckets) -> pd.Series:
    return buckets.frame.groupby("day")["aqi"].size()


def _most_complete(buckets: DayBuckets, day: date) -> Reading:
    """The day's reading with the most reported pollutants; earliest wins ties."""
    day_rows = buckets.frame[buckets.frame["day"] == day]
    best = day_rows.loc[day_rows["completeness"].idxmax()]
    return buckets.readings[int(best["position"])]


# =============================================================================
# Public API
# =============================================================================


def aggregate_by_day(
    readings: Sequence[Reading],
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[DailyAggregate]:
    """
    Collapse hourly readings into one aggregate per calendar day.

    Daily AQI values leave out the pollutants in
    config.daily_excluded_pollutants (PM10 by default). The dominant
    pollutant of a day comes from its most complete reading and is chosen
    over all six pollutants.

    Args:
        readings: Hourly readings for one location, in any order
        config: Engine constants

    Returns:
        list[DailyAggregate]: Sorted by date; days without a valid reading
        are omitted
    """
    return _aggregate(bucket_by_day(readings, config), config)


def _aggregate(buckets: DayBuckets, config: EngineConfig) -> list[DailyAggregate]:
    if buckets.frame.empty:
        return []

    aggregates = []
    for day, stats in _daily_statistics(buckets).iterrows():
        average = round_half_up(stats["sum"] / stats["count"])
        best = _most_complete(buckets, day)
        aggregates.append(
            DailyAggregate(
                date=day,
                average_aqi=average,
                max_aqi=int(stats["max"]),
                min_aqi=int(stats["min"]),
                dominant_pollutant=composite_for_reading(best, config).dominant_pollutant,
                category=classify(average),
            )
        )

    logger.debug(f"Aggregated {len(buckets.readings)} readings into {len(aggregates)} days")
    return aggregates


def forecast_from_readings(
    readings: Sequence[Reading],
    today: date | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[ForecastPoint]:
    """
    Collapse hourly forecast readings into one forecast point per day.

    Grouping and exclusion follow aggregate_by_day(). Confidence is based on
    how far the day is from ``today`` and on the number of hourly readings
    in the day's bucket.

    Args:
        readings: Hourly forecast readings
        today: Reference day (defaults to the current date)
        config: Engine constants

    Returns:
        list[ForecastPoint]: Sorted by date
    """
    today = today or date.today()
    buckets = bucket_by_day(readings, config)
    if buckets.frame.empty:
        return []

    sizes = _day_sizes(buckets)
    points = []
    for day, stats in _daily_statistics(buckets).iterrows():
        aqi = round_half_up(stats["sum"] / stats["count"])
        points.append(
            ForecastPoint(
                date=day,
                aqi=aqi,
                category=classify(aqi),
                confidence=forecast_confidence(int(sizes.loc[day]), day, today, config),
            )
        )
    return points


def aggregate_forecast(
    hourly: HourlyPayload | None,
    today: date | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[ForecastPoint]:
    """
    Forecast points from an hourly forecast payload.

    Providers may return partial data: a missing payload or a missing "time"
    array gives an empty list, and missing pollutant arrays are treated as
    having no values.
    """
    return forecast_from_readings(readings_from_hourly(hourly), today, config)


def weekly_series(
    location: str,
    readings: Sequence[Reading],
    config: EngineConfig = DEFAULT_CONFIG,
) -> WeeklySeries:
    """
    Daily aggregates for a location and the rounded mean of their averages.

    Args:
        location: Location name
        readings: Hourly readings for the location
        config: Engine constants

    Returns:
        WeeklySeries (average_aqi is None when there are no valid days)
    """
    buckets = bucket_by_day(readings, config)
    days = tuple(_aggregate(buckets, config))

    average = None
    if days:
        average = round_half_up(sum(d.average_aqi for d in days) / len(days))

    return WeeklySeries(
        location=location,
        days=days,
        average_aqi=average,
        dropped_readings=buckets.dropped,
    )


def series_to_frame(series: WeeklySeries) -> pd.DataFrame:
    """
    One row per day, for callers that work with DataFrames.

    A day without a dominant pollutant has None in that column.
    """
    frame = pd.DataFrame(
        [
            {
                "location": series.location,
                "date": pd.Timestamp(day.date),
                "average_aqi": day.average_aqi,
                "max_aqi": day.max_aqi,
                "min_aqi": day.min_aqi,
                "category": day.category,
            }
            for day in series.days
        ],
        columns=[
            "location",
            "date",
            "average_aqi",
            "max_aqi",
            "min_aqi",
            "dominant_pollutant",
            "category",
        ],
    )
    frame["dominant_pollutant"] = pd.Series(
        [
            day.dominant_pollutant.label if day.dominant_pollutant else None
            for day in series.days
        ],
        index=frame.index,
        dtype=object,
    )
    return frame
