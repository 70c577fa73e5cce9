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
Clean, user-friendly public API for Vayu.

This module ties the engine to per-location input. Each location's hourly
payload is processed independently (optionally on a thread pool); anything
that spans locations, such as the dominant trend, waits until every
location has been processed.

A payload of None means no input was available for that location. Such a
location gets an empty series and takes no part in the report.

Basic usage:
    >>> import vayu
    >>>
    >>> # Engine only, with payloads obtained elsewhere
    >>> series = vayu.weekly_overview({"Saket": payload_saket, "Rohini": None})
    >>> report = vayu.weekly_report(hourly_by_location, "2024-01-01", "2024-01-07")
    >>>
    >>> # Fetch from Open-Meteo and report in one go
    >>> report = vayu.fetch_weekly_report()
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Mapping

from .aggregation import ForecastPoint, WeeklySeries, aggregate_forecast, weekly_series
from .config import DEFAULT_CONFIG, EngineConfig
from .decorators import with_logging
from .metrics.base import Pollutant, Reading, composite_for_reading
from .normalise import reading_from_current, readings_from_hourly
from .report import AqiReport, build_report
from .sources import open_meteo
from .types import HourlyPayload

DEFAULT_MAX_WORKERS = 8
FORECAST_DAYS = 4


@dataclass(frozen=True)
class LocationSnapshot:
    """Current AQI for one location."""

    location: str
    timestamp: str | None
    aqi: int
    category: str
    dominant_pollutant: Pollutant | None
    concentrations: dict[Pollutant, float | None]


def current_conditions(
    location: str,
    reading: Reading,
    config: EngineConfig = DEFAULT_CONFIG,
) -> LocationSnapshot:
    """
    Composite AQI of a single, current reading.

    All six pollutants take part, PM10 included.
    """
    composite = composite_for_reading(reading, config)
    return LocationSnapshot(
        location=location,
        timestamp=reading.timestamp,
        aqi=composite.aqi,
        category=composite.category,
        dominant_pollutant=composite.dominant_pollutant,
        concentrations=reading.concentrations(),
    )


def _normalise_all(
    hourly_by_location: Mapping[str, HourlyPayload | None],
) -> dict[str, list[Reading] | None]:
    return {
        location: None if hourly is None else readings_from_hourly(hourly)
        for location, hourly in hourly_by_location.items()
    }


def _series_for(
    item: tuple[str, list[Reading] | None], config: EngineConfig
) -> WeeklySeries:
    location, readings = item
    if readings is None:
        return WeeklySeries(location=location, days=(), average_aqi=None)
    return weekly_series(location, readings, config)


def _series_by_location(
    readings_by_location: Mapping[str, list[Reading] | None],
    config: EngineConfig,
    max_workers: int,
) -> dict[str, WeeklySeries]:
    items = list(readings_by_location.items())
    if max_workers <= 1 or len(items) <= 1:
        results = [_series_for(item, config) for item in items]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(lambda item: _series_for(item, config), items))

    return {series.location: series for series in results}


@with_logging()
def weekly_overview(
    hourly_by_location: Mapping[str, HourlyPayload | None],
    config: EngineConfig = DEFAULT_CONFIG,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> dict[str, WeeklySeries]:
    """
    Daily aggregates and weekly average for every location.

    Args:
        hourly_by_location: Hourly payload per location (None = no input)
        config: Engine constants
        max_workers: Thread pool size; 1 processes locations in turn

    Returns:
        dict[str, WeeklySeries]: In the input's location order
    """
    return _series_by_location(_normalise_all(hourly_by_location), config, max_workers)


@with_logging()
def forecast(
    hourly: HourlyPayload | None,
    today: date | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[ForecastPoint]:
    """Daily forecast points from an hourly forecast payload."""
    return aggregate_forecast(hourly, today, config)


@with_logging()
def weekly_report(
    hourly_by_location: Mapping[str, HourlyPayload | None],
    week_starting: str,
    week_ending: str,
    config: EngineConfig = DEFAULT_CONFIG,
    region: str = "the region",
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> AqiReport:
    """
    Weekly report across locations.

    Per-location series are computed first (possibly in parallel); the
    cross-location trend vote and the narrative are built once all of them
    are available.
    """
    readings_by_location = _normalise_all(hourly_by_location)
    series = _series_by_location(readings_by_location, config, max_workers)
    return build_report(
        readings_by_location,
        week_starting,
        week_ending,
        config=config,
        region=region,
        series_by_location=series,
    )


# =============================================================================
# Fetch-and-compute conveniences (Open-Meteo)
# =============================================================================


def _fetch_all(
    locations: list[str], start: date, end: date, max_workers: int
) -> dict[str, HourlyPayload | None]:
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        payloads = executor.map(
            lambda location: open_meteo.fetch_location_hourly(location, start, end),
            locations,
        )
        return dict(zip(locations, payloads))


def fetch_current_conditions(
    location: str, config: EngineConfig = DEFAULT_CONFIG
) -> LocationSnapshot:
    """
    Current AQI for a named location.

    Raises:
        ValueError: If the location is unknown or no data could be fetched
    """
    current = open_meteo.fetch_location_current(location)
    if current is None:
        raise ValueError(f"Failed to fetch AQI data for {location}")
    return current_conditions(location, reading_from_current(current), config)


def fetch_forecast(
    location: str,
    today: date | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
) -> list[ForecastPoint]:
    """Forecast for today and the following FORECAST_DAYS days."""
    today = today or date.today()
    hourly = open_meteo.fetch_location_hourly(
        location, today, today + timedelta(days=FORECAST_DAYS)
    )
    return forecast(hourly, today, config)


def fetch_weekly_report(
    locations: list[str] | None = None,
    today: date | None = None,
    config: EngineConfig = DEFAULT_CONFIG,
    region: str = "Dwarka",
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> AqiReport:
    """Fetch the last seven days for each location and build the report."""
    locations = locations or list(open_meteo.LOCATIONS)
    today = today or date.today()
    start = today - timedelta(days=6)

    hourly_by_location = _fetch_all(locations, start, today, max_workers)
    return weekly_report(
        hourly_by_location,
        start.isoformat(),
        today.isoformat(),
        config=config,
        region=region,
        max_workers=max_workers,
    )
