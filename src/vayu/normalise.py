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
Turn provider-shaped input into Reading records.

Nothing is dropped here: readings without a usable timestamp are kept so
that the aggregator can count them when it skips them.
"""

import math
import warnings
from logging import getLogger
from typing import Any, Mapping, Sequence

from .metrics.base import POLLUTANT_PRIORITY, Reading, standardise_pollutant
from .types import HourlyPayload, PollutantSeries

logger = getLogger(__name__)


def _value_at(values: Sequence[Any] | None, index: int) -> float | None:
    """Value at index, or None if the array is missing, short, null or NaN."""
    if values is None or index >= len(values):
        return None
    value = values[index]
    if isinstance(value, float) and math.isnan(value):
        return None
    return value


def readings_from_hourly(hourly: HourlyPayload | None) -> list[Reading]:
    """
    Convert parallel hourly arrays into one Reading per timestamp.

    Missing pollutant arrays are treated as all-None, so partial payloads
    still produce readings.

    Args:
        hourly: Payload with a "time" array and optional pollutant arrays,
                or None when no input is available

    Returns:
        list[Reading]: Readings in payload order (empty if there is no
        "time" array)
    """
    if not hourly or not isinstance(hourly.get("time"), (list, tuple)):
        return []

    times = hourly["time"]
    readings = [
        Reading(
            timestamp=timestamp,
            **{
                p.value: _value_at(hourly.get(p.value), index)
                for p in POLLUTANT_PRIORITY
            },
        )
        for index, timestamp in enumerate(times)
    ]

    logger.debug(f"Normalised {len(readings)} hourly readings")
    return readings


def readings_from_series(series: PollutantSeries) -> list[Reading]:
    """
    Merge per-pollutant time series into readings keyed by timestamp.

    Points sharing a timestamp become one reading. Points without a
    timestamp cannot be matched and each becomes its own reading.

    Args:
        series: {pollutant_name: [{"timestamp": ..., "value": ...}, ...]}

    Returns:
        list[Reading]: One reading per distinct timestamp, in first-seen order
    """
    merged: dict[str, dict[str, Any]] = {}
    unmatched: list[Reading] = []
    unknown = set()

    for name, points in series.items():
        pollutant = standardise_pollutant(name)
        if pollutant is None:
            unknown.add(name)
            continue

        for point in points:
            timestamp = point.get("timestamp")
            value = _value_at([point.get("value")], 0)
            if not timestamp:
                unmatched.append(Reading(timestamp=None, **{pollutant.value: value}))
                continue
            merged.setdefault(timestamp, {})[pollutant.value] = value

    if unknown:
        warnings.warn(
            f"Unknown pollutants will be skipped: {unknown}",
            UserWarning,
            stacklevel=2,
        )

    readings = [Reading(timestamp=ts, **values) for ts, values in merged.items()]
    return readings + unmatched


def reading_from_current(current: Mapping[str, Any] | None) -> Reading:
    """
    Build a single reading from a "current conditions" block.

    The block carries a "time" key and one value per pollutant wire name;
    missing keys become None.
    """
    current = current or {}
    return Reading(
        timestamp=current.get("time"),
        **{p.value: _value_at([current.get(p.value)], 0) for p in POLLUTANT_PRIORITY},
    )
