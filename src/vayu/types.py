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
Input schemas accepted by the engine.

The engine does not care where readings come from. It accepts either an
hourly payload of parallel arrays (the shape air-quality APIs such as
Open-Meteo return) or one time series per pollutant.
"""

from typing import Sequence, TypeAlias, TypedDict

from .metrics.base import POLLUTANT_PRIORITY


class HourlyPayload(TypedDict, total=False):
    """
    Parallel hourly arrays for one location.

    Required fields:
        time: ISO-8601 timestamps, one per hour

    Optional fields (same length as time, None where missing):
        pm2_5, pm10, ozone, nitrogen_dioxide, sulphur_dioxide, carbon_monoxide
    """
    time: Sequence[str | None]
    pm2_5: Sequence[float | None]
    pm10: Sequence[float | None]
    ozone: Sequence[float | None]
    nitrogen_dioxide: Sequence[float | None]
    sulphur_dioxide: Sequence[float | None]
    carbon_monoxide: Sequence[float | None]


class SeriesPoint(TypedDict):
    """One timestamped value of a single pollutant."""
    timestamp: str | None
    value: float | None


PollutantSeries: TypeAlias = dict[str, Sequence[SeriesPoint]]
"""
Time series keyed by pollutant name.

Keys may be any name standardise_pollutant() understands, e.g. "pm2_5",
"PM2.5", "ozone", "O3".
"""

HOURLY_FIELDS = [p.value for p in POLLUTANT_PRIORITY]
