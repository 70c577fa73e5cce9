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

"""AQI conversion, aggregation, trend and forecast engine"""

from . import metrics, sources
from .aggregation import (
    DailyAggregate,
    ForecastPoint,
    WeeklySeries,
    aggregate_by_day,
    aggregate_forecast,
    weekly_series,
)
from .api import (
    LocationSnapshot,
    current_conditions,
    fetch_current_conditions,
    fetch_forecast,
    fetch_weekly_report,
    forecast,
    weekly_overview,
    weekly_report,
)
from .config import DEFAULT_CONFIG, EngineConfig
from .forecast import forecast_confidence
from .metrics.base import (
    POLLUTANT_PRIORITY,
    CompositeResult,
    Pollutant,
    Reading,
    classify,
    resolve_composite,
    sub_index,
)
from .normalise import readings_from_hourly, readings_from_series
from .report import AqiReport, build_report
from .trends import DominantTrend, dominant_trend, location_trend, pollutant_trend

__version__ = "0.1.0"

__all__ = [
    "metrics",
    "sources",
    # Facade
    "current_conditions",
    "weekly_overview",
    "forecast",
    "weekly_report",
    "fetch_current_conditions",
    "fetch_forecast",
    "fetch_weekly_report",
    "LocationSnapshot",
    # Engine
    "sub_index",
    "classify",
    "resolve_composite",
    "aggregate_by_day",
    "aggregate_forecast",
    "weekly_series",
    "forecast_confidence",
    "pollutant_trend",
    "location_trend",
    "dominant_trend",
    "build_report",
    "readings_from_hourly",
    "readings_from_series",
    # Types
    "Pollutant",
    "POLLUTANT_PRIORITY",
    "Reading",
    "CompositeResult",
    "DailyAggregate",
    "ForecastPoint",
    "WeeklySeries",
    "DominantTrend",
    "AqiReport",
    "EngineConfig",
    "DEFAULT_CONFIG",
]
