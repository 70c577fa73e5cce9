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
Forecast confidence.

Confidence is a bounded heuristic, not a probability: it starts at a base
value for a same-day forecast, loses a fixed number of points for each day
further out, gains a capped bonus for the number of hourly samples behind
the day, and is finally clamped between a floor and a ceiling.
"""

import math
from datetime import date, datetime, time, timedelta

from .config import DEFAULT_CONFIG, EngineConfig


def _align(forecast_date: date, today: date) -> tuple[date, date]:
    """Promote a plain date to midnight when the other side is a datetime."""
    if isinstance(forecast_date, datetime) != isinstance(today, datetime):
        if not isinstance(forecast_date, datetime):
            forecast_date = datetime.combine(forecast_date, time.min, today.tzinfo)
        else:
            today = datetime.combine(today, time.min, forecast_date.tzinfo)
    return forecast_date, today


def days_ahead(forecast_date: date, today: date) -> int:
    """Whole days from today to the forecast date, rounded down."""
    forecast_date, today = _align(forecast_date, today)
    return math.floor((forecast_date - today) / timedelta(days=1))


def forecast_confidence(
    sample_count: int,
    forecast_date: date,
    today: date,
    config: EngineConfig = DEFAULT_CONFIG,
) -> float:
    """
    Confidence score for one forecast day.

    Args:
        sample_count: Hourly samples behind the forecast day
        forecast_date: Day being forecast
        today: Reference day
        config: Engine constants

    Returns:
        float: Score between config.confidence_floor and
        config.confidence_ceiling (50 and 95 by default)

    Example:
        >>> forecast_confidence(24, date(2024, 1, 1), date(2024, 1, 1))
        95
        >>> forecast_confidence(0, date(2024, 1, 5), date(2024, 1, 1))
        65.0
    """
    base = config.confidence_base - config.confidence_decay_per_day * days_ahead(
        forecast_date, today
    )
    bonus = min(
        config.confidence_bonus_cap,
        sample_count / config.confidence_samples_per_point,
    )
    return min(config.confidence_ceiling, max(config.confidence_floor, base + bonus))
