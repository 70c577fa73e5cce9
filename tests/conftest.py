"""
Pytest configuration and shared fixtures.

This module provides common fixtures and utilities used across all tests.
"""

from datetime import date, timedelta

import pytest

from vayu.metrics.base import Reading

# ============================================================================
# Builders
# ============================================================================


def make_hourly(start: date, pm2_5_by_day, hour: int = 12, **extra) -> dict:
    """
    Hourly payload with one reading per day at the given hour.

    Args:
        start: First day
        pm2_5_by_day: PM2.5 concentration for each consecutive day
        hour: Hour of day for every timestamp
        **extra: Other pollutant arrays, same length as pm2_5_by_day
    """
    times = [
        f"{(start + timedelta(days=i)).isoformat()}T{hour:02d}:00"
        for i in range(len(pm2_5_by_day))
    ]
    return {"time": times, "pm2_5": list(pm2_5_by_day), **extra}


def make_day(day: date, pm2_5_values) -> dict:
    """Hourly payload with consecutive hours on a single day."""
    return {
        "time": [f"{day.isoformat()}T{h:02d}:00" for h in range(len(pm2_5_values))],
        "pm2_5": list(pm2_5_values),
    }


@pytest.fixture
def hourly_builder():
    """Return the make_hourly builder."""
    return make_hourly


@pytest.fixture
def day_builder():
    """Return the make_day builder."""
    return make_day


# ============================================================================
# Sample Readings
# ============================================================================


@pytest.fixture
def start_day():
    """First day of the sample week."""
    return date(2024, 1, 1)


@pytest.fixture
def two_day_readings():
    """
    Readings over two days, given out of order.

    2024-01-02: single PM2.5 reading of 6.0 (AQI 25)
    2024-01-01: PM2.5 12.0 and 35.4 (AQI 50 and 100)
    """
    return [
        Reading(timestamp="2024-01-02T09:00", pm2_5=6.0),
        Reading(timestamp="2024-01-01T00:00", pm2_5=12.0),
        Reading(timestamp="2024-01-01T01:00", pm2_5=35.4),
    ]


@pytest.fixture
def sample_hourly():
    """
    Open-Meteo style hourly block for a single day.

    Mirrors the "hourly" object of the air-quality endpoint, including a
    missing value in the middle of the PM2.5 array.
    """
    return {
        "time": ["2024-01-01T00:00", "2024-01-01T01:00", "2024-01-01T02:00"],
        "pm2_5": [12.0, None, 35.4],
        "pm10": [20.0, 30.0, 40.0],
        "ozone": [40.0, 42.0, 44.0],
        "nitrogen_dioxide": [10.0, 12.0, 14.0],
        "sulphur_dioxide": [2.0, 2.0, 2.0],
        "carbon_monoxide": [300.0, 310.0, 320.0],
    }


@pytest.fixture
def weekly_payloads(start_day):
    """
    Hourly payloads for four locations over six days.

    Rising:  PM2.5 AQI 25, 25, 25, 100, 100, 100 (increasing)
    Falling: PM2.5 AQI 100, 100, 100, 25, 25, 25 (decreasing)
    Flat:    PM2.5 AQI 50 every day (stable)
    Offline: no data available
    """
    return {
        "Rising": make_hourly(start_day, [6.0, 6.0, 6.0, 35.4, 35.4, 35.4]),
        "Falling": make_hourly(start_day, [35.4, 35.4, 35.4, 6.0, 6.0, 6.0]),
        "Flat": make_hourly(start_day, [12.0] * 6),
        "Offline": None,
    }
