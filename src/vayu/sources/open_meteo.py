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
Open-Meteo air quality data source.

Fetches hourly pollutant concentrations (µg/m³) for a coordinate. This
module sits outside the engine: any failure to retrieve or parse data is
reported to the caller as None, meaning "no input available", which the
engine turns into an empty aggregate.

No API key is required.

API Documentation: https://open-meteo.com/en/docs/air-quality-api
"""

import os
from datetime import date
from logging import getLogger

import requests

from ..decorators import retry_on_network_error
from ..types import HOURLY_FIELDS, HourlyPayload

logger = getLogger(__name__)

# ============================================================================
# CONSTANTS
# ============================================================================

DEFAULT_API_BASE = "https://air-quality-api.open-meteo.com/v1"

# Monitoring locations (latitude, longitude)
LOCATIONS: dict[str, tuple[float, float]] = {
    "Janakpuri": (28.5894, 77.0580),
    "Vasant Kunj": (28.5270, 77.1375),
    "Saket": (28.5260, 77.1798),
    "Mehrauli": (28.5242, 77.1867),
    "Pushp Vihar": (28.5285, 77.1743),
    "Rajouri Garden": (28.6287, 77.1195),
    "Moti Nagar": (28.6491, 77.1277),
    "Rohini": (28.7094, 77.1372),
    "Chattarpur": (28.5270, 77.1871),
    "Tilak Nagar": (28.5962, 77.1075),
    "Dwarka Sector 8": (28.5747, 77.0717),
    "Dwarka Sector 10": (28.5805, 77.0425),
    "Dwarka Sector 21": (28.5523, 77.0583),
}


def _api_base() -> str:
    # Read at call time for testability
    return os.getenv("OPEN_METEO_API_BASE", DEFAULT_API_BASE).rstrip("/")


def get_coordinates(location: str) -> tuple[float, float]:
    """
    Coordinates of a known location.

    Raises:
        ValueError: If the location is not in LOCATIONS
    """
    try:
        return LOCATIONS[location]
    except KeyError:
        raise ValueError(
            f"Invalid location: {location}. Available: {sorted(LOCATIONS)}"
        ) from None


# ============================================================================
# API CLIENT
# ============================================================================


@retry_on_network_error
def fetch_hourly(
    latitude: float,
    longitude: float,
    start_date: date,
    end_date: date,
    timeout: int = 30,
) -> HourlyPayload:
    """
    Fetch hourly concentrations for a coordinate.

    Args:
        latitude: Latitude in decimal degrees
        longitude: Longitude in decimal degrees
        start_date: First day (inclusive)
        end_date: Last day (inclusive)
        timeout: Request timeout in seconds

    Returns:
        HourlyPayload: The "hourly" block of the response, timestamps in the
        location's local time

    Raises:
        requests.HTTPError: If the API returns an error status
        ValueError: If the response has no "hourly" block
    """
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "hourly": ",".join(HOURLY_FIELDS),
        "start_date": start_date.isoformat(),
        "end_date": end_date.isoformat(),
        "timezone": "auto",
    }

    response = requests.get(f"{_api_base()}/air-quality", params=params, timeout=timeout)
    response.raise_for_status()

    data = response.json()
    if "hourly" not in data:
        raise ValueError(f"Open-Meteo response has no hourly data: {list(data)}")

    logger.debug(
        f"Fetched {len(data['hourly'].get('time', []))} hours for "
        f"({latitude}, {longitude})"
    )
    return data["hourly"]


def fetch_location_hourly(
    location: str,
    start_date: date,
    end_date: date,
) -> HourlyPayload | None:
    """
    Fetch hourly concentrations for a named location.

    Args:
        location: Name from LOCATIONS
        start_date: First day (inclusive)
        end_date: Last day (inclusive)

    Returns:
        HourlyPayload, or None when the data could not be retrieved

    Raises:
        ValueError: If the location is unknown
    """
    latitude, longitude = get_coordinates(location)

    try:
        return fetch_hourly(latitude, longitude, start_date, end_date)
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning(f"No data available for {location}: {e}")
        return None


@retry_on_network_error
def fetch_current(latitude: float, longitude: float, timeout: int = 30) -> dict:
    """
    Fetch the latest concentrations for a coordinate.

    Returns:
        dict: The "current" block of the response ("time" plus one key per
        pollutant)

    Raises:
        requests.HTTPError: If the API returns an error status
        ValueError: If the response has no "current" block
    """
    params = {
        "latitude": latitude,
        "longitude": longitude,
        "current": ",".join(HOURLY_FIELDS),
        "timezone": "auto",
    }

    response = requests.get(f"{_api_base()}/air-quality", params=params, timeout=timeout)
    response.raise_for_status()

    data = response.json()
    if "current" not in data:
        raise ValueError(f"Open-Meteo response has no current data: {list(data)}")
    return data["current"]


def fetch_location_current(location: str) -> dict | None:
    """Latest concentrations for a named location, or None on failure."""
    latitude, longitude = get_coordinates(location)

    try:
        return fetch_current(latitude, longitude)
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.warning(f"No current data available for {location}: {e}")
        return None
