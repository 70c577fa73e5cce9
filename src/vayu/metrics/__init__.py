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
Air Quality Index calculations.

This package holds the numeric core of Vayu: sub-index interpolation,
unit conversion, category classification and the composite resolver, plus
the registry of breakpoint tables they read from.

Supported Indices:
    - US_EPA: EPA-style AQI (0-500 scale, extrapolated above 500)

Quick Start:
    >>> from vayu import metrics
    >>> from vayu.metrics import Pollutant
    >>>
    >>> metrics.pollutant_sub_index(12.0, Pollutant.PM2_5)
    50
    >>> metrics.classify(51)
    'moderate'
    >>>
    >>> # One row per reading, with every sub-index
    >>> frame = metrics.aqi_timeseries(readings)
    >>>
    >>> # List available indices
    >>> metrics.list_indices()
    ['US_EPA']
"""

from collections.abc import Iterable

import pandas as pd

from .base import (
    CATEGORY_ORDER,
    CONVERSION_FACTORS,
    POLLUTANT_PRIORITY,
    Breakpoint,
    CompositeResult,
    IndexInfo,
    Pollutant,
    Reading,
    calculate_aqi_from_breakpoints,
    category_severity,
    classify,
    composite_for_reading,
    convert_concentration,
    is_concentration,
    pollutant_sub_index,
    reading_sub_indices,
    resolve_composite,
    round_half_up,
    standardise_pollutant,
    sub_index,
)
from .indices import get_breakpoints, get_index, register_index
from .indices import list_indices as _list_indices

__all__ = [
    # Main API functions
    "aqi_timeseries",
    "list_indices",
    "get_index_info",
    "register_index",
    "get_breakpoints",
    # Calculations
    "sub_index",
    "calculate_aqi_from_breakpoints",
    "pollutant_sub_index",
    "convert_concentration",
    "is_concentration",
    "round_half_up",
    "classify",
    "category_severity",
    "resolve_composite",
    "reading_sub_indices",
    "composite_for_reading",
    "standardise_pollutant",
    # Types and constants
    "Pollutant",
    "POLLUTANT_PRIORITY",
    "Breakpoint",
    "IndexInfo",
    "Reading",
    "CompositeResult",
    "CATEGORY_ORDER",
    "CONVERSION_FACTORS",
]


def list_indices() -> list[str]:
    """
    List all registered AQI indices.

    Example:
        >>> metrics.list_indices()
        ['US_EPA']
    """
    return _list_indices()


def get_index_info(index: str) -> IndexInfo | None:
    """
    Get detailed information about an AQI index.

    Args:
        index: Index key (e.g., "US_EPA")

    Returns:
        IndexInfo dict with name, short_name, version, scale_min,
        description and url, or None if the index is not registered
    """
    return get_index(index)


def aqi_timeseries(
    readings: Iterable[Reading],
    config=None,
    exclude: Iterable[Pollutant] = (),
) -> pd.DataFrame:
    """
    Calculate the AQI of every reading as a table.

    Args:
        readings: Readings in any order
        config: Engine configuration (defaults to DEFAULT_CONFIG)
        exclude: Pollutants left out of the composite

    Returns:
        DataFrame with columns:
            timestamp, {pollutant}_aqi for each pollutant, aqi, category,
            dominant_pollutant

        Sub-indices of excluded pollutants are still reported; only the
        composite ignores them. A reading with nothing computable has aqi 0.

    Example:
        >>> ts = metrics.aqi_timeseries(readings, exclude=[Pollutant.PM10])
        >>> ts.set_index("timestamp")["aqi"].plot()
    """
    excluded = set(exclude)
    rows = []
    dominants = []

    for reading in readings:
        sub_indices = reading_sub_indices(reading, config)
        composite = resolve_composite(
            {p: v for p, v in sub_indices.items() if p not in excluded}
        )

        row = {"timestamp": reading.timestamp}
        row.update({f"{p.value}_aqi": sub_indices[p] for p in POLLUTANT_PRIORITY})
        row["aqi"] = composite.aqi
        row["category"] = composite.category
        rows.append(row)
        dominants.append(
            composite.dominant_pollutant.label
            if composite.dominant_pollutant
            else None
        )

    columns = (
        ["timestamp"]
        + [f"{p.value}_aqi" for p in POLLUTANT_PRIORITY]
        + ["aqi", "category", "dominant_pollutant"]
    )
    frame = pd.DataFrame(rows, columns=columns)
    # object dtype keeps None as the missing marker instead of NaN
    frame["dominant_pollutant"] = pd.Series(dominants, index=frame.index, dtype=object)
    return frame
