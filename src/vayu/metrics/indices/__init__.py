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
Breakpoint calibrations.

Each index module provides:
- INDEX_INFO: Metadata about the calibration, including its version
- BREAKPOINTS: One breakpoint table per pollutant

Calibrations register themselves on import. Changing a table changes every
derived value, so a key can only be re-registered under a new version.
"""

import warnings
from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..base import Breakpoint, IndexInfo, Pollutant

BreakpointTables = Mapping["Pollutant", tuple["Breakpoint", ...]]

# Registry of available calibrations
_INDICES: dict[str, "IndexInfo"] = {}
_BREAKPOINTS: dict[str, BreakpointTables] = {}


def register_index(key: str, info: "IndexInfo", breakpoints: BreakpointTables) -> None:
    """
    Register a breakpoint calibration.

    Args:
        key: Index key (case-insensitive), e.g. "US_EPA"
        info: Index metadata; info["version"] identifies the tables
        breakpoints: Breakpoint table per pollutant

    Raises:
        ValueError: If the key is already registered with the same version,
            or a table is empty or out of order
    """
    from ..base import POLLUTANT_PRIORITY

    key = key.upper()

    missing = [p.label for p in POLLUTANT_PRIORITY if p not in breakpoints]
    if missing:
        raise ValueError(f"Index '{key}' has no breakpoints for {missing}")

    for pollutant, table in breakpoints.items():
        _check_table(key, pollutant, table)

    existing = _INDICES.get(key)
    if existing is not None:
        if existing["version"] == info["version"]:
            raise ValueError(
                f"Index '{key}' is already registered at version "
                f"{info['version']!r}. Register replacement tables under a new version."
            )
        warnings.warn(
            f"Index '{key}' version {existing['version']!r} replaced by {info['version']!r}",
            UserWarning,
            stacklevel=2,
        )

    _INDICES[key] = info
    _BREAKPOINTS[key] = {p: tuple(t) for p, t in breakpoints.items()}


def _check_table(key: str, pollutant, table) -> None:
    if not table:
        raise ValueError(f"Index '{key}' has an empty table for {pollutant}")

    previous_high = None
    for bp in table:
        if bp["low_conc"] > bp["high_conc"] or bp["low_aqi"] >= bp["high_aqi"]:
            raise ValueError(f"Index '{key}' has a malformed breakpoint for {pollutant}: {bp}")
        if previous_high is not None and bp["low_conc"] <= previous_high:
            raise ValueError(f"Index '{key}' has overlapping breakpoints for {pollutant}")
        previous_high = bp["high_conc"]


def get_index(key: str) -> "IndexInfo | None":
    """Get info about a registered calibration."""
    return _INDICES.get(key.upper())


def get_breakpoints(key: str) -> BreakpointTables:
    """
    Get the breakpoint tables of a registered calibration.

    Raises:
        ValueError: If the key is not registered
    """
    try:
        return _BREAKPOINTS[key.upper()]
    except KeyError:
        raise ValueError(
            f"Unknown index '{key}'. Available: {list_indices()}"
        ) from None


def list_indices() -> list[str]:
    """List all registered index keys."""
    return list(_INDICES.keys())


# Import indices to trigger registration
from . import us_epa  # noqa: E402, F401
