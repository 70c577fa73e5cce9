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
US EPA style breakpoint tables.

The AQI uses a 0-500 scale divided into six categories:
good (0-50), moderate (51-100), sensitive (101-150), unhealthy (151-200),
very-unhealthy (201-300), hazardous (301+).

These are the pre-2024 tables (PM2.5 "good" ends at 12.0 µg/m³). Gas tables
are in ppb (O3, NO2, SO2) and ppm (CO); raw µg/m³ values are converted with
the factors in EngineConfig before lookup.

Reference: https://www.airnow.gov/aqi/aqi-basics/
CFR: 40 CFR Appendix G to Part 58
"""

from ..base import Breakpoint, IndexInfo, Pollutant
from . import register_index

# =============================================================================
# Index Metadata
# =============================================================================

INDEX_INFO: IndexInfo = {
    "name": "US EPA Air Quality Index",
    "short_name": "AQI",
    "version": "2012.1",
    "scale_min": 0,
    "description": (
        "EPA-style Air Quality Index with the 2012 PM2.5 breakpoints. "
        "Sub-indices above the top breakpoint are extrapolated, not capped."
    ),
    "url": "https://www.airnow.gov/aqi/aqi-basics/",
}


def _make_breakpoint(
    low_conc: float,
    high_conc: float,
    low_aqi: int,
    high_aqi: int,
) -> Breakpoint:
    return Breakpoint(
        low_conc=low_conc,
        high_conc=high_conc,
        low_aqi=low_aqi,
        high_aqi=high_aqi,
    )


# =============================================================================
# Breakpoints
# =============================================================================

# PM2.5 (µg/m³)
PM25_BREAKPOINTS = (
    _make_breakpoint(0.0, 12.0, 0, 50),
    _make_breakpoint(12.1, 35.4, 51, 100),
    _make_breakpoint(35.5, 55.4, 101, 150),
    _make_breakpoint(55.5, 150.4, 151, 200),
    _make_breakpoint(150.5, 250.4, 201, 300),
    _make_breakpoint(250.5, 500.4, 301, 500),
)

# PM10 (µg/m³)
PM10_BREAKPOINTS = (
    _make_breakpoint(0, 54, 0, 50),
    _make_breakpoint(55, 154, 51, 100),
    _make_breakpoint(155, 254, 101, 150),
    _make_breakpoint(255, 354, 151, 200),
    _make_breakpoint(355, 424, 201, 300),
    _make_breakpoint(425, 604, 301, 500),
)

# O3 (ppb)
O3_BREAKPOINTS = (
    _make_breakpoint(0, 54, 0, 50),
    _make_breakpoint(55, 70, 51, 100),
    _make_breakpoint(71, 85, 101, 150),
    _make_breakpoint(86, 105, 151, 200),
    _make_breakpoint(106, 200, 201, 300),
)

# NO2 (ppb)
NO2_BREAKPOINTS = (
    _make_breakpoint(0, 53, 0, 50),
    _make_breakpoint(54, 100, 51, 100),
    _make_breakpoint(101, 360, 101, 150),
    _make_breakpoint(361, 649, 151, 200),
    _make_breakpoint(650, 1249, 201, 300),
    _make_breakpoint(1250, 2049, 301, 500),
)

# SO2 (ppb)
SO2_BREAKPOINTS = (
    _make_breakpoint(0, 35, 0, 50),
    _make_breakpoint(36, 75, 51, 100),
    _make_breakpoint(76, 185, 101, 150),
    _make_breakpoint(186, 304, 151, 200),
    _make_breakpoint(305, 604, 201, 300),
)

# CO (ppm)
CO_BREAKPOINTS = (
    _make_breakpoint(0.0, 4.4, 0, 50),
    _make_breakpoint(4.5, 9.4, 51, 100),
    _make_breakpoint(9.5, 12.4, 101, 150),
    _make_breakpoint(12.5, 15.4, 151, 200),
    _make_breakpoint(15.5, 30.4, 201, 300),
)

BREAKPOINTS = {
    Pollutant.PM2_5: PM25_BREAKPOINTS,
    Pollutant.PM10: PM10_BREAKPOINTS,
    Pollutant.O3: O3_BREAKPOINTS,
    Pollutant.NO2: NO2_BREAKPOINTS,
    Pollutant.SO2: SO2_BREAKPOINTS,
    Pollutant.CO: CO_BREAKPOINTS,
}

# Register this index
register_index("US_EPA", INDEX_INFO, BREAKPOINTS)
