# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Geometry utilities for GNSS processing.

Modules
-------
ranges : module
    Line of sight, geometric and clock corrected range, range rate, Doppler
    (also from an almanac)
elevation : module
    Satellite elevation and azimuth in the receiver's local frame, from an
    ephemeris or an almanac

Examples
--------
>>> from gnsskit.geometry import elevation_azimuth, clock_corrected_range
>>> el, az = elevation_azimuth(receiver, state.position)
>>> rho = clock_corrected_range(receiver, state)
"""

from .elevation import (
    AZIMUTH_UNDEFINED,
    almanac_elevation_azimuth,
    elevation_azimuth,
    satellite_elevation_azimuth,
)
from .ranges import (
    LineOfSight,
    almanac_doppler,
    clock_corrected_range,
    doppler,
    geometric_range,
    line_of_sight,
    pseudorange_residual,
    range_rate,
    signal_transit_time,
)

__all__ = [
    'AZIMUTH_UNDEFINED',
    'LineOfSight',
    'almanac_doppler',
    'almanac_elevation_azimuth',
    'clock_corrected_range',
    'doppler',
    'elevation_azimuth',
    'geometric_range',
    'line_of_sight',
    'pseudorange_residual',
    'range_rate',
    'satellite_elevation_azimuth',
    'signal_transit_time',
]
