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
Elevation and azimuth computation for GNSS satellites.

The line of sight from the receiver to the satellite is rotated into the
local North-East-Down frame at the receiver. Elevation is measured from the
local horizontal plane, positive upward; azimuth is measured clockwise from
north in [0, 2π).

Directly overhead or underfoot the azimuth has no meaning. In that case
elevation is exactly ±π/2 and azimuth is :data:`AZIMUTH_UNDEFINED` (NaN);
callers test for it with ``math.isnan``.
"""

import math

from ..coordinate.ellipsoid import WGS84, Ellipsoid
from ..coordinate.transforms import ecef_vector_to_ned
from ..coordinate.wrap import wrap_to_2pi
from ..core.time import GpsTime
from ..satellite.almanac import Almanac, compute_almanac_state
from ..satellite.ephemeris import BroadcastEphemeris
from ..satellite.kepler import KeplerOptions
from ..satellite.satellite_position import compute_satellite_position
from .ranges import line_of_sight

AZIMUTH_UNDEFINED = math.nan

# horizontal/range ratio below which the satellite is treated as vertical
VERTICAL_THRESHOLD = 1e-9


def elevation_azimuth(receiver, satellite, ellipsoid: Ellipsoid = WGS84) -> tuple[float, float]:
    """
    Compute the elevation and azimuth of a satellite seen from a receiver.

    Parameters
    ----------
    receiver : EcefCoordinate or array_like
        Receiver position in ECEF coordinates [m].
    satellite : EcefCoordinate or array_like
        Satellite position in ECEF coordinates [m].
    ellipsoid : Ellipsoid
        Ellipsoid defining the local vertical, WGS84 by default.

    Returns
    -------
    elevation : float
        Elevation angle in radians, [-π/2, π/2].
    azimuth : float
        Azimuth in radians, [0, 2π), or AZIMUTH_UNDEFINED at zenith/nadir.

    Raises
    ------
    ValueError
        If receiver and satellite coincide.

    Examples
    --------
    >>> import numpy as np
    >>> rcv = np.array([-2694685.473, -4293642.366, 3857878.924])
    >>> sat = np.array([-15359024.3, -10524568.9, 18984520.9])
    >>> el, az = elevation_azimuth(rcv, sat)
    """
    los = line_of_sight(receiver, satellite)
    ned = ecef_vector_to_ned(los.unit_vector, receiver, ellipsoid)

    horizontal = math.hypot(ned.north, ned.east)
    if horizontal <= VERTICAL_THRESHOLD:
        return math.copysign(0.5 * math.pi, -ned.down), AZIMUTH_UNDEFINED

    elevation = math.atan2(-ned.down, horizontal)
    azimuth = float(wrap_to_2pi(math.atan2(ned.east, ned.north)))
    return elevation, azimuth


def satellite_elevation_azimuth(eph: BroadcastEphemeris, t: GpsTime, receiver,
                                ellipsoid: Ellipsoid = WGS84,
                                options: KeplerOptions = None) -> tuple[float, float]:
    """Propagate an ephemeris to ``t`` and return its (elevation, azimuth) from ``receiver``"""
    position = compute_satellite_position(eph, t, options=options)
    return elevation_azimuth(receiver, position, ellipsoid)


def almanac_elevation_azimuth(alm: Almanac, t: GpsTime, receiver,
                              ellipsoid: Ellipsoid = WGS84) -> tuple[float, float]:
    """Evaluate an almanac at ``t`` and return its (elevation, azimuth) from ``receiver``"""
    position = compute_almanac_state(alm, t).position
    return elevation_azimuth(receiver, position, ellipsoid)
