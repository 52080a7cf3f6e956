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

"""Satellite clock computation and correction"""

import math

from ..core.constants import CLIGHT
from ..core.time import GpsTime, difference
from .ephemeris import BroadcastEphemeris
from .kepler import KeplerOptions, eccentric_anomaly


def relativistic_constant(mu: float) -> float:
    """F = -2 sqrt(mu) / c^2 (s/m^1/2)"""
    return -2.0 * math.sqrt(mu) / CLIGHT**2


def clock_correction(eph: BroadcastEphemeris, t: GpsTime, E: float, n: float,
                     relativistic: bool = True) -> tuple[float, float]:
    """
    Satellite clock bias and drift for a known eccentric anomaly

    Parameters:
    -----------
    eph : BroadcastEphemeris
        Satellite ephemeris
    t : GpsTime
        Time of interest
    E : float
        Eccentric anomaly at ``t`` (rad)
    n : float
        Corrected mean motion (rad/s)
    relativistic : bool
        Add the eccentricity relativistic term

    Returns:
    --------
    dts : float
        Satellite clock bias (s)
    ddts : float
        Satellite clock drift (s/s)
    """
    # Time from clock reference epoch
    dt = difference(t, eph.toc)

    # Clock bias (polynomial model)
    dts = eph.af0 + eph.af1 * dt + eph.af2 * dt**2

    # Clock drift
    ddts = eph.af1 + 2.0 * eph.af2 * dt

    if relativistic:
        F = relativistic_constant(eph.constellation.mu)
        dts += F * eph.ecc * eph.sqrta * math.sin(E)

        dE_dt = n / (1.0 - eph.ecc * math.cos(E))
        ddts += F * eph.ecc * eph.sqrta * math.cos(E) * dE_dt

    return dts, ddts


def compute_satellite_clock(eph: BroadcastEphemeris, t: GpsTime, relativistic: bool = True,
                            options: KeplerOptions = None) -> tuple[float, float]:
    """
    Compute satellite clock bias and drift

    Parameters:
    -----------
    eph : BroadcastEphemeris
        Satellite ephemeris
    t : GpsTime
        Time of interest (GPST)
    relativistic : bool
        Add the eccentricity relativistic term
    options : KeplerOptions, optional
        Kepler solver settings

    Returns:
    --------
    dts : float
        Satellite clock bias (s)
    ddts : float
        Satellite clock drift (s/s)
    """
    eph.check_usable(t)
    E, n = eccentric_anomaly(eph, difference(t, eph.toe), options)
    return clock_correction(eph, t, E, n, relativistic)
