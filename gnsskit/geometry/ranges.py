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

"""Line of sight, ranges and Doppler"""

from typing import NamedTuple

import numpy as np

from ..core.constants import CLIGHT, FREQ_L1
from ..core.time import GpsTime
from ..satellite.almanac import Almanac, compute_almanac_state
from ..satellite.satellite_position import SatelliteState


class LineOfSight(NamedTuple):
    """Unit vector from receiver to satellite and the distance between them"""
    unit_vector: np.ndarray
    range: float


def line_of_sight(receiver, satellite) -> LineOfSight:
    """
    Compute the line of sight from a receiver to a satellite

    Parameters
    ----------
    receiver : EcefCoordinate or array_like
        Receiver ECEF position (m)
    satellite : EcefCoordinate or array_like
        Satellite ECEF position (m)

    Returns
    -------
    LineOfSight
        ECEF unit vector pointing at the satellite and the geometric range (m)

    Raises
    ------
    ValueError
        If the two positions coincide
    """
    los = np.asarray(satellite, dtype=float) - np.asarray(receiver, dtype=float)
    rng = float(np.linalg.norm(los))
    if rng == 0.0:
        raise ValueError("Receiver and satellite positions coincide")
    return LineOfSight(los / rng, rng)


def geometric_range(receiver, satellite) -> float:
    """Euclidean distance between receiver and satellite (m)"""
    return line_of_sight(receiver, satellite).range


def clock_corrected_range(receiver, state: SatelliteState) -> float:
    """
    Geometric range corrected for the satellite clock

    Parameters
    ----------
    receiver : EcefCoordinate or array_like
        Receiver ECEF position (m)
    state : SatelliteState
        Propagated satellite state

    Returns
    -------
    float
        ``range - c * clock_bias`` (m), the expected pseudorange before
        receiver clock and atmospheric terms
    """
    return geometric_range(receiver, state.position) - CLIGHT * state.clock_bias


def pseudorange_residual(pseudorange: float, receiver, state: SatelliteState) -> float:
    """Measured pseudorange minus the clock corrected range (m)"""
    return pseudorange - clock_corrected_range(receiver, state)


def signal_transit_time(receiver, satellite) -> float:
    """Geometric signal travel time between receiver and satellite (s)"""
    return geometric_range(receiver, satellite) / CLIGHT


def range_rate(receiver, state: SatelliteState, receiver_velocity=None) -> float:
    """
    Rate of change of the geometric range (m/s)

    Parameters
    ----------
    receiver : EcefCoordinate or array_like
        Receiver ECEF position (m)
    state : SatelliteState
        Propagated satellite state
    receiver_velocity : array_like, optional
        Receiver ECEF velocity (m/s), static receiver when omitted

    Returns
    -------
    float
        Positive when the satellite recedes
    """
    los = line_of_sight(receiver, state.position)
    rel_vel = np.asarray(state.velocity, dtype=float)
    if receiver_velocity is not None:
        rel_vel = rel_vel - np.asarray(receiver_velocity, dtype=float)
    return float(los.unit_vector @ rel_vel)


def doppler(receiver, state: SatelliteState, receiver_velocity=None,
            carrier_frequency: float = FREQ_L1) -> float:
    """
    Expected Doppler shift of a satellite signal (Hz)

    Includes the apparent frequency offset of the satellite clock drift.

    Parameters
    ----------
    receiver : EcefCoordinate or array_like
        Receiver ECEF position (m)
    state : SatelliteState
        Propagated satellite state
    receiver_velocity : array_like, optional
        Receiver ECEF velocity (m/s)
    carrier_frequency : float
        Carrier frequency (Hz), GPS L1 by default

    Returns
    -------
    float
        Doppler shift, positive when the satellite approaches
    """
    pseudorange_rate = range_rate(receiver, state, receiver_velocity) - CLIGHT * state.clock_drift
    return -pseudorange_rate * carrier_frequency / CLIGHT


def almanac_doppler(alm: Almanac, t: GpsTime, receiver, receiver_velocity=None,
                    carrier_frequency: float = FREQ_L1) -> float:
    """Expected Doppler shift (Hz) of a satellite evaluated from its almanac"""
    return doppler(receiver, compute_almanac_state(alm, t), receiver_velocity, carrier_frequency)
