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

"""Satellite position computation from ephemeris"""

import logging
import math
from dataclasses import dataclass

import numpy as np
from numba import njit

from ..coordinate.coordinates import EcefCoordinate
from ..core.constants import J2, RE_WGS84
from ..core.time import GpsTime, difference
from .clock import clock_correction
from .ephemeris import BroadcastEphemeris, EphemerisStatus
from .kepler import KeplerOptions, eccentric_anomaly

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class SatelliteState:
    """Satellite state evaluated from an ephemeris

    Attributes
    ----------
    position : EcefCoordinate
        Satellite position (m)
    velocity : np.ndarray
        Satellite ECEF velocity (m/s)
    clock_bias : float
        Satellite clock error (s)
    clock_drift : float
        Satellite clock error rate (s/s)
    computed_at : GpsTime
        Time the state was evaluated for
    acceleration : np.ndarray
        Satellite ECEF acceleration from a point mass + J2 force model (m/s^2)
    eccentric_anomaly : float
        Eccentric anomaly at ``computed_at`` (rad)
    iode, iodc : int
        Issue of data of the source ephemeris
    """
    position: EcefCoordinate
    velocity: np.ndarray
    clock_bias: float
    clock_drift: float
    computed_at: GpsTime
    acceleration: np.ndarray
    eccentric_anomaly: float = 0.0
    iode: int = 0
    iodc: int = 0


@njit(cache=True)
def _orbit_kernel(A, n, ecc, E, w, tk, toe_tow, omega0, omegadot, inc, inc_dot,
                  crs, crc, cus, cuc, cis, cic, mu, omega_e, re, j2):
    """Position, velocity and acceleration of a Keplerian broadcast orbit"""
    sin_E = math.sin(E)
    cos_E = math.cos(E)
    den = 1.0 - ecc * cos_E
    sq1me2 = math.sqrt(1.0 - ecc * ecc)

    # true anomaly and argument of latitude
    v = math.atan2(sq1me2 * sin_E, cos_E - ecc)
    phi = v + w
    cos2phi = math.cos(2.0 * phi)
    sin2phi = math.sin(2.0 * phi)

    # corrected argument of latitude, radius and inclination
    u = phi + cus * sin2phi + cuc * cos2phi
    r = A * den + crs * sin2phi + crc * cos2phi
    i = inc + inc_dot * tk + cis * sin2phi + cic * cos2phi
    Omega = omega0 + (omegadot - omega_e) * tk - omega_e * toe_tow

    cos_u = math.cos(u)
    sin_u = math.sin(u)
    cos_i = math.cos(i)
    sin_i = math.sin(i)
    cos_O = math.cos(Omega)
    sin_O = math.sin(Omega)

    # rates
    E_dot = n / den
    v_dot = E_dot * sq1me2 / den
    i_dot = inc_dot + 2.0 * v_dot * (cis * cos2phi - cic * sin2phi)
    u_dot = v_dot * (1.0 + 2.0 * (cus * cos2phi - cuc * sin2phi))
    r_dot = ecc * A * E_dot * sin_E + 2.0 * v_dot * (crs * cos2phi - crc * sin2phi)
    O_dot = omegadot - omega_e

    # position in orbital plane and ECEF
    xo = r * cos_u
    yo = r * sin_u
    x = xo * cos_O - yo * cos_i * sin_O
    y = xo * sin_O + yo * cos_i * cos_O
    z = yo * sin_i

    # velocity
    xo_dot = r_dot * cos_u - r * u_dot * sin_u
    yo_dot = r_dot * sin_u + r * u_dot * cos_u
    vx = -(xo * O_dot * sin_O) + (xo_dot * cos_O) - (yo_dot * sin_O * cos_i) \
        - (yo * (O_dot * cos_O * cos_i - i_dot * sin_O * sin_i))
    vy = (xo * O_dot * cos_O) + (xo_dot * sin_O) + (yo_dot * cos_O * cos_i) \
        - (yo * (O_dot * sin_O * cos_i + i_dot * cos_O * sin_i))
    vz = (yo_dot * sin_i) + (yo * i_dot * cos_i)

    # acceleration in the rotating frame
    rk = math.sqrt(x * x + y * y + z * z)
    F = -1.5 * j2 * (mu / rk**2) * (re / rk)**2
    tmp1 = -mu / rk**3
    tmp2 = 5.0 * (z / rk)**2
    tmp3 = omega_e * omega_e
    ax = tmp1 * x + F * (1.0 - tmp2) * (x / rk) + 2.0 * vy * omega_e + x * tmp3
    ay = tmp1 * y + F * (1.0 - tmp2) * (y / rk) - 2.0 * vx * omega_e + y * tmp3
    az = tmp1 * z + F * (3.0 - tmp2) * (z / rk)

    pos = np.array([x, y, z])
    vel = np.array([vx, vy, vz])
    acc = np.array([ax, ay, az])
    return pos, vel, acc


def earth_rotation_matrix(angle: float) -> np.ndarray:
    """Rotation of ECEF coordinates about z by ``angle`` (frame rotation, rad)"""
    c = math.cos(angle)
    s = math.sin(angle)
    return np.array([
        [c, s, 0.0],
        [-s, c, 0.0],
        [0.0, 0.0, 1.0]
    ])


def _frozen(vec: np.ndarray) -> np.ndarray:
    vec = np.array(vec, dtype=float)
    vec.flags.writeable = False
    return vec


def compute_satellite_state(eph: BroadcastEphemeris, t: GpsTime, transit_time: float = 0.0,
                            options: KeplerOptions = None,
                            relativistic: bool = True) -> SatelliteState:
    """
    Compute satellite position, velocity and clock from a broadcast ephemeris

    Parameters:
    -----------
    eph : BroadcastEphemeris
        Satellite ephemeris
    t : GpsTime
        Signal transmission time (GPST)
    transit_time : float
        Signal travel time to the receiver (s). When non-zero the state is
        rotated into the ECEF frame at reception time.
    options : KeplerOptions, optional
        Kepler solver settings
    relativistic : bool
        Add the eccentricity relativistic clock term

    Returns:
    --------
    SatelliteState
        Freshly computed satellite state

    Raises:
    -------
    InvalidEphemeris
        Ephemeris flagged invalid, week 0 or zero fit interval
    EphemerisNotYetValid, EphemerisExpired
        ``t`` outside the fit interval
    PropagationDidNotConverge
        Kepler iteration failed
    """
    eph.check_usable(t)
    if eph.status is EphemerisStatus.UNHEALTHY:
        logger.debug(f"Propagating unhealthy ephemeris {eph.constellation.value}{eph.prn:02d}")

    tk = difference(t, eph.toe)
    E, n = eccentric_anomaly(eph, tk, options)

    constellation = eph.constellation
    pos, vel, acc = _orbit_kernel(
        eph.A, n, eph.ecc, E, eph.w, tk, constellation.time_of_week(eph.toe),
        eph.omega0, eph.omegadot, eph.inc, eph.inc_dot,
        eph.crs, eph.crc, eph.cus, eph.cuc, eph.cis, eph.cic,
        constellation.mu, constellation.omega_e, RE_WGS84, J2)

    if transit_time:
        R = earth_rotation_matrix(constellation.omega_e * transit_time)
        pos = R @ pos
        vel = R @ vel
        acc = R @ acc

    clock_bias, clock_drift = clock_correction(eph, t, E, n, relativistic)

    return SatelliteState(
        position=EcefCoordinate.from_array(pos),
        velocity=_frozen(vel),
        clock_bias=clock_bias,
        clock_drift=clock_drift,
        computed_at=t,
        acceleration=_frozen(acc),
        eccentric_anomaly=E,
        iode=eph.iode,
        iodc=eph.iodc,
    )


def compute_satellite_position(eph: BroadcastEphemeris, t: GpsTime, transit_time: float = 0.0,
                               options: KeplerOptions = None) -> EcefCoordinate:
    """Compute satellite ECEF position only"""
    return compute_satellite_state(eph, t, transit_time, options).position
