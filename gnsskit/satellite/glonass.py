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

"""GLONASS broadcast ephemeris and orbit integration

GLONASS satellites broadcast their PZ-90 position, velocity and lunisolar
acceleration at toe instead of Keplerian elements. The state is carried to
the time of interest by fourth order Runge-Kutta integration of the ICD
equations of motion (central body, J2 and Earth rotation terms).
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
from numba import njit

from ..coordinate.coordinates import EcefCoordinate
from ..core.constants import (
    GLO_FIT_INTERVAL,
    GLO_INTEGRATION_STEP,
    J2_GLO,
    MU_GLO,
    OMGE_GLO,
    RE_GLO,
)
from ..core.time import GpsTime
from .ephemeris import Constellation, EphemerisStatus, FitIntervalMixin
from .satellite_position import SatelliteState, _frozen, earth_rotation_matrix

logger = logging.getLogger(__name__)


def _vector(value) -> tuple:
    x, y, z = (float(v) for v in value)
    return x, y, z


@dataclass(frozen=True)
class GlonassEphemeris(FitIntervalMixin):
    """GLONASS broadcast ephemeris of one satellite

    Attributes
    ----------
    toe : GpsTime
        Reference time of the state vector, converted to GPST
    position : tuple of float
        PZ-90 ECEF position at toe (m)
    velocity : tuple of float
        PZ-90 ECEF velocity at toe (m/s)
    acceleration : tuple of float
        Lunisolar acceleration, held constant over the fit interval (m/s^2)
    gamma : float
        Relative frequency offset of the satellite clock
    tau : float
        Satellite clock offset from GLONASS time (s), subtracted
    d_tau : float
        Delay between L2 and L1 transmissions (s)
    fcn : int
        Frequency channel number
    prn : int
        Orbital slot
    iod : int
        Issue of data
    fit_interval : float
        Validity window centred on toe (s)
    ura : float
        User range accuracy (m)
    health_bits : int
        Broadcast health, 0 when healthy
    valid : bool
        False when the decoder could not produce a consistent record
    """
    toe: GpsTime
    position: tuple
    velocity: tuple
    acceleration: tuple = (0.0, 0.0, 0.0)
    gamma: float = 0.0
    tau: float = 0.0
    d_tau: float = 0.0
    fcn: int = 0
    prn: int = 0
    iod: int = 0
    fit_interval: float = GLO_FIT_INTERVAL
    ura: float = 0.0
    health_bits: int = 0
    valid: bool = True

    def __post_init__(self):
        for name in ('position', 'velocity', 'acceleration'):
            object.__setattr__(self, name, _vector(getattr(self, name)))

    @property
    def constellation(self) -> Constellation:
        return Constellation.GLO

    @property
    def name(self) -> str:
        return f"R{self.prn:02d}"

    @property
    def status(self) -> EphemerisStatus:
        if not self.valid or not all(math.isfinite(v) for v in self.position + self.velocity):
            return EphemerisStatus.INVALID
        if math.hypot(*self.position) == 0.0:
            return EphemerisStatus.INVALID
        if self.toe.week == 0:
            return EphemerisStatus.WN_EQ_0
        if self.fit_interval <= 0:
            return EphemerisStatus.FIT_INTERVAL_EQ_0
        if self.health_bits != 0:
            return EphemerisStatus.UNHEALTHY
        return EphemerisStatus.VALID


@njit(cache=True)
def _derivatives(x, acc, mu, re, j2, omega_e):
    """Time derivative of the PZ-90 state [pos, vel]"""
    r2 = x[0] * x[0] + x[1] * x[1] + x[2] * x[2]
    r3 = r2 * math.sqrt(r2)
    omg2 = omega_e * omega_e
    a = 1.5 * j2 * mu * re * re / r2 / r3
    b = 5.0 * x[2] * x[2] / r2
    c = -mu / r3 - a * (1.0 - b)

    xdot = np.empty(6)
    xdot[0] = x[3]
    xdot[1] = x[4]
    xdot[2] = x[5]
    xdot[3] = (c + omg2) * x[0] + 2.0 * omega_e * x[4] + acc[0]
    xdot[4] = (c + omg2) * x[1] - 2.0 * omega_e * x[3] + acc[1]
    xdot[5] = (c - 2.0 * a) * x[2] + acc[2]
    return xdot


@njit(cache=True)
def _integrate(x0, acc, dt, step, mu, re, j2, omega_e):
    """Runge-Kutta integration of the state over ``dt`` in steps of at most ``step``"""
    x = x0.copy()
    h = step if dt >= 0.0 else -step
    remaining = dt
    while abs(remaining) > 1e-9:
        if abs(remaining) < step:
            h = remaining
        k1 = _derivatives(x, acc, mu, re, j2, omega_e)
        k2 = _derivatives(x + k1 * h / 2.0, acc, mu, re, j2, omega_e)
        k3 = _derivatives(x + k2 * h / 2.0, acc, mu, re, j2, omega_e)
        k4 = _derivatives(x + k3 * h, acc, mu, re, j2, omega_e)
        x = x + (k1 + 2.0 * k2 + 2.0 * k3 + k4) * h / 6.0
        remaining -= h
    return x, _derivatives(x, acc, mu, re, j2, omega_e)[3:]


def glonass_clock(eph: GlonassEphemeris, t: GpsTime) -> tuple:
    """
    GLONASS satellite clock bias and drift

    Returns:
    --------
    dts : float
        ``-tau + gamma * (t - toe)`` (s)
    ddts : float
        ``gamma`` (s/s)
    """
    dt = eph.age(t)
    return -eph.tau + eph.gamma * dt, eph.gamma


def compute_glonass_state(eph: GlonassEphemeris, t: GpsTime, transit_time: float = 0.0,
                          step: float = GLO_INTEGRATION_STEP) -> SatelliteState:
    """
    Compute GLONASS satellite position, velocity and clock

    Parameters:
    -----------
    eph : GlonassEphemeris
        Satellite ephemeris
    t : GpsTime
        Signal transmission time (GPST)
    transit_time : float
        Signal travel time to the receiver (s). When non-zero the state is
        rotated into the ECEF frame at reception time.
    step : float
        Maximum integration step (s)

    Returns:
    --------
    SatelliteState
        Freshly computed satellite state; ``eccentric_anomaly`` is not
        defined for an integrated orbit and is NaN

    Raises:
    -------
    InvalidEphemeris
        Ephemeris flagged invalid, week 0 or zero fit interval
    EphemerisNotYetValid, EphemerisExpired
        ``t`` outside the fit interval
    """
    if not step > 0.0:
        raise ValueError(f"Integration step must be positive, got {step}")
    eph.check_usable(t)
    if eph.status is EphemerisStatus.UNHEALTHY:
        logger.debug(f"Propagating unhealthy ephemeris {eph.name}")

    x0 = np.array(eph.position + eph.velocity)
    x, acc = _integrate(x0, np.array(eph.acceleration), eph.age(t), step,
                        MU_GLO, RE_GLO, J2_GLO, OMGE_GLO)
    pos, vel = x[:3], x[3:]

    if transit_time:
        R = earth_rotation_matrix(OMGE_GLO * transit_time)
        pos = R @ pos
        vel = R @ vel
        acc = R @ acc

    clock_bias, clock_drift = glonass_clock(eph, t)

    return SatelliteState(
        position=EcefCoordinate.from_array(pos),
        velocity=_frozen(vel),
        clock_bias=clock_bias,
        clock_drift=clock_drift,
        computed_at=t,
        acceleration=_frozen(acc),
        eccentric_anomaly=math.nan,
        iode=eph.iod,
        iodc=eph.iod,
    )
