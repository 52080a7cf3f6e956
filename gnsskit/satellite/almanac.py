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

"""Satellite almanacs

An almanac describes a satellite orbit coarsely but stays usable for days.
It is meant for visibility planning and acquisition aiding; positioning
should use the broadcast ephemeris. Keplerian almanacs are evaluated with
the broadcast orbit model and all harmonic corrections set to zero. XYZ
almanacs are extrapolated from a state vector under constant acceleration.
"""

import logging
import math
from dataclasses import dataclass
from typing import Union

import numpy as np

from ..coordinate.coordinates import EcefCoordinate
from ..core.constants import ALMANAC_FIT_INTERVAL
from ..core.exceptions import UnsupportedConstellation
from ..core.time import GpsTime
from .ephemeris import BroadcastEphemeris, Constellation, EphemerisStatus, FitIntervalMixin
from .satellite_position import (
    SatelliteState,
    _frozen,
    compute_satellite_state,
    earth_rotation_matrix,
)

logger = logging.getLogger(__name__)

# constellations whose almanac formats are handled
ALMANAC_CONSTELLATIONS = (Constellation.GPS, Constellation.QZS, Constellation.SBAS)


@dataclass(frozen=True)
class KeplerAlmanacTerms:
    """Keplerian almanac orbit, angles in radians and rates in rad/s"""
    m0: float
    ecc: float
    sqrta: float
    omega0: float
    omegadot: float
    w: float
    inc: float
    af0: float = 0.0
    af1: float = 0.0


@dataclass(frozen=True)
class XyzAlmanacTerms:
    """ECEF position (m), velocity (m/s) and acceleration (m/s^2) at toa"""
    position: tuple
    velocity: tuple
    acceleration: tuple = (0.0, 0.0, 0.0)

    def __post_init__(self):
        for name in ('position', 'velocity', 'acceleration'):
            x, y, z = (float(v) for v in getattr(self, name))
            object.__setattr__(self, name, (x, y, z))


AlmanacTerms = Union[KeplerAlmanacTerms, XyzAlmanacTerms]


@dataclass(frozen=True)
class Almanac(FitIntervalMixin):
    """Almanac of one satellite

    Attributes
    ----------
    toa : GpsTime
        Reference time of the almanac
    terms : KeplerAlmanacTerms or XyzAlmanacTerms
        Orbit description
    constellation : Constellation
        GPS, QZSS or SBAS
    prn : int
        Satellite PRN
    ura : float
        User range accuracy (m)
    fit_interval : float
        Validity window centred on toa (s)
    health_bits : int
        Broadcast health, 0 when healthy
    valid : bool
        False when the decoder could not produce a consistent record

    Raises
    ------
    UnsupportedConstellation
        Constellation has no almanac format handled here
    """
    toa: GpsTime
    terms: AlmanacTerms
    constellation: Constellation = Constellation.GPS
    prn: int = 0
    ura: float = 0.0
    fit_interval: float = ALMANAC_FIT_INTERVAL
    health_bits: int = 0
    valid: bool = True

    def __post_init__(self):
        if self.constellation not in ALMANAC_CONSTELLATIONS:
            raise UnsupportedConstellation(
                f"Unsupported almanac constellation {self.constellation.value}",
                constellation=self.constellation)
        if not isinstance(self.terms, (KeplerAlmanacTerms, XyzAlmanacTerms)):
            raise TypeError(f"Unknown almanac terms {type(self.terms).__name__}")
        if self.constellation is Constellation.SBAS and self.is_kepler:
            raise UnsupportedConstellation("SBAS almanacs carry XYZ terms",
                                           constellation=self.constellation)

    @property
    def toe(self) -> GpsTime:
        return self.toa

    @property
    def name(self) -> str:
        return f"{self.constellation.value}{self.prn:02d}"

    @property
    def is_kepler(self) -> bool:
        return isinstance(self.terms, KeplerAlmanacTerms)

    @property
    def status(self) -> EphemerisStatus:
        if not self.valid:
            return EphemerisStatus.INVALID
        if self.is_kepler:
            if not 0.0 <= self.terms.ecc < 1.0 or not self.terms.sqrta > 0.0:
                return EphemerisStatus.INVALID
        elif not all(math.isfinite(v) for v in self.terms.position + self.terms.velocity):
            return EphemerisStatus.INVALID
        if self.toa.week == 0:
            return EphemerisStatus.WN_EQ_0
        if self.fit_interval <= 0:
            return EphemerisStatus.FIT_INTERVAL_EQ_0
        if self.health_bits != 0:
            return EphemerisStatus.UNHEALTHY
        return EphemerisStatus.VALID

    def to_ephemeris(self) -> BroadcastEphemeris:
        """Keplerian almanac as a broadcast ephemeris without corrections"""
        if not self.is_kepler:
            raise TypeError(f"Almanac {self.name} carries XYZ terms")
        k = self.terms
        return BroadcastEphemeris(
            toe=self.toa, toc=self.toa, sqrta=k.sqrta, ecc=k.ecc, inc=k.inc, inc_dot=0.0,
            omega0=k.omega0, omegadot=k.omegadot, w=k.w, m0=k.m0, dn=0.0,
            af0=k.af0, af1=k.af1, fit_interval=self.fit_interval,
            constellation=self.constellation, prn=self.prn, ura=self.ura,
            health_bits=self.health_bits, valid=self.valid)


def _xyz_state(alm: Almanac, t: GpsTime, transit_time: float) -> SatelliteState:
    terms = alm.terms
    dt = alm.age(t)
    acc = np.array(terms.acceleration)
    vel = np.array(terms.velocity) + acc * dt
    pos = np.array(terms.position) + np.array(terms.velocity) * dt + 0.5 * acc * dt * dt

    if transit_time:
        R = earth_rotation_matrix(alm.constellation.omega_e * transit_time)
        pos = R @ pos
        vel = R @ vel
        acc = R @ acc

    return SatelliteState(
        position=EcefCoordinate.from_array(pos),
        velocity=_frozen(vel),
        clock_bias=0.0,
        clock_drift=0.0,
        computed_at=t,
        acceleration=_frozen(acc),
        eccentric_anomaly=math.nan,
    )


def compute_almanac_state(alm: Almanac, t: GpsTime, transit_time: float = 0.0) -> SatelliteState:
    """
    Compute coarse satellite position, velocity and clock from an almanac

    Parameters:
    -----------
    alm : Almanac
        Satellite almanac
    t : GpsTime
        Time of interest (GPST)
    transit_time : float
        Signal travel time to the receiver (s)

    Returns:
    --------
    SatelliteState
        Satellite state; XYZ almanacs carry no clock terms and their
        ``eccentric_anomaly`` is NaN

    Raises:
    -------
    InvalidEphemeris
        Almanac flagged invalid, week 0 or zero fit interval
    EphemerisNotYetValid, EphemerisExpired
        ``t`` outside the fit interval
    """
    alm.check_usable(t)
    if alm.status is EphemerisStatus.UNHEALTHY:
        logger.debug(f"Evaluating unhealthy almanac {alm.name}")

    if alm.is_kepler:
        return compute_satellite_state(alm.to_ephemeris(), t, transit_time)
    return _xyz_state(alm, t, transit_time)
