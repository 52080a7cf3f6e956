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

"""Broadcast ephemeris records, validation and selection"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from ..core.constants import (
    DEFAULT_FIT_INTERVAL,
    MU_BDS,
    MU_GAL,
    MU_GLO,
    MU_GPS,
    OMGE_BDS,
    OMGE_GAL,
    OMGE_GLO,
    OMGE_GPS,
)
from ..core.exceptions import EphemerisExpired, EphemerisNotYetValid, InvalidEphemeris
from ..core.time import GpsTime, difference

logger = logging.getLogger(__name__)


class Constellation(Enum):
    """Supported constellations

    GLONASS and SBAS broadcast state vectors, the others Keplerian elements.
    """
    GPS = "GPS"
    GAL = "GAL"
    BDS = "BDS"
    QZS = "QZS"
    GLO = "GLO"
    SBAS = "SBAS"

    @property
    def mu(self) -> float:
        """Gravitational constant used by the constellation's ICD (m^3/s^2)"""
        return _ORBIT_CONSTANTS[self][0]

    @property
    def omega_e(self) -> float:
        """Earth rotation rate used by the constellation's ICD (rad/s)"""
        return _ORBIT_CONSTANTS[self][1]

    def time_of_week(self, t: GpsTime) -> float:
        """Time of week of ``t`` in the constellation's own time scale"""
        if self is Constellation.BDS:
            return t.to_beidou().tow
        return t.tow


_ORBIT_CONSTANTS = {
    Constellation.GPS: (MU_GPS, OMGE_GPS),
    Constellation.QZS: (MU_GPS, OMGE_GPS),
    Constellation.GAL: (MU_GAL, OMGE_GAL),
    Constellation.BDS: (MU_BDS, OMGE_BDS),
    Constellation.GLO: (MU_GLO, OMGE_GLO),
    Constellation.SBAS: (MU_GPS, OMGE_GPS),
}


class EphemerisStatus(Enum):
    """Time-independent usability of an ephemeris"""
    INVALID = 1
    WN_EQ_0 = 2
    FIT_INTERVAL_EQ_0 = 3
    UNHEALTHY = 4
    VALID = 5


# statuses that cannot be propagated at all
UNUSABLE_STATUSES = (
    EphemerisStatus.INVALID,
    EphemerisStatus.WN_EQ_0,
    EphemerisStatus.FIT_INTERVAL_EQ_0,
)


class FitIntervalMixin:
    """Validity checks shared by ephemeris records

    Subclasses provide ``toe``, ``fit_interval``, ``health_bits``, ``status``
    and ``name``.
    """

    @property
    def is_healthy(self) -> bool:
        return self.health_bits == 0

    def age(self, t: GpsTime) -> float:
        """Signed time from toe to ``t`` (s)"""
        return difference(t, self.toe)

    def check_usable(self, t: GpsTime) -> None:
        """
        Raise unless the ephemeris can be propagated to ``t``

        The fit interval edges are inclusive.

        Raises
        ------
        InvalidEphemeris
            Status is INVALID, WN_EQ_0 or FIT_INTERVAL_EQ_0
        EphemerisNotYetValid
            ``t`` precedes the start of the fit interval
        EphemerisExpired
            ``t`` follows the end of the fit interval
        """
        status = self.status
        if status in UNUSABLE_STATUSES:
            raise InvalidEphemeris(f"Ephemeris {self.name} unusable: {status.name}",
                                   status=status)

        dt = self.age(t)
        half = 0.5 * self.fit_interval
        if dt < -half:
            raise EphemerisNotYetValid(
                f"{t} is {-dt - half:.1f} s before the fit interval of toe {self.toe}",
                time=t, toe=self.toe, fit_interval=self.fit_interval)
        if dt > half:
            raise EphemerisExpired(
                f"{t} is {dt - half:.1f} s after the fit interval of toe {self.toe}",
                time=t, toe=self.toe, fit_interval=self.fit_interval)

    def is_valid_at(self, t: GpsTime) -> bool:
        """True if the ephemeris is usable and ``t`` lies inside its fit interval"""
        try:
            self.check_usable(t)
        except InvalidEphemeris:
            return False
        return True


@dataclass(frozen=True)
class BroadcastEphemeris(FitIntervalMixin):
    """Keplerian broadcast ephemeris of one satellite

    Angles are in radians, rates in rad/s, lengths in meters and times in
    seconds, as delivered by a navigation message decoder.

    Attributes
    ----------
    toe : GpsTime
        Reference time of ephemeris
    toc : GpsTime
        Reference time of clock
    sqrta : float
        Square root of the semi-major axis (m^1/2)
    ecc : float
        Eccentricity
    inc : float
        Inclination at reference time
    inc_dot : float
        Rate of inclination
    omega0 : float
        Longitude of ascending node at weekly epoch
    omegadot : float
        Rate of right ascension
    w : float
        Argument of perigee
    m0 : float
        Mean anomaly at reference time
    dn : float
        Mean motion difference
    crs, crc : float
        Sine/cosine harmonic corrections to the orbit radius (m)
    cus, cuc : float
        Sine/cosine harmonic corrections to the argument of latitude
    cis, cic : float
        Sine/cosine harmonic corrections to the inclination
    af0, af1, af2 : float
        Clock bias (s), drift (s/s) and drift rate (s/s^2)
    fit_interval : float
        Validity window centred on toe (s)
    constellation : Constellation
        Broadcasting constellation
    prn : int
        Satellite PRN
    iode, iodc : int
        Issue of data, ephemeris and clock
    ura : float
        User range accuracy (m)
    tgd : float
        Group delay (s)
    health_bits : int
        Broadcast health, 0 when healthy
    valid : bool
        False when the decoder could not produce a consistent record
    """
    toe: GpsTime
    toc: GpsTime
    sqrta: float
    ecc: float
    inc: float
    inc_dot: float
    omega0: float
    omegadot: float
    w: float
    m0: float
    dn: float
    crs: float = 0.0
    crc: float = 0.0
    cus: float = 0.0
    cuc: float = 0.0
    cis: float = 0.0
    cic: float = 0.0
    af0: float = 0.0
    af1: float = 0.0
    af2: float = 0.0
    fit_interval: float = DEFAULT_FIT_INTERVAL
    constellation: Constellation = Constellation.GPS
    prn: int = 0
    iode: int = 0
    iodc: int = 0
    ura: float = 0.0
    tgd: float = 0.0
    health_bits: int = 0
    valid: bool = True

    @property
    def A(self) -> float:
        """Semi-major axis (m)"""
        return self.sqrta * self.sqrta

    @property
    def name(self) -> str:
        return f"{self.constellation.value}{self.prn:02d}"

    @property
    def status(self) -> EphemerisStatus:
        # state vector broadcasts, see GlonassEphemeris
        if self.constellation in (Constellation.GLO, Constellation.SBAS):
            return EphemerisStatus.INVALID
        if not self.valid or not 0.0 <= self.ecc < 1.0 or not self.sqrta > 0.0:
            return EphemerisStatus.INVALID
        if self.toe.week == 0:
            return EphemerisStatus.WN_EQ_0
        if self.fit_interval <= 0:
            return EphemerisStatus.FIT_INTERVAL_EQ_0
        if self.health_bits != 0:
            return EphemerisStatus.UNHEALTHY
        return EphemerisStatus.VALID


def select_ephemeris(candidates: Iterable[BroadcastEphemeris], t: GpsTime,
                     prn: Optional[int] = None,
                     constellation: Optional[Constellation] = None,
                     allow_unhealthy: bool = False) -> Optional[BroadcastEphemeris]:
    """
    Select best ephemeris for a satellite at given time

    Parameters:
    -----------
    candidates : iterable of BroadcastEphemeris or GlonassEphemeris
        Available ephemerides
    t : GpsTime
        Time of interest
    prn : int, optional
        Restrict to this PRN
    constellation : Constellation, optional
        Restrict to this constellation
    allow_unhealthy : bool
        Accept ephemerides flagged unhealthy

    Returns:
    --------
    eph : record from ``candidates`` or None
        Valid ephemeris with toe closest to ``t``, or None if not found
    """
    best_eph = None
    min_dt = float('inf')

    for eph in candidates:
        if prn is not None and eph.prn != prn:
            continue
        if constellation is not None and eph.constellation is not constellation:
            continue
        if not allow_unhealthy and not eph.is_healthy:
            continue
        if not eph.is_valid_at(t):
            continue

        dt = abs(eph.age(t))
        if dt < min_dt:
            min_dt = dt
            best_eph = eph

    if best_eph is None:
        logger.debug(f"No valid ephemeris for prn={prn} at {t}")
    return best_eph
