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

"""GNSS Time Systems and Conversions

GPS time is kept as a (week, time-of-week) pair. Every instance is normalized
on construction so that ``0 <= tow < 604800`` and ``week >= 0``; instants before
the GPS epoch cannot be represented and raise :class:`InvalidTime`.
"""

import math
from datetime import date, datetime, timedelta, timezone
from typing import Union

from .constants import (
    BDS_WEEK_OFFSET,
    DAY_SECONDS,
    GAL_WEEK_OFFSET,
    GPS_BDS_OFFSET,
    GPS_WEEK_ROLLOVER,
    GPST0,
    WEEK_SECONDS,
)
from .exceptions import InvalidTime

GPS_EPOCH = datetime(*GPST0)


def _normalize(week, tow):
    if isinstance(week, bool) or int(week) != week:
        raise InvalidTime(f"Week number must be an integer, got {week!r}")
    tow = float(tow)
    if not math.isfinite(tow):
        raise InvalidTime(f"Time of week must be finite, got {tow!r}")

    week = int(week)
    shift = math.floor(tow / WEEK_SECONDS)
    tow -= shift * WEEK_SECONDS
    week += shift

    # floating point residue of the shift above
    if tow < 0.0:
        tow += WEEK_SECONDS
        week -= 1
    if tow >= WEEK_SECONDS:
        tow -= WEEK_SECONDS
        week += 1

    if week < 0:
        raise InvalidTime(f"Time precedes the GPS epoch (week {week})")
    return week, tow


class GpsTime:
    """GPS time as week number and time of week

    Instances are immutable and always normalized.

    Parameters:
    -----------
    week : int
        Week number since 1980-01-06 (no rollover applied)
    tow : float
        Time of week in seconds, any real value; it is rolled into
        [0, 604800) with the week adjusted accordingly
    """

    __slots__ = ('_week', '_tow')

    def __init__(self, week: int = 0, tow: float = 0.0):
        week, tow = _normalize(week, tow)
        object.__setattr__(self, '_week', week)
        object.__setattr__(self, '_tow', tow)

    def __setattr__(self, name, value):
        raise AttributeError("GpsTime is immutable")

    def __reduce__(self):
        return (GpsTime, (self._week, self._tow))

    @property
    def week(self) -> int:
        return self._week

    @property
    def tow(self) -> float:
        return self._tow

    @classmethod
    def from_gps_seconds(cls, gps_seconds: float) -> 'GpsTime':
        """Create GpsTime from continuous seconds since the GPS epoch"""
        return cls(0, gps_seconds)

    @classmethod
    def from_datetime(cls, dt: datetime) -> 'GpsTime':
        """Create GpsTime from a datetime expressed in the GPS time scale

        No leap seconds are applied; use :func:`gnsskit.core.utc.to_gps`
        for UTC calendar dates. Aware datetimes are shifted to a zero
        offset before the tzinfo is discarded.
        """
        if dt.tzinfo is not None:
            dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
        delta = dt - GPS_EPOCH
        weeks = delta.days // 7
        tow = (delta.days % 7) * 86400 + delta.seconds + delta.microseconds * 1e-6
        return cls(weeks, tow)

    def to_datetime(self) -> datetime:
        """Convert to a naive datetime in the GPS time scale"""
        return GPS_EPOCH + timedelta(weeks=self._week, seconds=self._tow)

    def to_gps_seconds(self) -> float:
        """Convert to GPS seconds since GPS epoch"""
        return self._week * WEEK_SECONDS + self._tow

    def add_seconds(self, seconds: float) -> 'GpsTime':
        """Add seconds to time"""
        return add_duration(self, seconds)

    def isclose(self, other: 'GpsTime', tol: float = 1e-9) -> bool:
        """Check that two times are within ``tol`` seconds of each other"""
        return abs(difference(self, other)) <= tol

    def round_to_epoch(self, soln_freq: float) -> 'GpsTime':
        """Round to the nearest solution epoch of a ``soln_freq`` Hz output"""
        rounded_tow = math.floor(self._tow * soln_freq + 0.5) / soln_freq
        return GpsTime(self._week, rounded_tow)

    def floor_to_epoch(self, soln_freq: float) -> 'GpsTime':
        """Round down to the previous solution epoch of a ``soln_freq`` Hz output"""
        floored_tow = math.floor(self._tow * soln_freq) / soln_freq
        return GpsTime(self._week, floored_tow)

    def to_galileo(self) -> 'GalTime':
        """Convert to Galileo System Time"""
        if self._week < GAL_WEEK_OFFSET:
            raise InvalidTime(f"{self} precedes the start of Galileo time")
        return GalTime(self._week - GAL_WEEK_OFFSET, self._tow)

    def to_beidou(self) -> 'BdsTime':
        """Convert to BeiDou Time"""
        shifted = add_duration(self, -GPS_BDS_OFFSET)
        if shifted.week < BDS_WEEK_OFFSET:
            raise InvalidTime(f"{self} precedes the start of BeiDou time")
        return BdsTime(shifted.week - BDS_WEEK_OFFSET, shifted.tow)

    def __add__(self, seconds: float) -> 'GpsTime':
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            return add_duration(self, seconds)
        return NotImplemented

    __radd__ = __add__

    def __sub__(self, other: Union['GpsTime', float]) -> Union[float, 'GpsTime']:
        if isinstance(other, GpsTime):
            return difference(self, other)
        if isinstance(other, (int, float)) and not isinstance(other, bool):
            return add_duration(self, -other)
        return NotImplemented

    def _key(self):
        return (self._week, self._tow)

    def __eq__(self, other):
        if not isinstance(other, GpsTime):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __lt__(self, other):
        if not isinstance(other, GpsTime):
            return NotImplemented
        return self._key() < other._key()

    def __le__(self, other):
        if not isinstance(other, GpsTime):
            return NotImplemented
        return self._key() <= other._key()

    def __gt__(self, other):
        if not isinstance(other, GpsTime):
            return NotImplemented
        return self._key() > other._key()

    def __ge__(self, other):
        if not isinstance(other, GpsTime):
            return NotImplemented
        return self._key() >= other._key()

    def __str__(self):
        return f"GPS Week: {self._week}, TOW: {self._tow:.3f}"

    def __repr__(self):
        return f"GpsTime({self._week}, {self._tow!r})"


class _ConstellationTime:
    """Week/TOW pair of a GNSS time scale other than GPS"""

    __slots__ = ('_week', '_tow')

    def __init__(self, week: int = 0, tow: float = 0.0):
        week, tow = _normalize(week, tow)
        object.__setattr__(self, '_week', week)
        object.__setattr__(self, '_tow', tow)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def week(self) -> int:
        return self._week

    @property
    def tow(self) -> float:
        return self._tow

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return (self._week, self._tow) == (other._week, other._tow)

    def __hash__(self):
        return hash((type(self).__name__, self._week, self._tow))

    def __repr__(self):
        return f"{type(self).__name__}({self._week}, {self._tow!r})"


class GalTime(_ConstellationTime):
    """Galileo System Time, aligned with GPS time, week 0 = GPS week 1024"""

    __slots__ = ()

    def to_gps(self) -> GpsTime:
        return GpsTime(self._week + GAL_WEEK_OFFSET, self._tow)

    def to_beidou(self) -> 'BdsTime':
        return self.to_gps().to_beidou()


class BdsTime(_ConstellationTime):
    """BeiDou Time, 14 s behind GPS time, week 0 = GPS week 1356"""

    __slots__ = ()

    def to_gps(self) -> GpsTime:
        return GpsTime(self._week + BDS_WEEK_OFFSET, self._tow + GPS_BDS_OFFSET)

    def to_galileo(self) -> GalTime:
        return self.to_gps().to_galileo()


def normalize(week: int, tow: float) -> GpsTime:
    """
    Bring a (week, tow) pair into canonical form

    Parameters:
    -----------
    week : int
        Week number
    tow : float
        Time of week (s), may lie outside [0, 604800)

    Returns:
    --------
    GpsTime
        Equivalent normalized time

    Raises:
    -------
    InvalidTime
        If the normalized week is negative or tow is not finite
    """
    return GpsTime(week, tow)


def add_duration(t: GpsTime, seconds: float) -> GpsTime:
    """Shift a time by a signed duration in seconds, wrapping across weeks"""
    return GpsTime(t.week, t.tow + seconds)


def difference(t1: GpsTime, t2: GpsTime) -> float:
    """Signed difference ``t1 - t2`` in seconds"""
    return (t1.week - t2.week) * WEEK_SECONDS + (t1.tow - t2.tow)


def resolve_week(modulo_week: int, reference: Union[GpsTime, datetime, date],
                 modulus: int = GPS_WEEK_ROLLOVER) -> int:
    """
    Resolve a truncated broadcast week number into a full week number

    The returned week is ``modulo_week + k * modulus`` for the integer ``k``
    that puts it nearest to the reference; exact ties resolve to the later
    candidate.

    Parameters:
    -----------
    modulo_week : int
        Week number as broadcast, in [0, modulus)
    reference : GpsTime, datetime or date
        Approximate current time
    modulus : int
        Rollover period in weeks (1024 for LNAV, 8192 for CNAV)

    Returns:
    --------
    int
        Full week number
    """
    if modulus <= 0:
        raise ValueError(f"modulus must be positive, got {modulus}")
    if not 0 <= modulo_week < modulus:
        raise InvalidTime(f"Truncated week {modulo_week} outside [0, {modulus})")

    if isinstance(reference, GpsTime):
        ref = reference
    elif isinstance(reference, datetime):
        ref = GpsTime.from_datetime(reference)
    elif isinstance(reference, date):
        ref = GpsTime.from_datetime(datetime(reference.year, reference.month, reference.day))
    else:
        raise TypeError(f"Unsupported reference type {type(reference).__name__}")

    # fractional reference week so ties are decided on the actual instant
    ref_week = ref.week + ref.tow / WEEK_SECONDS
    k = math.floor((ref_week - modulo_week) / modulus + 0.5)
    week = modulo_week + k * modulus
    if week < 0:
        week += modulus
    return int(week)



# Modified Julian Date

MJD_EPOCH = date(1858, 11, 17)
MJD_GPS_EPOCH = 44244  # MJD of 1980-01-06


def date_to_mjd(year: int, month: int, day: int, hour: int = 0, minute: int = 0,
                seconds: float = 0.0) -> float:
    """Modified Julian Date of a calendar instant

    Every day counts 86400 s, so on a leap second day the result may be off
    by up to one second.
    """
    try:
        d = date(year, month, day)
    except ValueError as exc:
        raise InvalidTime(f"Invalid date {year}-{month}-{day}") from exc
    if d < MJD_EPOCH:
        raise InvalidTime(f"{d} precedes the MJD epoch {MJD_EPOCH}")
    return (d - MJD_EPOCH).days + (hour * 3600 + minute * 60 + seconds) / DAY_SECONDS


def mjd_to_date(mjd: float) -> tuple:
    """
    Calendar date and time of day of a Modified Julian Date

    Parameters:
    -----------
    mjd : float
        Modified Julian Date, non-negative

    Returns:
    --------
    tuple
        (year, month, day, hour, minute, seconds) with a real-valued seconds
    """
    if not math.isfinite(mjd) or mjd < 0:
        raise InvalidTime(f"Invalid Modified Julian Date {mjd!r}")
    days = math.floor(mjd)
    d = MJD_EPOCH + timedelta(days=days)
    hour, rest = divmod((mjd - days) * DAY_SECONDS, 3600)
    minute, seconds = divmod(rest, 60)
    return d.year, d.month, d.day, int(hour), int(minute), seconds
