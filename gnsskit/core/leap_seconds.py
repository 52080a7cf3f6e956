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

"""Leap second sources for GPS/UTC conversion

Two interchangeable sources are provided:

- :class:`LeapSecondTable` - historical list of leap second insertions,
  optionally loaded from an IERS ``leap-seconds.list`` file.
- :class:`UtcParams` - the UTC model broadcast in the GPS navigation message.

Both expose the same lookup interface. UTC instants are passed as a
continuous "UTC count": seconds since 1980-01-06 00:00 on the UTC calendar
with every day 86400 s long, i.e. the value a naive datetime subtraction
gives. GPS instants are :class:`GpsTime`.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional, Tuple, Union

import pandas as pd

from .constants import DAY_SECONDS
from .exceptions import OutOfTableRange
from .time import GPS_EPOCH, GpsTime, difference

logger = logging.getLogger(__name__)

NTP_EPOCH = datetime(1900, 1, 1)
TAI_GPS_OFFSET = 19  # TAI - GPS (s)

# UTC effective date and GPS-UTC offset (s) from that date onward
GPS_UTC_LEAPS = [
    (datetime(1980, 1, 6), 0),
    (datetime(1981, 7, 1), 1),
    (datetime(1982, 7, 1), 2),
    (datetime(1983, 7, 1), 3),
    (datetime(1985, 7, 1), 4),
    (datetime(1988, 1, 1), 5),
    (datetime(1990, 1, 1), 6),
    (datetime(1991, 1, 1), 7),
    (datetime(1992, 7, 1), 8),
    (datetime(1993, 7, 1), 9),
    (datetime(1994, 7, 1), 10),
    (datetime(1996, 1, 1), 11),
    (datetime(1997, 7, 1), 12),
    (datetime(1999, 1, 1), 13),
    (datetime(2006, 1, 1), 14),
    (datetime(2009, 1, 1), 15),
    (datetime(2012, 7, 1), 16),
    (datetime(2015, 7, 1), 17),
    (datetime(2017, 1, 1), 18),
]

# Expiry announced with IERS Bulletin C 70
GPS_UTC_LEAPS_EXPIRE = datetime(2026, 12, 28)


def utc_count(dt: Union[datetime, date]) -> float:
    """Seconds from the GPS epoch to a UTC calendar instant, ignoring leap seconds"""
    if not isinstance(dt, datetime):
        dt = datetime(dt.year, dt.month, dt.day)
    delta = dt - GPS_EPOCH
    return delta.days * DAY_SECONDS + delta.seconds + delta.microseconds * 1e-6


class LeapSecondTable:
    """
    Ordered table of cumulative GPS-UTC offsets

    Parameters:
    -----------
    entries : iterable of (datetime, int)
        UTC effective instant and the GPS-UTC offset (s) in force from then
        on. Dates must be strictly increasing.
    expires : datetime, optional
        Date after which the table is no longer guaranteed complete. When
        omitted the last entry is the horizon.

    Notes
    -----
    For a positive leap second taking effect at UTC midnight ``u`` with the
    offset changing from ``k`` to ``k + 1``, the GPS instants in
    ``[u + k, u + k + 1)`` belong to the inserted second 23:59:60. During that
    second the previous offset ``k`` is reported.
    """

    def __init__(self, entries: Iterable[Tuple[Union[datetime, date], int]],
                 expires: Optional[Union[datetime, date]] = None):
        entries = [(self._as_datetime(when), int(offset)) for when, offset in entries]
        if not entries:
            raise ValueError("Leap second table needs at least one entry")
        for (prev, _), (curr, _) in zip(entries, entries[1:]):
            if curr <= prev:
                raise ValueError(f"Leap second entries not strictly increasing at {curr}")

        self._entries = entries
        self._utc = [utc_count(when) for when, _ in entries]
        self._offsets = [offset for _, offset in entries]
        self._expires = self._as_datetime(expires) if expires is not None else None
        if self._expires is not None:
            self._horizon = utc_count(self._expires)
        else:
            self._horizon = self._utc[-1]

    @staticmethod
    def _as_datetime(value):
        if isinstance(value, datetime):
            return value
        return datetime(value.year, value.month, value.day)

    @classmethod
    def from_iers_file(cls, path) -> 'LeapSecondTable':
        """
        Load an IERS/IETF ``leap-seconds.list`` file

        Parameters:
        -----------
        path : str or path-like
            File with one ``<NTP seconds> <TAI-UTC>`` pair per line and the
            expiry date on the ``#@`` line

        Returns:
        --------
        LeapSecondTable
            Table holding every leap second from the GPS epoch on
        """
        frame = pd.read_csv(path, sep=r"\s+", comment="#", header=None,
                            usecols=[0, 1], names=["ntp_seconds", "tai_utc"],
                            dtype={"ntp_seconds": "int64", "tai_utc": "int64"})
        frame = frame.sort_values("ntp_seconds")

        expires = None
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                if line.startswith("#@"):
                    expires = NTP_EPOCH + timedelta(seconds=int(line[2:].split()[0]))
                    break

        entries = []
        for ntp_seconds, tai_utc in zip(frame["ntp_seconds"], frame["tai_utc"]):
            when = NTP_EPOCH + timedelta(seconds=int(ntp_seconds))
            offset = int(tai_utc) - TAI_GPS_OFFSET
            if when <= GPS_EPOCH:
                # offset in force at the GPS epoch
                entries = [(GPS_EPOCH, offset)]
            else:
                entries.append((when, offset))

        if not entries:
            raise ValueError(f"No leap second entries found in {path}")
        logger.debug(f"Loaded {len(entries)} leap second entries from {path}, expires {expires}")
        return cls(entries, expires=expires)

    @property
    def entries(self) -> List[Tuple[datetime, int]]:
        return list(self._entries)

    @property
    def expires(self) -> Optional[datetime]:
        return self._expires

    def _lookup_gps(self, t: GpsTime):
        g = t.to_gps_seconds()
        for i in range(len(self._utc) - 1, -1, -1):
            if g >= self._utc[i] + self._offsets[i]:
                return self._offsets[i], False
            if i > 0 and self._offsets[i] > self._offsets[i - 1] \
                    and g >= self._utc[i] + self._offsets[i - 1]:
                return self._offsets[i - 1], True
        raise OutOfTableRange(f"{t} precedes the first leap second entry {self._entries[0][0]}")

    def gps_utc_offset(self, t: GpsTime) -> int:
        """GPS-UTC offset (s) in force at a GPS instant"""
        return self._lookup_gps(t)[0]

    def is_leap_second_event(self, t: GpsTime) -> bool:
        """True while ``t`` lies inside an inserted UTC second"""
        return self._lookup_gps(t)[1]

    def utc_gps_offset(self, utc_seconds: float) -> int:
        """GPS-UTC offset (s) in force at a UTC count"""
        for i in range(len(self._utc) - 1, -1, -1):
            if utc_seconds >= self._utc[i]:
                return self._offsets[i]
        raise OutOfTableRange(
            f"UTC instant precedes the first leap second entry {self._entries[0][0]}")

    def is_provisional_utc(self, utc_seconds: float) -> bool:
        if self._expires is not None:
            return utc_seconds >= self._horizon
        return utc_seconds > self._horizon

    def is_provisional_gps(self, t: GpsTime) -> bool:
        offset, in_event = self._lookup_gps(t)
        return self.is_provisional_utc(t.to_gps_seconds() - offset - int(in_event))

    def __len__(self):
        return len(self._entries)

    def __repr__(self):
        last, offset = self._entries[-1]
        return (f"LeapSecondTable({len(self._entries)} entries, last {last:%Y-%m-%d} "
                f"-> {offset} s, expires {self._expires})")


@dataclass(frozen=True)
class UtcParams:
    """
    GPS-UTC model broadcast in the navigation message

    Attributes
    ----------
    a0 : float
        Polynomial bias term (s)
    a1 : float
        Polynomial drift term (s/s)
    a2 : float
        Polynomial drift rate term (s/s^2)
    tot : GpsTime
        Reference time of the polynomial
    t_lse : GpsTime
        GPS instant at which the next (or last) leap second event begins
    dt_ls : int
        GPS-UTC offset before the event (s)
    dt_lsf : int
        GPS-UTC offset after the event (s)
    """
    a0: float
    a1: float
    a2: float
    tot: GpsTime
    t_lse: GpsTime
    dt_ls: int
    dt_lsf: int

    def _polynomial(self, dt: float) -> float:
        return self.a0 + self.a1 * dt + self.a2 * dt * dt

    def gps_utc_offset(self, t: GpsTime) -> float:
        offset = self._polynomial(difference(t, self.tot))
        # the new offset takes effect after the leap second event
        if difference(t, self.t_lse) >= 1.0:
            return offset + self.dt_lsf
        return offset + self.dt_ls

    def is_leap_second_event(self, t: GpsTime) -> bool:
        return 0.0 <= difference(t, self.t_lse) < 1.0

    def utc_gps_offset(self, utc_seconds: float) -> float:
        dt = utc_seconds - self.tot.to_gps_seconds() + self.dt_ls
        offset = self._polynomial(dt)
        if utc_seconds - self.t_lse.to_gps_seconds() >= -self.dt_ls - offset:
            return offset + self.dt_lsf
        return offset + self.dt_ls

    def is_provisional_utc(self, utc_seconds: float) -> bool:
        return False

    def is_provisional_gps(self, t: GpsTime) -> bool:
        return False


def default_leap_second_table() -> LeapSecondTable:
    """Leap second table built into the library"""
    return _DEFAULT_TABLE


_DEFAULT_TABLE = LeapSecondTable(GPS_UTC_LEAPS, expires=GPS_UTC_LEAPS_EXPIRE)
