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

"""UTC calendar time and GPS/UTC conversion"""

import calendar
import logging
import math
import warnings
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

from .constants import DAY_SECONDS, WEEK_SECONDS
from .exceptions import InvalidTime, ProvisionalConversionWarning
from .leap_seconds import default_leap_second_table
from .time import GPS_EPOCH, GpsTime, date_to_mjd, mjd_to_date

logger = logging.getLogger(__name__)

_GPS_EPOCH_DATE = GPS_EPOCH.date()


@dataclass(frozen=True)
class UtcTime:
    """
    UTC calendar instant

    The whole second and its fraction are kept apart so that a GPS time
    survives a trip through the calendar without rounding.

    Attributes
    ----------
    year, month, day : int
        Calendar date
    hour, minute : int
        Time of day
    second : int
        Whole second, 0-59, or 60 for an inserted leap second
    fraction : float
        Fractional second in [0, 1)
    provisional : bool
        Set when the instant lies beyond the horizon of the leap second
        source used to produce it
    """
    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0
    fraction: float = 0.0
    provisional: bool = False

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise InvalidTime(f"Invalid month {self.month}")
        if not 1 <= self.day <= calendar.monthrange(self.year, self.month)[1]:
            raise InvalidTime(f"Invalid day {self.year}-{self.month:02d}-{self.day:02d}")
        if not 0 <= self.hour <= 23 or not 0 <= self.minute <= 59:
            raise InvalidTime(f"Invalid time of day {self.hour:02d}:{self.minute:02d}")
        if not 0 <= self.second <= 60:
            raise InvalidTime(f"Invalid second {self.second}")
        if self.second == 60 and (self.hour, self.minute) != (23, 59):
            raise InvalidTime("Second 60 only exists at 23:59 of a leap second day")
        if not (math.isfinite(self.fraction) and 0.0 <= self.fraction < 1.0):
            raise InvalidTime(f"Fractional second {self.fraction} outside [0, 1)")

    @classmethod
    def from_parts(cls, year: int, month: int, day: int, hour: int = 0, minute: int = 0,
                   second: float = 0.0) -> 'UtcTime':
        """Create from calendar fields with a real-valued second"""
        whole = math.floor(second)
        return cls(year, month, day, hour, minute, int(whole), second - whole)

    @classmethod
    def from_mjd(cls, mjd: float) -> 'UtcTime':
        """Create from a Modified Julian Date on the UTC scale"""
        return cls.from_parts(*mjd_to_date(mjd))

    @classmethod
    def from_datetime(cls, dt: datetime) -> 'UtcTime':
        """Create from a datetime, aware values are converted to UTC first"""
        if dt.tzinfo is not None:
            dt = dt.astimezone(timezone.utc)
        return cls(dt.year, dt.month, dt.day, dt.hour, dt.minute, dt.second,
                   dt.microsecond * 1e-6)

    @property
    def seconds(self) -> float:
        """Second of minute including the fraction"""
        return self.second + self.fraction

    @property
    def is_leap_second(self) -> bool:
        return self.second == 60

    @property
    def day_of_year(self) -> int:
        return date(self.year, self.month, self.day).timetuple().tm_yday

    @property
    def fractional_year(self) -> float:
        """Decimal year, 1 January 00:00 of a year being exactly that year"""
        days = 366 if calendar.isleap(self.year) else 365
        day_seconds = self.hour * 3600 + self.minute * 60 + self.seconds
        return self.year + (self.day_of_year - 1 + day_seconds / DAY_SECONDS) / days

    def to_mjd(self) -> float:
        return date_to_mjd(self.year, self.month, self.day, self.hour, self.minute, self.seconds)

    def to_datetime(self) -> datetime:
        """Convert to an aware datetime; inserted leap seconds cannot be represented"""
        if self.is_leap_second:
            raise InvalidTime("datetime cannot represent a leap second (23:59:60)")
        microsecond = min(int(round(self.fraction * 1e6)), 999999)
        return datetime(self.year, self.month, self.day, self.hour, self.minute, self.second,
                        microsecond, tzinfo=timezone.utc)

    def iso8601(self) -> str:
        return (f"{self.year:04d}-{self.month:02d}-{self.day:02d}T"
                f"{self.hour:02d}:{self.minute:02d}:{self.seconds:06.3f}Z")

    def __str__(self):
        return self.iso8601()


def _utc_count(utc: UtcTime) -> int:
    days = (date(utc.year, utc.month, utc.day) - _GPS_EPOCH_DATE).days
    # an inserted second 60 counts as the first second of the next minute
    return days * DAY_SECONDS + utc.hour * 3600 + utc.minute * 60 + utc.second


def _warn_provisional(what):
    logger.debug(f"Provisional conversion of {what}")
    warnings.warn(f"{what} lies beyond the leap second horizon; "
                  "the GPS-UTC offset is extrapolated",
                  ProvisionalConversionWarning, stacklevel=3)


def to_utc(t: GpsTime, leap_seconds=None) -> UtcTime:
    """
    Convert GPS time to UTC

    Parameters:
    -----------
    t : GpsTime
        GPS time
    leap_seconds : LeapSecondTable or UtcParams, optional
        Source of the GPS-UTC offset, defaults to the built-in table

    Returns:
    --------
    UtcTime
        UTC calendar time. An instant inside an inserted leap second is
        reported as 23:59:60.x. ``provisional`` is set (and a
        ProvisionalConversionWarning emitted) beyond the source's horizon.

    Raises:
    -------
    OutOfTableRange
        If ``t`` precedes the first table entry
    """
    if leap_seconds is None:
        leap_seconds = default_leap_second_table()

    offset = leap_seconds.gps_utc_offset(t)
    in_event = leap_seconds.is_leap_second_event(t)
    provisional = leap_seconds.is_provisional_gps(t)

    whole = math.floor(t.tow)
    fraction = t.tow - whole
    if float(offset).is_integer():
        count = t.week * WEEK_SECONDS + int(whole) - int(offset) - int(in_event)
    else:
        total = t.week * WEEK_SECONDS + t.tow - offset - int(in_event)
        count = math.floor(total)
        fraction = total - count

    days, second_of_day = divmod(count, DAY_SECONDS)
    day = _GPS_EPOCH_DATE + timedelta(days=int(days))
    hour, rest = divmod(int(second_of_day), 3600)
    minute, second = divmod(rest, 60)
    if in_event:
        # 23:59:59 + the inserted second
        second += 1

    if provisional:
        _warn_provisional(t)
    return UtcTime(day.year, day.month, day.day, hour, minute, second, fraction, provisional)


def to_gps(utc: UtcTime, leap_seconds=None) -> GpsTime:
    """
    Convert UTC to GPS time

    Parameters:
    -----------
    utc : UtcTime
        UTC calendar time, 23:59:60.x allowed on leap second days
    leap_seconds : LeapSecondTable or UtcParams, optional
        Source of the GPS-UTC offset, defaults to the built-in table

    Returns:
    --------
    GpsTime
        GPS time. 23:59:60.x maps one second after 23:59:59.x.

    Raises:
    -------
    OutOfTableRange
        If ``utc`` precedes the first table entry
    InvalidTime
        If ``utc`` is 23:59:60.x on a day without a leap second event
    """
    if leap_seconds is None:
        leap_seconds = default_leap_second_table()

    count = _utc_count(utc)
    offset = leap_seconds.utc_gps_offset(count + utc.fraction)
    if leap_seconds.is_provisional_utc(count + utc.fraction):
        _warn_provisional(utc)

    leap = 1 if utc.is_leap_second else 0
    if float(offset).is_integer():
        week, tow = divmod(count + int(offset) - leap, WEEK_SECONDS)
        t = GpsTime(week, tow + utc.fraction)
    else:
        t = GpsTime(0, count + offset - leap + utc.fraction)

    if utc.is_leap_second and not leap_seconds.is_leap_second_event(t):
        raise InvalidTime(f"{utc} is not an inserted leap second")
    return t


def gps_to_mjd(t: GpsTime, leap_seconds=None) -> float:
    """Modified Julian Date (UTC) of a GPS time"""
    return to_utc(t, leap_seconds).to_mjd()


def mjd_to_gps(mjd: float, leap_seconds=None) -> GpsTime:
    """GPS time of a Modified Julian Date (UTC)"""
    return to_gps(UtcTime.from_mjd(mjd), leap_seconds)


def fractional_year(t: GpsTime, leap_seconds=None) -> float:
    """Decimal UTC year of a GPS time, as used for reference frame epochs"""
    return to_utc(t, leap_seconds).fractional_year
