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

"""Core GNSS Module.

This module provides the foundation shared by every other part of gnsskit:

- **Constants**: physical constants, ellipsoid parameters, per-constellation
  gravitational constants and Earth rotation rates, carrier frequencies
- **Exceptions**: the error hierarchy rooted at GnssError
- **Time Systems**: GPS week/TOW time, Galileo and BeiDou time scales,
  week-number disambiguation
- **Leap Seconds**: historical leap second table, IERS file loader and the
  broadcast UTC model
- **UTC**: calendar representation, GPS/UTC conversion, Modified Julian
  Date and decimal year

Example Usage:
    >>> from gnsskit.core import GpsTime, to_utc, to_gps
    >>>
    >>> t = GpsTime(2200, 432000.0)
    >>> utc = to_utc(t)
    >>> to_gps(utc) == t
    True
"""

from .constants import *
from .exceptions import (
    EphemerisExpired,
    EphemerisNotYetValid,
    GnssError,
    InvalidEphemeris,
    InvalidTime,
    OutOfTableRange,
    PropagationDidNotConverge,
    ProvisionalConversionWarning,
    TransformationNotFound,
    UnsupportedConstellation,
)
from .leap_seconds import LeapSecondTable, UtcParams, default_leap_second_table
from .time import (
    BdsTime,
    GalTime,
    GpsTime,
    add_duration,
    date_to_mjd,
    difference,
    mjd_to_date,
    normalize,
    resolve_week,
)
from .utc import UtcTime, fractional_year, gps_to_mjd, mjd_to_gps, to_gps, to_utc
