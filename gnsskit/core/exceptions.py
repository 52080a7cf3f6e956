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

"""Exceptions and warnings raised by gnsskit"""


class GnssError(Exception):
    """Base class for all gnsskit errors"""


class InvalidTime(GnssError, ValueError):
    """Time value cannot be represented (negative week, non-finite TOW, ...)"""


class OutOfTableRange(GnssError, LookupError):
    """Instant precedes the earliest entry of the leap second table"""


class InvalidEphemeris(GnssError, ValueError):
    """Ephemeris cannot be used to compute a satellite state

    Parameters:
    -----------
    message : str
        Human readable reason
    status : EphemerisStatus, optional
        Status of the rejected ephemeris
    """

    def __init__(self, message, status=None):
        super().__init__(message)
        self.status = status


class _FitIntervalError(InvalidEphemeris):

    def __init__(self, message, time=None, toe=None, fit_interval=None):
        super().__init__(message)
        self.time = time
        self.toe = toe
        self.fit_interval = fit_interval


class EphemerisExpired(_FitIntervalError):
    """Requested time is after the end of the fit interval"""


class EphemerisNotYetValid(_FitIntervalError):
    """Requested time is before the start of the fit interval"""


class PropagationDidNotConverge(GnssError, ArithmeticError):
    """Kepler iteration did not reach tolerance within the iteration limit"""

    def __init__(self, message, iterations=None, residual=None):
        super().__init__(message)
        self.iterations = iterations
        self.residual = residual


class TransformationNotFound(GnssError, LookupError):
    """No chain of transformations links two reference frames"""

    def __init__(self, source, destination):
        super().__init__(f"No transformation found from {source} to {destination}")
        self.source = source
        self.destination = destination


class UnsupportedConstellation(GnssError, ValueError):
    """Record type is not defined for the given constellation"""

    def __init__(self, message, constellation=None):
        super().__init__(message)
        self.constellation = constellation


class ProvisionalConversionWarning(UserWarning):
    """Time conversion extrapolated beyond the known leap second horizon"""
