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

"""
Satellite computation module.

Evaluates Keplerian broadcast ephemerides of GPS, Galileo, BeiDou and QZSS
satellites, GLONASS state vector ephemerides and GPS/QZSS/SBAS almanacs into
ECEF position, velocity, acceleration and clock corrections.

Modules
-------
ephemeris : module
    Ephemeris record, status, fit interval validation and selection
kepler : module
    Kepler's equation solver and its convergence settings
clock : module
    Satellite clock bias and drift with relativistic correction
satellite_position : module
    Satellite state propagation
glonass : module
    GLONASS ephemeris and Runge-Kutta orbit integration
almanac : module
    Coarse long-lived orbits for visibility planning

Usage Examples
--------------
    >>> from gnsskit.satellite import compute_satellite_state
    >>> state = compute_satellite_state(eph, t)
    >>> print(f"Satellite position: {state.position} m")
"""

from .almanac import (
    ALMANAC_CONSTELLATIONS,
    Almanac,
    KeplerAlmanacTerms,
    XyzAlmanacTerms,
    compute_almanac_state,
)
from .clock import clock_correction, compute_satellite_clock, relativistic_constant
from .ephemeris import (
    UNUSABLE_STATUSES,
    BroadcastEphemeris,
    Constellation,
    EphemerisStatus,
    FitIntervalMixin,
    select_ephemeris,
)
from .glonass import GlonassEphemeris, compute_glonass_state, glonass_clock
from .kepler import DEFAULT_KEPLER_OPTIONS, KeplerOptions, eccentric_anomaly, mean_motion, solve_kepler
from .satellite_position import (
    SatelliteState,
    compute_satellite_position,
    compute_satellite_state,
    earth_rotation_matrix,
)
