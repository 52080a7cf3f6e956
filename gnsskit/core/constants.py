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

"""GNSS Constants and System Parameters"""

# Physical Constants
CLIGHT = 299792458.0  # speed of light (m/s)

# Carrier frequencies
FREQ_L1 = 1.57542E9   # GPS L1 / Galileo E1 / BeiDou B1C (Hz)
FREQ_L5 = 1.17645E9   # GPS L5 / Galileo E5a (Hz)

# Time constants
WEEK_SECONDS = 604800          # seconds in a GPS week
DAY_SECONDS = 86400            # seconds in a day

# Time System Parameters
GPST0 = [1980, 1, 6, 0, 0, 0]  # GPS time reference epoch

GAL_WEEK_OFFSET = 1024         # GPS week of GST week 0
BDS_WEEK_OFFSET = 1356         # GPS week of BDT week 0
GPS_BDS_OFFSET = 14.0          # GPS-BeiDou time offset (seconds)
GPS_WEEK_ROLLOVER = 1024       # legacy 10-bit week modulus
GPS_WEEK_ROLLOVER_CNAV = 8192  # 13-bit week modulus

# Earth Parameters (WGS84)
RE_WGS84 = 6378137.0           # earth semimajor axis (m)
FE_WGS84 = 1.0 / 298.257223563 # earth flattening
J2 = 1.082627E-3               # J2 coefficient

# GRS80 ellipsoid
RE_GRS80 = 6378137.0                  # semimajor axis (m)
FE_GRS80 = 1.0 / 298.257222100882711  # flattening

# System-specific gravitational constants
MU_GPS = 3.9860050E14          # GPS gravitational constant
MU_GAL = 3.986004418E14        # Galileo gravitational constant
MU_BDS = 3.986004418E14        # BeiDou gravitational constant
MU_GLO = 3.9860044E14          # GLONASS (PZ-90) gravitational constant

# System-specific earth angular velocities
OMGE_GPS = 7.2921151467E-5     # GPS earth angular velocity
OMGE_GAL = 7.2921151467E-5     # Galileo earth angular velocity
OMGE_BDS = 7.292115E-5         # BeiDou earth angular velocity
OMGE_GLO = 7.292115E-5         # GLONASS earth angular velocity

# GLONASS (PZ-90) orbit model
RE_GLO = 6378136.0             # earth semimajor axis (m)
J2_GLO = 1.08262575E-3         # second zonal harmonic
GLO_INTEGRATION_STEP = 60.0    # Runge-Kutta step (s)

# Ephemeris defaults
DEFAULT_FIT_INTERVAL = 4 * 3600.0  # broadcast fit interval (s)
GLO_FIT_INTERVAL = 3600.0          # GLONASS fit interval, toe +/- 30 min (s)
ALMANAC_FIT_INTERVAL = 144 * 3600.0  # almanac curve fit interval (s)

# Kepler solver defaults
KEPLER_TOLERANCE = 1e-13
KEPLER_MAX_ITERATIONS = 10
