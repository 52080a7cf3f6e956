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

"""Reference frame utilities

This module provides:
- Reference ellipsoids (WGS84, GRS80)
- Coordinate value types (ECEF, geodetic, NED, ENU)
- ECEF <-> geodetic conversion
- ECEF <-> local NED/ENU transforms and rotation matrices
- Angle wrapping
- Reference frame (ITRF/ETRF/NAD83) Helmert transformations
"""

from .coordinates import EcefCoordinate, EnuVector, GeodeticCoordinate, NedVector
from .ellipsoid import ELLIPSOIDS, GRS80, WGS84, Ellipsoid, get_ellipsoid
from .transforms import (
    ecef2llh,
    ecef_to_enu,
    ecef_to_enu_matrix,
    ecef_to_geodetic,
    ecef_to_ned,
    ecef_to_ned_matrix,
    ecef_vector_to_ned,
    enu_to_ecef,
    geodetic_to_ecef,
    llh2ecef,
    ned_to_ecef,
    ned_vector_to_ecef,
)
from .wrap import wrap_to_2pi, wrap_to_pi
from .reference_frame import (
    FrameCoordinate,
    HelmertParams,
    ReferenceFrame,
    Transformation,
    TransformationRepository,
    builtin_transformations,
    parse_reference_frame,
)
