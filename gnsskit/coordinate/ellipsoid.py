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

"""Reference ellipsoids"""

import math
from dataclasses import dataclass

from ..core.constants import FE_GRS80, FE_WGS84, RE_GRS80, RE_WGS84


@dataclass(frozen=True)
class Ellipsoid:
    """Rotational ellipsoid defined by semi-major axis and flattening

    Attributes
    ----------
    name : str
        Ellipsoid name
    a : float
        Semi-major axis (m)
    f : float
        Flattening
    """
    name: str
    a: float
    f: float

    def __post_init__(self):
        if not self.a > 0.0:
            raise ValueError(f"Semi-major axis must be positive, got {self.a}")
        if not 0.0 <= self.f < 1.0:
            raise ValueError(f"Flattening must lie in [0, 1), got {self.f}")

    @property
    def b(self) -> float:
        """Semi-minor axis (m)"""
        return self.a * (1.0 - self.f)

    @property
    def e2(self) -> float:
        """First eccentricity squared"""
        return self.f * (2.0 - self.f)

    @property
    def e(self) -> float:
        """First eccentricity"""
        return math.sqrt(self.e2)

    def prime_vertical_radius(self, lat: float) -> float:
        """Radius of curvature in the prime vertical at geodetic latitude ``lat``"""
        return self.a / math.sqrt(1.0 - self.e2 * math.sin(lat) ** 2)


WGS84 = Ellipsoid("WGS84", RE_WGS84, FE_WGS84)
GRS80 = Ellipsoid("GRS80", RE_GRS80, FE_GRS80)

ELLIPSOIDS = {
    "WGS84": WGS84,
    "GRS80": GRS80,
}


def get_ellipsoid(name: str) -> Ellipsoid:
    """Look up a built-in ellipsoid by name (case-insensitive)"""
    try:
        return ELLIPSOIDS[name.upper()]
    except KeyError:
        raise ValueError(f"Unknown ellipsoid: {name}. Must be one of {sorted(ELLIPSOIDS)}") from None
