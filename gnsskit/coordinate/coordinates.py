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

"""Coordinate value types"""

import math
from dataclasses import dataclass, field

import numpy as np

from .ellipsoid import WGS84, Ellipsoid
from .wrap import wrap_to_pi


def _as_vector(value) -> np.ndarray:
    vec = np.asarray(value, dtype=float)
    if vec.shape != (3,):
        raise ValueError(f"Expected a 3-vector, got shape {vec.shape}")
    return vec


@dataclass(frozen=True)
class EcefCoordinate:
    """Earth-Centered Earth-Fixed position

    Attributes
    ----------
    x, y, z : float
        Cartesian coordinates (m)
    """
    x: float
    y: float
    z: float

    @classmethod
    def from_array(cls, xyz) -> 'EcefCoordinate':
        x, y, z = _as_vector(xyz)
        return cls(float(x), float(y), float(z))

    def as_array(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z])

    def __array__(self, dtype=None, copy=None):
        return np.array([self.x, self.y, self.z], dtype=dtype)

    def norm(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def __add__(self, other):
        try:
            vec = _as_vector(other)
        except (TypeError, ValueError):
            return NotImplemented
        return EcefCoordinate.from_array(self.as_array() + vec)

    __radd__ = __add__

    def __sub__(self, other):
        try:
            vec = _as_vector(other)
        except (TypeError, ValueError):
            return NotImplemented
        return EcefCoordinate.from_array(self.as_array() - vec)

    def __mul__(self, scale):
        if isinstance(scale, (int, float)) and not isinstance(scale, bool):
            return EcefCoordinate(self.x * scale, self.y * scale, self.z * scale)
        return NotImplemented

    __rmul__ = __mul__

    def __neg__(self):
        return EcefCoordinate(-self.x, -self.y, -self.z)


@dataclass(frozen=True)
class GeodeticCoordinate:
    """Geodetic position on a reference ellipsoid

    Latitude must lie in [-π/2, π/2]; longitude is wrapped to (-π, π]
    on construction. Height is unbounded.

    Attributes
    ----------
    latitude : float
        Geodetic latitude (rad)
    longitude : float
        Longitude (rad)
    height : float
        Height above the ellipsoid (m)
    ellipsoid : Ellipsoid
        Reference ellipsoid, WGS84 by default
    """
    latitude: float
    longitude: float
    height: float = 0.0
    ellipsoid: Ellipsoid = field(default=WGS84)

    def __post_init__(self):
        lat = float(self.latitude)
        if not -0.5 * math.pi <= lat <= 0.5 * math.pi:
            raise ValueError(f"Latitude {lat} rad outside [-pi/2, pi/2]")
        lon = float(self.longitude)
        if not math.isfinite(lon):
            raise ValueError(f"Longitude must be finite, got {lon}")
        object.__setattr__(self, 'latitude', lat)
        object.__setattr__(self, 'longitude', float(wrap_to_pi(lon)))
        object.__setattr__(self, 'height', float(self.height))

    @classmethod
    def from_degrees(cls, lat_deg: float, lon_deg: float, height: float = 0.0,
                     ellipsoid: Ellipsoid = WGS84) -> 'GeodeticCoordinate':
        return cls(math.radians(lat_deg), math.radians(lon_deg), height, ellipsoid)

    @classmethod
    def from_array(cls, llh, ellipsoid: Ellipsoid = WGS84) -> 'GeodeticCoordinate':
        """Create from [lat, lon, height] in radians and meters"""
        lat, lon, h = _as_vector(llh)
        return cls(lat, lon, h, ellipsoid)

    def to_degrees(self) -> np.ndarray:
        """Return [lat_deg, lon_deg, height]"""
        return np.array([math.degrees(self.latitude), math.degrees(self.longitude), self.height])

    def as_array(self) -> np.ndarray:
        """Return [lat, lon, height] in radians and meters"""
        return np.array([self.latitude, self.longitude, self.height])


@dataclass(frozen=True)
class NedVector:
    """Local North-East-Down vector (m, or m/s for velocities)"""
    north: float
    east: float
    down: float

    def as_array(self) -> np.ndarray:
        return np.array([self.north, self.east, self.down])

    def __array__(self, dtype=None, copy=None):
        return np.array([self.north, self.east, self.down], dtype=dtype)

    def to_enu(self) -> 'EnuVector':
        return EnuVector(self.east, self.north, -self.down)

    def norm(self) -> float:
        return math.sqrt(self.north ** 2 + self.east ** 2 + self.down ** 2)


@dataclass(frozen=True)
class EnuVector:
    """Local East-North-Up vector (m, or m/s for velocities)"""
    east: float
    north: float
    up: float

    def as_array(self) -> np.ndarray:
        return np.array([self.east, self.north, self.up])

    def __array__(self, dtype=None, copy=None):
        return np.array([self.east, self.north, self.up], dtype=dtype)

    def to_ned(self) -> NedVector:
        return NedVector(self.north, self.east, -self.up)

    def norm(self) -> float:
        return math.sqrt(self.east ** 2 + self.north ** 2 + self.up ** 2)
