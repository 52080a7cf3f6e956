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

"""Coordinate transformation utilities"""

import math
from typing import Optional

import numpy as np
from numba import njit

from .coordinates import EcefCoordinate, EnuVector, GeodeticCoordinate, NedVector
from .ellipsoid import WGS84, Ellipsoid

_FUKUSHIMA_MAX_ITERATIONS = 10
_FUKUSHIMA_TOLERANCE = 1e-16


@njit(cache=True)
def _ecef2llh_kernel(x, y, z, a, e2):
    """Fukushima (2006) ECEF to geodetic iteration

    S and C are renormalised after every Halley step so that neither
    overflows nor underflows.
    """
    p = math.sqrt(x * x + y * y)

    if p != 0.0:
        lon = math.atan2(y, x)
    else:
        lon = 0.0

    b = a * math.sqrt(1.0 - e2)
    if p < a * 1e-16:
        # on the polar axis; the origin falls here and is given the north pole
        if z == 0.0:
            return 0.5 * math.pi, lon, -b
        return math.copysign(0.5 * math.pi, z), lon, abs(z) - b

    e = math.sqrt(e2)
    e_c = math.sqrt(1.0 - e2)
    P = p / a
    Z = abs(z) * e_c / a

    # zero height solution
    S = Z
    C = e_c * P

    prev_S = -1.0
    prev_C = -1.0
    for _ in range(_FUKUSHIMA_MAX_ITERATIONS):
        A = math.sqrt(S * S + C * C)
        D = Z * A * A * A + e2 * S * S * S
        F = P * A * A * A - e2 * C * C * C
        B = 1.5 * e * S * C * C * (A * (P * S - Z * C) - e * S * C)

        S = D * F - B * S
        C = F * F - B * C

        if S > C:
            C = C / S
            S = 1.0
        else:
            S = S / C
            C = 1.0

        if abs(S - prev_S) < _FUKUSHIMA_TOLERANCE and abs(C - prev_C) < _FUKUSHIMA_TOLERANCE:
            break
        prev_S = S
        prev_C = C

    A = math.sqrt(S * S + C * C)
    lat = math.copysign(1.0, z) * math.atan(S / (e_c * C))
    h = (p * e_c * C + abs(z) * S - a * e_c * A) / math.sqrt(e_c * e_c * C * C + S * S)
    return lat, lon, h


def ecef_to_geodetic(ecef, ellipsoid: Ellipsoid = WGS84) -> GeodeticCoordinate:
    """Convert ECEF coordinates to geodetic coordinates

    Parameters
    ----------
    ecef : EcefCoordinate or array_like
        ECEF position [x, y, z] in meters
    ellipsoid : Ellipsoid
        Reference ellipsoid, WGS84 by default

    Returns
    -------
    GeodeticCoordinate
        Geodetic latitude and longitude in radians, height in meters

    Notes
    -----
    Uses Fukushima's Halley-type iteration, which reaches double precision
    in two or three steps for terrestrial and orbital points. Points on the
    polar axis return latitude ±π/2, longitude 0 and height ``|z| - b``.
    The origin returns latitude +π/2 and height ``-b``.
    """
    x, y, z = np.asarray(ecef, dtype=float)
    lat, lon, h = _ecef2llh_kernel(float(x), float(y), float(z), ellipsoid.a, ellipsoid.e2)
    return GeodeticCoordinate(lat, lon, h, ellipsoid)


def geodetic_to_ecef(geodetic: GeodeticCoordinate,
                     ellipsoid: Optional[Ellipsoid] = None) -> EcefCoordinate:
    """Convert geodetic coordinates to ECEF coordinates

    Parameters
    ----------
    geodetic : GeodeticCoordinate
        Geodetic position
    ellipsoid : Ellipsoid, optional
        Overrides the ellipsoid carried by ``geodetic``

    Returns
    -------
    EcefCoordinate
        ECEF position in meters
    """
    ellipsoid = ellipsoid or geodetic.ellipsoid
    lat, lon, h = geodetic.latitude, geodetic.longitude, geodetic.height

    sin_lat = math.sin(lat)
    cos_lat = math.cos(lat)
    sin_lon = math.sin(lon)
    cos_lon = math.cos(lon)

    N = ellipsoid.a / math.sqrt(1.0 - ellipsoid.e2 * sin_lat ** 2)

    x = (N + h) * cos_lat * cos_lon
    y = (N + h) * cos_lat * sin_lon
    z = (N * (1.0 - ellipsoid.e2) + h) * sin_lat
    return EcefCoordinate(x, y, z)


def ecef2llh(xyz: np.ndarray, ellipsoid: Ellipsoid = WGS84) -> np.ndarray:
    """Array form of :func:`ecef_to_geodetic`, returns [lat, lon, height]"""
    return ecef_to_geodetic(xyz, ellipsoid).as_array()


def llh2ecef(llh: np.ndarray, ellipsoid: Ellipsoid = WGS84) -> np.ndarray:
    """Array form of :func:`geodetic_to_ecef`, takes [lat, lon, height]"""
    return geodetic_to_ecef(GeodeticCoordinate.from_array(llh, ellipsoid)).as_array()


def ecef_to_enu_matrix(lat: float, lon: float) -> np.ndarray:
    """
    Rotation matrix from ECEF to local ENU

    Parameters:
    -----------
    lat : float
        Geodetic latitude (rad)
    lon : float
        Longitude (rad)

    Returns:
    --------
    R : np.ndarray
        3x3 orthonormal matrix, rows are the east, north and up axes
    """
    sin_lat = math.sin(lat)
    cos_lat = math.cos(lat)
    sin_lon = math.sin(lon)
    cos_lon = math.cos(lon)

    return np.array([
        [-sin_lon, cos_lon, 0.0],
        [-sin_lat * cos_lon, -sin_lat * sin_lon, cos_lat],
        [cos_lat * cos_lon, cos_lat * sin_lon, sin_lat]
    ])


def ecef_to_ned_matrix(lat: float, lon: float) -> np.ndarray:
    """
    Rotation matrix from ECEF to local NED

    Parameters:
    -----------
    lat : float
        Geodetic latitude (rad)
    lon : float
        Longitude (rad)

    Returns:
    --------
    R : np.ndarray
        3x3 orthonormal matrix, rows are the north, east and down axes
    """
    sin_lat = math.sin(lat)
    cos_lat = math.cos(lat)
    sin_lon = math.sin(lon)
    cos_lon = math.cos(lon)

    return np.array([
        [-sin_lat * cos_lon, -sin_lat * sin_lon, cos_lat],
        [-sin_lon, cos_lon, 0.0],
        [-cos_lat * cos_lon, -cos_lat * sin_lon, -sin_lat]
    ])


def _reference_geodetic(reference, ellipsoid):
    if isinstance(reference, GeodeticCoordinate):
        return reference
    return ecef_to_geodetic(reference, ellipsoid)


def _reference_ecef(reference):
    if isinstance(reference, GeodeticCoordinate):
        return geodetic_to_ecef(reference).as_array()
    return np.asarray(reference, dtype=float)


def ecef_vector_to_ned(vector, reference, ellipsoid: Ellipsoid = WGS84) -> NedVector:
    """Rotate an ECEF vector (e.g. a velocity) into the NED frame at ``reference``"""
    ref = _reference_geodetic(reference, ellipsoid)
    n, e, d = ecef_to_ned_matrix(ref.latitude, ref.longitude) @ np.asarray(vector, dtype=float)
    return NedVector(float(n), float(e), float(d))


def ned_vector_to_ecef(ned, reference, ellipsoid: Ellipsoid = WGS84) -> np.ndarray:
    """Rotate a NED vector at ``reference`` into an ECEF vector"""
    ref = _reference_geodetic(reference, ellipsoid)
    return ecef_to_ned_matrix(ref.latitude, ref.longitude).T @ np.asarray(ned, dtype=float)


def ecef_to_ned(point, reference, ellipsoid: Ellipsoid = WGS84) -> NedVector:
    """
    Express an ECEF point in the local NED frame of a reference point

    Parameters:
    -----------
    point : EcefCoordinate or array_like
        ECEF position (m)
    reference : EcefCoordinate, GeodeticCoordinate or array_like
        Origin of the local frame
    ellipsoid : Ellipsoid
        Ellipsoid used to find the local vertical

    Returns:
    --------
    ned : NedVector
        Local NED coordinates [n, e, d] (m)
    """
    dx = np.asarray(point, dtype=float) - _reference_ecef(reference)
    return ecef_vector_to_ned(dx, reference, ellipsoid)


def ned_to_ecef(ned, reference, ellipsoid: Ellipsoid = WGS84) -> EcefCoordinate:
    """
    Convert local NED coordinates back to an ECEF point

    Parameters:
    -----------
    ned : NedVector or array_like
        Local NED coordinates [n, e, d] (m)
    reference : EcefCoordinate, GeodeticCoordinate or array_like
        Origin of the local frame
    ellipsoid : Ellipsoid
        Ellipsoid used to find the local vertical

    Returns:
    --------
    EcefCoordinate
        ECEF position (m)
    """
    return EcefCoordinate.from_array(
        _reference_ecef(reference) + ned_vector_to_ecef(ned, reference, ellipsoid))


def ecef_to_enu(point, reference, ellipsoid: Ellipsoid = WGS84) -> EnuVector:
    """Express an ECEF point in the local ENU frame of a reference point"""
    return ecef_to_ned(point, reference, ellipsoid).to_enu()


def enu_to_ecef(enu, reference, ellipsoid: Ellipsoid = WGS84) -> EcefCoordinate:
    """Convert local ENU coordinates back to an ECEF point"""
    e, n, u = np.asarray(enu, dtype=float)
    return ned_to_ecef(NedVector(n, e, -u), reference, ellipsoid)
