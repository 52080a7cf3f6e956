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

"""Reference frame (datum) transformations

Positions on the crust move with the tectonic plates, so a coordinate is
only meaningful together with its reference frame and the epoch at which it
was determined. Global frames (ITRF) are not tied to any plate; regional
frames (ETRF, NAD83, DREF91) are fixed to one and cancel most of its motion.

Frames are related by 15-parameter time-dependent Helmert transformations.
A :class:`TransformationRepository` holds a graph of them and chains the
fewest transformations needed between two frames. Transforming changes the
position and velocity of a :class:`FrameCoordinate` but never its epoch; use
:meth:`FrameCoordinate.adjust_epoch` to move it in time.

Example:
    >>> repo = TransformationRepository.from_builtin()
    >>> coord = FrameCoordinate(ReferenceFrame.ITRF2014,
    ...                         EcefCoordinate(4027894.006, 307045.600, 4919474.910),
    ...                         epoch, velocity=[0.01, 0.2, 0.03])
    >>> etrf = repo.transform(coord, ReferenceFrame.ETRF2014)
"""

import logging
import math
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Tuple, Union

import numpy as np

from ..core.exceptions import TransformationNotFound
from ..core.time import GpsTime
from ..core.utc import fractional_year
from .coordinates import EcefCoordinate

logger = logging.getLogger(__name__)

# Parameter units to SI
TRANSLATE_SCALE = 1.0e-3                          # mm -> m
SCALE_SCALE = 1.0e-9                              # ppb -> unitless
ROTATE_SCALE = math.pi / 180.0 * 0.001 / 3600.0   # mas -> rad


class ReferenceFrame(Enum):
    """Well known reference frames

    Frames not listed here are represented by their name as a plain string,
    see :func:`parse_reference_frame`.
    """
    ITRF88 = "ITRF88"
    ITRF89 = "ITRF89"
    ITRF90 = "ITRF90"
    ITRF91 = "ITRF91"
    ITRF92 = "ITRF92"
    ITRF93 = "ITRF93"
    ITRF94 = "ITRF94"
    ITRF96 = "ITRF96"
    ITRF97 = "ITRF97"
    ITRF2000 = "ITRF2000"
    ITRF2005 = "ITRF2005"
    ITRF2008 = "ITRF2008"
    ITRF2014 = "ITRF2014"
    ITRF2020 = "ITRF2020"
    ETRF89 = "ETRF89"
    ETRF90 = "ETRF90"
    ETRF91 = "ETRF91"
    ETRF92 = "ETRF92"
    ETRF93 = "ETRF93"
    ETRF94 = "ETRF94"
    ETRF96 = "ETRF96"
    ETRF97 = "ETRF97"
    ETRF2000 = "ETRF2000"
    ETRF2005 = "ETRF2005"
    ETRF2014 = "ETRF2014"
    ETRF2020 = "ETRF2020"
    NAD83_2011 = "NAD83(2011)"
    NAD83_CSRS = "NAD83(CSRS)"
    DREF91_R2016 = "DREF91(R2016)"
    WGS84_G1762 = "WGS84(G1762)"
    WGS84_G2139 = "WGS84(G2139)"
    WGS84_G2296 = "WGS84(G2296)"

    def __str__(self):
        return self.value


FrameLike = Union[ReferenceFrame, str]


def parse_reference_frame(name: FrameLike) -> FrameLike:
    """
    Resolve a frame name

    Parameters:
    -----------
    name : ReferenceFrame or str
        Member, member name (``"NAD83_2011"``) or label (``"NAD83(2011)"``)

    Returns:
    --------
    ReferenceFrame or str
        The matching member, or the stripped name itself for a custom frame
    """
    if isinstance(name, ReferenceFrame):
        return name
    if not isinstance(name, str) or not name.strip():
        raise ValueError(f"Invalid reference frame name {name!r}")
    name = name.strip()
    if name in ReferenceFrame.__members__:
        return ReferenceFrame[name]
    try:
        return ReferenceFrame(name)
    except ValueError:
        return name


def _triple(value) -> Tuple[float, float, float]:
    x, y, z = (float(v) for v in value)
    return x, y, z


def _helmert_matrix(s: float, r: np.ndarray) -> np.ndarray:
    rx, ry, rz = r
    return np.array([
        [s, -rz, ry],
        [rz, s, -rx],
        [-ry, rx, s],
    ])


@dataclass(frozen=True)
class HelmertParams:
    """
    15-parameter time-dependent Helmert transformation

    Each parameter evolves linearly, ``p(t) = p + p_dot * (t - epoch)``, and
    a position maps as ``X2 = X1 + T + M X1`` with::

        M = | s   -rz   ry |
            | rz   s   -rx |
            | -ry  rx   s  |

    Rotation signs follow the IERS convention.

    Attributes
    ----------
    epoch : float
        Reference epoch of the parameters (decimal year)
    t, t_dot : tuple of float
        Translation (mm) and its rate (mm/yr)
    s, s_dot : float
        Scale (ppb) and its rate (ppb/yr)
    r, r_dot : tuple of float
        Rotation (mas) and its rate (mas/yr)
    """
    epoch: float
    t: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    t_dot: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    s: float = 0.0
    s_dot: float = 0.0
    r: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    r_dot: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self):
        for name in ('t', 't_dot', 'r', 'r_dot'):
            object.__setattr__(self, name, _triple(getattr(self, name)))
        for name in ('epoch', 's', 's_dot'):
            object.__setattr__(self, name, float(getattr(self, name)))

    @classmethod
    def from_dict(cls, params: dict) -> 'HelmertParams':
        """Create from flat ``tx, tx_dot, ..., rz_dot, epoch`` keys, missing terms are zero"""
        unknown = set(params) - {'epoch', 's', 's_dot'} - {
            f"{kind}{axis}{rate}" for kind in 'tr' for axis in 'xyz' for rate in ('', '_dot')}
        if unknown:
            raise ValueError(f"Unknown Helmert parameters: {sorted(unknown)}")
        if 'epoch' not in params:
            raise ValueError("Helmert parameters need a reference epoch")

        def triple(kind, rate=''):
            return tuple(params.get(f"{kind}{axis}{rate}", 0.0) for axis in 'xyz')

        return cls(params['epoch'], triple('t'), triple('t', '_dot'),
                   params.get('s', 0.0), params.get('s_dot', 0.0),
                   triple('r'), triple('r', '_dot'))

    def invert(self) -> 'HelmertParams':
        """Reverse transformation, every term negated"""
        def neg(v):
            return tuple(-c for c in v)

        return HelmertParams(self.epoch, neg(self.t), neg(self.t_dot), -self.s, -self.s_dot,
                             neg(self.r), neg(self.r_dot))

    def transform_position(self, position, epoch: float) -> EcefCoordinate:
        """Transform an ECEF position at a decimal year epoch"""
        dt = epoch - self.epoch
        t = (np.array(self.t) + np.array(self.t_dot) * dt) * TRANSLATE_SCALE
        s = (self.s + self.s_dot * dt) * SCALE_SCALE
        r = (np.array(self.r) + np.array(self.r_dot) * dt) * ROTATE_SCALE

        xyz = np.asarray(position, dtype=float)
        return EcefCoordinate.from_array(xyz + t + _helmert_matrix(s, r) @ xyz)

    def transform_velocity(self, velocity, position) -> np.ndarray:
        """Transform an ECEF velocity (m/yr) of a point at ``position``"""
        t = np.array(self.t_dot) * TRANSLATE_SCALE
        s = self.s_dot * SCALE_SCALE
        r = np.array(self.r_dot) * ROTATE_SCALE

        return (np.asarray(velocity, dtype=float) + t
                + _helmert_matrix(s, r) @ np.asarray(position, dtype=float))

    def transform(self, position, velocity, epoch: float):
        """Transform a position and an optional velocity

        The velocity term is evaluated at the transformed position.
        """
        position = self.transform_position(position, epoch)
        if velocity is not None:
            velocity = self.transform_velocity(velocity, position)
        return position, velocity


def _frozen(vec) -> np.ndarray:
    vec = np.array(vec, dtype=float)
    if vec.shape != (3,):
        raise ValueError(f"Expected a 3-vector, got shape {vec.shape}")
    vec.flags.writeable = False
    return vec


@dataclass(frozen=True, eq=False)
class FrameCoordinate:
    """
    Position in a named reference frame at an epoch

    Attributes
    ----------
    reference_frame : ReferenceFrame or str
        Frame of the position, resolved with :func:`parse_reference_frame`
    position : EcefCoordinate
        ECEF position (m)
    epoch : GpsTime
        Epoch the position refers to
    velocity : np.ndarray, optional
        ECEF velocity of the point (m/yr)
    """
    reference_frame: FrameLike
    position: EcefCoordinate
    epoch: GpsTime
    velocity: Optional[np.ndarray] = field(default=None)

    def __post_init__(self):
        object.__setattr__(self, 'reference_frame', parse_reference_frame(self.reference_frame))
        if not isinstance(self.position, EcefCoordinate):
            object.__setattr__(self, 'position', EcefCoordinate.from_array(self.position))
        if self.velocity is not None:
            object.__setattr__(self, 'velocity', _frozen(self.velocity))

    def adjust_epoch(self, epoch: GpsTime, leap_seconds=None) -> 'FrameCoordinate':
        """Move the position to another epoch along its velocity

        A coordinate without velocity keeps its position.
        """
        dt = fractional_year(epoch, leap_seconds) - fractional_year(self.epoch, leap_seconds)
        position = self.position
        if self.velocity is not None:
            position = position + dt * self.velocity
        return FrameCoordinate(self.reference_frame, position, epoch, self.velocity)


@dataclass(frozen=True)
class Transformation:
    """Helmert transformation from one reference frame to another"""
    source: FrameLike
    destination: FrameLike
    params: HelmertParams

    def __post_init__(self):
        object.__setattr__(self, 'source', parse_reference_frame(self.source))
        object.__setattr__(self, 'destination', parse_reference_frame(self.destination))

    @classmethod
    def from_dict(cls, data: dict) -> 'Transformation':
        """
        Create from a mapping

        ``source``/``from`` and ``destination``/``to`` name the frames;
        ``params`` holds the flat Helmert terms accepted by
        :meth:`HelmertParams.from_dict`.
        """
        source = data.get('source', data.get('from'))
        destination = data.get('destination', data.get('to'))
        if source is None or destination is None or 'params' not in data:
            raise ValueError("Transformation needs source, destination and params")
        return cls(source, destination, HelmertParams.from_dict(data['params']))

    def invert(self) -> 'Transformation':
        return Transformation(self.destination, self.source, self.params.invert())

    def transform(self, coord: FrameCoordinate, leap_seconds=None) -> FrameCoordinate:
        """
        Transform a coordinate, keeping its epoch

        Raises:
        -------
        TransformationNotFound
            If the coordinate is not in the source frame
        """
        if coord.reference_frame != self.source:
            raise TransformationNotFound(coord.reference_frame, self.destination)
        position, velocity = self.params.transform(
            coord.position, coord.velocity, fractional_year(coord.epoch, leap_seconds))
        return FrameCoordinate(self.destination, position, coord.epoch, velocity)


class TransformationRepository:
    """
    Graph of reference frame transformations

    Every added transformation is stored with its inverse. A later
    transformation between the same pair of frames replaces the earlier one.
    """

    def __init__(self, transformations: Iterable[Transformation] = ()):
        self._graph = {}
        self.extend(transformations)

    @classmethod
    def from_builtin(cls) -> 'TransformationRepository':
        return cls(builtin_transformations())

    def add_transformation(self, transformation: Transformation):
        src, dst = transformation.source, transformation.destination
        self._graph.setdefault(src, {})[dst] = transformation.params
        self._graph.setdefault(dst, {})[src] = transformation.params.invert()

    def extend(self, transformations: Iterable[Transformation]):
        for transformation in transformations:
            self.add_transformation(transformation)

    def __len__(self):
        """Number of stored directed transformations, inverses included"""
        return sum(len(neighbors) for neighbors in self._graph.values())

    def shortest_path(self, source: FrameLike, destination: FrameLike) -> list:
        """
        Fewest-step chain of Helmert parameters between two frames

        Returns:
        --------
        list of HelmertParams
            Parameters to apply in order; empty when the frames are equal

        Raises:
        -------
        TransformationNotFound
            If the frames are not connected
        """
        source, destination = parse_reference_frame(source), parse_reference_frame(destination)
        if source == destination:
            return []

        visited = {source}
        queue = deque([(source, [])])
        while queue:
            frame, path = queue.popleft()
            for neighbor, params in self._graph.get(frame, {}).items():
                if neighbor in visited:
                    continue
                if neighbor == destination:
                    return path + [params]
                visited.add(neighbor)
                queue.append((neighbor, path + [params]))

        raise TransformationNotFound(source, destination)

    def transform(self, coord: FrameCoordinate, destination: FrameLike,
                  leap_seconds=None) -> FrameCoordinate:
        """
        Transform a coordinate into another frame, keeping its epoch

        Parameters:
        -----------
        coord : FrameCoordinate
            Coordinate to transform
        destination : ReferenceFrame or str
            Target frame
        leap_seconds : LeapSecondTable or UtcParams, optional
            Source used to express the epoch as a decimal UTC year

        Returns:
        --------
        FrameCoordinate
            Coordinate in ``destination`` at the same epoch
        """
        destination = parse_reference_frame(destination)
        path = self.shortest_path(coord.reference_frame, destination)
        logger.debug(f"{coord.reference_frame} -> {destination} in {len(path)} step(s)")

        epoch = fractional_year(coord.epoch, leap_seconds)
        position, velocity = coord.position, coord.velocity
        for params in path:
            position, velocity = params.transform(position, velocity, epoch)
        return FrameCoordinate(destination, position, coord.epoch, velocity)


def _row(source, destination, epoch, t, t_dot, s, s_dot, r=(0.0, 0.0, 0.0),
         r_dot=(0.0, 0.0, 0.0)) -> Transformation:
    return Transformation(source, destination, HelmertParams(epoch, t, t_dot, s, s_dot, r, r_dot))


_F = ReferenceFrame
_ITRF_R = (0.0, 0.0, 0.36)
_ITRF_R_DOT = (0.0, 0.0, 0.02)
_NAD83_R = (-26.78138, 0.42027, -10.93206)
_NAD83_R_DOT = (-0.06667, 0.75744, 0.05133)
_ZERO = (0.0, 0.0, 0.0)

# ITRF2020 to earlier ITRF realizations (IERS), ITRS to ETRS89 (EUREF
# TN-1), NAD83 (NGS/NRCan) and DREF91(R2016) (AdV)
BUILTIN_TRANSFORMATIONS = (
    _row(_F.ITRF2020, _F.ITRF2014, 2015.0, (-1.4, -0.9, 1.4), (0.0, -0.1, 0.2), -0.42, 0.0),
    _row(_F.ITRF2020, _F.ITRF2008, 2015.0, (0.2, 1.0, 3.3), (0.0, -0.1, 0.1), -0.29, 0.03),
    _row(_F.ITRF2020, _F.ITRF2005, 2015.0, (2.7, 0.1, -1.4), (0.3, -0.1, 0.1), 0.65, 0.03),
    _row(_F.ITRF2020, _F.ITRF2000, 2015.0, (-0.2, 0.8, -34.2), (0.1, 0.0, -1.7), 2.25, 0.11),
    _row(_F.ITRF2020, _F.ITRF97, 2015.0, (6.5, -3.9, -77.9), (0.1, -0.6, -3.1), 3.98, 0.12,
         _ITRF_R, _ITRF_R_DOT),
    _row(_F.ITRF2020, _F.ITRF96, 2015.0, (6.5, -3.9, -77.9), (0.1, -0.6, -3.1), 3.98, 0.12,
         _ITRF_R, _ITRF_R_DOT),
    _row(_F.ITRF2020, _F.ITRF94, 2015.0, (6.5, -3.9, -77.9), (0.1, -0.6, -3.1), 3.98, 0.12,
         _ITRF_R, _ITRF_R_DOT),
    _row(_F.ITRF2020, _F.ITRF93, 2015.0, (-65.8, 1.9, -71.3), (-2.8, -0.2, -2.3), 4.47, 0.12,
         (-3.36, -4.33, 0.75), (-0.11, -0.19, 0.07)),
    _row(_F.ITRF2020, _F.ITRF92, 2015.0, (14.5, -1.9, -85.9), (0.1, -0.6, -3.1), 3.27, 0.12,
         _ITRF_R, _ITRF_R_DOT),
    _row(_F.ITRF2020, _F.ITRF91, 2015.0, (26.5, 12.1, -91.9), (0.1, -0.6, -3.1), 4.67, 0.12,
         _ITRF_R, _ITRF_R_DOT),
    _row(_F.ITRF2020, _F.ITRF90, 2015.0, (24.5, 8.1, -107.9), (0.1, -0.6, -3.1), 4.97, 0.12,
         _ITRF_R, _ITRF_R_DOT),
    _row(_F.ITRF2020, _F.ITRF89, 2015.0, (29.5, 32.1, -145.9), (0.1, -0.6, -3.1), 8.37, 0.12,
         _ITRF_R, _ITRF_R_DOT),
    _row(_F.ITRF2020, _F.ITRF88, 2015.0, (24.5, -3.9, -169.9), (0.1, -0.6, -3.1), 11.47, 0.12,
         (0.10, 0.0, 0.36), _ITRF_R_DOT),
    _row(_F.ITRF2020, _F.ETRF2020, 1989.0, _ZERO, _ZERO, 0.0, 0.0,
         _ZERO, (0.086, 0.519, -0.753)),
    _row(_F.ITRF2014, _F.ETRF2014, 1989.0, _ZERO, _ZERO, 0.0, 0.0,
         _ZERO, (0.085, 0.531, -0.770)),
    _row(_F.ITRF2005, _F.ETRF2005, 1989.0, (56.0, 48.0, -37.0), _ZERO, 0.0, 0.0,
         _ZERO, (0.054, 0.518, -0.781)),
    _row(_F.ITRF2000, _F.ETRF2000, 1989.0, (54.0, 51.0, -48.0), _ZERO, 0.0, 0.0,
         _ZERO, (0.081, 0.490, -0.792)),
    _row(_F.ITRF97, _F.ETRF97, 1989.0, (41.0, 41.0, -49.0), _ZERO, 0.0, 0.0,
         _ZERO, (0.200, 0.500, -0.650)),
    _row(_F.ITRF96, _F.ETRF96, 1989.0, (41.0, 41.0, -49.0), _ZERO, 0.0, 0.0,
         _ZERO, (0.200, 0.500, -0.650)),
    _row(_F.ITRF94, _F.ETRF94, 1989.0, (41.0, 41.0, -49.0), _ZERO, 0.0, 0.0,
         _ZERO, (0.200, 0.500, -0.650)),
    _row(_F.ITRF93, _F.ETRF93, 1989.0, (19.0, 53.0, -21.0), _ZERO, 0.0, 0.0,
         _ZERO, (0.320, 0.780, -0.670)),
    _row(_F.ITRF92, _F.ETRF92, 1989.0, (38.0, 40.0, -37.0), _ZERO, 0.0, 0.0,
         _ZERO, (0.210, 0.520, -0.680)),
    _row(_F.ITRF91, _F.ETRF91, 1989.0, (21.0, 25.0, -37.0), _ZERO, 0.0, 0.0,
         _ZERO, (0.210, 0.520, -0.680)),
    _row(_F.ITRF90, _F.ETRF90, 1989.0, (19.0, 28.0, -23.0), _ZERO, 0.0, 0.0,
         _ZERO, (0.110, 0.570, -0.710)),
    _row(_F.ITRF89, _F.ETRF89, 1989.0, _ZERO, _ZERO, 0.0, 0.0,
         _ZERO, (0.110, 0.570, -0.710)),
    _row(_F.ITRF2014, _F.NAD83_2011, 2010.0, (1005.30, -1909.21, -541.57), (0.79, -0.60, -1.44),
         0.36891, -0.07201, _NAD83_R, _NAD83_R_DOT),
    _row(_F.ITRF2008, _F.NAD83_CSRS, 2010.0, (1003.70, -1911.11, -543.97), (0.79, -0.60, -1.34),
         0.38891, -0.10201, _NAD83_R, _NAD83_R_DOT),
    _row(_F.ITRF2014, _F.NAD83_CSRS, 2010.0, (1005.30, -1909.21, -541.57), (0.79, -0.60, -1.44),
         0.36891, -0.07201, _NAD83_R, _NAD83_R_DOT),
    _row(_F.ITRF2020, _F.NAD83_CSRS, 2010.0, (1003.90, -1909.61, -541.17), (0.79, -0.70, -1.24),
         -0.05109, -0.07201, _NAD83_R, _NAD83_R_DOT),
    _row(_F.ITRF2020, _F.DREF91_R2016, 2021.0, (-3.0821, 95.0769, -73.5435),
         (-20.3181, -20.3593, 23.6394), 7.4874, -0.3306,
         (2.5445, 17.6078, -27.6123), (-0.5966, 1.4967, -0.5284)),
)


def builtin_transformations() -> list:
    """Copy of the transformations shipped with the library"""
    return list(BUILTIN_TRANSFORMATIONS)
