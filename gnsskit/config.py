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

"""Library configuration

A :class:`GnssConfig` bundles the read-only inputs shared by the engines:
the reference ellipsoid, the leap second source and the Kepler solver
settings. It is an immutable value that callers hand to the functions that
need it; there is no global mutable configuration.

Example config dict:
{
    'ellipsoid': 'WGS84',
    'leap_second_file': '/usr/share/zoneinfo/leap-seconds.list',
    'kepler': {'tolerance': 1e-13, 'max_iterations': 10},
    'relativistic_clock': True,
}
"""

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Union

from .coordinate.ellipsoid import WGS84, Ellipsoid, get_ellipsoid
from .core.leap_seconds import LeapSecondTable, UtcParams, default_leap_second_table
from .satellite.kepler import DEFAULT_KEPLER_OPTIONS, KeplerOptions

logger = logging.getLogger(__name__)

_KNOWN_KEYS = {'ellipsoid', 'leap_second_file', 'kepler', 'relativistic_clock'}


@dataclass(frozen=True)
class GnssConfig:
    """Immutable configuration of the time, frame and propagation engines

    Attributes
    ----------
    ellipsoid : Ellipsoid
        Reference ellipsoid for geodetic conversions and local frames
    leap_seconds : LeapSecondTable or UtcParams
        Source of the GPS-UTC offset
    kepler : KeplerOptions
        Kepler solver tolerance and iteration limit
    relativistic_clock : bool
        Apply the relativistic term to satellite clock corrections
    """
    ellipsoid: Ellipsoid = WGS84
    leap_seconds: Union[LeapSecondTable, UtcParams] = field(default_factory=default_leap_second_table)
    kepler: KeplerOptions = DEFAULT_KEPLER_OPTIONS
    relativistic_clock: bool = True

    @classmethod
    def from_dict(cls, config: dict) -> 'GnssConfig':
        """Build a configuration from a plain dictionary (e.g. parsed JSON/YAML)"""
        unknown = set(config) - _KNOWN_KEYS
        if unknown:
            raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

        kwargs = {}
        if 'ellipsoid' in config:
            kwargs['ellipsoid'] = get_ellipsoid(config['ellipsoid'])
        if config.get('leap_second_file'):
            kwargs['leap_seconds'] = LeapSecondTable.from_iers_file(config['leap_second_file'])
        if 'kepler' in config:
            kwargs['kepler'] = KeplerOptions(**config['kepler'])
        if 'relativistic_clock' in config:
            kwargs['relativistic_clock'] = bool(config['relativistic_clock'])

        cfg = cls(**kwargs)
        logger.debug(f"Configuration loaded: {cfg}")
        return cfg

    def replace(self, **changes) -> 'GnssConfig':
        """Return a copy with some fields replaced"""
        return dataclasses.replace(self, **changes)


def default_config() -> GnssConfig:
    """Configuration with WGS84, the built-in leap second table and default solver settings"""
    return GnssConfig()
