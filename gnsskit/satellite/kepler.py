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

"""Kepler's equation solver"""

import logging
import math
from dataclasses import dataclass

from numba import njit

from ..core.constants import KEPLER_MAX_ITERATIONS, KEPLER_TOLERANCE
from ..core.exceptions import PropagationDidNotConverge

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeplerOptions:
    """Convergence settings of the Kepler solver

    Attributes
    ----------
    tolerance : float
        Newton step size (rad) below which the iteration has converged
    max_iterations : int
        Maximum number of Newton steps
    """
    tolerance: float = KEPLER_TOLERANCE
    max_iterations: int = KEPLER_MAX_ITERATIONS

    def __post_init__(self):
        if not self.tolerance > 0.0:
            raise ValueError(f"tolerance must be positive, got {self.tolerance}")
        if isinstance(self.max_iterations, bool) or int(self.max_iterations) != self.max_iterations \
                or self.max_iterations < 1:
            raise ValueError(f"max_iterations must be a positive integer, got {self.max_iterations}")
        object.__setattr__(self, 'max_iterations', int(self.max_iterations))


DEFAULT_KEPLER_OPTIONS = KeplerOptions()


@njit(cache=True)
def _kepler_kernel(mean_anomaly, ecc, tolerance, max_iterations):
    """Newton iteration on E - e sin E = M

    Returns (E, iterations, converged, last step size).
    """
    E = mean_anomaly
    step = math.inf
    for i in range(max_iterations):
        step = (mean_anomaly - E + ecc * math.sin(E)) / (1.0 - ecc * math.cos(E))
        E += step
        if abs(step) < tolerance:
            return E, i + 1, True, abs(step)
    return E, max_iterations, False, abs(step)


def solve_kepler(mean_anomaly: float, ecc: float, options: KeplerOptions = None) -> float:
    """
    Solve Kepler's equation for the eccentric anomaly

    Parameters:
    -----------
    mean_anomaly : float
        Mean anomaly (rad)
    ecc : float
        Eccentricity, 0 <= e < 1
    options : KeplerOptions, optional
        Solver settings, defaults to tolerance 1e-13 rad and 10 iterations

    Returns:
    --------
    float
        Eccentric anomaly (rad)

    Raises:
    -------
    PropagationDidNotConverge
        If the Newton step does not fall below the tolerance within the
        iteration limit
    """
    options = options or DEFAULT_KEPLER_OPTIONS
    if not 0.0 <= ecc < 1.0:
        raise ValueError(f"Eccentricity must lie in [0, 1), got {ecc}")

    E, iterations, converged, step = _kepler_kernel(float(mean_anomaly), float(ecc),
                                                    options.tolerance, options.max_iterations)
    if not converged:
        raise PropagationDidNotConverge(
            f"Kepler iteration did not converge after {iterations} iterations "
            f"(M={mean_anomaly}, e={ecc}, last step {step:.3e} rad)",
            iterations=iterations, residual=step)

    logger.debug(f"Kepler converged in {iterations} iterations (step {step:.3e} rad)")
    return E


def mean_motion(eph) -> float:
    """Corrected mean motion n = sqrt(mu / A^3) + dn (rad/s)"""
    A = eph.sqrta * eph.sqrta
    return math.sqrt(eph.constellation.mu / (A * A * A)) + eph.dn


def eccentric_anomaly(eph, tk: float, options: KeplerOptions = None):
    """
    Eccentric anomaly of an ephemeris ``tk`` seconds after toe

    Returns:
    --------
    E : float
        Eccentric anomaly (rad)
    n : float
        Corrected mean motion (rad/s)
    """
    n = mean_motion(eph)
    M = eph.m0 + n * tk
    return solve_kepler(M, eph.ecc, options), n
