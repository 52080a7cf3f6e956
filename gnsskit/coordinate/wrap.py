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
Angle wrapping utilities.
"""

import numpy as np
from numba import njit

# Constants for angle wrapping
TWO_PI = 2 * np.pi


@njit(cache=True)
def wrap_to_2pi(angle):
    """
    Wrap an angle to the [0, 2π) range.

    Parameters
    ----------
    angle : float
        Angle in radians

    Returns
    -------
    float
        Equivalent angle in radians [0, 2π)
    """
    if 0.0 <= angle < TWO_PI:
        return angle
    wrapped = np.mod(angle, TWO_PI)
    if wrapped >= TWO_PI:
        wrapped = 0.0
    return wrapped


@njit(cache=True)
def wrap_to_pi(angle):
    """
    Wrap an angle to the (-π, π] range.

    Parameters
    ----------
    angle : float
        Angle in radians

    Returns
    -------
    float
        Equivalent angle in radians (-π, π]
    """
    if -np.pi < angle <= np.pi:
        return angle
    wrapped = np.mod(angle + np.pi, TWO_PI) - np.pi
    if wrapped <= -np.pi:
        wrapped = np.pi
    return wrapped
