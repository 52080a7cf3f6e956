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
gnsskit - GNSS Core Library

Time scales, reference frames, broadcast ephemeris propagation and
receiver-satellite geometry, as building blocks for positioning engines.
"""

__version__ = "1.0.0"
__author__ = "gnsskit Development Team"
__title__ = "gnsskit"
__description__ = "GNSS time, frame, ephemeris and geometry core library"

from .core import *
from .coordinate import *
from .satellite import *
from .geometry import *
from .config import GnssConfig, default_config
