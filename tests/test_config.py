#!/usr/bin/env python3
"""Test suite for library configuration"""

import dataclasses
import os
import tempfile
import unittest

from gnsskit.config import GnssConfig, default_config
from gnsskit.coordinate.ellipsoid import GRS80, WGS84
from gnsskit.core.leap_seconds import LeapSecondTable, default_leap_second_table
from gnsskit.core.time import GpsTime
from gnsskit.core.utc import to_gps, to_utc
from gnsskit.satellite.kepler import DEFAULT_KEPLER_OPTIONS, KeplerOptions


class TestGnssConfig(unittest.TestCase):
    """Test configuration construction and use"""

    def test_defaults(self):
        config = default_config()
        self.assertIs(config.ellipsoid, WGS84)
        self.assertIs(config.leap_seconds, default_leap_second_table())
        self.assertEqual(config.kepler, DEFAULT_KEPLER_OPTIONS)
        self.assertTrue(config.relativistic_clock)

    def test_from_dict(self):
        config = GnssConfig.from_dict({
            'ellipsoid': 'grs80',
            'kepler': {'tolerance': 1e-12, 'max_iterations': 20},
            'relativistic_clock': False,
        })
        self.assertIs(config.ellipsoid, GRS80)
        self.assertEqual(config.kepler, KeplerOptions(1e-12, 20))
        self.assertFalse(config.relativistic_clock)

    def test_from_dict_rejects_unknown(self):
        with self.assertRaises(ValueError):
            GnssConfig.from_dict({'elipsoid': 'WGS84'})
        with self.assertRaises(ValueError):
            GnssConfig.from_dict({'ellipsoid': 'clarke1866'})
        with self.assertRaises(ValueError):
            GnssConfig.from_dict({'kepler': {'max_iterations': 0}})

    def test_leap_second_file(self):
        fd, path = tempfile.mkstemp(suffix='.list')
        with os.fdopen(fd, 'w', encoding='utf-8') as fh:
            fh.write("#@\t3881174400\n"
                     "2571782400\t19\t# 1 Jan 1980\n"
                     "3692217600\t37\t# 1 Jan 2017\n")
        try:
            config = GnssConfig.from_dict({'leap_second_file': path})
        finally:
            os.remove(path)

        self.assertIsInstance(config.leap_seconds, LeapSecondTable)
        self.assertEqual(len(config.leap_seconds), 2)

        # components are handed the configured source explicitly
        t = GpsTime(2200, 1000.0)
        self.assertEqual(to_gps(to_utc(t, config.leap_seconds), config.leap_seconds), t)

    def test_immutable(self):
        config = default_config()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            config.relativistic_clock = False

    def test_replace(self):
        config = default_config().replace(ellipsoid=GRS80)
        self.assertIs(config.ellipsoid, GRS80)
        self.assertIs(default_config().ellipsoid, WGS84)


if __name__ == '__main__':
    unittest.main()
