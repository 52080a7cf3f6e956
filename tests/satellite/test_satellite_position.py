#!/usr/bin/env python3
"""Test suite for satellite position, velocity and clock computation"""

import math
import unittest

import numpy as np
from gnsskit.core.time import GpsTime
from gnsskit.satellite.clock import compute_satellite_clock, relativistic_constant
from gnsskit.satellite.ephemeris import BroadcastEphemeris, Constellation
from gnsskit.satellite.satellite_position import (
    compute_satellite_position, compute_satellite_state, earth_rotation_matrix
)


def make_ephemeris(**overrides):
    """GPS-like ephemeris with harmonic corrections"""
    toe = overrides.pop('toe', GpsTime(2200, 7200.0))
    fields = dict(
        toe=toe, toc=toe, sqrta=5153.6, ecc=0.01, inc=0.96, inc_dot=1e-10,
        omega0=-1.0, omegadot=-8e-9, w=0.5, m0=0.3, dn=4.5e-9,
        crs=-50.0, crc=250.0, cus=5e-6, cuc=-2e-6, cis=1e-7, cic=-5e-8,
        af0=1e-4, af1=-1e-12, af2=1e-20, prn=5, iode=33, iodc=45,
    )
    fields.update(overrides)
    return BroadcastEphemeris(**fields)


def make_circular_ephemeris(constellation=Constellation.GPS):
    """Circular equatorial orbit with no perturbations, toe at the start of a week"""
    toe = GpsTime(2200, 0.0)
    return BroadcastEphemeris(
        toe=toe, toc=toe, sqrta=5153.7, ecc=0.0, inc=0.0, inc_dot=0.0,
        omega0=0.0, omegadot=0.0, w=0.0, m0=0.0, dn=0.0,
        af0=1e-5, af1=1e-11, af2=0.0, constellation=constellation)


class TestCircularOrbit(unittest.TestCase):
    """Closed-form check on an unperturbed circular equatorial orbit

    With e = i = 0 and no corrections the ECEF position is
    A [cos(phi), sin(phi), 0] with phi = (n - omega_e) tk.
    """

    def setUp(self):
        self.eph = make_circular_ephemeris()
        self.A = self.eph.A
        mu = Constellation.GPS.mu
        self.rate = math.sqrt(mu / self.A ** 3) - Constellation.GPS.omega_e

    def test_position(self):
        for tk in (0.0, 600.0, 3600.0, -5400.0):
            with self.subTest(tk=tk):
                state = compute_satellite_state(self.eph, self.eph.toe + tk)
                phi = self.rate * tk
                expected = self.A * np.array([math.cos(phi), math.sin(phi), 0.0])
                np.testing.assert_allclose(state.position.as_array(), expected, atol=1e-6)

    def test_velocity(self):
        tk = 3600.0
        state = compute_satellite_state(self.eph, self.eph.toe + tk)
        phi = self.rate * tk
        expected = self.A * self.rate * np.array([-math.sin(phi), math.cos(phi), 0.0])
        np.testing.assert_allclose(state.velocity, expected, atol=1e-9)

    def test_acceleration(self):
        state = compute_satellite_state(self.eph, self.eph.toe + 3600.0)
        # centripetal acceleration in the rotating frame plus a small J2 term
        self.assertAlmostEqual(np.linalg.norm(state.acceleration),
                               self.A * self.rate ** 2, delta=1e-4)
        radial = state.position.as_array() / state.position.norm()
        self.assertLess(float(state.acceleration @ radial), 0.0)

    def test_clock(self):
        state = compute_satellite_state(self.eph, self.eph.toe + 3600.0)
        # no relativistic term on a circular orbit
        self.assertAlmostEqual(state.clock_bias, 1e-5 + 1e-11 * 3600.0, delta=1e-18)
        self.assertAlmostEqual(state.clock_drift, 1e-11, delta=1e-22)

    def test_beidou_uses_bdt_week(self):
        eph = make_circular_ephemeris(Constellation.BDS)
        tk = 600.0
        state = compute_satellite_state(eph, eph.toe + tk)

        # toe is 14 s before the end of the previous BDT week
        toe_tow = eph.toe.to_beidou().tow
        self.assertEqual(toe_tow, 604786.0)
        n = math.sqrt(Constellation.BDS.mu / self.A ** 3)
        omega_e = Constellation.BDS.omega_e
        phi = n * tk - omega_e * tk - omega_e * toe_tow
        expected = self.A * np.array([math.cos(phi), math.sin(phi), 0.0])
        np.testing.assert_allclose(state.position.as_array(), expected, atol=1e-5)


class TestSatelliteState(unittest.TestCase):
    """Test propagation of a perturbed orbit"""

    def setUp(self):
        self.eph = make_ephemeris()

    def test_radius_bounds(self):
        for tk in np.linspace(-7200.0, 7200.0, 9):
            state = compute_satellite_state(self.eph, self.eph.toe + float(tk))
            r = state.position.norm()
            self.assertGreater(r, self.eph.A * (1 - self.eph.ecc) - 1000.0)
            self.assertLess(r, self.eph.A * (1 + self.eph.ecc) + 1000.0)

    def test_velocity_matches_finite_difference(self):
        t = self.eph.toe + 1234.0
        state = compute_satellite_state(self.eph, t)
        before = compute_satellite_state(self.eph, t - 1.0).position.as_array()
        after = compute_satellite_state(self.eph, t + 1.0).position.as_array()
        np.testing.assert_allclose(state.velocity, (after - before) / 2.0, atol=1e-3)

    def test_acceleration_matches_finite_difference(self):
        t = self.eph.toe + 1234.0
        state = compute_satellite_state(self.eph, t)
        before = compute_satellite_state(self.eph, t - 1.0).velocity
        after = compute_satellite_state(self.eph, t + 1.0).velocity
        # the force model and the fitted broadcast orbit differ slightly
        np.testing.assert_allclose(state.acceleration, (after - before) / 2.0, atol=5e-3)

    def test_week_rollover(self):
        eph = make_ephemeris(toe=GpsTime(2200, 604000.0))
        t = GpsTime(2201, 0.0)
        state = compute_satellite_state(eph, t)
        before = compute_satellite_state(eph, GpsTime(2200, 604799.0)).position.as_array()
        after = compute_satellite_state(eph, GpsTime(2201, 1.0)).position.as_array()
        np.testing.assert_allclose(state.velocity, (after - before) / 2.0, atol=1e-3)

    def test_earth_rotation_correction(self):
        t = self.eph.toe + 600.0
        transit = 0.075
        state0 = compute_satellite_state(self.eph, t)
        state = compute_satellite_state(self.eph, t, transit_time=transit)

        R = earth_rotation_matrix(Constellation.GPS.omega_e * transit)
        np.testing.assert_allclose(state.position.as_array(),
                                   R @ state0.position.as_array(), atol=1e-6)
        np.testing.assert_allclose(state.velocity, R @ state0.velocity, atol=1e-9)
        self.assertAlmostEqual(state.position.norm(), state0.position.norm(), delta=1e-6)
        self.assertEqual(state.position.z, state0.position.z)

        # frame rotation moves the satellite westward by about omega_e * transit * rho
        shift = np.linalg.norm(state.position.as_array() - state0.position.as_array())
        rho_xy = math.hypot(state0.position.x, state0.position.y)
        self.assertAlmostEqual(shift, Constellation.GPS.omega_e * transit * rho_xy, delta=1e-3)

    def test_earth_rotation_matrix(self):
        R = earth_rotation_matrix(0.3)
        np.testing.assert_allclose(R @ R.T, np.eye(3), atol=1e-15)
        np.testing.assert_allclose(R @ np.array([1.0, 0.0, 0.0]),
                                   [math.cos(0.3), -math.sin(0.3), 0.0])

    def test_state_metadata(self):
        t = self.eph.toe + 60.0
        state = compute_satellite_state(self.eph, t)
        self.assertEqual(state.computed_at, t)
        self.assertEqual(state.iode, 33)
        self.assertEqual(state.iodc, 45)
        with self.assertRaises(ValueError):
            state.velocity[0] = 0.0

    def test_position_only(self):
        t = self.eph.toe + 60.0
        self.assertEqual(compute_satellite_position(self.eph, t),
                         compute_satellite_state(self.eph, t).position)


class TestBroadcastRecord(unittest.TestCase):
    """Evaluate a real GPS broadcast record

    G01 from a RINEX 2 navigation file, toe 2026-02-09 00:00:00 GPST.
    Reference values come from a separate evaluation of the IS-GPS-200
    user algorithm.
    """

    def setUp(self):
        toe = GpsTime(2405, 86400.0)
        self.eph = BroadcastEphemeris(
            toe=toe, toc=toe, sqrta=5.153630035400E+03, ecc=1.488578156568E-03,
            inc=9.584031772936E-01, inc_dot=-1.357199389945E-10,
            omega0=-2.769294893459E+00, omegadot=-8.224628303067E-09,
            w=3.752528970751E-02, m0=-2.685675915079E+00, dn=4.651622330170E-09,
            crs=-2.831250000000E+01, crc=2.753437500000E+02,
            cus=5.397945642471E-06, cuc=-1.467764377594E-06,
            cis=1.490116119385E-08, cic=-5.401670932770E-08,
            af0=3.345320001245E-04, af1=-5.002220859751E-12, af2=0.0,
            fit_interval=4 * 3600.0, prn=1, iode=29, iodc=541, ura=2.0,
            tgd=-8.847564458847E-09)

    def test_reference_states(self):
        cases = [
            (86400.0, (19465490.1902, 14922386.7533, -10282988.8843), 3.345334987624e-04),
            (90000.0, (12740374.1120, 14227042.1009, -18489602.5426), 3.345168223350e-04),
            (84600.0, (21261966.3770, 15190249.5290, -4968765.4935), 3.345416581188e-04),
        ]
        for tow, position, clock_bias in cases:
            with self.subTest(tow=tow):
                state = compute_satellite_state(self.eph, GpsTime(2405, tow))
                np.testing.assert_allclose(state.position.as_array(), position, rtol=0, atol=1.0)
                self.assertAlmostEqual(state.clock_bias, clock_bias, delta=1e-9)

    def test_orbit_radius(self):
        state = compute_satellite_state(self.eph, self.eph.toe)
        self.assertAlmostEqual(state.position.norm(), 26.6e6, delta=0.2e6)


class TestSatelliteClock(unittest.TestCase):
    """Test satellite clock bias and drift"""

    def setUp(self):
        self.eph = make_ephemeris()

    def test_matches_state(self):
        t = self.eph.toe + 900.0
        state = compute_satellite_state(self.eph, t)
        bias, drift = compute_satellite_clock(self.eph, t)
        self.assertEqual(bias, state.clock_bias)
        self.assertEqual(drift, state.clock_drift)

    def test_relativistic_term(self):
        t = self.eph.toe + 900.0
        state = compute_satellite_state(self.eph, t)
        bias_norel, _ = compute_satellite_clock(self.eph, t, relativistic=False)

        F = relativistic_constant(Constellation.GPS.mu)
        expected = F * self.eph.ecc * self.eph.sqrta * math.sin(state.eccentric_anomaly)
        self.assertAlmostEqual(state.clock_bias - bias_norel, expected, delta=1e-18)
        self.assertAlmostEqual(F, -4.442807633e-10, delta=1e-17)

    def test_polynomial(self):
        t = self.eph.toe + 900.0
        bias, drift = compute_satellite_clock(self.eph, t, relativistic=False)
        self.assertAlmostEqual(bias, 1e-4 - 1e-12 * 900.0 + 1e-20 * 900.0 ** 2, delta=1e-18)
        self.assertAlmostEqual(drift, -1e-12 + 2e-20 * 900.0, delta=1e-24)

    def test_drift_matches_finite_difference(self):
        t = self.eph.toe + 900.0
        _, drift = compute_satellite_clock(self.eph, t)
        before, _ = compute_satellite_clock(self.eph, t - 1.0)
        after, _ = compute_satellite_clock(self.eph, t + 1.0)
        self.assertAlmostEqual(drift, (after - before) / 2.0, delta=1e-15)


if __name__ == '__main__':
    unittest.main()
