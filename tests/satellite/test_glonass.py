#!/usr/bin/env python3
"""Test suite for GLONASS ephemeris integration"""

import dataclasses
import math
import unittest

import numpy as np

from gnsskit.core.constants import J2_GLO, MU_GLO, OMGE_GLO, RE_GLO
from gnsskit.core.exceptions import EphemerisExpired, EphemerisNotYetValid, InvalidEphemeris
from gnsskit.core.time import GpsTime, add_duration
from gnsskit.satellite.ephemeris import (
    BroadcastEphemeris, Constellation, EphemerisStatus, select_ephemeris
)
from gnsskit.satellite.glonass import GlonassEphemeris, compute_glonass_state, glonass_clock
from gnsskit.satellite.satellite_position import earth_rotation_matrix


def make_glonass(**overrides):
    """Circular orbit at 25510 km, 64.8 deg inclination"""
    fields = dict(
        toe=GpsTime(2405, 105318.0),
        position=(13432829.1, 15817244.6, 14836912.4),
        velocity=(-1691.6871, -1133.4067, 2739.8905),
        acceleration=(1.86e-6, -9.31e-7, -2.79e-6),
        gamma=1.8189894e-12, tau=-1.3784e-04, fcn=1, prn=7, iod=45,
    )
    fields.update(overrides)
    return GlonassEphemeris(**fields)


def jacobi_integral(position, velocity):
    """Energy of the rotating frame J2 problem, constant along a trajectory"""
    x, y, z = position
    r = math.sqrt(x * x + y * y + z * z)
    potential = MU_GLO / r - 0.5 * MU_GLO * J2_GLO * RE_GLO ** 2 * (3 * z * z / r ** 5 - 1 / r ** 3)
    return (0.5 * float(np.dot(velocity, velocity))
            - 0.5 * OMGE_GLO ** 2 * (x * x + y * y) - potential)


class TestGlonassEphemeris(unittest.TestCase):

    def test_valid(self):
        eph = make_glonass()
        self.assertEqual(eph.status, EphemerisStatus.VALID)
        self.assertEqual(eph.constellation, Constellation.GLO)
        self.assertEqual(eph.name, "R07")
        self.assertIsInstance(eph.position, tuple)

    def test_status(self):
        self.assertEqual(make_glonass(valid=False).status, EphemerisStatus.INVALID)
        self.assertEqual(make_glonass(position=(0.0, 0.0, 0.0)).status, EphemerisStatus.INVALID)
        self.assertEqual(make_glonass(velocity=(math.nan, 0.0, 0.0)).status,
                         EphemerisStatus.INVALID)
        self.assertEqual(make_glonass(toe=GpsTime(0, 1800.0)).status, EphemerisStatus.WN_EQ_0)
        self.assertEqual(make_glonass(fit_interval=0.0).status,
                         EphemerisStatus.FIT_INTERVAL_EQ_0)
        self.assertEqual(make_glonass(health_bits=1).status, EphemerisStatus.UNHEALTHY)

    def test_keplerian_record_rejected(self):
        toe = GpsTime(2405, 105318.0)
        eph = BroadcastEphemeris(toe=toe, toc=toe, sqrta=5050.0, ecc=0.0, inc=1.13,
                                 inc_dot=0.0, omega0=0.5, omegadot=0.0, w=0.0, m0=0.7,
                                 dn=0.0, constellation=Constellation.GLO, prn=7)
        self.assertEqual(eph.status, EphemerisStatus.INVALID)
        with self.assertRaises(InvalidEphemeris):
            eph.check_usable(eph.toe)

    def test_immutable(self):
        eph = make_glonass()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            eph.tau = 0.0


class TestGlonassFitInterval(unittest.TestCase):

    def setUp(self):
        self.eph = make_glonass()

    def test_edges_inclusive(self):
        self.assertTrue(self.eph.is_valid_at(add_duration(self.eph.toe, 1800.0)))
        self.assertTrue(self.eph.is_valid_at(add_duration(self.eph.toe, -1800.0)))
        compute_glonass_state(self.eph, add_duration(self.eph.toe, 1800.0))

    def test_outside(self):
        with self.assertRaises(EphemerisExpired):
            compute_glonass_state(self.eph, add_duration(self.eph.toe, 1800.5))
        with self.assertRaises(EphemerisNotYetValid):
            compute_glonass_state(self.eph, add_duration(self.eph.toe, -1800.5))

    def test_invalid_raises(self):
        with self.assertRaises(InvalidEphemeris):
            compute_glonass_state(make_glonass(valid=False), self.eph.toe)

    def test_step_must_be_positive(self):
        with self.assertRaises(ValueError):
            compute_glonass_state(self.eph, self.eph.toe, step=0.0)

    def test_select(self):
        later = make_glonass(toe=add_duration(self.eph.toe, 1800.0), iod=46)
        t = add_duration(self.eph.toe, 1500.0)
        self.assertIs(select_ephemeris([self.eph, later], t, prn=7), later)
        self.assertIsNone(select_ephemeris([self.eph, later], t, prn=8))


class TestGlonassState(unittest.TestCase):
    """Integrated states against an independent Runge-Kutta evaluation"""

    def setUp(self):
        self.eph = make_glonass()

    def test_at_toe(self):
        state = compute_glonass_state(self.eph, self.eph.toe)
        np.testing.assert_array_equal(state.position.as_array(), self.eph.position)
        np.testing.assert_array_equal(state.velocity, self.eph.velocity)
        self.assertAlmostEqual(state.clock_bias, 1.3784e-04, delta=1e-15)
        self.assertEqual(state.clock_drift, 1.8189894e-12)
        self.assertTrue(math.isnan(state.eccentric_anomaly))
        self.assertEqual(state.iode, 45)
        self.assertEqual(state.computed_at, self.eph.toe)

    def test_reference_states(self):
        cases = [
            (900.0, (11745189.3399, 14787222.2288, 17150764.2786),
             (-2054.134105, -1144.704044, 2393.668722)),
            (-900.0, (14784279.8661, 16807487.5024, 12234928.7273),
             (-1309.437810, -1055.983015, 3032.922233)),
            (1800.0, (9745526.6322, 13775637.0591, 19131568.8647),
             (-2382.822625, -1093.226441, 2000.986211)),
            (75.0, (13304783.2535, 15732107.2361, 15041397.4914),
             (-1722.845142, -1136.846286, 2712.983913)),
        ]
        for dt, position, velocity in cases:
            with self.subTest(dt=dt):
                state = compute_glonass_state(self.eph, add_duration(self.eph.toe, dt))
                np.testing.assert_allclose(state.position.as_array(), position, rtol=0, atol=1e-3)
                np.testing.assert_allclose(state.velocity, velocity, rtol=0, atol=1e-6)

    def test_acceleration(self):
        state = compute_glonass_state(self.eph, add_duration(self.eph.toe, 900.0))
        np.testing.assert_allclose(state.acceleration, (-0.386464584, 0.023202273, -0.411837047),
                                   rtol=0, atol=1e-8)

    def test_clock(self):
        t = add_duration(self.eph.toe, 900.0)
        dts, ddts = glonass_clock(self.eph, t)
        self.assertAlmostEqual(dts, 1.378416370904600e-04, delta=1e-15)
        self.assertEqual(ddts, self.eph.gamma)
        dts, _ = glonass_clock(self.eph, add_duration(self.eph.toe, -900.0))
        self.assertAlmostEqual(dts, 1.378383629095400e-04, delta=1e-15)

    def test_energy_conserved(self):
        eph = make_glonass(acceleration=(0.0, 0.0, 0.0))
        initial = jacobi_integral(eph.position, eph.velocity)
        for dt in (-1800.0, -437.0, 600.0, 1800.0):
            with self.subTest(dt=dt):
                state = compute_glonass_state(eph, add_duration(eph.toe, dt))
                self.assertAlmostEqual(
                    jacobi_integral(state.position.as_array(), state.velocity), initial, delta=0.1)

    def test_forward_and_back(self):
        later = compute_glonass_state(self.eph, add_duration(self.eph.toe, 1200.0))
        eph = make_glonass(toe=add_duration(self.eph.toe, 1200.0),
                           position=later.position.as_array(), velocity=later.velocity)
        back = compute_glonass_state(eph, self.eph.toe)
        np.testing.assert_allclose(back.position.as_array(), self.eph.position, rtol=0, atol=1e-2)

    def test_step_size(self):
        t = add_duration(self.eph.toe, 900.0)
        coarse = compute_glonass_state(self.eph, t)
        fine = compute_glonass_state(self.eph, t, step=10.0)
        np.testing.assert_allclose(coarse.position.as_array(), fine.position.as_array(),
                                   rtol=0, atol=1e-2)

    def test_transit_time(self):
        t = add_duration(self.eph.toe, 300.0)
        state = compute_glonass_state(self.eph, t)
        rotated = compute_glonass_state(self.eph, t, transit_time=0.075)
        R = earth_rotation_matrix(OMGE_GLO * 0.075)
        np.testing.assert_allclose(rotated.position.as_array(), R @ state.position.as_array(),
                                   rtol=0, atol=1e-6)
        self.assertAlmostEqual(rotated.position.norm(), state.position.norm(), delta=1e-6)
        self.assertEqual(rotated.clock_bias, state.clock_bias)


if __name__ == '__main__':
    unittest.main()
