import math
import unittest

import numpy as np
from gnsskit.coordinate.coordinates import EcefCoordinate, GeodeticCoordinate, NedVector
from gnsskit.coordinate.ellipsoid import GRS80, WGS84
from gnsskit.coordinate.transforms import (
    ecef2llh, llh2ecef, ecef_to_geodetic, geodetic_to_ecef,
    ecef_to_ned, ned_to_ecef, ecef_to_enu, enu_to_ecef,
    ecef_vector_to_ned, ned_vector_to_ecef,
    ecef_to_enu_matrix, ecef_to_ned_matrix
)
from gnsskit.core.constants import RE_WGS84, FE_WGS84


class TestGeodeticConversion(unittest.TestCase):

    def setUp(self):
        # Test points
        self.tokyo_llh = np.array([np.radians(35.6762), np.radians(139.6503), 40.0])  # Tokyo Tower
        self.newyork_llh = np.array([np.radians(40.7128), np.radians(-74.0060), 10.0])  # New York
        self.equator_llh = np.array([0.0, 0.0, 0.0])  # Equator, prime meridian
        self.pole_llh = np.array([np.radians(90.0), 0.0, 0.0])  # North pole

    def test_llh2ecef_ecef2llh_round_trip(self):
        test_points = [
            self.tokyo_llh,
            self.newyork_llh,
            self.equator_llh,
            self.pole_llh,
            np.array([np.radians(-35.0), np.radians(150.0), 100.0]),  # Southern hemisphere
            np.array([np.radians(-89.9), np.radians(-10.0), 2000.0]),  # Near south pole
            np.array([np.radians(12.0), np.radians(45.0), -100.0]),  # Below the ellipsoid
            np.array([np.radians(55.0), np.radians(-120.0), 20200e3]),  # GNSS orbit altitude
            np.array([np.radians(1e-7), np.radians(179.9999), 0.0]),  # Near the antimeridian
        ]

        for llh in test_points:
            xyz = llh2ecef(llh)
            llh_recovered = ecef2llh(xyz)

            np.testing.assert_allclose(llh_recovered[:2], llh[:2], rtol=1e-10, atol=1e-10,
                                       err_msg=f"Round-trip failed for lat/lon {llh}")
            np.testing.assert_allclose(llh_recovered[2], llh[2], rtol=1e-10, atol=1e-5,
                                       err_msg=f"Round-trip failed for height {llh}")

    def test_round_trip_grs80(self):
        geodetic = GeodeticCoordinate(np.radians(48.0), np.radians(11.0), 500.0, GRS80)
        recovered = ecef_to_geodetic(geodetic_to_ecef(geodetic), GRS80)

        self.assertIs(recovered.ellipsoid, GRS80)
        np.testing.assert_allclose(recovered.as_array(), geodetic.as_array(), atol=1e-6)

    def test_llh2ecef_known_values(self):
        # Point at equator, prime meridian, sea level
        xyz = llh2ecef(np.array([0.0, 0.0, 0.0]))
        np.testing.assert_allclose(xyz, [RE_WGS84, 0.0, 0.0], atol=1e-3)

        # North pole
        xyz = llh2ecef(np.array([np.pi / 2, 0.0, 0.0]))
        b = RE_WGS84 * np.sqrt(1 - FE_WGS84 * (2 - FE_WGS84))
        np.testing.assert_allclose(xyz, [0.0, 0.0, b], atol=1e-3)

    def test_ecef2llh_known_values(self):
        llh = ecef2llh(np.array([RE_WGS84, 0.0, 0.0]))
        self.assertAlmostEqual(llh[0], 0.0, places=10)
        self.assertAlmostEqual(llh[1], 0.0, places=10)
        self.assertAlmostEqual(llh[2], 0.0, places=3)

        llh = ecef2llh(np.array([0.0, RE_WGS84 + 100.0, 0.0]))
        self.assertAlmostEqual(llh[1], np.pi / 2, places=12)
        self.assertAlmostEqual(llh[2], 100.0, places=6)

    def test_polar_axis(self):
        geodetic = ecef_to_geodetic(EcefCoordinate(0.0, 0.0, 7.0e6))
        self.assertEqual(geodetic.latitude, math.pi / 2)
        self.assertEqual(geodetic.longitude, 0.0)
        self.assertAlmostEqual(geodetic.height, 7.0e6 - WGS84.b, places=6)

        geodetic = ecef_to_geodetic(EcefCoordinate(0.0, 0.0, -7.0e6))
        self.assertEqual(geodetic.latitude, -math.pi / 2)
        self.assertAlmostEqual(geodetic.height, 7.0e6 - WGS84.b, places=6)

    def test_origin(self):
        geodetic = ecef_to_geodetic(EcefCoordinate(0.0, 0.0, 0.0))
        self.assertEqual(geodetic.latitude, math.pi / 2)
        self.assertEqual(geodetic.longitude, 0.0)
        self.assertAlmostEqual(geodetic.height, -WGS84.b, places=6)

    def test_output_ranges(self):
        rng = np.random.default_rng(7)
        for _ in range(50):
            direction = rng.normal(size=3)
            xyz = direction / np.linalg.norm(direction) * rng.uniform(6.3e6, 3e7)
            geodetic = ecef_to_geodetic(xyz)
            self.assertTrue(-np.pi / 2 <= geodetic.latitude <= np.pi / 2)
            self.assertTrue(-np.pi < geodetic.longitude <= np.pi)
            np.testing.assert_allclose(geodetic_to_ecef(geodetic).as_array(), xyz, atol=1e-5)


class TestLocalFrames(unittest.TestCase):

    def setUp(self):
        self.ref_geodetic = GeodeticCoordinate.from_degrees(35.6762, 139.6503, 40.0)
        self.ref_ecef = geodetic_to_ecef(self.ref_geodetic)

    def test_rotation_matrix_orthonormal(self):
        for lat_deg in [0.0, 35.0, -60.0, 89.999999, 90.0, -90.0]:
            for lon_deg in [0.0, 139.65, -74.0, 180.0]:
                lat, lon = np.radians(lat_deg), np.radians(lon_deg)
                for R in (ecef_to_ned_matrix(lat, lon), ecef_to_enu_matrix(lat, lon)):
                    np.testing.assert_allclose(R @ R.T, np.eye(3), atol=1e-12)
                    self.assertAlmostEqual(np.linalg.det(R), 1.0, places=12)

    def test_rotation_matrix_continuous_at_pole(self):
        lon = np.radians(30.0)
        R_pole = ecef_to_ned_matrix(np.pi / 2, lon)
        R_near = ecef_to_ned_matrix(np.pi / 2 - 1e-9, lon)
        np.testing.assert_allclose(R_near, R_pole, atol=1e-8)

    def test_ned_enu_matrices_agree(self):
        lat, lon = self.ref_geodetic.latitude, self.ref_geodetic.longitude
        R_ned = ecef_to_ned_matrix(lat, lon)
        R_enu = ecef_to_enu_matrix(lat, lon)
        np.testing.assert_allclose(R_ned[0], R_enu[1])
        np.testing.assert_allclose(R_ned[1], R_enu[0])
        np.testing.assert_allclose(R_ned[2], -R_enu[2])

    def test_point_above_reference(self):
        above = geodetic_to_ecef(GeodeticCoordinate(
            self.ref_geodetic.latitude, self.ref_geodetic.longitude, 140.0))
        ned = ecef_to_ned(above, self.ref_ecef)
        np.testing.assert_allclose(ned.as_array(), [0.0, 0.0, -100.0], atol=1e-6)

        enu = ecef_to_enu(above, self.ref_geodetic)
        np.testing.assert_allclose(enu.as_array(), [0.0, 0.0, 100.0], atol=1e-6)

    def test_ned_round_trip(self):
        ned = NedVector(1234.5, -678.9, 42.0)
        point = ned_to_ecef(ned, self.ref_ecef)
        recovered = ecef_to_ned(point, self.ref_ecef)
        np.testing.assert_allclose(recovered.as_array(), ned.as_array(), atol=1e-6)

        np.testing.assert_allclose(ecef_to_ned(self.ref_ecef, self.ref_ecef).as_array(),
                                   np.zeros(3), atol=1e-9)

    def test_enu_round_trip(self):
        point = self.ref_ecef + np.array([100.0, -250.0, 300.0])
        enu = ecef_to_enu(point, self.ref_geodetic)
        recovered = enu_to_ecef(enu, self.ref_geodetic)
        np.testing.assert_allclose(recovered.as_array(), point.as_array(), atol=1e-6)

        np.testing.assert_allclose(enu.to_ned().as_array(),
                                   ecef_to_ned(point, self.ref_geodetic).as_array(), atol=1e-9)

    def test_vector_rotation(self):
        velocity = np.array([10.0, -20.0, 5.0])
        ned = ecef_vector_to_ned(velocity, self.ref_ecef)
        self.assertAlmostEqual(ned.norm(), np.linalg.norm(velocity), places=10)
        np.testing.assert_allclose(ned_vector_to_ecef(ned, self.ref_ecef), velocity, atol=1e-10)

    def test_north_at_equator(self):
        ned = ecef_vector_to_ned(np.array([0.0, 0.0, 1.0]),
                                 GeodeticCoordinate(0.0, 0.0, 0.0))
        np.testing.assert_allclose(ned.as_array(), [1.0, 0.0, 0.0], atol=1e-15)


if __name__ == '__main__':
    unittest.main()
