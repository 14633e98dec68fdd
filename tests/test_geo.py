import math

import pytest

from depotline.geo import EARTH_RADIUS_KM, distance_km


class TestDistance:
    def test_identical_points_are_zero(self):
        assert distance_km(48.85, 2.35, 48.85, 2.35) == 0

    @pytest.mark.parametrize(
        "a, b",
        [
            ((33.9425, -118.408056), (40.639722, -73.778889)),
            ((-23.435556, -46.473056), (22.308889, 113.914444)),
            ((0.0, 179.9), (0.0, -179.9)),
        ],
    )
    def test_symmetric(self, a, b):
        assert distance_km(*a, *b) == pytest.approx(distance_km(*b, *a))

    def test_antipodal_points_are_half_circumference(self):
        assert distance_km(0, 0, 0, 180) == pytest.approx(math.pi * EARTH_RADIUS_KM)

    def test_one_degree_of_latitude(self):
        assert distance_km(0, 0, 1, 0) == pytest.approx(111.19, abs=0.01)

    def test_known_city_pair(self):
        # LAX to JFK airports, roughly 3975 km great-circle
        assert distance_km(33.9425, -118.408056, 40.639722, -73.778889) == pytest.approx(3975, rel=0.01)

    def test_never_negative(self):
        assert distance_km(-90, -180, 90, 180) >= 0
