"""Tests for great-circle distance."""

import pytest

from src.core.geo import distance_meters
from src.domain.coordinate import Coordinate
from tests.unit.mocks import HOME, NEARBY, TASK_SPOT


@pytest.mark.unit
class TestDistanceMeters:
    """Test haversine distance."""

    def test_zero_for_same_point(self):
        assert distance_meters(HOME, HOME) == 0.0

    def test_symmetric(self):
        a = Coordinate(latitude=51.5074, longitude=-0.1278)
        b = Coordinate(latitude=48.8566, longitude=2.3522)

        assert distance_meters(a, b) == pytest.approx(distance_meters(b, a))

    def test_london_to_paris(self):
        a = Coordinate(latitude=51.5074, longitude=-0.1278)
        b = Coordinate(latitude=48.8566, longitude=2.3522)

        assert distance_meters(a, b) == pytest.approx(343_500, rel=0.01)

    def test_scenario_distances(self):
        """The task spot is outside one mile from home, the nearby fix is inside."""
        assert distance_meters(HOME, TASK_SPOT) == pytest.approx(2664, rel=0.01)
        assert distance_meters(NEARBY, TASK_SPOT) == pytest.approx(1421, rel=0.01)

    def test_one_degree_of_latitude(self):
        a = Coordinate(latitude=0.0, longitude=0.0)
        b = Coordinate(latitude=1.0, longitude=0.0)

        assert distance_meters(a, b) == pytest.approx(111_195, rel=0.001)

    def test_antipodal_points(self):
        a = Coordinate(latitude=0.0, longitude=0.0)
        b = Coordinate(latitude=0.0, longitude=180.0)

        assert distance_meters(a, b) == pytest.approx(20_015_087, rel=0.001)
