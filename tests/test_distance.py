"""
Test distance helpers

Haversine, first-minimum reduction, input validation and the segment
candidate projection used by the "segment" distance mode.
"""
import math

import numpy as np
import pytest

from coastcheck.config import EARTH_RADIUS_M
from coastcheck.distance import (
    haversine_m,
    haversine_m_many,
    min_reduce,
    nearest_on_segments,
    validate_point,
    validate_threshold,
)
from coastcheck.errors import InvalidInputError, NoDataError


class TestHaversine:

    def test_same_point_is_zero(self):
        assert haversine_m(41.71, 2.80, 41.71, 2.80) == 0.0

    def test_one_degree_of_latitude(self):
        expected = EARTH_RADIUS_M * math.pi / 180.0
        assert haversine_m(0.0, 0.0, 1.0, 0.0) == pytest.approx(expected, rel=1e-12)

    def test_antipodes_are_half_circumference(self):
        assert haversine_m(0.0, 0.0, 0.0, 180.0) == pytest.approx(math.pi * EARTH_RADIUS_M, rel=1e-12)

    def test_vectorized_matches_scalar(self):
        lats = np.array([41.70, 41.71, -33.86, 0.0])
        lons = np.array([2.79, 2.80, 151.21, 0.0])
        many = haversine_m_many(41.7253, 2.9411, lats, lons)
        for d, lat, lon in zip(many, lats, lons):
            assert d == pytest.approx(haversine_m(41.7253, 2.9411, lat, lon), rel=1e-12)

    def test_vectorized_exact_vertex_is_zero(self):
        d = haversine_m_many(41.71, 2.80, np.array([41.71]), np.array([2.80]))
        assert d[0] == 0.0


class TestMinReduce:

    def test_returns_first_minimum_on_ties(self):
        idx, d = min_reduce(np.array([5.0, 1.0, 3.0, 1.0]))
        assert (idx, d) == (1, 1.0)

    def test_empty_raises_no_data(self):
        with pytest.raises(NoDataError):
            min_reduce(np.array([]))


class TestValidation:

    def test_valid_point_is_returned_as_floats(self):
        lat, lon = validate_point(41, np.float32(2.5))
        assert isinstance(lat, float) and isinstance(lon, float)
        assert (lat, lon) == (41.0, 2.5)

    @pytest.mark.parametrize("lat,lon", [
        (200, 2.79),
        (-90.0001, 0.0),
        (0.0, 180.5),
        (float("nan"), 0.0),
        (0.0, float("inf")),
        ("41.7", 2.9),
        (True, 2.9),
        (None, 2.9),
    ])
    def test_invalid_points_rejected(self, lat, lon):
        with pytest.raises(InvalidInputError):
            validate_point(lat, lon)

    def test_range_edges_accepted(self):
        assert validate_point(-90, 180) == (-90.0, 180.0)
        assert validate_point(90, -180) == (90.0, -180.0)

    def test_threshold(self):
        assert validate_threshold(0) == 0.0
        assert validate_threshold(500) == 500.0
        with pytest.raises(InvalidInputError):
            validate_threshold(-1)
        with pytest.raises(InvalidInputError):
            validate_threshold(float("nan"))

    def test_invalid_input_is_a_value_error(self):
        with pytest.raises(ValueError):
            validate_point(200, 0)


class TestSegmentCandidates:

    def test_projects_onto_edge_interior(self):
        vertices = np.array([[0.0, 0.0], [0.0, 1.0]])
        ring_ids = np.array([0, 0])
        cands = nearest_on_segments(0.5, 0.1, vertices, ring_ids)
        assert cands.shape == (1, 2)
        assert cands[0, 0] == pytest.approx(0.0, abs=1e-12)
        assert cands[0, 1] == pytest.approx(0.5, abs=1e-12)

    def test_clamps_to_endpoint(self):
        vertices = np.array([[0.0, 0.0], [0.0, 1.0]])
        ring_ids = np.array([0, 0])
        cands = nearest_on_segments(2.0, 0.0, vertices, ring_ids)
        assert tuple(cands[0]) == (0.0, 1.0)

    def test_edges_do_not_bridge_rings(self):
        vertices = np.array([[0.0, 0.0], [0.0, 1.0], [5.0, 5.0], [5.0, 6.0]])
        ring_ids = np.array([0, 0, 1, 1])
        cands = nearest_on_segments(0.0, 0.0, vertices, ring_ids)
        assert len(cands) == 2

    def test_single_vertex_has_no_edges(self):
        cands = nearest_on_segments(0.0, 0.0, np.array([[1.0, 1.0]]), np.array([0]))
        assert cands.shape == (0, 2)

    def test_antimeridian_edge(self):
        vertices = np.array([[179.5, 0.0], [-179.5, 0.0]])
        ring_ids = np.array([0, 0])
        cands = nearest_on_segments(0.1, 180.0, vertices, ring_ids)
        assert abs(cands[0, 0]) == pytest.approx(180.0, abs=1e-9)
        assert cands[0, 1] == pytest.approx(0.0, abs=1e-12)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
