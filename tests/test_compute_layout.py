"""Tests for globe placement."""

import json

import numpy as np
import pytest

from compute_layout import GLOBE_RADIUS, compute_positions, latlng_to_xyz, save_layout_results


@pytest.mark.parametrize("lat,lng,expected", [
    (90.0, 0.0, (0.0, GLOBE_RADIUS, 0.0)),
    (-90.0, 0.0, (0.0, -GLOBE_RADIUS, 0.0)),
    (0.0, 0.0, (0.0, 0.0, GLOBE_RADIUS)),
    (0.0, 90.0, (GLOBE_RADIUS, 0.0, 0.0)),
])
def test_latlng_to_xyz(lat, lng, expected):
    assert np.allclose(latlng_to_xyz(lat, lng), expected, atol=1e-9)


def test_altitude_scales_radius():
    x, y, z = latlng_to_xyz(90.0, 0.0, radius=100, altitude=0.25)
    assert y == pytest.approx(125.0)


def test_positions_lie_on_sphere(sample_network):
    positions = compute_positions(sample_network)
    assert set(positions) == set(sample_network.entities)
    for x, y, z in positions.values():
        assert np.sqrt(x * x + y * y + z * z) == pytest.approx(GLOBE_RADIUS)


def test_save_layout_results(small_network, tmp_path):
    output = tmp_path / "nested" / "layout.json"
    save_layout_results(compute_positions(small_network), output)
    data = json.loads(output.read_text())
    assert data["metadata"]["total_entities"] == 5
    assert set(data["positions"]["h"]) == {"x", "y", "z"}
