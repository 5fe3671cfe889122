"""Shared test fixtures for the health grid tests."""

import pytest

from grid_config import RevealMode, default_data_path
from network_data import load_network, network_from_dict
from reveal_engine import RevealEngine


def node(entity_id, type="provider", lat=0.0, lng=0.0, size=4):
    return {
        "id": entity_id, "lat": lat, "lng": lng, "label": entity_id.upper(),
        "type": type, "color": "#ffffff", "size": size,
    }


@pytest.fixture()
def sample_network():
    """The bundled health grid data."""
    return load_network(default_data_path())


def build_small_network():
    """
    Hub h connected to x, y, z; x-y and x-z cross links; z-w tail.

    Sequences: x -> [x, h, z], y revisits itself, w is a single step,
    z has no sequence.
    """
    return network_from_dict({
        "metadata": {"title": "Small Grid", "description": "test grid"},
        "nodes": [
            node("h", type="hub", lat=10.0, lng=20.0, size=12),
            node("x", lat=-5.0, lng=40.0),
            node("y", type="source", lat=30.0, lng=-60.0),
            node("z", type="sensor", lat=0.0, lng=0.0),
            node("w", type="logistics", lat=45.0, lng=120.0, size=3),
        ],
        "edges": [
            {"source": "h", "target": "x", "type": "data"},
            {"source": "y", "target": "h", "type": "data"},
            {"source": "h", "target": "z", "type": "pipeline"},
            {"source": "x", "target": "y", "type": "data"},
            {"source": "x", "target": "z", "type": "data"},
            {"source": "z", "target": "w", "type": "emergency"},
        ],
        "sequences": {
            "x": ["x", "h", "z"],
            "y": ["y", "x", "y", "h"],
            "w": ["w"],
        },
    })


@pytest.fixture()
def small_network():
    return build_small_network()


@pytest.fixture()
def engine(small_network):
    return RevealEngine(small_network, mode=RevealMode.SEQUENCE)


@pytest.fixture()
def neighbor_engine(small_network):
    return RevealEngine(small_network, mode=RevealMode.NEIGHBOR)


@pytest.fixture(scope="session")
def sample_network_static():
    """Session-wide grid for hypothesis tests; NetworkData is read-only."""
    return load_network(default_data_path())


@pytest.fixture(scope="session")
def small_network_static():
    return build_small_network()
