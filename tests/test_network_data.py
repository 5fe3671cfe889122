"""Tests for grid loading and referential integrity."""

import json

import pytest

from network_data import (
    Connection, DuplicateEntity, Entity, EntityCategory, MalformedConnection,
    MalformedSequence, NetworkData, NetworkDataError, UnknownEntity,
    load_network, network_from_dict,
)
from conftest import node


class TestSampleData:
    def test_loads(self, sample_network):
        assert len(sample_network.entities) == 11
        assert len(sample_network.connections) == 13
        assert sample_network.metadata["title"] == "AI Health Grid"

    def test_every_connection_references_known_entities(self, sample_network):
        for conn in sample_network.connections:
            assert sample_network.has_entity(conn.source)
            assert sample_network.has_entity(conn.target)

    def test_every_sequence_step_is_known(self, sample_network):
        for trigger, path in sample_network.sequences.items():
            assert path[0] == trigger
            assert all(sample_network.has_entity(step) for step in path)

    def test_sequence_steps_follow_connections(self, sample_network):
        for path in sample_network.sequences.values():
            for a, b in zip(path, path[1:]):
                assert sample_network.connections_between(a, b), f"{a} -> {b}"

    def test_hub_category(self, sample_network):
        assert sample_network.entity("server").category is EntityCategory.HUB


class TestModels:
    def test_entity_uses_type_key(self):
        entity = Entity.model_validate(node("a", type="sensor"))
        assert entity.category is EntityCategory.SENSOR
        assert entity.model_dump(mode="json", by_alias=True)["type"] == "sensor"

    def test_entity_is_frozen(self):
        entity = Entity.model_validate(node("a"))
        with pytest.raises(Exception):
            entity.label = "changed"

    def test_connection_default_type(self):
        conn = Connection(source="a", target="b")
        assert conn.category == "data"
        assert conn.endpoints == frozenset({"a", "b"})
        assert conn.touches("a") and not conn.touches("c")


class TestNeighbors:
    def test_undirected(self, small_network):
        assert small_network.neighbors("h") == {"x", "y", "z"}
        # y -> h is stored in reverse direction
        assert "h" in small_network.neighbors("y")

    def test_unknown(self, small_network):
        with pytest.raises(UnknownEntity) as exc_info:
            small_network.neighbors("nope")
        assert exc_info.value.entity_id == "nope"

    def test_entity_lookup_unknown(self, small_network):
        with pytest.raises(UnknownEntity):
            small_network.entity("nope")

    def test_connections_between_ignores_direction(self, small_network):
        assert len(small_network.connections_between("h", "y")) == 1
        assert small_network.connections_between("w", "h") == ()


class TestMalformedInput:
    def test_connection_to_missing_entity_is_fatal(self):
        with pytest.raises(MalformedConnection, match="ghost"):
            network_from_dict({
                "nodes": [node("a")],
                "edges": [{"source": "a", "target": "ghost"}],
            })

    def test_duplicate_entity(self):
        with pytest.raises(DuplicateEntity):
            network_from_dict({"nodes": [node("a"), node("a")]})

    def test_sequence_with_unknown_step(self):
        with pytest.raises(MalformedSequence):
            network_from_dict({"nodes": [node("a")], "sequences": {"a": ["a", "b"]}})

    def test_sequence_with_unknown_trigger(self):
        with pytest.raises(MalformedSequence):
            network_from_dict({"nodes": [node("a")], "sequences": {"b": ["a"]}})

    def test_empty_sequence(self):
        with pytest.raises(MalformedSequence):
            network_from_dict({"nodes": [node("a")], "sequences": {"a": []}})

    def test_sequence_not_a_list(self):
        with pytest.raises(MalformedSequence):
            network_from_dict({"nodes": [node("a")], "sequences": {"a": "a"}})

    @pytest.mark.parametrize("path", [{"a": 1}, None, 5])
    def test_sequence_of_wrong_type(self, path):
        with pytest.raises(MalformedSequence):
            network_from_dict({"nodes": [node("a")], "sequences": {"a": path}})

    def test_metadata_not_a_mapping(self):
        with pytest.raises(NetworkDataError, match="metadata"):
            network_from_dict({"nodes": [node("a")], "metadata": "oops"})

    def test_invalid_latitude(self):
        with pytest.raises(NetworkDataError, match="index 0"):
            network_from_dict({"nodes": [node("a", lat=120.0)]})

    def test_unknown_category(self):
        with pytest.raises(NetworkDataError):
            network_from_dict({"nodes": [node("a", type="spaceship")]})

    def test_non_positive_size(self):
        with pytest.raises(NetworkDataError):
            network_from_dict({"nodes": [node("a", size=0)]})

    def test_missing_nodes(self):
        with pytest.raises(NetworkDataError):
            network_from_dict({"edges": []})

    def test_invalid_json_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(NetworkDataError):
            load_network(path)

    def test_sequence_not_starting_at_trigger_is_accepted(self, caplog):
        network = network_from_dict({
            "nodes": [node("a"), node("b")],
            "sequences": {"a": ["b", "a"]},
        })
        assert network.sequence_for("a") == ("b", "a")
        assert "instead of its trigger" in caplog.text


def test_load_network_from_file(tmp_path):
    path = tmp_path / "grid.json"
    path.write_text(json.dumps({
        "nodes": [node("a"), node("b")],
        "edges": [{"source": "a", "target": "b", "type": "pipeline"}],
        "sequences": {"a": ["a", "b"]},
    }))
    network = load_network(path)
    assert isinstance(network, NetworkData)
    assert network.connections[0].category == "pipeline"
    assert network.sequence_for("a") == ("a", "b")
    assert network.sequence_for("b") is None
