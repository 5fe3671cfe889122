"""Tests for translating visibility into draw descriptors."""

import pytest

from network_data import Connection, EntityCategory
from render_adapter import (
    ARC_AMBIENT_DATA, ARC_AMBIENT_PIPELINE, ARC_HIDDEN,
    arc_style, camera_directive, node_style, render_frame, shape_for, sidebar_view,
)


@pytest.mark.parametrize("category,kind", [
    (EntityCategory.HUB, "box"),
    (EntityCategory.SENSOR, "octahedron"),
    (EntityCategory.SOURCE, "sphere"),
    (EntityCategory.PROVIDER, "sphere"),
    (EntityCategory.LOGISTICS, "sphere"),
    (EntityCategory.ECOSYSTEM, "sphere"),
])
def test_shape_for_category(category, kind):
    shape = shape_for(category, 4.0)
    assert shape.kind == kind
    assert shape.size == 4.0


def test_sphere_segments():
    assert shape_for(EntityCategory.OTHER, 3.0).segments == 32


class TestNodeStyle:
    def test_revealed(self, small_network):
        draw = node_style(small_network.entity("x"), revealed=True, emphasized=False)
        assert (draw.opacity, draw.emissive_intensity, draw.scale) == (0.9, 0.6, 1.0)

    def test_dimmed(self, small_network):
        draw = node_style(small_network.entity("x"), revealed=False, emphasized=False)
        assert (draw.opacity, draw.emissive_intensity) == (0.2, 0.0)

    def test_emphasized(self, small_network):
        draw = node_style(small_network.entity("x"), revealed=True, emphasized=True)
        assert draw.emissive_intensity == 1.0
        assert draw.scale > 1.0


class TestArcStyle:
    def test_ambient_layer(self):
        data = arc_style(Connection(source="a", target="b"), revealed=True, default_layer=True)
        pipe = arc_style(Connection(source="a", target="b", type="pipeline"), revealed=True, default_layer=True)
        assert data.color == ARC_AMBIENT_DATA
        assert pipe.color == ARC_AMBIENT_PIPELINE
        assert (data.stroke, data.altitude) == (2.5, 0.25)
        assert (pipe.stroke, pipe.altitude) == (2.5, 0.25)
        assert pipe.dash_gap == 0.5 and pipe.dash_animate_ms == 3000
        assert data.dash_gap == 0.1 and data.dash_animate_ms == 1500

    def test_focused(self):
        emergency = arc_style(Connection(source="a", target="b", type="emergency"), revealed=True, default_layer=False)
        data = arc_style(Connection(source="a", target="b"), revealed=True, default_layer=False)
        assert emergency.color == "#ef4444"
        assert data.color == "#d946ef"
        assert data.stroke == 2.5 and data.altitude == 0.25

    def test_hidden(self):
        hidden = arc_style(Connection(source="a", target="b"), revealed=False, default_layer=False)
        assert hidden.color == ARC_HIDDEN
        assert hidden.stroke == 0.5 and hidden.altitude == 0.1


class TestCameraAndSidebar:
    def test_idle(self, small_network):
        camera = camera_directive(small_network, None)
        assert camera.auto_rotate
        assert camera.altitude == 2.5
        assert sidebar_view(small_network, None) is None

    def test_focus_on_selection(self, engine, small_network):
        engine.select("x")
        camera = camera_directive(small_network, engine.current_session())
        assert not camera.auto_rotate
        assert (camera.lat, camera.lng) == (-5.0, 40.0)

    def test_sequence_sidebar_lists_steps(self, engine, small_network):
        engine.select("x")
        engine.advance()
        view = sidebar_view(small_network, engine.current_session())
        assert view.title == "X"
        assert view.type_label == "TYPE: PROVIDER"
        assert [(i.id, i.revealed, i.current) for i in view.items] == [
            ("x", True, False), ("h", True, True), ("z", False, False),
        ]

    def test_neighbor_sidebar_lists_connections(self, neighbor_engine, small_network):
        neighbor_engine.select("h")
        view = sidebar_view(small_network, neighbor_engine.current_session())
        assert view.heading == "Connections"
        assert [i.id for i in view.items] == ["x", "y", "z"]
        assert view.type_label == "TYPE: HUB"


class TestRenderFrame:
    def test_idle_frame(self, engine, small_network):
        frame = render_frame(small_network, engine)
        assert frame.default_layer_visible
        assert frame.session is None
        assert frame.sidebar is None
        assert len(frame.nodes) == len(small_network.entities)
        assert all(n.revealed for n in frame.nodes)
        assert len(frame.arcs) == len(small_network.connections)

    def test_playing_frame(self, engine, small_network):
        engine.select("x")
        engine.advance()
        frame = render_frame(small_network, engine)
        nodes = {n.id: n for n in frame.nodes}
        assert nodes["h"].emphasized
        assert nodes["x"].revealed and not nodes["x"].emphasized
        assert not nodes["z"].revealed
        revealed_arcs = {(a.source, a.target) for a in frame.arcs if a.revealed}
        assert revealed_arcs == {("h", "x")}
        assert frame.session["cursor"] == 1

    def test_frame_from_session(self, engine, small_network):
        engine.select("w")
        frame = render_frame(small_network, engine.current_session())
        assert not frame.default_layer_visible
        assert [n.id for n in frame.nodes if n.revealed] == ["w"]

    def test_frame_serializes(self, engine, small_network):
        engine.select("x")
        data = render_frame(small_network, engine).model_dump(mode="json")
        assert data["camera"]["auto_rotate"] is False
        assert data["nodes"][0]["shape"]["kind"] == "box"
