"""
Render Adapter

Translates the engine's visibility answers into draw descriptors for the
globe renderer: node meshes, arcs, camera directive and sidebar content.
Nothing here touches engine state.

Node shapes by category:
    hub     -> box (edge = size)
    sensor  -> octahedron (radius = size)
    others  -> sphere (radius = size, 32 segments)
"""

from typing import Optional, Union

from pydantic import BaseModel

from grid_config import RevealMode
from network_data import Connection, Entity, EntityCategory, NetworkData
from reveal_engine import RevealEngine, RevealSession
import visibility

# Arc colours (focused / ambient)
ARC_ALERT_COLOR = "#ef4444"
ARC_DATA_COLOR = "#d946ef"
ARC_AMBIENT_PIPELINE = "rgba(239, 68, 68, 0.6)"
ARC_AMBIENT_DATA = "rgba(217, 70, 239, 0.5)"
ARC_HIDDEN = "rgba(0,0,0,0)"
ALERT_ARC_TYPES = {"pipeline", "emergency"}

CAMERA_IDLE_ALTITUDE = 2.5
CAMERA_FOCUS_ALTITUDE = 2.0
CAMERA_TRANSITION_MS = 1000
AUTO_ROTATE_SPEED = 0.5


class ShapeDescriptor(BaseModel):
    kind: str                   # box | sphere | octahedron
    size: float
    segments: int = 0


class NodeDraw(BaseModel):
    id: str
    label: str
    lat: float
    lng: float
    color: str
    shape: ShapeDescriptor
    opacity: float
    emissive_intensity: float
    scale: float = 1.0
    revealed: bool
    emphasized: bool


class ArcDraw(BaseModel):
    source: str
    target: str
    type: str
    color: str
    stroke: float
    altitude: float
    dash_length: float
    dash_gap: float
    dash_animate_ms: int
    revealed: bool


class CameraDirective(BaseModel):
    auto_rotate: bool
    auto_rotate_speed: float = AUTO_ROTATE_SPEED
    altitude: float
    lat: Optional[float] = None
    lng: Optional[float] = None
    transition_ms: int = 0


class SidebarItem(BaseModel):
    id: str
    label: str
    revealed: bool = True
    current: bool = False


class SidebarView(BaseModel):
    title: str
    color: str
    type_label: str
    description: str
    heading: str
    items: list[SidebarItem]


class Frame(BaseModel):
    default_layer_visible: bool
    nodes: list[NodeDraw]
    arcs: list[ArcDraw]
    camera: CameraDirective
    sidebar: Optional[SidebarView] = None
    session: Optional[dict] = None


def shape_for(category: EntityCategory, size: float) -> ShapeDescriptor:
    if category is EntityCategory.HUB:
        return ShapeDescriptor(kind="box", size=size)
    if category is EntityCategory.SENSOR:
        return ShapeDescriptor(kind="octahedron", size=size)
    return ShapeDescriptor(kind="sphere", size=size, segments=32)


def node_style(entity: Entity, revealed: bool, emphasized: bool) -> NodeDraw:
    if emphasized:
        opacity, emissive, scale = 1.0, 1.0, 1.3
    elif revealed:
        opacity, emissive, scale = 0.9, 0.6, 1.0
    else:
        opacity, emissive, scale = 0.2, 0.0, 1.0

    return NodeDraw(
        id=entity.id,
        label=entity.label,
        lat=entity.lat,
        lng=entity.lng,
        color=entity.color,
        shape=shape_for(entity.category, entity.size),
        opacity=opacity,
        emissive_intensity=emissive,
        scale=scale,
        revealed=revealed,
        emphasized=emphasized,
    )


def arc_style(connection: Connection, revealed: bool, default_layer: bool) -> ArcDraw:
    is_pipeline = connection.category == "pipeline"

    if default_layer:
        color = ARC_AMBIENT_PIPELINE if is_pipeline else ARC_AMBIENT_DATA
    elif revealed:
        color = ARC_ALERT_COLOR if connection.category in ALERT_ARC_TYPES else ARC_DATA_COLOR
    else:
        color = ARC_HIDDEN

    # Active lines, including the whole ambient layer, are thicker and higher
    active = revealed or default_layer
    return ArcDraw(
        source=connection.source,
        target=connection.target,
        type=connection.category,
        color=color,
        stroke=2.5 if active else 0.5,
        altitude=0.25 if active else 0.1,
        dash_length=0.4,
        dash_gap=0.5 if is_pipeline else 0.1,
        dash_animate_ms=3000 if is_pipeline else 1500,
        revealed=revealed,
    )


def camera_directive(network: NetworkData, session: Optional[RevealSession]) -> CameraDirective:
    if session is None:
        return CameraDirective(auto_rotate=True, altitude=CAMERA_IDLE_ALTITUDE)
    entity = network.entity(session.selected_entity_id)
    return CameraDirective(
        auto_rotate=False,
        altitude=CAMERA_FOCUS_ALTITUDE,
        lat=entity.lat,
        lng=entity.lng,
        transition_ms=CAMERA_TRANSITION_MS,
    )


def sidebar_view(network: NetworkData, session: Optional[RevealSession]) -> Optional[SidebarView]:
    """Info panel for the selected entity; neighbors or the path as a step list."""
    if session is None:
        return None

    selected = network.entity(session.selected_entity_id)
    if session.mode is RevealMode.NEIGHBOR:
        heading = "Connections"
        items = [
            SidebarItem(id=eid, label=network.entity(eid).label)
            for eid in sorted(session.highlighted)
            if eid != selected.id
        ]
    else:
        heading = "Sequence"
        items = [
            SidebarItem(
                id=eid,
                label=network.entity(eid).label,
                revealed=index <= session.cursor,
                current=index == session.cursor,
            )
            for index, eid in enumerate(session.active_path)
        ]

    return SidebarView(
        title=selected.label,
        color=selected.color,
        type_label=f"TYPE: {selected.category.value.upper()}",
        description=selected.description,
        heading=heading,
        items=items,
    )


def render_frame(network: NetworkData, source: Union[RevealEngine, RevealSession, None]) -> Frame:
    """Build the full draw list for one frame."""
    session = source.current_session() if isinstance(source, RevealEngine) else source
    default_layer = visibility.default_layer_visible(session)

    nodes = [
        node_style(
            entity,
            revealed=visibility.is_entity_revealed(session, entity.id),
            emphasized=visibility.is_entity_emphasized(session, entity.id),
        )
        for entity in network.entities.values()
    ]
    arcs = [
        arc_style(conn, visibility.is_connection_revealed(session, conn), default_layer)
        for conn in network.connections
    ]

    return Frame(
        default_layer_visible=default_layer,
        nodes=nodes,
        arcs=arcs,
        camera=camera_directive(network, session),
        sidebar=sidebar_view(network, session),
        session=session.as_dict() if session is not None else None,
    )
