"""
Health Grid Network Data

Entities (globe nodes), connections (arcs) and sequence definitions
(trigger id -> ordered reveal path). Everything here is loaded once and
read-only afterwards.

Input format (same shape the visualization generators consume):

    {
        "metadata": {"title": "...", "description": "..."},
        "nodes": [{"id": "server", "lat": 38.0, "lng": -95.0, "label": "...",
                   "type": "hub", "color": "#d946ef", "size": 12}],
        "edges": [{"source": "twban", "target": "server", "type": "data"}],
        "sequences": {"twban": ["twban", "server", "doctor"]}
    }

Loading is strict: a bad record aborts the whole load instead of being
dropped.
"""

import json
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

import networkx as nx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from logging_config import get_logger

logger = get_logger("network_data")


# =============================================================================
# ERRORS
# =============================================================================

class NetworkDataError(ValueError):
    """Grid data could not be loaded. Always fatal."""


class DuplicateEntity(NetworkDataError):
    """Two nodes share the same id."""


class MalformedConnection(NetworkDataError):
    """A connection references an entity that does not exist."""


class MalformedSequence(NetworkDataError):
    """A sequence definition is empty or references an unknown entity."""


class UnknownEntity(LookupError):
    """A lookup or selection referenced an id absent from the grid."""

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"Unknown entity: {entity_id!r}")


# =============================================================================
# MODELS
# =============================================================================

class EntityCategory(str, Enum):
    HUB = "hub"
    SOURCE = "source"
    PROVIDER = "provider"
    LOGISTICS = "logistics"
    ECOSYSTEM = "ecosystem"
    SENSOR = "sensor"
    OTHER = "other"


class Entity(BaseModel):
    """A node on the globe."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(min_length=1)
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    label: str
    category: EntityCategory = Field(alias="type")
    color: str
    size: float = Field(gt=0)
    description: str = ""


class Connection(BaseModel):
    """An arc between two entities. Direction is kept but not used for focus."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: str = Field(min_length=1)
    target: str = Field(min_length=1)
    category: str = Field(default="data", alias="type")

    @property
    def endpoints(self) -> frozenset[str]:
        return frozenset((self.source, self.target))

    def touches(self, entity_id: str) -> bool:
        return entity_id == self.source or entity_id == self.target


# =============================================================================
# NETWORK
# =============================================================================

class NetworkData:
    """
    Immutable domain graph plus sequence definitions.

    Construction validates referential integrity and raises a
    NetworkDataError subclass on the first problem found.
    """

    def __init__(
        self,
        entities: Iterable[Entity],
        connections: Iterable[Connection] = (),
        sequences: Optional[Mapping[str, Iterable[str]]] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ):
        entity_map: dict[str, Entity] = {}
        for entity in entities:
            if entity.id in entity_map:
                raise DuplicateEntity(f"Duplicate entity id: {entity.id!r}")
            entity_map[entity.id] = entity

        connection_list = tuple(connections)
        for index, conn in enumerate(connection_list):
            missing = [end for end in (conn.source, conn.target) if end not in entity_map]
            if missing:
                raise MalformedConnection(
                    f"Connection {index} ({conn.source} -> {conn.target}) "
                    f"references unknown entities: {', '.join(missing)}"
                )

        sequence_map: dict[str, tuple[str, ...]] = {}
        for trigger, raw_path in (sequences or {}).items():
            if trigger not in entity_map:
                raise MalformedSequence(f"Sequence trigger {trigger!r} is not an entity")
            if not isinstance(raw_path, (list, tuple)):
                raise MalformedSequence(f"Sequence for {trigger!r} must be a list of ids")
            path = tuple(raw_path)
            if not path:
                raise MalformedSequence(f"Sequence for {trigger!r} is empty")
            unknown = [step for step in path if not isinstance(step, str) or step not in entity_map]
            if unknown:
                raise MalformedSequence(
                    f"Sequence for {trigger!r} references unknown entities: {unknown}"
                )
            if path[0] != trigger:
                logger.warning("Sequence for %r starts at %r instead of its trigger", trigger, path[0])
            sequence_map[trigger] = path

        if metadata is not None and not isinstance(metadata, Mapping):
            raise NetworkDataError("'metadata' must be a mapping")

        graph = nx.Graph()
        graph.add_nodes_from(entity_map)
        graph.add_edges_from((c.source, c.target) for c in connection_list)

        self._entities = MappingProxyType(entity_map)
        self._connections = connection_list
        self._sequences = MappingProxyType(sequence_map)
        self._graph = graph
        self._metadata = MappingProxyType(dict(metadata or {}))

    @property
    def entities(self) -> Mapping[str, Entity]:
        return self._entities

    @property
    def connections(self) -> tuple[Connection, ...]:
        return self._connections

    @property
    def sequences(self) -> Mapping[str, tuple[str, ...]]:
        return self._sequences

    @property
    def metadata(self) -> Mapping[str, Any]:
        return self._metadata

    def has_entity(self, entity_id: str) -> bool:
        return entity_id in self._entities

    def entity(self, entity_id: str) -> Entity:
        try:
            return self._entities[entity_id]
        except KeyError:
            raise UnknownEntity(entity_id) from None

    def neighbors(self, entity_id: str) -> frozenset[str]:
        """Entities directly connected to entity_id, in either direction."""
        if entity_id not in self._entities:
            raise UnknownEntity(entity_id)
        return frozenset(self._graph.neighbors(entity_id))

    def sequence_for(self, entity_id: str) -> Optional[tuple[str, ...]]:
        return self._sequences.get(entity_id)

    def connections_between(self, a: str, b: str) -> tuple[Connection, ...]:
        pair = frozenset((a, b))
        return tuple(c for c in self._connections if c.endpoints == pair)

    def __len__(self) -> int:
        return len(self._entities)

    def __repr__(self) -> str:
        return (
            f"NetworkData(entities={len(self._entities)}, "
            f"connections={len(self._connections)}, sequences={len(self._sequences)})"
        )


# =============================================================================
# LOADING
# =============================================================================

def _validate_records(model: type[BaseModel], records: Any, kind: str) -> list:
    if not isinstance(records, list):
        raise NetworkDataError(f"'{kind}' must be a list")
    items = []
    for index, raw in enumerate(records):
        try:
            items.append(model.model_validate(raw))
        except ValidationError as exc:
            raise NetworkDataError(f"Invalid {kind[:-1]} at index {index}: {exc}") from exc
    return items


def network_from_dict(data: Mapping[str, Any]) -> NetworkData:
    """Build a NetworkData from an already-parsed grid document."""
    if "nodes" not in data:
        raise NetworkDataError("Grid data has no 'nodes'")

    entities = _validate_records(Entity, data["nodes"], "nodes")
    connections = _validate_records(Connection, data.get("edges", []), "edges")

    sequences = data.get("sequences", {})
    if not isinstance(sequences, Mapping):
        raise MalformedSequence("'sequences' must map trigger ids to paths")

    return NetworkData(entities, connections, sequences, data.get("metadata", {}))


def load_network(filepath: str | Path) -> NetworkData:
    """Load and validate grid data from a JSON file."""
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as exc:
        raise NetworkDataError(f"{filepath} is not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise NetworkDataError(f"{filepath} must contain a JSON object")

    network = network_from_dict(data)
    logger.info(
        "Loaded %d entities, %d connections, %d sequences from %s",
        len(network.entities), len(network.connections), len(network.sequences), filepath,
    )
    return network
