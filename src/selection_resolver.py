"""
Selection Resolver

Turns a clicked entity id into what should come into focus:

- neighbor mode: the entity plus everything directly connected to it
- sequence mode: the predefined reveal path for the entity, or an empty
  path when none is defined (info-only selection)

Pure lookups over the read-only NetworkData.
"""

from dataclasses import dataclass

from grid_config import RevealMode
from network_data import NetworkData, UnknownEntity


@dataclass(frozen=True)
class ResolvedSelection:
    selected_entity_id: str
    mode: RevealMode
    active_path: tuple[str, ...] = ()
    highlighted: frozenset[str] = frozenset()

    @property
    def has_playback(self) -> bool:
        return len(self.active_path) > 0


def resolve_neighbors(network: NetworkData, entity_id: str) -> ResolvedSelection:
    if not network.has_entity(entity_id):
        raise UnknownEntity(entity_id)
    return ResolvedSelection(
        selected_entity_id=entity_id,
        mode=RevealMode.NEIGHBOR,
        highlighted=network.neighbors(entity_id) | {entity_id},
    )


def resolve_sequence(network: NetworkData, entity_id: str) -> ResolvedSelection:
    # Paths are used verbatim, repeats included
    if not network.has_entity(entity_id):
        raise UnknownEntity(entity_id)
    return ResolvedSelection(
        selected_entity_id=entity_id,
        mode=RevealMode.SEQUENCE,
        active_path=network.sequence_for(entity_id) or (),
    )


def resolve(network: NetworkData, entity_id: str, mode: RevealMode) -> ResolvedSelection:
    """Resolve a selection. Raises UnknownEntity for ids not in the grid."""
    mode = RevealMode(mode)
    if mode is RevealMode.NEIGHBOR:
        return resolve_neighbors(network, entity_id)
    return resolve_sequence(network, entity_id)
