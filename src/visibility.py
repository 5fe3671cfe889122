"""
Visibility queries evaluated by the renderer every frame.

All functions are pure reads of a session snapshot (``None`` when nothing is
selected) and can be called at any rate.

Sequence mode semantics for paths that revisit an id: every occurrence is
its own path position, an entity is revealed once any of its occurrences is
at or before the cursor, and a connection is revealed when its endpoints
form some consecutive step path[k-1], path[k] with k <= cursor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from grid_config import RevealMode
from network_data import Connection

if TYPE_CHECKING:
    from reveal_engine import RevealSession


def default_layer_visible(session: Optional[RevealSession]) -> bool:
    """True when nothing is focused, so the ambient layer shows every arc."""
    return session is None


def is_entity_revealed(session: Optional[RevealSession], entity_id: str) -> bool:
    if session is None:
        return True
    if session.mode is RevealMode.NEIGHBOR:
        return entity_id in session.highlighted
    return entity_id in session.revealed_ids


def is_entity_emphasized(session: Optional[RevealSession], entity_id: str) -> bool:
    """Only the newest revealed path entity is emphasized."""
    if session is None or session.mode is not RevealMode.SEQUENCE:
        return False
    return session.current_entity_id == entity_id


def is_connection_revealed(session: Optional[RevealSession], connection: Connection) -> bool:
    if session is None:
        return True
    if session.mode is RevealMode.NEIGHBOR:
        return connection.source in session.highlighted and connection.target in session.highlighted
    return connection.endpoints in session.revealed_steps
