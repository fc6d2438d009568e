"""Hidden-marker visibility filter."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from enum import Enum

from player.schemas.node import HIDDEN_MARKER_KIND, Marker, Node


class Readiness(str, Enum):
    UNKNOWN = "unknown"  # markers not loaded yet
    VISIBLE = "visible"
    HIDDEN = "hidden"


def is_hidden(node: Node, markers: Iterable[Marker] | None) -> bool:
    """True iff one of the node's markers is a hidden marker."""
    if not markers:
        return False
    return any(
        m.marker_kind == HIDDEN_MARKER_KIND and m.node_id == node.id
        for m in markers
    )


def visibility(node: Node, markers: Sequence[Marker] | None) -> Readiness:
    """``markers`` is None while marker loading has not completed."""
    if markers is None:
        return Readiness.UNKNOWN
    return Readiness.HIDDEN if is_hidden(node, markers) else Readiness.VISIBLE


def filter_visible(
    nodes: Iterable[Node],
    markers_by_id: Mapping[str, Sequence[Marker]],
) -> list[Node]:
    """Drop hidden nodes. ``markers_by_id`` must come from a completed fetch:
    a node missing from it carries no markers."""
    return [n for n in nodes if not is_hidden(n, markers_by_id.get(n.id, ()))]
