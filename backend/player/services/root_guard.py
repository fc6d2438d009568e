"""Root change guard — never show one root's tree under another root's identity."""

from __future__ import annotations

import logging
from enum import Enum

from player.schemas.node import Node

logger = logging.getLogger(__name__)


class GuardState(str, Enum):
    STABLE = "stable"
    TRANSITIONING = "transitioning"


class RootChangeGuard:
    """Tracks the displayed root and forces a placeholder across root changes.

    Leaving TRANSITIONING requires the new root's own node to be observed,
    regardless of whether a cache could already answer for it.
    """

    def __init__(self) -> None:
        self._root_id: str | None = None
        self._previous_root_id: str | None = None
        self._state = GuardState.STABLE
        self._seen_first = False

    @property
    def state(self) -> GuardState:
        return self._state

    @property
    def root_id(self) -> str | None:
        return self._root_id

    @property
    def previous_root_id(self) -> str | None:
        return self._previous_root_id

    @property
    def may_render(self) -> bool:
        return self._state == GuardState.STABLE

    def request(self, root_id: str | None) -> GuardState:
        """Announce that the view wants to display ``root_id``."""
        if not self._seen_first:
            # first root of a fresh view is adopted directly
            self._seen_first = True
            self._root_id = root_id
            return self._state

        if root_id != self._root_id:
            self._previous_root_id = self._root_id
            self._root_id = root_id
            self._state = GuardState.TRANSITIONING
            logger.debug(
                "Root changed %s -> %s, transitioning", self._previous_root_id, root_id,
            )
        return self._state

    def observe_root(self, node: Node) -> bool:
        """Report that data for ``node`` arrived. Returns True if now stable."""
        if self._state == GuardState.TRANSITIONING and node.id == self._root_id:
            self._state = GuardState.STABLE
            logger.debug("Root %s observed, stable", node.id)
        return self._state == GuardState.STABLE

    def reset(self) -> None:
        self._root_id = None
        self._previous_root_id = None
        self._state = GuardState.STABLE
        self._seen_first = False
