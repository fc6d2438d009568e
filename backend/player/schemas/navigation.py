"""Navigation widget schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from player.schemas.node import Node


class NavigationView(BaseModel):
    """One frame handed to the navigation widget."""
    kind: Literal["nothing", "loading", "error", "tree"]
    root: Node | None = None
    items: list[Node] = Field(default_factory=list)
    message: str | None = None


class NavigationRoute(BaseModel):
    """Route change requested when a navigation item is selected."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    root_id: str
    item_id: str
