"""Node, marker and page schemas — camelCase on the wire, snake_case in Python."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class NodeType(str, Enum):
    FOLDER = "folder"
    LOCAL_FILE = "file"
    S3_FILE = "s3File"
    LINK = "embeddedLink"
    DOCUMENT = "document"
    APP = "app"
    H5P = "h5p"
    ETHERPAD = "etherpad"
    SHORTCUT = "shortcut"


HIDDEN_MARKER_KIND = "hidden"


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class NodeSettings(_WireModel):
    """Per-node display settings."""
    is_pinned: bool = False
    is_collapsible: bool = False
    is_resizable: bool | None = None
    show_link_button: bool = True
    show_link_iframe: bool = False
    show_title: bool = True


class Node(_WireModel):
    """A single content item. ``type`` is kept as a raw string so that
    unknown discriminants survive validation and reach the dispatcher."""
    id: str
    type: str
    name: str
    display_name: str | None = None
    description: str | None = None
    lang: str | None = None
    path: str | None = None
    settings: NodeSettings = Field(default_factory=NodeSettings)
    extra: dict[str, Any] = Field(default_factory=dict)

    @property
    def node_type(self) -> NodeType | None:
        try:
            return NodeType(self.type)
        except ValueError:
            return None

    @property
    def is_folder(self) -> bool:
        return self.type == NodeType.FOLDER.value

    @property
    def title(self) -> str:
        return self.display_name or self.name

    def extra_value(self, key: str) -> Any:
        """Return ``extra[<type>][key]`` or None."""
        payload = self.extra.get(self.type)
        if isinstance(payload, dict):
            return payload.get(key)
        return None


class Marker(_WireModel):
    """Tag-like annotation on a node."""
    id: str
    node_id: str
    marker_kind: str


class Page(_WireModel):
    """One fetched batch of a folder's children."""
    page_number: int = Field(ge=0)
    data: list[Node] = Field(default_factory=list)
    has_next_page: bool = False
