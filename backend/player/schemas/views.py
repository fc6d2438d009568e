"""View session request/response schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ViewCreated(_CamelModel):
    view_id: str


class DisplayRequest(_CamelModel):
    root_id: str
    show_pinned_only: bool = False


class SelectRequest(_CamelModel):
    item_id: str


class ActionRequest(_CamelModel):
    kind: str


class FramesResponse(_CamelModel):
    """Frames in the order the view went through them."""
    frames: list[Any]


class LoadMoreResponse(_CamelModel):
    fetched: bool
    tree: Any = None
