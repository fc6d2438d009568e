"""Render outcomes — serialisable stand-ins for the visual widgets."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field


class Placeholder(BaseModel):
    """Loading skeleton."""
    kind: Literal["placeholder"] = "placeholder"
    node_type: str | None = None
    is_children: bool = False
    max_height: str | None = None


class ErrorAlert(BaseModel):
    """User-facing error indicator."""
    kind: Literal["error"] = "error"
    node_id: str | None = None
    message: str


class FolderCard(BaseModel):
    """A child folder rendered as a link to its own page."""
    kind: Literal["folder-card"] = "folder-card"
    node_id: str
    element_id: str
    name: str
    description: str = ""
    to: str


class FileView(BaseModel):
    kind: Literal["file"] = "file"
    node_id: str
    element_id: str
    name: str
    url: str
    max_height: str
    pdf_viewer_link: str
    show_collapse: bool = False


class LinkView(BaseModel):
    kind: Literal["link"] = "link"
    node_id: str
    element_id: str
    name: str
    url: str | None = None
    height: str
    is_resizable: bool = True
    show_button: bool = True
    show_iframe: bool = False
    show_collapse: bool = False


class DocumentView(BaseModel):
    kind: Literal["document"] = "document"
    node_id: str
    element_id: str
    name: str
    content: str = ""
    show_title: bool = True
    show_collapse: bool = False


class AppFrame(BaseModel):
    kind: Literal["app"] = "app"
    node_id: str
    frame_id: str
    name: str
    url: str | None = None
    height: str
    is_resizable: bool = False
    context: dict[str, Any] = Field(default_factory=dict)
    show_collapse: bool = False


class WidgetEmbed(BaseModel):
    """Interactive (H5P) content."""
    kind: Literal["interactive-widget"] = "interactive-widget"
    node_id: str
    name: str
    content_id: str
    integration_url: str
    show_collapse: bool = False


class CollabDocEmbed(BaseModel):
    """Read-only collaborative document (Etherpad)."""
    kind: Literal["collab-doc"] = "collab-doc"
    node_id: str
    pad_url: str
    options: dict[str, bool] = Field(default_factory=dict)


class Collapsible(BaseModel):
    """Collapsible affordance around a shortcut target."""
    kind: Literal["collapsible"] = "collapsible"
    element_id: str
    name: str
    content: RenderOutcome


class LoadMoreControl(BaseModel):
    visible: bool
    disabled: bool


class FolderContent(BaseModel):
    """Root folder with its children rendered inline."""
    kind: Literal["folder"] = "folder"
    node_id: str
    name: str | None = None
    description: str | None = None
    children: list[RenderOutcome] = Field(default_factory=list)
    load_more: LoadMoreControl | None = None


RenderOutcome = Annotated[
    Union[
        Placeholder,
        ErrorAlert,
        FolderCard,
        FileView,
        LinkView,
        DocumentView,
        AppFrame,
        WidgetEmbed,
        CollabDocEmbed,
        Collapsible,
        FolderContent,
    ],
    Field(discriminator="kind"),
]

Collapsible.model_rebuild()
FolderContent.model_rebuild()
