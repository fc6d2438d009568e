"""View session routes — display, pagination triggers, navigation."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel

from player.api.deps import current_view, view_registry
from player.schemas.views import (
    DisplayRequest,
    FramesResponse,
    LoadMoreResponse,
    SelectRequest,
    ViewCreated,
)
from player.services.session import ViewRegistry, ViewSession

logger = logging.getLogger(__name__)
router = APIRouter()


def _dump(frame: BaseModel | None) -> dict[str, Any] | None:
    if frame is None:
        return None
    return frame.model_dump(mode="json", by_alias=True)


@router.post("", response_model=ViewCreated, status_code=status.HTTP_201_CREATED)
async def mount_view(views: ViewRegistry = Depends(view_registry)):
    """Mount a new view and return its id."""
    view = views.create()
    return ViewCreated(view_id=view.id)


@router.delete("/{view_id}", status_code=status.HTTP_204_NO_CONTENT)
async def unmount_view(view_id: str, views: ViewRegistry = Depends(view_registry)):
    """Unmount a view, discarding all of its state."""
    if not views.close(view_id):
        raise HTTPException(status.HTTP_404_NOT_FOUND, f"View {view_id} is not mounted")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{view_id}/display", response_model=FramesResponse)
async def display(body: DisplayRequest, view: ViewSession = Depends(current_view)):
    """Show ``rootId`` in the main pane; returns every frame in order."""
    frames = [_dump(f) async for f in view.display(body.root_id, body.show_pinned_only)]
    return FramesResponse(frames=frames)


@router.post("/{view_id}/folders/{folder_id}/load-more", response_model=LoadMoreResponse)
async def load_more(folder_id: str, pinned_only: bool = Query(False, alias="pinnedOnly"), view: ViewSession = Depends(current_view)):
    """Explicit "load more" action of a folder."""
    fetched = await view.load_more(folder_id, pinned_only)
    return LoadMoreResponse(fetched=fetched, tree=_dump(await view.refresh()))


@router.post("/{view_id}/folders/{folder_id}/sentinel", response_model=LoadMoreResponse)
async def sentinel_visible(folder_id: str, pinned_only: bool = Query(False, alias="pinnedOnly"), view: ViewSession = Depends(current_view)):
    """The folder's sentinel element entered the viewport."""
    fetched = await view.sentinel_visible(folder_id, pinned_only)
    return LoadMoreResponse(fetched=fetched, tree=_dump(await view.refresh()))


@router.post("/{view_id}/folders/{folder_id}/invalidate", response_model=LoadMoreResponse)
async def invalidate(folder_id: str, view: ViewSession = Depends(current_view)):
    """Children of ``folder_id`` changed upstream; reload from page 0."""
    reset = await view.invalidate(folder_id)
    return LoadMoreResponse(fetched=reset > 0, tree=_dump(await view.refresh()))


@router.get("/{view_id}/navigation", response_model=FramesResponse)
async def navigation(root_id: str | None = Query(None, alias="rootId"), view: ViewSession = Depends(current_view)):
    """Frames of the navigation drawer for ``root_id``."""
    frames = [_dump(f) async for f in view.sync_navigation(root_id)]
    return FramesResponse(frames=frames)


@router.post("/{view_id}/navigation/select")
async def select(body: SelectRequest, view: ViewSession = Depends(current_view)):
    """Selecting a navigation item yields the route to change to."""
    try:
        route = view.select(body.item_id)
    except ValueError as e:
        raise HTTPException(status.HTTP_409_CONFLICT, str(e))
    return route.model_dump(by_alias=True)
