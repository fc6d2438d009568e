"""FastAPI dependency injection — service singletons and view lookup."""

from __future__ import annotations

from fastapi import Depends, HTTPException, status

from player.services import get_action_reporter, get_view_registry
from player.services.actions import ActionReporter
from player.services.session import ViewRegistry, ViewSession


def view_registry() -> ViewRegistry:
    return get_view_registry()


def action_reporter() -> ActionReporter:
    return get_action_reporter()


def current_view(
    view_id: str,
    views: ViewRegistry = Depends(view_registry),
) -> ViewSession:
    """Resolve ``view_id`` from the path, 404 if the view is not mounted."""
    view = views.get(view_id)
    if view is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"View {view_id} is not mounted",
        )
    view.touch()
    return view
