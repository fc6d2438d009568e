"""Item action routes — open/download telemetry."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from player.api.deps import action_reporter
from player.schemas.views import ActionRequest
from player.services.actions import ActionReporter
from player.services.datasource import ActionKind

router = APIRouter()


@router.post("/{item_id}/actions", status_code=status.HTTP_202_ACCEPTED)
async def post_action(
    item_id: str,
    body: ActionRequest,
    reporter: ActionReporter = Depends(action_reporter),
):
    """Record an action without waiting for the item store."""
    try:
        kind = ActionKind(body.kind)
    except ValueError:
        raise HTTPException(
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            f"Unknown action kind {body.kind!r}",
        )
    reporter.fire(item_id, kind)
    return {"accepted": True}
