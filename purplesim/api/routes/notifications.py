"""Notification routes: visible notices and dismissal."""

from fastapi import APIRouter, Depends, HTTPException

from ...bridge.contracts import ClearNotificationsResponse, NotificationModel
from ...dependencies import get_simulation_engine

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationModel])
async def list_notifications(engine=Depends(get_simulation_engine)):
    """Visible notices, most recent first."""
    return [n.to_dict() for n in engine.notifications.list()]


@router.delete("/{notification_id}", status_code=204)
async def dismiss_notification(notification_id: str, engine=Depends(get_simulation_engine)):
    if not engine.notifications.dismiss(notification_id):
        raise HTTPException(status_code=404, detail=f"Notification {notification_id} not found")


@router.delete("", response_model=ClearNotificationsResponse)
async def clear_notifications(engine=Depends(get_simulation_engine)):
    return {"cleared": engine.notifications.clear_all()}
