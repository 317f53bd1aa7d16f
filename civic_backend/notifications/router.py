"""
Notification inbox routes. Every route requires a logged-in user; a
notification is visible to its recipient and to admins.
"""

from fastapi import APIRouter, Depends, Query, status

from civic_backend.access import Action, Resource, ensure_allowed
from civic_backend.authentication.security import get_current_user
from civic_backend.database import DocumentStore, get_store, public
from civic_backend.errors import CivicError
from civic_backend.notifications import schemas, utils

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=schemas.NotificationPage)
def list_notifications(
    unread: bool = Query(False, description="Only unread notifications"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user=Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return utils.list_notifications(store, current_user.user_id, unread_only=unread, page=page, limit=limit)


@router.post("", response_model=schemas.Notification, status_code=status.HTTP_201_CREATED)
def create_notification(
    data: schemas.NotificationCreate,
    current_user=Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """Create a notification directly (admin only)."""
    ensure_allowed(current_user, Resource.NOTIFICATION, Action.CREATE,
                   message="Only admins can create notifications directly")
    result = utils.dispatch(
        store,
        utils.RecipientSelector.single(data.recipient),
        data.type,
        data.title,
        data.message,
        related_report=data.related_report,
        related_department=data.related_department,
    )
    if not result.created:
        raise CivicError("Failed to create notification")
    return public(store.get("notifications", result.notification_ids[0]))


@router.patch("")
def mark_all_read(current_user=Depends(get_current_user), store: DocumentStore = Depends(get_store)):
    """Mark every unread notification of the current user as read."""
    modified = utils.mark_all_read(store, current_user.user_id)
    return {"message": f"Marked {modified} notifications as read", "modified_count": modified}


@router.get("/{notification_id}", response_model=schemas.Notification)
def get_notification(notification_id: str, current_user=Depends(get_current_user),
                     store: DocumentStore = Depends(get_store)):
    notification = utils.get_notification(store, notification_id)
    ensure_allowed(current_user, Resource.NOTIFICATION, Action.READ, owner_id=notification["recipient"],
                   message="You do not have permission to view this notification")
    return public(notification)


@router.patch("/{notification_id}", response_model=schemas.Notification)
def update_notification(
    notification_id: str,
    update: schemas.NotificationUpdate,
    current_user=Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    notification = utils.get_notification(store, notification_id)
    ensure_allowed(current_user, Resource.NOTIFICATION, Action.UPDATE, owner_id=notification["recipient"],
                   message="You can only update your own notifications")
    return public(utils.mark_read(store, notification, update.read))


@router.delete("/{notification_id}")
def delete_notification(notification_id: str, current_user=Depends(get_current_user),
                        store: DocumentStore = Depends(get_store)):
    notification = utils.get_notification(store, notification_id)
    ensure_allowed(current_user, Resource.NOTIFICATION, Action.DELETE, owner_id=notification["recipient"],
                   message="You can only delete your own notifications")
    utils.delete_notification(store, notification)
    return {"message": "Notification deleted successfully"}
