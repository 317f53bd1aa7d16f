"""
Notification dispatcher.

``dispatch`` resolves a RecipientSelector to user ids and writes one
notification per recipient, one write at a time. A failure for one recipient
does not undo the notifications already written: the returned DispatchResult
lists what was created and which recipients failed.

The ``notify_*`` helpers bind report lifecycle events to a type and a
title/message template.
"""

import math, logging
from typing import Dict, List, Optional

from civic_backend.authentication.schemas import UserRole
from civic_backend.database import DocumentStore, is_valid_id, check_id, public, utcnow
from civic_backend.errors import NotFoundError, ValidationError
from civic_backend.notifications import schemas

logger = logging.getLogger(__name__)


def format_status(status: str) -> str:
    """'in_progress' -> 'In Progress'"""
    return status.replace("_", " ").title()


# ────────────────────────────────
# Recipient selection
# ────────────────────────────────
class RecipientSelector:
    SINGLE = "single"
    ROLE = "role"
    ALL = "all"

    def __init__(self, kind: str, value: Optional[str] = None):
        self.kind = kind
        self.value = value

    @classmethod
    def single(cls, user_id_or_email: str) -> "RecipientSelector":
        return cls(cls.SINGLE, user_id_or_email)

    @classmethod
    def by_role(cls, role) -> "RecipientSelector":
        return cls(cls.ROLE, UserRole(role).value)

    @classmethod
    def all(cls) -> "RecipientSelector":
        return cls(cls.ALL)

    def resolve(self, store: DocumentStore) -> List[str]:
        """Return the matching user ids; NotFoundError when there are none."""
        if self.kind == self.SINGLE:
            user = None
            if is_valid_id(self.value):
                user = store.get("users", self.value)
            elif self.value:
                user = store.find_one("users", {"email": self.value.strip().lower()})
            if not user:
                raise NotFoundError("Recipient user not found")
            return [user["_id"]]

        if self.kind == self.ROLE:
            users = store.find("users", {"role": self.value})
            if not users:
                raise NotFoundError(f"No users found with role: {self.value}")
            return [u["_id"] for u in users]

        if self.kind == self.ALL:
            users = store.find("users")
            if not users:
                raise NotFoundError("No users found in the system")
            return [u["_id"] for u in users]

        raise ValidationError("Invalid recipient type")

    def __repr__(self):
        return f"RecipientSelector({self.kind!r}, {self.value!r})"


# ────────────────────────────────
# Creation
# ────────────────────────────────
def create_notification(
    store: DocumentStore,
    recipient: str,
    type: schemas.NotificationType,
    title: str,
    message: str,
    related_report: Optional[str] = None,
    related_department: Optional[str] = None,
) -> Dict:
    """Persist one unread notification and link it to the recipient's list."""
    if not recipient or not type or not title or not message:
        raise ValidationError("Missing required notification fields")

    notification = store.insert("notifications", {
        "recipient": recipient,
        "type": schemas.NotificationType(type).value,
        "title": title,
        "message": message,
        "related_report": related_report,
        "related_department": related_department,
        "read": False,
        "read_at": None,
        "created_at": utcnow(),
    })
    store.push("users", recipient, "notifications", notification["_id"])
    return notification


def dispatch(
    store: DocumentStore,
    selector: RecipientSelector,
    type: schemas.NotificationType,
    title: str,
    message: str,
    related_report: Optional[str] = None,
    related_department: Optional[str] = None,
) -> schemas.DispatchResult:
    recipients = selector.resolve(store)

    result = schemas.DispatchResult(created=0)
    for recipient in recipients:
        try:
            notification = create_notification(
                store, recipient, type, title, message,
                related_report=related_report,
                related_department=related_department,
            )
        except Exception:
            logger.error("Failed to create %s notification for user %s", type, recipient, exc_info=True)
            result.failed_recipients.append(recipient)
            continue
        result.notification_ids.append(notification["_id"])
        result.created += 1

    logger.info("Dispatched %d/%d %s notifications", result.created, len(recipients),
                schemas.NotificationType(type).value)
    return result


# ────────────────────────────────
# Lifecycle event helpers
# ────────────────────────────────
def notify_report_status_change(store: DocumentStore, report: Dict, old_status: str,
                                new_status: str) -> schemas.DispatchResult:
    return dispatch(
        store,
        RecipientSelector.single(report["submitted_by"]),
        schemas.NotificationType.report_status_change,
        title=f"Report Status Updated: {format_status(new_status)}",
        message=(f'Your report "{report["title"]}" has been updated from '
                 f'{format_status(old_status)} to {format_status(new_status)}.'),
        related_report=report["_id"],
    )


def notify_report_assigned(store: DocumentStore, report: Dict, department: Dict) -> schemas.DispatchResult:
    return dispatch(
        store,
        RecipientSelector.single(report["submitted_by"]),
        schemas.NotificationType.report_assigned,
        title="Report Assigned",
        message=f'Your report "{report["title"]}" has been assigned to the {department["name"]} department.',
        related_report=report["_id"],
        related_department=department["_id"],
    )


def notify_report_resolved(store: DocumentStore, report: Dict) -> schemas.DispatchResult:
    return dispatch(
        store,
        RecipientSelector.single(report["submitted_by"]),
        schemas.NotificationType.report_resolved,
        title="Report Resolved",
        message=f'Your report "{report["title"]}" has been marked as resolved.',
        related_report=report["_id"],
    )


def notify_comment_added(store: DocumentStore, report: Dict, comment: str) -> schemas.DispatchResult:
    return dispatch(
        store,
        RecipientSelector.single(report["submitted_by"]),
        schemas.NotificationType.comment_added,
        title="New Comment on Your Report",
        message=f'A comment was added to your report "{report["title"]}": {comment}',
        related_report=report["_id"],
    )


def notify_admins_new_report(store: DocumentStore, report: Dict, user_name: str) -> schemas.DispatchResult:
    return dispatch(
        store,
        RecipientSelector.by_role(UserRole.ADMIN),
        schemas.NotificationType.admin_alert,
        title="New Report Submitted",
        message=f'{user_name} has submitted a new report: "{report["title"]}".',
        related_report=report["_id"],
    )


# ────────────────────────────────
# Read side
# ────────────────────────────────
def get_notification(store: DocumentStore, notification_id: str) -> Dict:
    check_id(notification_id, "notification ID")
    notification = store.get("notifications", notification_id)
    if not notification:
        raise NotFoundError("Notification not found")
    return notification


def count_unread(store: DocumentStore, user_id: str) -> int:
    return store.count("notifications", {"recipient": user_id, "read": False})


def list_notifications(store: DocumentStore, user_id: str, unread_only: bool = False,
                       page: int = 1, limit: int = 10) -> Dict:
    """Newest first, paginated, with the user's overall unread count."""
    query = {"recipient": user_id}
    if unread_only:
        query["read"] = False

    notifications = store.find("notifications", query)
    notifications.sort(key=lambda n: n["created_at"], reverse=True)
    total = len(notifications)
    skip = (page - 1) * limit

    return {
        "notifications": [public(n) for n in notifications[skip: skip + limit]],
        "unread_count": count_unread(store, user_id),
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit),
        },
    }


def mark_read(store: DocumentStore, notification: Dict, read: bool = True) -> Dict:
    """read_at is stamped on the first transition to read and cleared when marked unread."""
    if read:
        changes = {"read": True, "read_at": notification.get("read_at") or utcnow()}
    else:
        changes = {"read": False, "read_at": None}
    return store.update("notifications", notification["_id"], changes)


def mark_all_read(store: DocumentStore, user_id: str) -> int:
    return store.update_many(
        "notifications",
        {"read": True, "read_at": utcnow()},
        query={"recipient": user_id, "read": False},
    )


def delete_notification(store: DocumentStore, notification: Dict) -> bool:
    deleted = store.delete("notifications", notification["_id"])
    if deleted:
        store.pull("users", notification["recipient"], "notifications", notification["_id"])
    return deleted
