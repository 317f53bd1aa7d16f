"""
Dashboard statistics and user listing for administrators.
"""

import math
from collections import Counter
from datetime import datetime
from typing import Dict, Optional

from civic_backend import config
from civic_backend.authentication import utils as auth_utils
from civic_backend.authentication.schemas import UserRole
from civic_backend.database import DocumentStore, check_id, public
from civic_backend.notifications import schemas as notification_schemas
from civic_backend.notifications.utils import RecipientSelector, dispatch
from civic_backend.errors import ValidationError


def _hours_between(start: str, end: str) -> float:
    return (datetime.fromisoformat(end) - datetime.fromisoformat(start)).total_seconds() / 3600


def get_stats(store: DocumentStore) -> Dict:
    reports = store.find("reports")

    resolved = [r for r in reports if r["status"] == "resolved" and r.get("resolved_at")]
    avg_resolution = 0.0
    if resolved:
        avg_resolution = sum(_hours_between(r["created_at"], r["resolved_at"]) for r in resolved) / len(resolved)

    recent = sorted(reports, key=lambda r: r["created_at"], reverse=True)[:config.RECENT_REPORTS_LIMIT]

    return {
        "total_reports": len(reports),
        "status_counts": dict(Counter(r["status"] for r in reports)),
        "category_counts": dict(Counter(r["category"] for r in reports)),
        "recent_reports": [public(r) for r in recent],
        "total_users": store.count("users"),
        "total_departments": store.count("departments"),
        "avg_resolution_time_hours": avg_resolution,
    }


def list_users(store: DocumentStore, role: Optional[UserRole] = None, search: Optional[str] = None,
               page: int = 1, limit: int = 10) -> Dict:
    query = {"role": UserRole(role).value} if role else None
    where = None
    if search:
        needle = search.lower()
        where = lambda u: needle in u.get("name", "").lower() or needle in u.get("email", "").lower()

    users = store.find("users", query, where=where)
    users.sort(key=lambda u: u.get("created_at", ""), reverse=True)
    total = len(users)
    skip = (page - 1) * limit

    return {
        "users": [auth_utils.to_response(u) for u in users[skip: skip + limit]],
        "pagination": {"total": total, "page": page, "limit": limit, "pages": math.ceil(total / limit)},
    }


def send_notification(store: DocumentStore,
                      request: notification_schemas.SendNotificationRequest) -> notification_schemas.DispatchResult:
    """Translate an admin broadcast request into a dispatcher call."""
    kind = request.recipient_type
    if kind == notification_schemas.RecipientType.user:
        target = request.recipient_id or request.recipient_email
        if not target:
            raise ValidationError("Either recipient ID or email is required for user notifications")
        selector = RecipientSelector.single(target)
    elif kind == notification_schemas.RecipientType.role:
        selector = RecipientSelector.by_role(request.role)
    else:
        selector = RecipientSelector.all()

    related_report = None
    if request.related_report_id:
        related_report = check_id(request.related_report_id, "related report ID")

    return dispatch(store, selector, request.type, request.title, request.message,
                    related_report=related_report)
