"""
Report lifecycle: submission, status transitions with history, field edits and
deletion, plus the notifications each transition triggers.

Status changes follow a fixed state machine (TRANSITIONS). Citizens can only
move a report forward; admins may also reopen a resolved or rejected report
for review. Every write is conditional on the report ``version`` that was
read.

Notifications are best-effort: once the report write has succeeded a failing
notification is logged and the update still succeeds.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

from civic_backend.access import Action, Resource, ensure_allowed, is_admin
from civic_backend.database import DocumentStore, utcnow
from civic_backend.departments import utils as department_utils
from civic_backend.errors import AuthorizationError, CivicError, NotFoundError, ValidationError
from civic_backend.notifications import utils as notify
from civic_backend.reports import schemas
from civic_backend.reports.utils import get_report

logger = logging.getLogger(__name__)

Status = schemas.ReportStatus

TRANSITIONS = {
    Status.submitted: {Status.in_review, Status.assigned, Status.rejected},
    Status.in_review: {Status.assigned, Status.rejected},
    Status.assigned: {Status.in_progress, Status.rejected},
    Status.in_progress: {Status.resolved, Status.rejected},
    Status.resolved: set(),
    Status.rejected: set(),
}

ADMIN_REOPEN = {
    Status.resolved: {Status.in_review},
    Status.rejected: {Status.in_review},
}

EDITABLE_FIELDS = ("title", "description", "category", "priority", "images")


def allowed_transitions(current: Status, actor: Any = None) -> set:
    allowed = set(TRANSITIONS[Status(current)])
    if is_admin(actor):
        allowed |= ADMIN_REOPEN.get(Status(current), set())
    return allowed


def check_transition(current: Status, new: Status, actor: Any = None) -> None:
    """Raise ValidationError unless ``current -> new`` is a legal move for ``actor``."""
    current, new = Status(current), Status(new)
    if new not in allowed_transitions(current, actor):
        raise ValidationError(f"Invalid status transition from {current.value} to {new.value}")


def _plain(value):
    return value.value if isinstance(value, Enum) else value


def _notify_safely(send: Callable, store: DocumentStore, report: Dict, *args) -> None:
    try:
        send(store, report, *args)
    except CivicError as e:
        logger.warning("%s skipped for report %s: %s", send.__name__, report["_id"], e.message)
    except Exception:
        logger.error("%s failed for report %s", send.__name__, report["_id"], exc_info=True)


def submit_report(store: DocumentStore, data: schemas.ReportCreate, actor: Any) -> Dict:
    """Create a report in the submitted state and alert the admins."""
    ensure_allowed(actor, Resource.REPORT, Action.CREATE, message="You must be logged in to submit a report")

    now = utcnow()
    doc = {key: _plain(value) for key, value in data.dict().items()}
    doc.update({
        "status": Status.submitted.value,
        "submitted_by": actor.user_id,
        "assigned_to": None,
        "status_history": [{
            "status": Status.submitted.value,
            "timestamp": now,
            "comment": "Report submitted",
        }],
        "resolved_at": None,
        "created_at": now,
        "updated_at": now,
        "version": 0,
    })
    report = store.insert("reports", doc)
    logger.info("Report %s submitted by user %s", report["_id"], actor.user_id)

    _notify_safely(notify.notify_admins_new_report, store, report, getattr(actor, "name", None) or "A citizen")
    return report


def update_status(
    store: DocumentStore,
    report: Dict,
    new_status: Status,
    comment: Optional[str],
    actor: Any,
    department_id: Optional[str] = None,
) -> Dict:
    ensure_allowed(actor, Resource.REPORT, Action.UPDATE, owner_id=report["submitted_by"],
                   message="You are not authorized to update this report")

    new_status = Status(new_status)
    old_status = Status(report["status"])

    department = None
    if department_id:
        if not is_admin(actor):
            raise AuthorizationError("Only admins can assign departments")
        department = department_utils.get_department(store, department_id)

    if new_status == old_status and not comment and department is None:
        return report

    now = utcnow()
    changes = {"updated_at": now}

    if new_status != old_status:
        check_transition(old_status, new_status, actor)
        changes["status"] = new_status.value
        changes["status_history"] = report["status_history"] + [{
            "status": new_status.value,
            "timestamp": now,
            "comment": comment or f"Status updated to {new_status.value}",
        }]
        if new_status == Status.resolved:
            changes["resolved_at"] = now
    elif comment:
        changes["status_history"] = report["status_history"] + [{
            "status": old_status.value,
            "timestamp": now,
            "comment": comment,
        }]

    if department is not None:
        changes["assigned_to"] = {"department": department["_id"], "assigned_at": now}

    updated = store.update("reports", report["_id"], changes, expected_version=report.get("version", 0))
    if updated is None:
        raise NotFoundError("Report not found")
    logger.info("Report %s: %s -> %s by user %s", report["_id"], old_status.value, new_status.value,
                actor.user_id)

    if new_status != old_status:
        _notify_safely(notify.notify_report_status_change, store, updated, old_status.value, new_status.value)
        if new_status == Status.resolved:
            _notify_safely(notify.notify_report_resolved, store, updated)
    elif comment and actor.user_id != report["submitted_by"]:
        _notify_safely(notify.notify_comment_added, store, updated, comment)

    if department is not None:
        _notify_safely(notify.notify_report_assigned, store, updated, department)

    return updated


def update_report(store: DocumentStore, report_id: str, update: schemas.ReportUpdate, actor: Any) -> Dict:
    """Edit report fields (owner or admin); status and department go through update_status."""
    report = get_report(store, report_id)
    ensure_allowed(actor, Resource.REPORT, Action.UPDATE, owner_id=report["submitted_by"],
                   message="You are not authorized to update this report")

    # Reject a bad status or assignment before any field is written
    if update.status is not None and Status(update.status) != Status(report["status"]):
        check_transition(report["status"], update.status, actor)
    if update.department_id:
        if not is_admin(actor):
            raise AuthorizationError("Only admins can assign departments")
        department_utils.get_department(store, update.department_id)

    fields = {
        key: _plain(value)
        for key, value in update.dict(exclude_unset=True, include=set(EDITABLE_FIELDS)).items()
        if value is not None
    }
    if fields:
        fields["updated_at"] = utcnow()
        report = store.update("reports", report["_id"], fields, expected_version=report.get("version", 0))
        if report is None:
            raise NotFoundError("Report not found")

    if update.status is not None or update.status_comment or update.department_id:
        report = update_status(
            store,
            report,
            update.status or report["status"],
            update.status_comment,
            actor,
            department_id=update.department_id,
        )
    return report


def delete_report(store: DocumentStore, report_id: str, actor: Any) -> None:
    report = get_report(store, report_id)
    ensure_allowed(actor, Resource.REPORT, Action.DELETE, owner_id=report["submitted_by"],
                   message="You are not authorized to delete this report")
    store.delete("reports", report["_id"])
    logger.info("Report %s deleted by user %s", report_id, actor.user_id)
