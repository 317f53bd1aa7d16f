"""
Admin-only routes: dashboard statistics, report triage, user listing and
manual notifications.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import Optional

from civic_backend.admin import schemas, utils
from civic_backend.authentication.schemas import CurrentUser, UserRole
from civic_backend.authentication.security import require_admin
from civic_backend.database import DocumentStore, get_store, public
from civic_backend.notifications.schemas import SendNotificationRequest
from civic_backend.reports import lifecycle
from civic_backend.reports import schemas as report_schemas
from civic_backend.reports import utils as report_utils

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/stats", response_model=schemas.AdminStats)
def get_stats(current_user: CurrentUser = Depends(require_admin), store: DocumentStore = Depends(get_store)):
    return utils.get_stats(store)


@router.get("/reports", response_model=report_schemas.ReportPage)
def list_reports(
    status: Optional[report_schemas.ReportStatus] = Query(None),
    category: Optional[report_schemas.ReportCategory] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: CurrentUser = Depends(require_admin),
    store: DocumentStore = Depends(get_store),
):
    result = report_utils.find_reports(store, status=status, category=category, search=search,
                                       page=page, limit=limit)
    result["items"] = [public(r) for r in result["items"]]
    return result


@router.get("/reports/{report_id}", response_model=report_schemas.Report)
def get_report(report_id: str, current_user: CurrentUser = Depends(require_admin),
               store: DocumentStore = Depends(get_store)):
    return public(report_utils.get_report(store, report_id))


@router.patch("/reports/{report_id}", response_model=report_schemas.Report)
def triage_report(
    report_id: str,
    update: report_schemas.AdminReportUpdate,
    current_user: CurrentUser = Depends(require_admin),
    store: DocumentStore = Depends(get_store),
):
    """Change status, leave a comment and/or assign a department."""
    report = report_utils.get_report(store, report_id)
    updated = lifecycle.update_status(
        store,
        report,
        update.status or report["status"],
        update.admin_comment,
        current_user,
        department_id=update.department_id,
    )
    return public(updated)


@router.get("/users", response_model=schemas.UserPage)
def list_users(
    role: Optional[UserRole] = Query(None),
    search: Optional[str] = Query(None, description="Matches name or email"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: CurrentUser = Depends(require_admin),
    store: DocumentStore = Depends(get_store),
):
    return utils.list_users(store, role=role, search=search, page=page, limit=limit)


@router.post("/send-notification", response_model=schemas.SendNotificationResponse,
             status_code=status.HTTP_201_CREATED)
def send_notification(request: SendNotificationRequest, current_user: CurrentUser = Depends(require_admin),
                      store: DocumentStore = Depends(get_store)):
    result = utils.send_notification(store, request)
    return {
        "message": f"Sent {result.created} notifications successfully",
        "count": result.created,
        "failed_recipients": result.failed_recipients,
    }
