"""
Handles report submission, browsing, nearby search, editing and deletion.
Reading is public; editing and deleting are limited to the submitter or an admin.
"""

from fastapi import APIRouter, Depends, Query, status
from typing import List, Optional

from civic_backend import config
from civic_backend.authentication.security import get_current_user
from civic_backend.database import DocumentStore, get_store, public
from civic_backend.reports import lifecycle, schemas, utils

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("", response_model=schemas.ReportPage)
def list_reports(
    status: Optional[schemas.ReportStatus] = Query(None),
    category: Optional[schemas.ReportCategory] = Query(None),
    search: Optional[str] = Query(None, description="Case-insensitive match on title or description"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    store: DocumentStore = Depends(get_store),
):
    result = utils.find_reports(store, status=status, category=category, search=search, page=page, limit=limit)
    result["items"] = [public(r) for r in result["items"]]
    return result


@router.post("", response_model=schemas.Report, status_code=status.HTTP_201_CREATED)
def submit_report(report: schemas.ReportCreate, current_user=Depends(get_current_user),
                  store: DocumentStore = Depends(get_store)):
    return public(lifecycle.submit_report(store, report, current_user))


@router.get("/nearby", response_model=List[schemas.Report])
def nearby_reports(
    lat: float = Query(...),
    lng: float = Query(...),
    distance: float = Query(config.NEARBY_DEFAULT_DISTANCE, description="Search radius in meters"),
    store: DocumentStore = Depends(get_store),
):
    """Up to 20 reports within ``distance`` meters, nearest first."""
    return [public(r) for r in utils.find_near(store, lat, lng, distance)]


@router.get("/{report_id}", response_model=schemas.Report)
def get_report(report_id: str, store: DocumentStore = Depends(get_store)):
    return public(utils.get_report(store, report_id))


@router.patch("/{report_id}", response_model=schemas.Report)
def update_report(report_id: str, update: schemas.ReportUpdate, current_user=Depends(get_current_user),
                  store: DocumentStore = Depends(get_store)):
    """Edit fields or move the status forward (submitter or admin)."""
    return public(lifecycle.update_report(store, report_id, update, current_user))


@router.delete("/{report_id}")
def delete_report(report_id: str, current_user=Depends(get_current_user),
                  store: DocumentStore = Depends(get_store)):
    lifecycle.delete_report(store, report_id, current_user)
    return {"message": "Report deleted successfully"}
