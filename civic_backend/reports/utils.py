"""
Read access over reports: lookup, filtered pagination and nearby search.
"""

import math
from typing import Dict, List, Optional

from civic_backend import config
from civic_backend.database import DocumentStore, check_id
from civic_backend.errors import NotFoundError, ValidationError
from civic_backend.reports import schemas

EARTH_RADIUS_M = 6371000


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)
    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def get_report(store: DocumentStore, report_id: str) -> Dict:
    check_id(report_id, "report ID")
    report = store.get("reports", report_id)
    if not report:
        raise NotFoundError("Report not found")
    return report


def _text_match(search: str):
    needle = search.lower()
    return lambda r: needle in r.get("title", "").lower() or needle in r.get("description", "").lower()


def find_reports(
    store: DocumentStore,
    status: Optional[schemas.ReportStatus] = None,
    category: Optional[schemas.ReportCategory] = None,
    search: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> Dict:
    """Filter and paginate reports, newest first."""
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be positive")

    query = {}
    if status:
        query["status"] = schemas.ReportStatus(status).value
    if category:
        query["category"] = schemas.ReportCategory(category).value

    reports = store.find("reports", query, where=_text_match(search) if search else None)
    reports.sort(key=lambda r: r["created_at"], reverse=True)

    total = len(reports)
    skip = (page - 1) * limit
    return {
        "items": reports[skip: skip + limit],
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit),
    }


def find_near(store: DocumentStore, lat: float, lng: float,
              max_distance: float = config.NEARBY_DEFAULT_DISTANCE) -> List[Dict]:
    """Reports within ``max_distance`` meters of (lat, lng), nearest first."""
    if not -90 <= lat <= 90 or not -180 <= lng <= 180:
        raise ValidationError("Invalid coordinates")
    if max_distance < 0:
        raise ValidationError("Distance must not be negative")

    nearby = []
    for report in store.find("reports"):
        r_lng, r_lat = report["location"]["coordinates"]
        distance = haversine(lat, lng, r_lat, r_lng)
        if distance <= max_distance:
            nearby.append((distance, report))

    nearby.sort(key=lambda pair: pair[0])
    return [report for _, report in nearby[:config.NEARBY_RESULT_LIMIT]]
