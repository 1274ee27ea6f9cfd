# SPDX-License-Identifier: Apache-2.0

"""
Scope-specific complaint views and read-time statistics.

Public and tracking views are built from models that do not declare owner,
contact or actor fields, so those values are dropped structurally.
"""

import math
from datetime import datetime
from typing import Any, Dict, Optional

from models.entities import Complaint, Feedback
from models.enums import ComplaintStatus
from models.responses import (
    AdminComplaintSummaryView, ComplaintDetailView, ComplaintSummaryView,
    OwnerStats, PaginationInfo, PublicComplaintView, PublicStats,
    SubmitComplaintResponse, TrackingView
)
from .complaints import days_since, status_message


def _dump(view) -> Dict[str, Any]:
    return view.model_dump(by_alias=True, mode="json")


def _feedback_data(feedback: Optional[Feedback]) -> Optional[Dict[str, Any]]:
    return feedback.model_dump() if feedback else None


def submission_view(complaint: Complaint) -> Dict[str, Any]:
    return _dump(SubmitComplaintResponse.model_validate(complaint.model_dump()))


def summary_view(complaint: Complaint, admin: bool = False) -> Dict[str, Any]:
    """Listing row; admins also see owner and contact data."""
    model = AdminComplaintSummaryView if admin else ComplaintSummaryView
    return _dump(model.model_validate(complaint.model_dump()))


def detail_view(complaint: Complaint, feedback: Optional[Feedback] = None) -> Dict[str, Any]:
    data = complaint.model_dump()
    data["feedback"] = _feedback_data(feedback)
    return _dump(ComplaintDetailView.model_validate(data))


def public_view(complaint: Complaint, feedback: Optional[Feedback] = None) -> Dict[str, Any]:
    data = complaint.model_dump()
    data["feedback"] = _feedback_data(feedback)
    return _dump(PublicComplaintView.model_validate(data))


def tracking_view(complaint: Complaint, now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Build the unauthenticated tracking view.

    Args:
        complaint: Complaint found by tracking ID
        now: Reference time for the elapsed-days counter

    Returns:
        Tracking view without owner identity, contact data or timeline actors
    """
    data = complaint.model_dump()
    data["days_since_creation"] = days_since(complaint.created_at, now)
    data["status_message"] = status_message(complaint.status)
    return _dump(TrackingView.model_validate(data))


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


def pagination_view(page: int, limit: int, total: int) -> Dict[str, Any]:
    return _dump(PaginationInfo(page=page, limit=limit, total=total, total_pages=total_pages(total, limit)))


def owner_stats(counts: Dict[str, int]) -> Dict[str, Any]:
    """
    Build owner statistics from per-status counts.

    Args:
        counts: Mapping of status value to complaint count

    Returns:
        Stats with total and one counter per status
    """
    stats = OwnerStats(
        pending=counts.get(ComplaintStatus.PENDING.value, 0),
        in_progress=counts.get(ComplaintStatus.IN_PROGRESS.value, 0),
        resolved=counts.get(ComplaintStatus.RESOLVED.value, 0),
        rejected=counts.get(ComplaintStatus.REJECTED.value, 0),
    )
    stats.total = stats.pending + stats.in_progress + stats.resolved + stats.rejected
    return _dump(stats)


def round_rating(average: Optional[float]) -> Optional[float]:
    return None if average is None else round(float(average), 2)


def public_stats(counts: Dict[str, int], average_rating: Optional[float]) -> Dict[str, Any]:
    """Build public statistics over the filtered public set."""
    stats = PublicStats(
        total=sum(counts.values()),
        resolved=counts.get(ComplaintStatus.RESOLVED.value, 0),
        in_progress=counts.get(ComplaintStatus.IN_PROGRESS.value, 0),
        pending=counts.get(ComplaintStatus.PENDING.value, 0),
        avg_rating=round_rating(average_rating),
    )
    return _dump(stats)
