# SPDX-License-Identifier: Apache-2.0

"""
Complaint domain logic for filing and tracking.

This module contains pure functions for tracking ID generation, complaint
construction and the citizen-facing tracking view. Randomness and clocks are
passed in so every function is testable without side effects.
"""

import secrets
import string
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

from models.entities import ActorContext, Complaint, TimelineEntry
from models.enums import ComplaintCategory, ComplaintPriority, ComplaintStatus
from models.requests import SubmitComplaintRequest


TRACKING_ID_PREFIX = "TRP-"
TRACKING_ID_SUFFIX_LENGTH = 8
TRACKING_ID_ALPHABET = string.digits + string.ascii_uppercase

INITIAL_REMARKS = "Complaint submitted successfully"

ESTIMATED_RESOLUTION_DAYS: Dict[ComplaintCategory, int] = {
    ComplaintCategory.ROAD_INFRASTRUCTURE: 15,
    ComplaintCategory.WATER_SUPPLY: 3,
    ComplaintCategory.ELECTRICITY: 2,
    ComplaintCategory.SANITATION: 5,
    ComplaintCategory.STREET_LIGHTS: 7,
    ComplaintCategory.DRAINAGE: 10,
    ComplaintCategory.PUBLIC_HEALTH: 5,
    ComplaintCategory.ENCROACHMENT: 20,
    ComplaintCategory.NOISE_POLLUTION: 7,
    ComplaintCategory.OTHER: 10,
}

DEFAULT_RESOLUTION_DAYS = 10

STATUS_MESSAGES: Dict[ComplaintStatus, str] = {
    ComplaintStatus.PENDING: "Your complaint is pending review by our officials.",
    ComplaintStatus.IN_PROGRESS: "Your complaint is being actively worked on.",
    ComplaintStatus.RESOLVED: "Your complaint has been resolved successfully.",
    ComplaintStatus.REJECTED: "Your complaint could not be processed.",
}

WARDS: List[Dict[str, str]] = [
    {"id": "W01", "name": "Avinashi Road"},
    {"id": "W02", "name": "Kumaran Road"},
    {"id": "W03", "name": "Palladam Road"},
    {"id": "W04", "name": "Dharapuram Road"},
    {"id": "W05", "name": "Kangeyam Road"},
    {"id": "W06", "name": "Mangalam Road"},
    {"id": "W07", "name": "Kongu Main Road"},
    {"id": "W08", "name": "Veerapandi"},
    {"id": "W09", "name": "Nallur"},
    {"id": "W10", "name": "Angeripalayam"},
    {"id": "W11", "name": "Iduvampalayam"},
    {"id": "W12", "name": "Perumanallur"},
]


@dataclass
class ValidationResult:
    """Result of complaint validation."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def generate_tracking_id(choice: Callable[[str], str] = secrets.choice) -> str:
    """
    Generate a public tracking ID such as ``TRP-7K2Q9XAB``.

    Args:
        choice: Picks one character from the alphabet; a CSPRNG by default

    Returns:
        Tracking ID string
    """
    suffix = "".join(choice(TRACKING_ID_ALPHABET) for _ in range(TRACKING_ID_SUFFIX_LENGTH))
    return f"{TRACKING_ID_PREFIX}{suffix}"


def normalize_tracking_id(tracking_id: str) -> str:
    """Tracking ID lookups are case-insensitive."""
    return (tracking_id or "").strip().upper()


def is_well_formed_tracking_id(tracking_id: str) -> bool:
    value = normalize_tracking_id(tracking_id)
    suffix = value[len(TRACKING_ID_PREFIX):]
    return (
        value.startswith(TRACKING_ID_PREFIX)
        and len(suffix) == TRACKING_ID_SUFFIX_LENGTH
        and all(c in TRACKING_ID_ALPHABET for c in suffix)
    )


def estimated_resolution_days(category: str) -> int:
    """
    Look up the expected resolution time for a category.

    Args:
        category: Category display value

    Returns:
        Number of days
    """
    try:
        return ESTIMATED_RESOLUTION_DAYS[ComplaintCategory(category)]
    except ValueError:
        return DEFAULT_RESOLUTION_DAYS


def validate_submitter(actor: ActorContext) -> ValidationResult:
    errors = []
    if not actor.is_citizen():
        errors.append("Only citizens can submit complaints")
    return ValidationResult(is_valid=len(errors) == 0, errors=errors)


def build_complaint(
    request: SubmitComplaintRequest,
    actor: ActorContext,
    tracking_id: str,
    now: Optional[datetime] = None
) -> Complaint:
    """
    Build a new pending complaint with its initial timeline entry.

    Args:
        request: Validated submission payload
        actor: Submitting citizen
        tracking_id: Freshly generated tracking ID
        now: Submission timestamp

    Returns:
        Complaint entity ready to be inserted
    """
    now = now or datetime.utcnow()
    complaint = Complaint(
        tracking_id=tracking_id,
        owner_id=actor.subject_id,
        owner_name=actor.name,
        title=request.title,
        description=request.description,
        category=request.category,
        priority=request.priority,
        location=request.location,
        ward=request.ward,
        alt_phone=request.alt_phone,
        attachments=list(request.attachment_urls),
        status=ComplaintStatus.PENDING,
        is_public=False,
        estimated_resolution_days=estimated_resolution_days(request.category),
        created_at=now,
        updated_at=now
    )
    complaint.timeline = [
        TimelineEntry(
            complaint_id=complaint.id,
            status=ComplaintStatus.PENDING,
            remarks=INITIAL_REMARKS,
            actor_id=actor.subject_id,
            created_at=now
        )
    ]
    return complaint


def reassign_tracking_id(complaint: Complaint, tracking_id: str) -> Complaint:
    """Return a copy carrying a new tracking ID, used only before the first insert succeeds."""
    return complaint.model_copy(update={"tracking_id": tracking_id})


def days_since(created_at: datetime, now: Optional[datetime] = None) -> int:
    """Whole days elapsed since a timestamp."""
    now = now or datetime.utcnow()
    return max((now - created_at).days, 0)


def status_message(status: str) -> str:
    """Human-readable message for a status."""
    try:
        return STATUS_MESSAGES[ComplaintStatus(status)]
    except ValueError:
        return ""


def reference_categories() -> List[Dict[str, object]]:
    """Categories with their expected resolution time."""
    return [
        {"value": category.value, "estimatedResolutionDays": days}
        for category, days in ESTIMATED_RESOLUTION_DAYS.items()
    ]


def reference_priorities() -> List[str]:
    return [priority.value for priority in ComplaintPriority]
