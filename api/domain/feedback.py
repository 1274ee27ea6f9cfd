# SPDX-License-Identifier: Apache-2.0

"""
Feedback domain logic: who may rate a complaint and when.
"""

from datetime import datetime
from typing import Optional

from models.entities import ActorContext, Complaint, Feedback
from models.enums import ComplaintStatus
from .complaints import ValidationResult


def is_feedback_author(complaint: Complaint, actor: ActorContext) -> bool:
    """Only the citizen who filed the complaint may rate it."""
    return actor.is_citizen() and complaint.is_owned_by(actor.subject_id)


def validate_feedback_eligibility(complaint: Complaint) -> ValidationResult:
    errors = []
    if complaint.status != ComplaintStatus.RESOLVED:
        errors.append("Feedback can only be submitted for resolved complaints")
    return ValidationResult(is_valid=len(errors) == 0, errors=errors)


def build_feedback(
    complaint: Complaint,
    actor: ActorContext,
    rating: int,
    comment: Optional[str] = None,
    now: Optional[datetime] = None
) -> Feedback:
    """
    Build the feedback record for a resolved complaint.

    Args:
        complaint: Rated complaint
        actor: Owner submitting the rating
        rating: Integer rating from 1 to 5
        comment: Optional comment
        now: Submission timestamp

    Returns:
        Feedback entity ready to be inserted
    """
    return Feedback(
        complaint_id=complaint.id,
        citizen_id=actor.subject_id,
        rating=rating,
        comment=comment.strip() if comment and comment.strip() else None,
        submitted_at=now or datetime.utcnow()
    )
