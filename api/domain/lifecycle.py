# SPDX-License-Identifier: Apache-2.0

"""
Complaint lifecycle rules.

Pure functions describing the status graph, building timeline entries and
checking that a recorded timeline is a valid walk of the graph.
"""

from datetime import datetime
from typing import Dict, FrozenSet, List, Optional

from models.entities import ActorContext, Complaint, TimelineEntry
from models.enums import ComplaintStatus
from .complaints import ValidationResult


ALLOWED_TRANSITIONS: Dict[ComplaintStatus, FrozenSet[ComplaintStatus]] = {
    ComplaintStatus.PENDING: frozenset({
        ComplaintStatus.IN_PROGRESS,
        ComplaintStatus.RESOLVED,
        ComplaintStatus.REJECTED,
    }),
    ComplaintStatus.IN_PROGRESS: frozenset({
        ComplaintStatus.RESOLVED,
        ComplaintStatus.REJECTED,
    }),
    ComplaintStatus.RESOLVED: frozenset(),  # Terminal state
    ComplaintStatus.REJECTED: frozenset(),  # Terminal state
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def is_terminal(status: str) -> bool:
    return ComplaintStatus(status) in TERMINAL_STATUSES


def validate_status_transition(current_status: str, new_status: str) -> ValidationResult:
    """
    Validate a complaint status transition.

    Args:
        current_status: Current complaint status
        new_status: Desired new status

    Returns:
        ValidationResult with validation status and errors
    """
    errors = []
    current = ComplaintStatus(current_status)
    target = ComplaintStatus(new_status)

    if current == target:
        errors.append(f"Complaint is already {current.value}")
    elif is_terminal(current):
        errors.append(f"Complaint is {current.value} and can no longer change status")
    elif target not in ALLOWED_TRANSITIONS[current]:
        errors.append(f"Invalid status transition from {current.value} to {target.value}")

    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors
    )


def build_timeline_entry(
    complaint: Complaint,
    new_status: str,
    actor: ActorContext,
    remarks: Optional[str] = None,
    now: Optional[datetime] = None
) -> TimelineEntry:
    """
    Build the timeline entry recording an accepted transition.

    Args:
        complaint: Complaint being transitioned
        new_status: Status being entered
        actor: Admin performing the transition
        remarks: Optional citizen-facing remarks
        now: Transition timestamp

    Returns:
        TimelineEntry to append
    """
    return TimelineEntry(
        complaint_id=complaint.id,
        status=new_status,
        remarks=remarks,
        actor_id=actor.subject_id,
        created_at=now or datetime.utcnow()
    )


def build_transition_update(entry: TimelineEntry, remarks: Optional[str]) -> dict:
    """
    Build the MongoDB update document for an accepted transition.

    The status change and the timeline append are a single update so they
    commit together.
    """
    fields = {
        "status": entry.status,
        "updatedAt": entry.created_at,
        "adminRemarks": remarks,
    }
    if entry.status == ComplaintStatus.RESOLVED:
        fields["resolvedAt"] = entry.created_at

    return {
        "$set": fields,
        "$push": {"timeline": entry.model_dump(by_alias=True)},
    }


def validate_timeline(complaint: Complaint) -> ValidationResult:
    """
    Check that a complaint's timeline is a valid walk ending at its status.

    The first entry must be pending, each subsequent entry must be an allowed
    edge from the previous one, timestamps must not decrease and the last
    entry must match the complaint's current status.
    """
    errors: List[str] = []
    timeline = complaint.timeline

    if not timeline:
        return ValidationResult(is_valid=False, errors=["Timeline is empty"])

    if timeline[0].status != ComplaintStatus.PENDING:
        errors.append("Timeline must start with pending")

    for previous, current in zip(timeline, timeline[1:]):
        check = validate_status_transition(previous.status, current.status)
        errors.extend(check.errors)
        if current.created_at < previous.created_at:
            errors.append("Timeline timestamps must not decrease")

    if timeline[-1].status != complaint.status:
        errors.append("Last timeline entry does not match the complaint status")

    return ValidationResult(is_valid=len(errors) == 0, errors=errors)
