# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Status engine for admin-driven complaint transitions.

A transition is committed with one conditional update matching the status
that was read. The status change and its timeline entry land together or
not at all, and a concurrent writer makes the loser fail with a conflict.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from opentelemetry import trace

from domain.lifecycle import build_timeline_entry, build_transition_update, validate_status_transition
from middleware.error_handler import AuthorizationException, ConflictException, ValidationException
from models.entities import ActorContext, Complaint
from models.enums import ComplaintStatus
from services.complaint_store import ComplaintStore
from services.mongodb import COMPLAINTS

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

MAX_REMARKS_LENGTH = 1000


class StatusEngine:
    """Applies lifecycle transitions to stored complaints."""

    def __init__(self, store: ComplaintStore, clock: Callable[[], datetime] = datetime.utcnow):
        self.store = store
        self.mongodb = store.mongodb
        self.clock = clock

    def transition(
        self,
        actor: ActorContext,
        complaint_id: str,
        new_status: str,
        remarks: Optional[str] = None
    ) -> Complaint:
        """
        Move a complaint to a new status.

        Args:
            actor: Acting admin
            complaint_id: Complaint ID
            new_status: Target status value
            remarks: Optional citizen-facing remarks

        Returns:
            Updated complaint including the new timeline entry

        Raises:
            AuthorizationException: If the actor is not an admin
            ValidationException: For an unknown status or overlong remarks
            NotFoundException: If the complaint does not exist
            ConflictException: For a disallowed edge or a lost race
        """
        with tracer.start_as_current_span("complaint.transition") as span:
            span.set_attributes({
                "complaint.operation": "transition",
                "complaint.id": complaint_id,
                "complaint.new_status": str(new_status),
                "user.id": actor.subject_id
            })

            if not actor.is_admin():
                raise AuthorizationException("Only administrators can change complaint status")

            try:
                target = ComplaintStatus(new_status)
            except ValueError:
                raise ValidationException(
                    "Invalid status",
                    [{"field": "status", "message": f"Unknown status '{new_status}'", "type": "enum"}]
                )

            remarks = remarks.strip() if remarks and remarks.strip() else None
            if remarks and len(remarks) > MAX_REMARKS_LENGTH:
                raise ValidationException(
                    "Invalid remarks",
                    [{
                        "field": "remarks",
                        "message": f"Remarks cannot exceed {MAX_REMARKS_LENGTH} characters",
                        "type": "string_too_long"
                    }]
                )

            complaint = self.store.get_by_id(complaint_id)
            current = complaint.status

            check = validate_status_transition(current, target)
            if not check.is_valid:
                span.set_attribute("complaint.result", "rejected")
                logger.info(
                    "Status transition rejected",
                    extra={
                        "complaint_id": complaint.id,
                        "from_status": current,
                        "to_status": target.value,
                        "user_id": actor.subject_id
                    }
                )
                raise ConflictException(check.errors[0])

            entry = build_timeline_entry(complaint, target, actor, remarks, self.clock())
            updated = self.mongodb.find_one_and_update(
                COMPLAINTS,
                {"_id": self.mongodb.parse_object_id(complaint.id), "status": current},
                build_transition_update(entry, remarks)
            )

            if updated is None:
                latest = self.store.get_by_id(complaint_id)
                span.set_attribute("complaint.result", "lost_race")
                logger.warning(
                    "Status transition lost a concurrent update",
                    extra={
                        "complaint_id": complaint.id,
                        "expected_status": current,
                        "latest_status": latest.status,
                        "user_id": actor.subject_id
                    }
                )
                raise ConflictException(
                    f"Complaint status changed concurrently and is now {latest.status}"
                )

            span.set_attribute("complaint.result", "transitioned")
            logger.info(
                "Complaint status changed",
                extra={
                    "complaint_id": complaint.id,
                    "tracking_id": complaint.tracking_id,
                    "from_status": current,
                    "to_status": target.value,
                    "user_id": actor.subject_id
                }
            )
            return Complaint.from_document(updated)
