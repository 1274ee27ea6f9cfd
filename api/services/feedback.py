# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Feedback service: owner ratings for resolved complaints.

At most one feedback document exists per complaint, enforced by a unique
index on ``complaintId``.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from opentelemetry import trace
from pymongo.errors import DuplicateKeyError

from domain.feedback import build_feedback, is_feedback_author, validate_feedback_eligibility
from middleware.error_handler import AuthorizationException, ConflictException, ValidationException
from middleware.validation import parse_model
from models.entities import ActorContext, Feedback
from models.requests import FeedbackRequest
from services.complaint_store import ComplaintStore
from services.mongodb import COMPLAINTS, FEEDBACK

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class FeedbackService:
    """Records and reads complaint feedback."""

    def __init__(self, store: ComplaintStore, clock: Callable[[], datetime] = datetime.utcnow):
        self.store = store
        self.mongodb = store.mongodb
        self.clock = clock

    def submit_feedback(
        self,
        actor: ActorContext,
        complaint_id: str,
        rating: int,
        comment: Optional[str] = None
    ) -> Feedback:
        """
        Rate a resolved complaint.

        Args:
            actor: Complaint owner
            complaint_id: Complaint ID
            rating: Integer from 1 to 5
            comment: Optional comment of up to 1000 characters

        Returns:
            Stored feedback

        Raises:
            NotFoundException: If the complaint does not exist
            AuthorizationException: If the actor does not own the complaint
            ValidationException: For a bad rating or an unresolved complaint
            ConflictException: If feedback already exists
        """
        with tracer.start_as_current_span("feedback.submit") as span:
            span.set_attributes({
                "feedback.operation": "submit",
                "complaint.id": complaint_id,
                "user.id": actor.subject_id
            })

            complaint = self.store.get_by_id(complaint_id)

            if not is_feedback_author(complaint, actor):
                span.set_attribute("feedback.result", "forbidden")
                raise AuthorizationException("Only the complaint owner can submit feedback")

            request = parse_model(FeedbackRequest, {"rating": rating, "comment": comment})

            check = validate_feedback_eligibility(complaint)
            if not check.is_valid:
                span.set_attribute("feedback.result", "not_resolved")
                raise ValidationException(
                    check.errors[0],
                    [{"field": "status", "message": check.errors[0], "type": "invalid_state"}]
                )

            feedback = build_feedback(complaint, actor, request.rating, request.comment, self.clock())
            try:
                self.mongodb.insert(FEEDBACK, feedback.to_document())
            except DuplicateKeyError:
                span.set_attribute("feedback.result", "duplicate")
                logger.info(
                    "Duplicate feedback rejected",
                    extra={"complaint_id": complaint.id, "user_id": actor.subject_id}
                )
                raise ConflictException("Feedback has already been submitted for this complaint")

            span.set_attributes({"feedback.result": "created", "feedback.rating": feedback.rating})
            logger.info(
                "Feedback submitted",
                extra={
                    "complaint_id": complaint.id,
                    "user_id": actor.subject_id,
                    "rating": feedback.rating
                }
            )
            return feedback

    def get_for_complaint(self, complaint_id: str) -> Optional[Feedback]:
        document = self.mongodb.find_one(FEEDBACK, {"complaintId": complaint_id})
        return Feedback.from_document(document) if document else None

    def get_for_complaints(self, complaint_ids: List[str]) -> Dict[str, Feedback]:
        """Feedback keyed by complaint ID for a page of complaints."""
        if not complaint_ids:
            return {}
        documents = self.mongodb.find_many(FEEDBACK, {"complaintId": {"$in": list(complaint_ids)}})
        return {doc["complaintId"]: Feedback.from_document(doc) for doc in documents}

    def average_rating(self, complaint_filter: Dict[str, Any]) -> Optional[float]:
        """
        Mean rating over the complaints matching a filter.

        Feedback is joined onto the matching complaints in one aggregation,
        so the complaint set is never materialized.

        Args:
            complaint_filter: Match filter on the complaints collection

        Returns:
            Average rating, or None when no matching complaint was rated
        """
        results = self.mongodb.aggregate(COMPLAINTS, [
            {"$match": complaint_filter},
            {"$addFields": {"complaintId": {"$toString": "$_id"}}},
            {"$lookup": {
                "from": FEEDBACK,
                "localField": "complaintId",
                "foreignField": "complaintId",
                "as": "feedback"
            }},
            {"$unwind": "$feedback"},
            {"$group": {"_id": None, "avgRating": {"$avg": "$feedback.rating"}}}
        ])
        if not results or results[0].get("avgRating") is None:
            return None
        return results[0]["avgRating"]
