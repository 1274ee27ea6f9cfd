# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Complaint store: filing complaints and looking them up.

A complaint is inserted together with its initial timeline entry in a single
document write. Tracking IDs are protected by a unique index; a collision is
retried with a fresh ID a bounded number of times.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Union

from opentelemetry import trace
from pymongo.errors import DuplicateKeyError

from domain.complaints import (
    build_complaint, generate_tracking_id, is_well_formed_tracking_id,
    normalize_tracking_id, reassign_tracking_id, validate_submitter
)
from domain.views import tracking_view
from middleware.error_handler import AuthorizationException, ConflictException, NotFoundException
from middleware.validation import parse_model
from models.entities import ActorContext, Complaint
from models.requests import SubmitComplaintRequest
from services.mongodb import COMPLAINTS, MongoDBService

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

DEFAULT_TRACKING_ID_MAX_ATTEMPTS = 5


class ComplaintStore:
    """Creates complaints and resolves them by ID or tracking ID."""

    def __init__(
        self,
        mongodb: MongoDBService,
        max_attempts: int = DEFAULT_TRACKING_ID_MAX_ATTEMPTS,
        tracking_id_factory: Callable[[], str] = generate_tracking_id,
        clock: Callable[[], datetime] = datetime.utcnow
    ):
        self.mongodb = mongodb
        self.max_attempts = max(1, max_attempts)
        self.tracking_id_factory = tracking_id_factory
        self.clock = clock

    def submit(
        self,
        actor: ActorContext,
        payload: Union[SubmitComplaintRequest, Dict[str, Any]]
    ) -> Complaint:
        """
        File a new complaint for a citizen.

        Args:
            actor: Submitting actor; must be a citizen
            payload: Submission payload or validated request model

        Returns:
            The stored complaint, status pending, with one timeline entry

        Raises:
            AuthorizationException: If the actor is not a citizen
            ValidationException: If the payload is invalid
            ConflictException: If no unique tracking ID could be allocated
        """
        with tracer.start_as_current_span("complaint.submit") as span:
            span.set_attributes({
                "complaint.operation": "submit",
                "user.id": actor.subject_id,
                "user.role": actor.role
            })

            check = validate_submitter(actor)
            if not check.is_valid:
                raise AuthorizationException(check.errors[0])

            request = parse_model(SubmitComplaintRequest, payload)
            complaint = build_complaint(request, actor, self.tracking_id_factory(), self.clock())

            for attempt in range(1, self.max_attempts + 1):
                try:
                    self.mongodb.insert(COMPLAINTS, complaint.to_document())
                    break
                except DuplicateKeyError:
                    logger.warning(
                        "Tracking ID collision, retrying",
                        extra={"tracking_id": complaint.tracking_id, "attempt": attempt}
                    )
                    complaint = reassign_tracking_id(complaint, self.tracking_id_factory())
            else:
                span.set_attribute("complaint.result", "tracking_id_exhausted")
                logger.error(
                    "Could not allocate a unique tracking ID",
                    extra={"attempts": self.max_attempts, "user_id": actor.subject_id}
                )
                raise ConflictException("Could not allocate a tracking id, please try again")

            span.set_attributes({
                "complaint.result": "created",
                "complaint.id": complaint.id,
                "complaint.tracking_id": complaint.tracking_id,
                "complaint.category": complaint.category
            })
            logger.info(
                "Complaint submitted",
                extra={
                    "complaint_id": complaint.id,
                    "tracking_id": complaint.tracking_id,
                    "user_id": actor.subject_id,
                    "category": complaint.category
                }
            )
            return complaint

    def get_by_id(self, complaint_id: str) -> Complaint:
        """
        Load a complaint by ID.

        Raises:
            NotFoundException: For unknown or malformed IDs
        """
        document = self.mongodb.find_by_id(COMPLAINTS, complaint_id)
        if document is None:
            raise NotFoundException("Complaint not found")
        return Complaint.from_document(document)

    def get_by_tracking_id(self, tracking_id: str) -> Complaint:
        """
        Load a complaint by tracking ID, ignoring case and surrounding whitespace.

        Raises:
            NotFoundException: If no complaint carries the tracking ID
        """
        if not is_well_formed_tracking_id(tracking_id):
            raise NotFoundException("No complaint found with this tracking ID")
        document = self.mongodb.find_one(COMPLAINTS, {"trackingId": normalize_tracking_id(tracking_id)})
        if document is None:
            raise NotFoundException("No complaint found with this tracking ID")
        return Complaint.from_document(document)

    def track(self, tracking_id: str) -> Dict[str, Any]:
        """
        Public tracking lookup.

        Returns:
            Tracking view without owner identity, contact data or timeline actors
        """
        with tracer.start_as_current_span("complaint.track") as span:
            complaint = self.get_by_tracking_id(tracking_id)
            span.set_attributes({
                "complaint.id": complaint.id,
                "complaint.status": complaint.status
            })
            return tracking_view(complaint, self.clock())
