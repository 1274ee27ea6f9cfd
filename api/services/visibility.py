# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Visibility policy: publishing complaints to the transparency listing.

Publishing is one-way. The commit only matches a private complaint, so two
concurrent publishes cannot both succeed.
"""

import logging
from datetime import datetime
from typing import Callable

from opentelemetry import trace

from domain.visibility import VisibilityError, visibility_of
from middleware.error_handler import AuthorizationException, ConflictException
from models.entities import ActorContext, Complaint
from services.complaint_store import ComplaintStore
from services.mongodb import COMPLAINTS

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


class VisibilityService:
    """Applies the publish-only visibility policy to stored complaints."""

    def __init__(self, store: ComplaintStore, clock: Callable[[], datetime] = datetime.utcnow):
        self.store = store
        self.mongodb = store.mongodb
        self.clock = clock

    def _require_admin(self, actor: ActorContext) -> None:
        if not actor.is_admin():
            raise AuthorizationException("Only administrators can change complaint visibility")

    def publish(self, actor: ActorContext, complaint_id: str) -> Complaint:
        """
        Make a complaint public.

        Raises:
            AuthorizationException: If the actor is not an admin
            NotFoundException: If the complaint does not exist
            ConflictException: If the complaint is already public
        """
        with tracer.start_as_current_span("complaint.publish") as span:
            span.set_attributes({
                "complaint.operation": "publish",
                "complaint.id": complaint_id,
                "user.id": actor.subject_id
            })
            self._require_admin(actor)

            complaint = self.store.get_by_id(complaint_id)
            try:
                visibility_of(complaint.is_public).publish()
            except VisibilityError as e:
                span.set_attribute("complaint.result", "already_public")
                raise ConflictException(str(e))

            updated = self.mongodb.find_one_and_update(
                COMPLAINTS,
                {"_id": self.mongodb.parse_object_id(complaint.id), "isPublic": False},
                {"$set": {"isPublic": True, "updatedAt": self.clock()}}
            )
            if updated is None:
                span.set_attribute("complaint.result", "lost_race")
                raise ConflictException("Complaint is already public")

            span.set_attribute("complaint.result", "published")
            logger.info(
                "Complaint published",
                extra={
                    "complaint_id": complaint.id,
                    "tracking_id": complaint.tracking_id,
                    "user_id": actor.subject_id
                }
            )
            return Complaint.from_document(updated)

    def unpublish(self, actor: ActorContext, complaint_id: str) -> Complaint:
        """
        Reject any attempt to make a complaint private.

        Raises:
            AuthorizationException: If the actor is not an admin
            NotFoundException: If the complaint does not exist
            ConflictException: Always, for an existing complaint
        """
        with tracer.start_as_current_span("complaint.unpublish") as span:
            span.set_attributes({"complaint.id": complaint_id, "user.id": actor.subject_id})
            self._require_admin(actor)

            complaint = self.store.get_by_id(complaint_id)
            try:
                visibility_of(complaint.is_public).unpublish()
            except VisibilityError as e:
                logger.info(
                    "Unpublish rejected",
                    extra={"complaint_id": complaint.id, "user_id": actor.subject_id}
                )
                raise ConflictException(str(e))

            # No visibility state accepts unpublish
            raise ConflictException("Complaint visibility cannot be revoked")

    def set_visibility(self, actor: ActorContext, complaint_id: str, is_public: bool) -> Complaint:
        """Route a requested visibility value to publish or unpublish."""
        if is_public:
            return self.publish(actor, complaint_id)
        return self.unpublish(actor, complaint_id)
