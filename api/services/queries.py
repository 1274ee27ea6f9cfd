# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Query and listing service for the owner, admin and public scopes.

Listings are paginated newest first. Statistics are aggregated at read time
from the complaint and feedback collections.
"""

import logging
import re
from typing import Any, Dict, Optional, Union

from opentelemetry import trace

from domain.views import (
    detail_view, owner_stats, pagination_view, public_stats, public_view, summary_view
)
from middleware.error_handler import AuthorizationException
from middleware.validation import parse_model
from models.entities import ActorContext, Complaint
from models.enums import ComplaintStatus
from models.requests import AdminListQuery, OwnListQuery, PublicListQuery
from services.complaint_store import ComplaintStore
from services.feedback import FeedbackService
from services.mongodb import COMPLAINTS

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)


def _status_counts(mongodb, query: Dict[str, Any]) -> Dict[str, int]:
    """One count per status within the query; a status filter zeroes the others."""
    wanted = query.get("status")
    return {
        status.value: (
            mongodb.count(COMPLAINTS, {**query, "status": status.value})
            if wanted in (None, status.value) else 0
        )
        for status in ComplaintStatus
    }


class QueryService:
    """Read side for complaints, applying per-scope redaction."""

    def __init__(self, store: ComplaintStore, feedback: FeedbackService):
        self.store = store
        self.feedback = feedback
        self.mongodb = store.mongodb

    def get_one(self, actor: ActorContext, complaint_id: str) -> Dict[str, Any]:
        """
        Full complaint with timeline and feedback for its owner or an admin.

        Raises:
            NotFoundException: If the complaint does not exist
            AuthorizationException: If the actor is neither owner nor admin
        """
        with tracer.start_as_current_span("complaint.get_one") as span:
            span.set_attributes({"complaint.id": complaint_id, "user.id": actor.subject_id})

            complaint = self.store.get_by_id(complaint_id)
            if not (actor.is_admin() or complaint.is_owned_by(actor.subject_id)):
                logger.warning(
                    "Complaint access denied",
                    extra={"complaint_id": complaint_id, "user_id": actor.subject_id}
                )
                raise AuthorizationException("You do not have access to this complaint")

            return detail_view(complaint, self.feedback.get_for_complaint(complaint.id))

    def list_own(
        self,
        actor: ActorContext,
        query: Union[OwnListQuery, Dict[str, Any], None] = None
    ) -> Dict[str, Any]:
        """
        List the actor's own complaints with per-status statistics.

        Args:
            actor: Citizen owner
            query: Pagination and status/priority filters

        Returns:
            Dictionary with items, pagination and stats
        """
        with tracer.start_as_current_span("complaint.list_own") as span:
            if not actor.is_citizen():
                raise AuthorizationException("Only citizens have their own complaints")

            params = parse_model(OwnListQuery, query)
            owner_query = {"ownerId": actor.subject_id}
            filters = dict(owner_query)
            if params.status:
                filters["status"] = params.status
            if params.priority:
                filters["priority"] = params.priority

            result = self.mongodb.paginate(COMPLAINTS, filters, params.page, params.limit)
            items = [summary_view(Complaint.from_document(doc)) for doc in result.items]

            span.set_attributes({
                "user.id": actor.subject_id,
                "query.total": result.total,
                "query.page": params.page
            })

            return {
                "items": items,
                "pagination": pagination_view(params.page, params.limit, result.total),
                "stats": owner_stats(_status_counts(self.mongodb, owner_query)),
            }

    def list_admin(
        self,
        actor: ActorContext,
        query: Union[AdminListQuery, Dict[str, Any], None] = None
    ) -> Dict[str, Any]:
        """
        List all complaints for administrators.

        Args:
            actor: Admin
            query: Pagination plus status, category and free-text search filters

        Returns:
            Dictionary with items and pagination
        """
        with tracer.start_as_current_span("complaint.list_admin") as span:
            if not actor.is_admin():
                raise AuthorizationException("Only administrators can list all complaints")

            params = parse_model(AdminListQuery, query)
            filters: Dict[str, Any] = {}
            if params.status:
                filters["status"] = params.status
            if params.category:
                filters["category"] = params.category
            if params.search:
                pattern = {"$regex": re.escape(params.search.strip()), "$options": "i"}
                filters["$or"] = [
                    {"title": pattern},
                    {"trackingId": pattern},
                    {"ownerName": pattern},
                ]

            result = self.mongodb.paginate(COMPLAINTS, filters, params.page, params.limit)
            items = [summary_view(Complaint.from_document(doc), admin=True) for doc in result.items]

            span.set_attributes({"query.total": result.total, "query.page": params.page})

            return {
                "items": items,
                "pagination": pagination_view(params.page, params.limit, result.total),
            }

    def list_public(self, query: Union[PublicListQuery, Dict[str, Any], None] = None) -> Dict[str, Any]:
        """
        Public transparency listing.

        Only published complaints are listed, redacted for anonymous readers,
        each with its timeline and feedback. Stats cover the filtered set.

        Args:
            query: Pagination plus category and status filters

        Returns:
            Dictionary with items, pagination and stats
        """
        with tracer.start_as_current_span("complaint.list_public") as span:
            params = parse_model(PublicListQuery, query)
            filters: Dict[str, Any] = {"isPublic": True}
            if params.category:
                filters["category"] = params.category
            if params.status:
                filters["status"] = params.status

            result = self.mongodb.paginate(COMPLAINTS, filters, params.page, params.limit)
            complaints = [Complaint.from_document(doc) for doc in result.items]
            feedback = self.feedback.get_for_complaints([c.id for c in complaints])
            items = [public_view(c, feedback.get(c.id)) for c in complaints]

            average: Optional[float] = self.feedback.average_rating(filters)

            span.set_attributes({"query.total": result.total, "query.page": params.page})

            return {
                "items": items,
                "pagination": pagination_view(params.page, params.limit, result.total),
                "stats": public_stats(_status_counts(self.mongodb, filters), average),
            }
