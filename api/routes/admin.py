# SPDX-License-Identifier: Apache-2.0

"""
Administrative complaint endpoints.

This module implements the admin listing, status transitions and
publication of complaints on the transparency listing.
"""

from flask import current_app, jsonify
from flask_openapi3 import APIBlueprint, Tag
import logging

from domain.views import detail_view
from middleware.auth import current_actor, require_role
from models.enums import ActorRole
from models.requests import AdminListQuery, ComplaintPath, TransitionRequest, VisibilityRequest

logger = logging.getLogger(__name__)

admin_tag = Tag(name="Administration", description="Complaint moderation and publication")
admin_bp = APIBlueprint(
    'admin',
    __name__,
    url_prefix='/api/admin/complaints',
    abp_tags=[admin_tag]
)


def _complaint_response(complaint):
    actor = current_actor()
    feedback = current_app.feedback_service.get_for_complaint(complaint.id)
    return current_app.hal_formatter.format_complaint(
        detail_view(complaint, feedback),
        actor,
        has_feedback=feedback is not None
    )


@admin_bp.get('')
@require_role(ActorRole.ADMIN.value)
def list_complaints(query: AdminListQuery):
    """
    List all complaints.

    Supports status and category filters and a case-insensitive search over
    title, tracking ID and citizen name.
    """
    actor = current_actor()
    result = current_app.query_service.list_admin(actor, query)

    filters = {"status": query.status, "category": query.category, "search": query.search}
    return jsonify(current_app.hal_formatter.format_complaint_collection(
        result["items"],
        result["pagination"],
        actor,
        "/api/admin/complaints",
        filters
    ))


@admin_bp.post('/<complaint_id>/transition')
@require_role(ActorRole.ADMIN.value)
def transition_complaint(path: ComplaintPath, body: TransitionRequest):
    """
    Move a complaint along its lifecycle.

    The status change, the latest remarks and the new timeline entry are
    stored together.
    """
    complaint = current_app.status_engine.transition(
        current_actor(),
        path.complaint_id,
        body.status,
        body.remarks
    )
    return jsonify(_complaint_response(complaint))


@admin_bp.post('/<complaint_id>/publish')
@require_role(ActorRole.ADMIN.value)
def publish_complaint(path: ComplaintPath):
    """Publish a complaint on the transparency listing. Publication is permanent."""
    complaint = current_app.visibility_service.publish(current_actor(), path.complaint_id)
    return jsonify(_complaint_response(complaint))


@admin_bp.patch('/<complaint_id>/visibility')
@require_role(ActorRole.ADMIN.value)
def set_complaint_visibility(path: ComplaintPath, body: VisibilityRequest):
    """
    Set the visibility flag of a complaint.

    Only ``isPublic: true`` is accepted for a private complaint; a public
    complaint cannot be made private again.
    """
    complaint = current_app.visibility_service.set_visibility(
        current_actor(),
        path.complaint_id,
        body.is_public
    )
    logger.info(
        "Complaint visibility updated",
        extra={"complaint_id": path.complaint_id, "is_public": complaint.is_public}
    )
    return jsonify(_complaint_response(complaint))
