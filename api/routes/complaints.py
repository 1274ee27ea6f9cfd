# SPDX-License-Identifier: Apache-2.0

"""
Citizen complaint endpoints.

This module implements filing complaints, listing the caller's own
complaints, the complaint detail view, owner feedback and reference data.
"""

from flask import current_app, jsonify
from flask_openapi3 import APIBlueprint, Tag
import logging

from domain.complaints import WARDS, reference_categories, reference_priorities
from domain.views import submission_view
from middleware.auth import current_actor, require_auth, require_role
from models.enums import ActorRole
from models.requests import ComplaintPath, FeedbackRequest, OwnListQuery, SubmitComplaintRequest
from models.responses import FeedbackView

logger = logging.getLogger(__name__)

complaints_tag = Tag(name="Complaints", description="Filing, tracking and rating complaints")
complaints_bp = APIBlueprint(
    'complaints',
    __name__,
    url_prefix='/api/complaints',
    abp_tags=[complaints_tag]
)


@complaints_bp.post('')
@require_role(ActorRole.CITIZEN.value)
def submit_complaint(body: SubmitComplaintRequest):
    """
    File a complaint.

    Returns the tracking ID the citizen can use to follow the complaint.
    """
    actor = current_actor()
    complaint = current_app.complaint_store.submit(actor, body)
    return jsonify(current_app.hal_formatter.format_submission(submission_view(complaint))), 201


@complaints_bp.get('/mine')
@require_role(ActorRole.CITIZEN.value)
def list_my_complaints(query: OwnListQuery):
    """
    List the caller's complaints.

    Includes per-status counts over all of the caller's complaints.
    """
    actor = current_actor()
    result = current_app.query_service.list_own(actor, query)

    filters = {"status": query.status, "priority": query.priority}
    return jsonify(current_app.hal_formatter.format_complaint_collection(
        result["items"],
        result["pagination"],
        actor,
        "/api/complaints/mine",
        filters,
        extra={"stats": result["stats"]}
    ))


@complaints_bp.get('/categories')
def list_categories():
    """Complaint categories with expected resolution times, and priorities."""
    return jsonify({
        "categories": reference_categories(),
        "priorities": reference_priorities()
    })


@complaints_bp.get('/wards')
def list_wards():
    """Wards complaints can be filed against."""
    return jsonify({"wards": WARDS})


@complaints_bp.get('/<complaint_id>')
@require_auth
def get_complaint(path: ComplaintPath):
    """
    Get a complaint with its timeline and feedback.

    Only the owner and administrators can read the full record.
    """
    actor = current_actor()
    complaint = current_app.query_service.get_one(actor, path.complaint_id)
    return jsonify(current_app.hal_formatter.format_complaint(
        complaint,
        actor,
        has_feedback=complaint.get("feedback") is not None
    ))


@complaints_bp.post('/<complaint_id>/feedback')
@require_auth
def submit_feedback(path: ComplaintPath, body: FeedbackRequest):
    """Rate the resolution of one's own resolved complaint."""
    actor = current_actor()
    feedback = current_app.feedback_service.submit_feedback(
        actor,
        path.complaint_id,
        body.rating,
        body.comment
    )

    response = FeedbackView.model_validate(feedback.model_dump()).model_dump(by_alias=True, mode="json")
    return jsonify(current_app.hal_formatter.format_feedback(response, path.complaint_id)), 201
