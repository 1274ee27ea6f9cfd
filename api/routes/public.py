# SPDX-License-Identifier: Apache-2.0

"""
Unauthenticated transparency endpoints.

Tracking by ID and the public listing are rate limited per client and never
expose owner identity, contact details or timeline actors.
"""

from flask import current_app, jsonify
from flask_openapi3 import APIBlueprint, Tag

from middleware.rate_limit import rate_limit_public
from models.requests import PublicListQuery, TrackingPath

public_tag = Tag(name="Public", description="Complaint tracking and transparency listing")
public_bp = APIBlueprint(
    'public',
    __name__,
    url_prefix='/api/public',
    abp_tags=[public_tag]
)


@public_bp.get('/track/<tracking_id>')
@rate_limit_public
def track_complaint(path: TrackingPath):
    """
    Track a complaint by its tracking ID.

    Lookup ignores case and surrounding whitespace.
    """
    view = current_app.complaint_store.track(path.tracking_id)
    return jsonify(current_app.hal_formatter.format_public_complaint(view))


@public_bp.get('/complaints')
@rate_limit_public
def list_public_complaints(query: PublicListQuery):
    """List published complaints with statistics over the filtered set."""
    result = current_app.query_service.list_public(query)

    filters = {"category": query.category, "status": query.status}
    return jsonify(current_app.hal_formatter.format_public_collection(
        result["items"],
        result["pagination"],
        filters,
        extra={"stats": result["stats"]}
    ))
