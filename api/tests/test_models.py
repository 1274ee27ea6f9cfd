# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for Pydantic models.
"""

import pytest
from pydantic import ValidationError
from bson import ObjectId

from models.entities import ActorContext, Complaint, Feedback, TimelineEntry
from models.requests import (
    AdminListQuery, FeedbackRequest, OwnListQuery, PublicListQuery,
    SubmitComplaintRequest, TransitionRequest, VisibilityRequest
)


class TestSubmitComplaintRequest:
    """Test complaint submission validation."""

    def test_valid_request_with_camel_case_keys(self, complaint_payload):
        request = SubmitComplaintRequest.model_validate(complaint_payload)

        assert request.category == "Road & Infrastructure"
        assert request.priority == "high"
        assert request.alt_phone == "+91 98765 43210"
        assert request.attachment_urls == ["https://cdn.example.org/uploads/pothole.jpg"]

    def test_strings_are_trimmed_before_length_checks(self, complaint_payload):
        complaint_payload["title"] = "   short   "

        with pytest.raises(ValidationError) as exc_info:
            SubmitComplaintRequest.model_validate(complaint_payload)

        assert exc_info.value.errors()[0]["loc"] == ("title",)

    def test_description_minimum_length(self, complaint_payload):
        complaint_payload["description"] = "Too short to be useful"

        with pytest.raises(ValidationError):
            SubmitComplaintRequest.model_validate(complaint_payload)

    def test_blank_priority_defaults_to_normal(self, complaint_payload):
        complaint_payload["priority"] = "  "

        request = SubmitComplaintRequest.model_validate(complaint_payload)
        assert request.priority == "normal"

    def test_missing_priority_defaults_to_normal(self, complaint_payload):
        del complaint_payload["priority"]

        request = SubmitComplaintRequest.model_validate(complaint_payload)
        assert request.priority == "normal"

    def test_unknown_category_rejected(self, complaint_payload):
        complaint_payload["category"] = "Potholes"

        with pytest.raises(ValidationError):
            SubmitComplaintRequest.model_validate(complaint_payload)

    def test_blank_optional_fields_become_none(self, complaint_payload):
        complaint_payload["ward"] = ""
        complaint_payload["altPhone"] = "   "

        request = SubmitComplaintRequest.model_validate(complaint_payload)
        assert request.ward is None
        assert request.alt_phone is None

    def test_alt_phone_rejects_letters(self, complaint_payload):
        complaint_payload["altPhone"] = "call me maybe"

        with pytest.raises(ValidationError) as exc_info:
            SubmitComplaintRequest.model_validate(complaint_payload)

        assert "Alternate phone" in str(exc_info.value)

    def test_at_most_three_attachments(self, complaint_payload):
        complaint_payload["attachmentUrls"] = [f"https://cdn.example.org/{i}.jpg" for i in range(4)]

        with pytest.raises(ValidationError) as exc_info:
            SubmitComplaintRequest.model_validate(complaint_payload)

        assert "At most 3 attachments" in str(exc_info.value)

    def test_attachments_must_be_http_urls(self, complaint_payload):
        complaint_payload["attachmentUrls"] = ["file:///etc/passwd"]

        with pytest.raises(ValidationError):
            SubmitComplaintRequest.model_validate(complaint_payload)


class TestActionRequests:
    """Test transition, feedback and visibility payloads."""

    def test_transition_request_accepts_known_status(self):
        request = TransitionRequest.model_validate({"status": "in_progress", "remarks": "Crew assigned"})
        assert request.status == "in_progress"

    def test_transition_request_rejects_unknown_status(self):
        with pytest.raises(ValidationError):
            TransitionRequest.model_validate({"status": "closed"})

    def test_transition_remarks_length(self):
        with pytest.raises(ValidationError):
            TransitionRequest.model_validate({"status": "resolved", "remarks": "x" * 1001})

    @pytest.mark.parametrize("rating", [0, 6, 4.5, "5", True])
    def test_feedback_rating_must_be_integer_in_range(self, rating):
        with pytest.raises(ValidationError):
            FeedbackRequest.model_validate({"rating": rating})

    def test_feedback_comment_length(self):
        with pytest.raises(ValidationError):
            FeedbackRequest.model_validate({"rating": 4, "comment": "x" * 1001})

    def test_visibility_request_uses_camel_case(self):
        assert VisibilityRequest.model_validate({"isPublic": True}).is_public is True

    def test_visibility_request_is_strict(self):
        with pytest.raises(ValidationError):
            VisibilityRequest.model_validate({"isPublic": "yes"})


class TestListQueries:
    """Test pagination and filter parsing."""

    def test_defaults(self):
        assert OwnListQuery().limit == 10
        assert AdminListQuery().limit == 20
        assert PublicListQuery().page == 1

    def test_blank_filters_mean_no_filter(self):
        query = AdminListQuery.model_validate({"status": "", "category": " ", "search": ""})

        assert query.status is None
        assert query.category is None
        assert query.search is None

    def test_filters_are_plain_values(self):
        query = PublicListQuery.model_validate({"status": "resolved", "category": "Drainage"})

        assert query.status == "resolved"
        assert type(query.status) is str

    @pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 101}])
    def test_pagination_bounds(self, params):
        with pytest.raises(ValidationError):
            OwnListQuery.model_validate(params)


class TestComplaintEntity:
    """Test Complaint document mapping."""

    def _complaint(self, **overrides):
        data = {
            "tracking_id": "trp-abc12345",
            "owner_id": "citizen-1",
            "title": "Streetlight out on Nallur main road",
            "description": "The streetlight near the temple has been off for a week now.",
            "category": "Street Lights",
            "location": "Nallur main road"
        }
        data.update(overrides)
        return Complaint(**data)

    def test_tracking_id_is_upper_cased(self):
        assert self._complaint().tracking_id == "TRP-ABC12345"

    def test_defaults(self):
        complaint = self._complaint()

        assert complaint.status == "pending"
        assert complaint.priority == "normal"
        assert complaint.is_public is False
        assert complaint.schema_version == 1
        assert ObjectId.is_valid(complaint.id)

    def test_document_round_trip_uses_object_id(self):
        complaint = self._complaint()
        complaint.timeline = [
            TimelineEntry(complaint_id=complaint.id, status="pending", actor_id="citizen-1")
        ]

        document = complaint.to_document()
        assert isinstance(document["_id"], ObjectId)
        assert document["trackingId"] == "TRP-ABC12345"
        assert document["timeline"][0]["actorId"] == "citizen-1"

        restored = Complaint.from_document(document)
        assert restored.id == complaint.id
        assert restored.timeline[0].status == "pending"

    def test_too_many_attachments_rejected(self):
        with pytest.raises(ValidationError):
            self._complaint(attachments=["https://a", "https://b", "https://c", "https://d"])


class TestFeedbackAndActor:
    """Test Feedback and ActorContext models."""

    def test_feedback_document_mapping(self):
        feedback = Feedback(complaint_id="c1", citizen_id="citizen-1", rating=5)

        document = feedback.to_document()
        assert document["complaintId"] == "c1"
        assert Feedback.from_document(document).id == feedback.id

    def test_actor_roles(self):
        assert ActorContext(subject_id="a", role="admin").is_admin()
        assert ActorContext(subject_id="c", role="citizen").is_citizen()

    def test_actor_rejects_unknown_role(self):
        with pytest.raises(ValidationError):
            ActorContext(subject_id="x", role="moderator")
