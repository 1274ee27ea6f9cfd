# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the owner, admin and public listings.
"""

import pytest

from middleware.error_handler import AuthorizationException, NotFoundException, ValidationException


def _submit(store, actor, payload, **overrides):
    data = dict(payload)
    data.update(overrides)
    return store.submit(actor, data)


class TestGetOne:
    """Test the full complaint view."""

    def test_owner_sees_full_record(self, query_service, complaint_store, citizen, complaint_payload):
        complaint = _submit(complaint_store, citizen, complaint_payload)

        view = query_service.get_one(citizen, complaint.id)

        assert view["id"] == complaint.id
        assert view["altPhone"] == "+91 98765 43210"
        assert view["timeline"][0]["actorId"] == "citizen-1"
        assert view["feedback"] is None

    def test_admin_sees_any_record(self, query_service, complaint_store, citizen, admin, complaint_payload):
        complaint = _submit(complaint_store, citizen, complaint_payload)

        assert query_service.get_one(admin, complaint.id)["ownerId"] == "citizen-1"

    def test_other_citizen_forbidden(self, query_service, complaint_store, citizen, other_citizen,
                                     complaint_payload):
        complaint = _submit(complaint_store, citizen, complaint_payload)

        with pytest.raises(AuthorizationException):
            query_service.get_one(other_citizen, complaint.id)

    def test_missing(self, query_service, admin):
        with pytest.raises(NotFoundException):
            query_service.get_one(admin, "65f000000000000000000000")

    def test_includes_feedback(self, query_service, complaint_store, status_engine, feedback_service,
                               citizen, admin, complaint_payload):
        complaint = _submit(complaint_store, citizen, complaint_payload)
        status_engine.transition(admin, complaint.id, "resolved")
        feedback_service.submit_feedback(citizen, complaint.id, 5, "Great")

        view = query_service.get_one(citizen, complaint.id)
        assert view["feedback"]["rating"] == 5
        assert view["feedback"]["comment"] == "Great"


class TestListOwn:
    """Test the owner's listing and stats."""

    def test_only_own_complaints_newest_first(self, query_service, complaint_store, citizen, other_citizen,
                                              complaint_payload):
        first = _submit(complaint_store, citizen, complaint_payload)
        second = _submit(complaint_store, citizen, complaint_payload)
        _submit(complaint_store, other_citizen, complaint_payload)

        result = query_service.list_own(citizen)

        assert [item["id"] for item in result["items"]] == [second.id, first.id]
        assert result["pagination"] == {"page": 1, "limit": 10, "total": 2, "totalPages": 1}

    def test_stats_cover_all_own_complaints(self, query_service, complaint_store, status_engine, citizen,
                                            admin, complaint_payload):
        complaints = [_submit(complaint_store, citizen, complaint_payload) for _ in range(4)]
        status_engine.transition(admin, complaints[0].id, "in_progress")
        status_engine.transition(admin, complaints[1].id, "resolved")
        status_engine.transition(admin, complaints[2].id, "rejected")

        result = query_service.list_own(citizen, {"status": "pending"})

        assert len(result["items"]) == 1
        assert result["stats"] == {
            "total": 4, "pending": 1, "inProgress": 1, "resolved": 1, "rejected": 1
        }

    def test_priority_filter(self, query_service, complaint_store, citizen, complaint_payload):
        _submit(complaint_store, citizen, complaint_payload, priority="urgent")
        _submit(complaint_store, citizen, complaint_payload, priority="low")

        result = query_service.list_own(citizen, {"priority": "urgent"})
        assert [item["priority"] for item in result["items"]] == ["urgent"]

    def test_summary_omits_timeline_and_owner(self, query_service, complaint_store, citizen,
                                              complaint_payload):
        _submit(complaint_store, citizen, complaint_payload)

        item = query_service.list_own(citizen)["items"][0]
        assert "timeline" not in item
        assert "ownerId" not in item

    def test_pagination(self, query_service, complaint_store, citizen, complaint_payload):
        for _ in range(5):
            _submit(complaint_store, citizen, complaint_payload)

        result = query_service.list_own(citizen, {"page": 3, "limit": 2})

        assert len(result["items"]) == 1
        assert result["pagination"]["totalPages"] == 3

    def test_admin_has_no_own_listing(self, query_service, admin):
        with pytest.raises(AuthorizationException):
            query_service.list_own(admin)

    def test_invalid_filter(self, query_service, citizen):
        with pytest.raises(ValidationException):
            query_service.list_own(citizen, {"status": "closed"})


class TestListAdmin:
    """Test the admin listing."""

    def test_lists_everyone_with_contact_data(self, query_service, complaint_store, citizen, other_citizen,
                                              admin, complaint_payload):
        _submit(complaint_store, citizen, complaint_payload)
        _submit(complaint_store, other_citizen, complaint_payload)

        result = query_service.list_admin(admin)

        assert result["pagination"]["total"] == 2
        assert result["pagination"]["limit"] == 20
        assert {item["ownerId"] for item in result["items"]} == {"citizen-1", "citizen-2"}
        assert "altPhone" in result["items"][0]

    def test_search_title_tracking_id_and_owner_name(self, query_service, complaint_store, citizen,
                                                      other_citizen, admin, complaint_payload):
        water = _submit(complaint_store, citizen, complaint_payload,
                        title="No water supply since Monday morning", category="Water Supply")
        road = _submit(complaint_store, other_citizen, complaint_payload)

        by_title = query_service.list_admin(admin, {"search": "WATER supply"})
        by_tracking = query_service.list_admin(admin, {"search": road.tracking_id.lower()})
        by_owner = query_service.list_admin(admin, {"search": "ravi"})

        assert [item["id"] for item in by_title["items"]] == [water.id]
        assert [item["id"] for item in by_tracking["items"]] == [road.id]
        assert [item["id"] for item in by_owner["items"]] == [road.id]

    def test_search_is_literal(self, query_service, complaint_store, citizen, admin, complaint_payload):
        _submit(complaint_store, citizen, complaint_payload)

        assert query_service.list_admin(admin, {"search": ".*"})["items"] == []

    def test_status_and_category_filters(self, query_service, complaint_store, status_engine, citizen,
                                         admin, complaint_payload):
        drainage = _submit(complaint_store, citizen, complaint_payload, category="Drainage")
        _submit(complaint_store, citizen, complaint_payload)
        status_engine.transition(admin, drainage.id, "in_progress")

        result = query_service.list_admin(admin, {"status": "in_progress", "category": "Drainage"})
        assert [item["id"] for item in result["items"]] == [drainage.id]

    def test_citizen_forbidden(self, query_service, citizen):
        with pytest.raises(AuthorizationException):
            query_service.list_admin(citizen)


class TestListPublic:
    """Test the public transparency listing."""

    @pytest.fixture
    def published(self, complaint_store, status_engine, visibility_service, feedback_service, citizen,
                  admin, complaint_payload):
        resolved = _submit(complaint_store, citizen, complaint_payload)
        status_engine.transition(admin, resolved.id, "resolved", "Road relaid")
        visibility_service.publish(admin, resolved.id)
        feedback_service.submit_feedback(citizen, resolved.id, 4)

        working = _submit(complaint_store, citizen, complaint_payload, category="Drainage")
        status_engine.transition(admin, working.id, "in_progress")
        visibility_service.publish(admin, working.id)

        _submit(complaint_store, citizen, complaint_payload)
        return resolved, working

    def test_only_published_complaints(self, query_service, published):
        resolved, working = published

        result = query_service.list_public()

        assert {item["id"] for item in result["items"]} == {resolved.id, working.id}
        assert result["stats"] == {
            "total": 2, "resolved": 1, "inProgress": 1, "pending": 0, "avgRating": 4.0
        }

    def test_public_items_are_redacted(self, query_service, published):
        for item in query_service.list_public()["items"]:
            for hidden in ("ownerId", "ownerName", "altPhone", "isPublic"):
                assert hidden not in item
            assert all("actorId" not in entry for entry in item["timeline"])

    def test_feedback_attached(self, query_service, published):
        resolved, _ = published

        items = {item["id"]: item for item in query_service.list_public()["items"]}
        assert items[resolved.id]["feedback"]["rating"] == 4

    def test_stats_follow_filters(self, query_service, published):
        result = query_service.list_public({"category": "Drainage"})

        assert result["stats"]["total"] == 1
        assert result["stats"]["inProgress"] == 1
        assert result["stats"]["avgRating"] is None

    def test_status_filter_zeroes_other_counts(self, query_service, published):
        result = query_service.list_public({"status": "resolved"})

        assert result["stats"]["total"] == 1
        assert result["stats"]["inProgress"] == 0

    def test_empty_listing(self, query_service):
        result = query_service.list_public()

        assert result["items"] == []
        assert result["pagination"]["totalPages"] == 0
        assert result["stats"]["avgRating"] is None
