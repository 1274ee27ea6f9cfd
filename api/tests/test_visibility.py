# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for the publish-only visibility policy.
"""

import pytest
from unittest.mock import patch

from domain.visibility import Private, Public, VisibilityError, visibility_of
from middleware.error_handler import AuthorizationException, ConflictException, NotFoundException


@pytest.fixture
def complaint(complaint_store, citizen, complaint_payload):
    return complaint_store.submit(citizen, complaint_payload)


class TestVisibilityStates:
    """Test the two visibility states."""

    def test_mapping_from_flag(self):
        assert visibility_of(False) == Private()
        assert visibility_of(True) == Public()

    def test_private_publishes_to_public(self):
        assert Private().publish().is_public is True

    def test_public_cannot_publish_again(self):
        with pytest.raises(VisibilityError):
            Public().publish()

    @pytest.mark.parametrize("state", [Private(), Public()])
    def test_no_state_unpublishes(self, state):
        with pytest.raises(VisibilityError):
            state.unpublish()


class TestVisibilityService:
    """Test publishing stored complaints."""

    def test_publish(self, visibility_service, complaint, admin):
        published = visibility_service.publish(admin, complaint.id)

        assert published.is_public is True
        assert published.updated_at > complaint.updated_at
        assert published.status == complaint.status

    def test_publish_twice_is_a_conflict(self, visibility_service, complaint, admin):
        visibility_service.publish(admin, complaint.id)

        with pytest.raises(ConflictException):
            visibility_service.publish(admin, complaint.id)

    def test_citizen_cannot_publish(self, visibility_service, complaint, citizen):
        with pytest.raises(AuthorizationException):
            visibility_service.publish(citizen, complaint.id)

    def test_unknown_complaint(self, visibility_service, admin):
        with pytest.raises(NotFoundException):
            visibility_service.publish(admin, "65f000000000000000000000")

    def test_published_complaint_cannot_be_made_private(self, visibility_service, complaint_store,
                                                        complaint, admin):
        visibility_service.publish(admin, complaint.id)

        with pytest.raises(ConflictException):
            visibility_service.set_visibility(admin, complaint.id, False)

        assert complaint_store.get_by_id(complaint.id).is_public is True

    def test_private_complaint_cannot_be_unpublished(self, visibility_service, complaint, admin):
        with pytest.raises(ConflictException):
            visibility_service.unpublish(admin, complaint.id)

    def test_publishing_does_not_touch_lifecycle(self, visibility_service, status_engine, complaint, admin):
        status_engine.transition(admin, complaint.id, "resolved")
        published = visibility_service.set_visibility(admin, complaint.id, True)

        assert published.is_public is True
        assert published.status == "resolved"
        assert len(published.timeline) == 2

    def test_concurrent_publish_loses_race(self, visibility_service, complaint_store, complaint, admin):
        stale = complaint_store.get_by_id(complaint.id)
        first = visibility_service.publish(admin, complaint.id)

        # Replay the read that happened before the concurrent publish
        with patch.object(complaint_store, "get_by_id", return_value=stale):
            with pytest.raises(ConflictException) as exc_info:
                visibility_service.publish(admin, complaint.id)

        assert exc_info.value.message == "Complaint is already public"
        assert complaint_store.get_by_id(complaint.id).updated_at == first.updated_at
