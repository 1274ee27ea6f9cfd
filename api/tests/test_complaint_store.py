# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for complaint filing and lookup.
"""

import pytest
from unittest.mock import patch
from pymongo.errors import AutoReconnect

from middleware.error_handler import (
    AuthorizationException, ConflictException, NotFoundException,
    TransientStoreException, ValidationException
)
from services.complaint_store import ComplaintStore
from services.mongodb import COMPLAINTS


class TestSubmit:
    """Test complaint submission."""

    def test_submit_stores_pending_private_complaint(self, complaint_store, mongodb_service, citizen,
                                                     complaint_payload):
        complaint = complaint_store.submit(citizen, complaint_payload)

        assert complaint.tracking_id == "TRP-00000001"
        assert complaint.status == "pending"
        assert complaint.is_public is False

        stored = mongodb_service.find_by_id(COMPLAINTS, complaint.id)
        assert stored["trackingId"] == "TRP-00000001"
        assert stored["ownerId"] == "citizen-1"
        assert stored["altPhone"] == "+91 98765 43210"
        assert len(stored["timeline"]) == 1
        assert stored["timeline"][0]["status"] == "pending"

    def test_admin_cannot_submit(self, complaint_store, admin, complaint_payload):
        with pytest.raises(AuthorizationException):
            complaint_store.submit(admin, complaint_payload)

    def test_invalid_payload(self, complaint_store, citizen, complaint_payload):
        complaint_payload["title"] = "Short"

        with pytest.raises(ValidationException) as exc_info:
            complaint_store.submit(citizen, complaint_payload)

        assert exc_info.value.validation_errors[0]["field"] == "title"

    def test_tracking_id_collision_is_retried(self, mongodb_service, citizen, complaint_payload, clock):
        ids = iter(["TRP-DUPLICAT", "TRP-DUPLICAT", "TRP-FRESH001"])
        store = ComplaintStore(mongodb_service, tracking_id_factory=lambda: next(ids), clock=clock)

        first = store.submit(citizen, complaint_payload)
        second = store.submit(citizen, complaint_payload)

        assert first.tracking_id == "TRP-DUPLICAT"
        assert second.tracking_id == "TRP-FRESH001"
        assert mongodb_service.count(COMPLAINTS, {}) == 2

    def test_tracking_id_exhaustion_is_a_conflict(self, mongodb_service, citizen, complaint_payload, clock):
        store = ComplaintStore(mongodb_service, max_attempts=3, tracking_id_factory=lambda: "TRP-SAMEID00",
                               clock=clock)
        store.submit(citizen, complaint_payload)

        with pytest.raises(ConflictException) as exc_info:
            store.submit(citizen, complaint_payload)

        assert "Could not allocate a tracking id" in exc_info.value.message
        assert mongodb_service.count(COMPLAINTS, {}) == 1

    def test_store_outage_is_transient(self, complaint_store, citizen, complaint_payload):
        with patch.object(complaint_store.mongodb, "get_collection", side_effect=AutoReconnect("down")):
            with pytest.raises(TransientStoreException):
                complaint_store.submit(citizen, complaint_payload)


class TestLookup:
    """Test lookups by ID and tracking ID."""

    def test_get_by_id(self, complaint_store, citizen, complaint_payload):
        created = complaint_store.submit(citizen, complaint_payload)

        assert complaint_store.get_by_id(created.id).tracking_id == created.tracking_id

    @pytest.mark.parametrize("complaint_id", ["not-an-object-id", "65f000000000000000000000"])
    def test_unknown_or_malformed_id_is_not_found(self, complaint_store, complaint_id):
        with pytest.raises(NotFoundException):
            complaint_store.get_by_id(complaint_id)

    def test_tracking_lookup_is_case_insensitive(self, complaint_store, citizen, complaint_payload):
        created = complaint_store.submit(citizen, complaint_payload)

        found = complaint_store.get_by_tracking_id(f"  {created.tracking_id.lower()} ")
        assert found.id == created.id

    def test_unknown_tracking_id(self, complaint_store):
        with pytest.raises(NotFoundException):
            complaint_store.get_by_tracking_id("TRP-NOPE0000")

    @pytest.mark.parametrize("tracking_id", ["", "TRP-1", "XYZ-12345678", "TRP-ABCD-123"])
    def test_malformed_tracking_id_skips_the_store(self, complaint_store, tracking_id):
        with patch.object(complaint_store.mongodb, 'find_one') as find_one:
            with pytest.raises(NotFoundException):
                complaint_store.get_by_tracking_id(tracking_id)

        find_one.assert_not_called()

    def test_track_view_hides_owner_and_contact(self, complaint_store, citizen, complaint_payload):
        created = complaint_store.submit(citizen, complaint_payload)

        view = complaint_store.track(created.tracking_id)

        assert view["trackingId"] == created.tracking_id
        assert view["status"] == "pending"
        assert view["daysSinceCreation"] == 0
        assert "pending review" in view["statusMessage"]
        for hidden in ("ownerId", "ownerName", "altPhone", "id"):
            assert hidden not in view
        assert all("actorId" not in entry for entry in view["timeline"])
