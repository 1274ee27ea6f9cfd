# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Unit tests for MongoDB service layer.
"""

import pytest
from unittest.mock import MagicMock
from bson import ObjectId
from pymongo.errors import AutoReconnect, DuplicateKeyError

from middleware.error_handler import TransientStoreException
from services.mongodb import COMPLAINTS, FEEDBACK, MongoDBService, PaginationResult


class TestMongoDBService:
    """Test MongoDB service functionality."""

    def test_insert_and_find_by_id(self, mongodb_service):
        doc_id = mongodb_service.insert(COMPLAINTS, {"trackingId": "TRP-AAAA1111", "status": "pending"})

        assert ObjectId.is_valid(doc_id)
        assert mongodb_service.find_by_id(COMPLAINTS, doc_id)["trackingId"] == "TRP-AAAA1111"

    def test_malformed_id_is_missing(self, mongodb_service):
        assert mongodb_service.find_by_id(COMPLAINTS, "not-an-id") is None
        assert mongodb_service.find_by_id(COMPLAINTS, None) is None

    def test_unique_tracking_id(self, mongodb_service):
        mongodb_service.insert(COMPLAINTS, {"trackingId": "TRP-AAAA1111"})

        with pytest.raises(DuplicateKeyError):
            mongodb_service.insert(COMPLAINTS, {"trackingId": "TRP-AAAA1111"})

    def test_unique_feedback_per_complaint(self, mongodb_service):
        mongodb_service.insert(FEEDBACK, {"complaintId": "c-1", "rating": 5})

        with pytest.raises(DuplicateKeyError):
            mongodb_service.insert(FEEDBACK, {"complaintId": "c-1", "rating": 2})

    def test_find_one_and_update_is_conditional(self, mongodb_service):
        doc_id = mongodb_service.insert(COMPLAINTS, {"trackingId": "TRP-AAAA1111", "status": "pending"})
        query = {"_id": ObjectId(doc_id), "status": "pending"}

        updated = mongodb_service.find_one_and_update(COMPLAINTS, query, {"$set": {"status": "in_progress"}})
        assert updated["status"] == "in_progress"

        stale = mongodb_service.find_one_and_update(COMPLAINTS, query, {"$set": {"status": "resolved"}})
        assert stale is None
        assert mongodb_service.find_by_id(COMPLAINTS, doc_id)["status"] == "in_progress"

    def test_paginate_newest_first(self, mongodb_service):
        for index in range(5):
            mongodb_service.insert(COMPLAINTS, {"trackingId": f"TRP-0000000{index}", "createdAt": index})

        result = mongodb_service.paginate(COMPLAINTS, {}, page=2, limit=2)

        assert [doc["createdAt"] for doc in result.items] == [2, 1]
        assert result.total == 5
        assert result.total_pages == 3
        assert result.has_next and result.has_prev

    def test_count_and_aggregate(self, mongodb_service):
        for index, status in enumerate(["pending", "pending", "resolved"]):
            mongodb_service.insert(COMPLAINTS, {"trackingId": f"TRP-0000000{index}", "status": status})

        assert mongodb_service.count(COMPLAINTS, {"status": "pending"}) == 2

        groups = mongodb_service.aggregate(COMPLAINTS, [{"$group": {"_id": "$status", "count": {"$sum": 1}}}])
        assert {group["_id"]: group["count"] for group in groups} == {"pending": 2, "resolved": 1}

    def test_driver_outage_is_transient(self, mongodb_service):
        collection = MagicMock()
        collection.count_documents.side_effect = AutoReconnect("connection reset")
        mongodb_service.get_collection = MagicMock(return_value=collection)

        with pytest.raises(TransientStoreException):
            mongodb_service.count(COMPLAINTS, {})

    def test_health_check(self):
        client = MagicMock()
        client.admin.command.return_value = {"ok": 1}
        service = MongoDBService(database_name="civic_complaints_test", client=client)

        health = service.health_check()

        assert health['status'] == 'healthy'
        assert health['ping'] is True
        assert health['database'] == 'civic_complaints_test'

    def test_health_check_failure(self):
        client = MagicMock()
        client.admin.command.side_effect = AutoReconnect("no servers")
        service = MongoDBService(database_name="civic_complaints_test", client=client)

        health = service.health_check()

        assert health['status'] == 'unhealthy'
        assert "no servers" in health['error']


class TestPaginationResult:
    """Test pagination arithmetic."""

    def test_empty(self):
        result = PaginationResult([], 0, 1, 10)

        assert result.total_pages == 0
        assert not result.has_next
        assert not result.has_prev
