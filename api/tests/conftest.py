# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration and fixtures.

Tests run against an in-memory mongomock client so no MongoDB server is
required; tokens are signed with a throwaway RS256 key pair.
"""

import os
import itertools
import pytest
import mongomock
from datetime import datetime, timedelta
from typing import Dict, Any

# Set test environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['OTEL_ENABLED'] = 'false'
os.environ['MONGODB_DATABASE'] = 'civic_complaints_test'

from app import create_app
from models.entities import ActorContext
from services.auth import AuthService, generate_key_pair
from services.complaint_store import ComplaintStore
from services.feedback import FeedbackService
from services.mongodb import MongoDBService
from services.queries import QueryService
from services.status_engine import StatusEngine
from services.visibility import VisibilityService


class FakeClock:
    """Clock advancing one second per call, so timestamps are strictly ordered."""

    def __init__(self, start: datetime = datetime(2024, 3, 1, 9, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(seconds=1)
        return value


@pytest.fixture(scope="session")
def key_pair():
    """RS256 key pair shared by the test session."""
    return generate_key_pair()


@pytest.fixture
def auth_service(key_pair):
    private_key, public_key = key_pair
    return AuthService(private_key, public_key)


@pytest.fixture
def mongodb_service():
    """MongoDB service backed by mongomock, with production indexes."""
    service = MongoDBService(
        'mongodb://localhost:27017/civic_complaints_test',
        'civic_complaints_test',
        client=mongomock.MongoClient()
    )
    service.create_indexes()
    yield service
    service.close_connection()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tracking_ids():
    """Deterministic tracking ID factory."""
    counter = itertools.count(1)
    return lambda: f"TRP-{next(counter):08d}"


@pytest.fixture
def complaint_store(mongodb_service, tracking_ids, clock):
    return ComplaintStore(mongodb_service, tracking_id_factory=tracking_ids, clock=clock)


@pytest.fixture
def feedback_service(complaint_store, clock):
    return FeedbackService(complaint_store, clock=clock)


@pytest.fixture
def status_engine(complaint_store, clock):
    return StatusEngine(complaint_store, clock=clock)


@pytest.fixture
def visibility_service(complaint_store, clock):
    return VisibilityService(complaint_store, clock=clock)


@pytest.fixture
def query_service(complaint_store, feedback_service):
    return QueryService(complaint_store, feedback_service)


@pytest.fixture
def citizen():
    return ActorContext(subject_id="citizen-1", role="citizen", name="Asha Kumar")


@pytest.fixture
def other_citizen():
    return ActorContext(subject_id="citizen-2", role="citizen", name="Ravi Shankar")


@pytest.fixture
def admin():
    return ActorContext(subject_id="admin-1", role="admin", name="Ward Officer")


@pytest.fixture
def complaint_payload() -> Dict[str, Any]:
    """Valid complaint submission payload."""
    return {
        "title": "Pothole on Kumaran Road near the bus stop",
        "description": "A deep pothole has formed in the left lane and vehicles swerve to avoid it.",
        "category": "Road & Infrastructure",
        "priority": "high",
        "location": "Kumaran Road, opposite the central bus stop",
        "ward": "W02",
        "altPhone": "+91 98765 43210",
        "attachmentUrls": ["https://cdn.example.org/uploads/pothole.jpg"]
    }


@pytest.fixture
def app(mongodb_service, auth_service):
    """Application wired to the mongomock store without Redis."""
    application = create_app(
        config={
            'ENVIRONMENT': 'test',
            'OTEL_ENABLED': False,
            'DOCS_ENABLED': False,
            'BASE_URL': 'https://api.example.org',
            'CREATE_INDEXES': False,
            'TESTING': True
        },
        mongodb_service=mongodb_service,
        auth_service=auth_service
    )
    return application


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_headers(auth_service):
    """Build Authorization headers for a subject and role."""
    def _make(subject_id: str, role: str, name: str = None) -> Dict[str, str]:
        token = auth_service.issue_token(subject_id, role, name=name)
        return {"Authorization": f"Bearer {token}"}
    return _make


@pytest.fixture
def citizen_headers(make_headers):
    return make_headers("citizen-1", "citizen", "Asha Kumar")


@pytest.fixture
def other_citizen_headers(make_headers):
    return make_headers("citizen-2", "citizen", "Ravi Shankar")


@pytest.fixture
def admin_headers(make_headers):
    return make_headers("admin-1", "admin", "Ward Officer")
