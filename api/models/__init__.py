# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Models package - Pydantic schemas and data models for the civic complaints platform.
"""

# Base models
from .base import BaseEntity, CamelModel, generate_object_id

# Enumerations
from .enums import (
    ComplaintStatus,
    ComplaintPriority,
    ComplaintCategory,
    ActorRole
)

# Core entities
from .entities import (
    TimelineEntry,
    Complaint,
    Feedback,
    ActorContext
)

# Request models
from .requests import (
    SubmitComplaintRequest,
    TransitionRequest,
    FeedbackRequest,
    VisibilityRequest,
    OwnListQuery,
    AdminListQuery,
    PublicListQuery,
    ComplaintPath,
    TrackingPath
)

# Response models
from .responses import (
    HalLink,
    TimelineEntryView,
    TimelineEntryDetail,
    FeedbackView,
    SubmitComplaintResponse,
    ComplaintSummaryView,
    AdminComplaintSummaryView,
    ComplaintDetailView,
    PublicComplaintView,
    TrackingView,
    PaginationInfo,
    OwnerStats,
    PublicStats
)

__all__ = [
    # Base models
    "BaseEntity",
    "CamelModel",
    "generate_object_id",

    # Enumerations
    "ComplaintStatus",
    "ComplaintPriority",
    "ComplaintCategory",
    "ActorRole",

    # Core entities
    "TimelineEntry",
    "Complaint",
    "Feedback",
    "ActorContext",

    # Request models
    "SubmitComplaintRequest",
    "TransitionRequest",
    "FeedbackRequest",
    "VisibilityRequest",
    "OwnListQuery",
    "AdminListQuery",
    "PublicListQuery",
    "ComplaintPath",
    "TrackingPath",

    # Response models
    "HalLink",
    "TimelineEntryView",
    "TimelineEntryDetail",
    "FeedbackView",
    "SubmitComplaintResponse",
    "ComplaintSummaryView",
    "AdminComplaintSummaryView",
    "ComplaintDetailView",
    "PublicComplaintView",
    "TrackingView",
    "PaginationInfo",
    "OwnerStats",
    "PublicStats"
]
