# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Response models for API endpoints with HAL support.

Each scope has its own view model. Views ignore unknown input fields, so a
public or tracking view built from a full complaint can never carry owner
identity, contact data or timeline actor IDs.
"""

from typing import List, Optional
from pydantic import BaseModel, Field
from datetime import datetime
from .base import CamelModel


class HalLink(BaseModel):
    """HAL link representation."""

    href: str = Field(..., description="Link URL")
    method: Optional[str] = Field(None, description="HTTP method")
    type: Optional[str] = Field(None, description="Content type")
    title: Optional[str] = Field(None, description="Link title")
    templated: Optional[bool] = Field(None, description="Whether URL is templated")


class TimelineEntryView(CamelModel):
    """Timeline entry as shown to the public (no actor)."""

    status: str = Field(..., description="Status entered")
    remarks: Optional[str] = Field(None, description="Remarks")
    created_at: datetime = Field(..., description="Entry timestamp")


class TimelineEntryDetail(TimelineEntryView):
    """Timeline entry as shown to owners and admins."""

    id: str = Field(..., description="Entry ID")
    actor_id: str = Field(..., description="Subject who caused the entry")


class FeedbackView(CamelModel):
    rating: int = Field(..., description="Rating from 1 to 5")
    comment: Optional[str] = Field(None, description="Optional comment")
    submitted_at: datetime = Field(..., description="Submission timestamp")


class SubmitComplaintResponse(CamelModel):
    """Acknowledgement returned after filing a complaint."""

    id: str = Field(..., description="Complaint ID")
    tracking_id: str = Field(..., description="Public tracking ID")
    status: str = Field(..., description="Initial status")
    estimated_resolution_days: int = Field(..., description="Expected days to resolve")
    created_at: datetime = Field(..., description="Creation timestamp")


class ComplaintSummaryView(CamelModel):
    """Listing row for the owner's own complaints."""

    id: str = Field(..., description="Complaint ID")
    tracking_id: str = Field(..., description="Public tracking ID")
    title: str = Field(..., description="Complaint title")
    category: str = Field(..., description="Complaint category")
    priority: str = Field(..., description="Priority level")
    status: str = Field(..., description="Lifecycle status")
    location: str = Field(..., description="Location")
    ward: Optional[str] = Field(None, description="Ward identifier")
    is_public: bool = Field(..., description="Published on the transparency listing")
    admin_remarks: Optional[str] = Field(None, description="Latest remarks")
    estimated_resolution_days: int = Field(..., description="Expected days to resolve")
    resolved_at: Optional[datetime] = Field(None, description="Resolution timestamp")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class AdminComplaintSummaryView(ComplaintSummaryView):
    """Listing row for administrators, including owner and contact data."""

    owner_id: str = Field(..., description="Owner subject ID")
    owner_name: Optional[str] = Field(None, description="Owner display name")
    alt_phone: Optional[str] = Field(None, description="Alternate contact number")


class ComplaintDetailView(AdminComplaintSummaryView):
    """Full complaint as seen by its owner or an admin."""

    description: str = Field(..., description="Complaint description")
    attachments: List[str] = Field(default_factory=list, description="Media URLs")
    timeline: List[TimelineEntryDetail] = Field(default_factory=list, description="Status history")
    feedback: Optional[FeedbackView] = Field(None, description="Owner feedback")


class PublicComplaintView(CamelModel):
    """Published complaint on the transparency listing."""

    id: str = Field(..., description="Complaint ID")
    tracking_id: str = Field(..., description="Public tracking ID")
    title: str = Field(..., description="Complaint title")
    description: str = Field(..., description="Complaint description")
    category: str = Field(..., description="Complaint category")
    priority: str = Field(..., description="Priority level")
    status: str = Field(..., description="Lifecycle status")
    location: str = Field(..., description="Location")
    ward: Optional[str] = Field(None, description="Ward identifier")
    attachments: List[str] = Field(default_factory=list, description="Media URLs")
    admin_remarks: Optional[str] = Field(None, description="Latest remarks")
    resolved_at: Optional[datetime] = Field(None, description="Resolution timestamp")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
    timeline: List[TimelineEntryView] = Field(default_factory=list, description="Status history")
    feedback: Optional[FeedbackView] = Field(None, description="Owner feedback")


class TrackingView(CamelModel):
    """Result of an unauthenticated tracking ID lookup."""

    tracking_id: str = Field(..., description="Public tracking ID")
    title: str = Field(..., description="Complaint title")
    category: str = Field(..., description="Complaint category")
    priority: str = Field(..., description="Priority level")
    status: str = Field(..., description="Lifecycle status")
    location: str = Field(..., description="Location")
    ward: Optional[str] = Field(None, description="Ward identifier")
    admin_remarks: Optional[str] = Field(None, description="Latest remarks")
    estimated_resolution_days: int = Field(..., description="Expected days to resolve")
    resolved_at: Optional[datetime] = Field(None, description="Resolution timestamp")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")
    timeline: List[TimelineEntryView] = Field(default_factory=list, description="Status history")
    days_since_creation: int = Field(..., description="Whole days since filing")
    status_message: str = Field(..., description="Human-readable status message")


class PaginationInfo(CamelModel):
    page: int = Field(..., description="Current page number")
    limit: int = Field(..., description="Items per page")
    total: int = Field(..., description="Total number of items")
    total_pages: int = Field(..., description="Total number of pages")


class OwnerStats(CamelModel):
    """Status counts over all of an owner's complaints."""

    total: int = 0
    pending: int = 0
    in_progress: int = 0
    resolved: int = 0
    rejected: int = 0


class PublicStats(CamelModel):
    """Aggregates over the filtered public complaint set."""

    total: int = 0
    resolved: int = 0
    in_progress: int = 0
    pending: int = 0
    avg_rating: Optional[float] = None
