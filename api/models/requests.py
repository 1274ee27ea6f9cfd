# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Request models for API endpoints.
"""

import re
from typing import List, Optional
from pydantic import BaseModel, Field, StrictBool, StrictInt, field_validator, ConfigDict
from .base import CamelModel
from .enums import ComplaintStatus, ComplaintPriority, ComplaintCategory

ALT_PHONE_PATTERN = re.compile(r'^\+?[0-9][0-9 \-]*$')
MAX_ATTACHMENTS = 3


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class SubmitComplaintRequest(CamelModel):
    """Request model for filing a complaint."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=10, max_length=200, description="Complaint title")
    description: str = Field(..., min_length=30, max_length=5000, description="Detailed description")
    category: ComplaintCategory = Field(..., description="Complaint category")
    priority: ComplaintPriority = Field(default=ComplaintPriority.NORMAL, description="Priority level")
    location: str = Field(..., min_length=1, max_length=255, description="Free-text location")
    ward: Optional[str] = Field(None, max_length=10, description="Ward identifier")
    alt_phone: Optional[str] = Field(None, max_length=15, description="Alternate contact number")
    attachment_urls: List[str] = Field(default_factory=list, description="Uploaded media URLs")

    @field_validator('ward', 'alt_phone', mode='before')
    @classmethod
    def empty_optional_to_none(cls, v):
        return _blank_to_none(v)

    @field_validator('priority', mode='before')
    @classmethod
    def default_blank_priority(cls, v):
        """A blank priority falls back to normal."""
        return _blank_to_none(v) or ComplaintPriority.NORMAL

    @field_validator('alt_phone')
    @classmethod
    def validate_alt_phone(cls, v):
        """Digits with an optional leading plus; spaces and dashes allowed."""
        if v is not None and not ALT_PHONE_PATTERN.match(v):
            raise ValueError('Alternate phone must contain only digits, spaces and dashes')
        return v

    @field_validator('attachment_urls')
    @classmethod
    def validate_attachment_urls(cls, v):
        """At most three http(s) URLs."""
        if len(v) > MAX_ATTACHMENTS:
            raise ValueError(f'At most {MAX_ATTACHMENTS} attachments are allowed')
        for url in v:
            if not url or not url.lower().startswith(('http://', 'https://')):
                raise ValueError('Attachments must be http(s) URLs')
        return v


class TransitionRequest(CamelModel):
    """Request model for moving a complaint to a new status."""

    status: ComplaintStatus = Field(..., description="Target status")
    remarks: Optional[str] = Field(None, max_length=1000, description="Citizen-facing remarks")


class FeedbackRequest(CamelModel):
    """Request model for rating a resolved complaint."""

    rating: StrictInt = Field(..., ge=1, le=5, description="Rating from 1 to 5")
    comment: Optional[str] = Field(None, max_length=1000, description="Optional comment")


class VisibilityRequest(CamelModel):
    """Request model for changing public visibility."""

    is_public: StrictBool = Field(..., description="Desired visibility")


class ListQuery(BaseModel):
    """Common pagination parameters."""

    model_config = ConfigDict(use_enum_values=True)

    page: int = Field(default=1, ge=1, description="Page number")
    limit: int = Field(default=10, ge=1, le=100, description="Items per page")

    @field_validator('*', mode='before')
    @classmethod
    def empty_filter_to_none(cls, v, info):
        # Blank filters from HTML forms mean "no filter"
        if info.field_name in ('page', 'limit'):
            return v
        return _blank_to_none(v)


class OwnListQuery(ListQuery):
    """Filters for the owner's complaint listing."""

    status: Optional[ComplaintStatus] = Field(None, description="Filter by status")
    priority: Optional[ComplaintPriority] = Field(None, description="Filter by priority")


class AdminListQuery(ListQuery):
    """Filters for the admin complaint listing."""

    limit: int = Field(default=20, ge=1, le=100, description="Items per page")
    status: Optional[ComplaintStatus] = Field(None, description="Filter by status")
    category: Optional[ComplaintCategory] = Field(None, description="Filter by category")
    search: Optional[str] = Field(None, max_length=200, description="Search title, tracking ID and owner name")


class PublicListQuery(ListQuery):
    """Filters for the public transparency listing."""

    status: Optional[ComplaintStatus] = Field(None, description="Filter by status")
    category: Optional[ComplaintCategory] = Field(None, description="Filter by category")


class ComplaintPath(BaseModel):
    complaint_id: str = Field(..., description="Complaint ID")


class TrackingPath(BaseModel):
    tracking_id: str = Field(..., description="Public tracking ID")
