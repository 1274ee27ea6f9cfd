# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Core entity models for the civic complaints platform.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from bson import ObjectId
from pydantic import BaseModel, Field, field_validator, ConfigDict
from .base import BaseEntity, CamelModel, generate_object_id
from .enums import ComplaintStatus, ComplaintPriority, ComplaintCategory, ActorRole


class TimelineEntry(CamelModel):
    """Append-only audit row recording one accepted status of a complaint."""

    id: str = Field(default_factory=generate_object_id, description="Entry identifier")
    complaint_id: str = Field(..., description="Owning complaint ID")
    status: ComplaintStatus = Field(..., description="Status entered")
    remarks: Optional[str] = Field(None, description="Citizen-facing remarks")
    actor_id: str = Field(..., description="Subject who caused the entry")
    created_at: datetime = Field(default_factory=datetime.utcnow, description="Entry timestamp")


class Complaint(BaseEntity):
    """Citizen-submitted civic issue report."""

    tracking_id: str = Field(..., min_length=1, description="Public immutable tracking identifier")
    owner_id: str = Field(..., description="Citizen who filed the complaint")
    owner_name: Optional[str] = Field(None, description="Owner display name at submission time")
    title: str = Field(..., max_length=200, description="Complaint title")
    description: str = Field(..., description="Complaint description")
    category: ComplaintCategory = Field(..., description="Complaint category")
    priority: ComplaintPriority = Field(default=ComplaintPriority.NORMAL, description="Priority level")
    location: str = Field(..., max_length=255, description="Free-text location")
    ward: Optional[str] = Field(None, description="Ward identifier")
    alt_phone: Optional[str] = Field(None, description="Alternate contact number")
    attachments: List[str] = Field(default_factory=list, max_length=3, description="Media URLs")
    status: ComplaintStatus = Field(default=ComplaintStatus.PENDING, description="Lifecycle status")
    is_public: bool = Field(default=False, description="Included in the public listing")
    admin_remarks: Optional[str] = Field(None, description="Remarks of the latest transition")
    estimated_resolution_days: int = Field(default=10, description="Expected days to resolve")
    resolved_at: Optional[datetime] = Field(None, description="Resolution timestamp")
    timeline: List[TimelineEntry] = Field(default_factory=list, description="Ordered status history")

    @field_validator('tracking_id')
    @classmethod
    def validate_tracking_id(cls, v):
        """Tracking IDs are stored upper-case."""
        return v.strip().upper()

    def is_owned_by(self, subject_id: str) -> bool:
        """Check whether the subject filed this complaint."""
        return self.owner_id == subject_id


class Feedback(CamelModel):
    """Post-resolution rating submitted by the complaint owner."""

    id: str = Field(default_factory=generate_object_id, description="Feedback identifier")
    complaint_id: str = Field(..., description="Rated complaint ID")
    citizen_id: str = Field(..., description="Owner who submitted the rating")
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5")
    comment: Optional[str] = Field(None, max_length=1000, description="Optional comment")
    submitted_at: datetime = Field(default_factory=datetime.utcnow, description="Submission timestamp")

    def to_document(self) -> Dict[str, Any]:
        document = self.model_dump(by_alias=True, exclude={"id"})
        document["_id"] = ObjectId(self.id)
        return document

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Feedback":
        data = dict(document)
        if "_id" in data:
            data["id"] = str(data.pop("_id"))
        return cls.model_validate(data)


class ActorContext(BaseModel):
    """Authenticated caller as asserted by the upstream identity provider."""

    subject_id: str = Field(..., description="Authenticated subject ID")
    role: ActorRole = Field(..., description="Subject role")
    name: Optional[str] = Field(None, description="Display name")
    ip_address: Optional[str] = Field(None, description="Client IP address")
    user_agent: Optional[str] = Field(None, description="Client user agent")

    model_config = ConfigDict(
        use_enum_values=True
    )

    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN

    def is_citizen(self) -> bool:
        return self.role == ActorRole.CITIZEN
