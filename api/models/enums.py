# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Enumeration types for the civic complaints platform.
"""

from enum import Enum


class ComplaintStatus(str, Enum):
    """Complaint lifecycle status enumeration."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class ComplaintPriority(str, Enum):
    """Complaint priority levels."""
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class ComplaintCategory(str, Enum):
    """Closed set of complaint categories."""
    ROAD_INFRASTRUCTURE = "Road & Infrastructure"
    WATER_SUPPLY = "Water Supply"
    ELECTRICITY = "Electricity"
    SANITATION = "Sanitation"
    STREET_LIGHTS = "Street Lights"
    DRAINAGE = "Drainage"
    PUBLIC_HEALTH = "Public Health"
    ENCROACHMENT = "Encroachment"
    NOISE_POLLUTION = "Noise Pollution"
    OTHER = "Other"


class ActorRole(str, Enum):
    """Roles supplied by the upstream identity provider."""
    CITIZEN = "citizen"
    ADMIN = "admin"
