"""
Listing Schema - Properties and Moderation Reports

A Property carries exactly one verification status and one advertising flag
at any time. Both are set only through the lifecycle manager; field
updates from the owner never touch them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Final, Optional

from dreamkeys.storage import generate_id, parse_timestamp, utcnow


# =============================================================================
# Enums
# =============================================================================


class VerificationStatus(Enum):
    """Admin review state of a listing."""

    PENDING = "pending"  # Initial state, awaiting admin review
    VERIFIED = "verified"
    REJECTED = "rejected"


# Outcomes an admin may set
VERIFICATION_OUTCOMES: Final[tuple[VerificationStatus, ...]] = (
    VerificationStatus.VERIFIED,
    VerificationStatus.REJECTED,
)


# =============================================================================
# Constants
# =============================================================================

PROPERTY_ID_PREFIX: Final[str] = "PROP"
REPORT_ID_PREFIX: Final[str] = "RPT"

# Descriptive fields an owner or admin may edit
EDITABLE_FIELDS: Final[tuple[str, ...]] = (
    "title",
    "location",
    "description",
    "image_url",
    "agent_name",
    "price_min",
    "price_max",
)


def generate_property_id() -> str:
    return generate_id(PROPERTY_ID_PREFIX)


def generate_report_id() -> str:
    return generate_id(REPORT_ID_PREFIX)


# =============================================================================
# Property
# =============================================================================


@dataclass(frozen=True)
class Property:
    """A listing owned by the agent whose email it carries."""

    property_id: str
    agent_email: str
    title: str
    location: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    agent_name: Optional[str] = None
    price_min: Optional[int] = None
    price_max: Optional[int] = None
    verification_status: VerificationStatus = VerificationStatus.PENDING
    is_advertised: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Validate required fields at construction."""
        if not self.property_id:
            raise ValueError("property_id is required")
        if not self.agent_email or not self.agent_email.strip():
            raise ValueError("agent_email is required")
        if not self.title or not self.title.strip():
            raise ValueError("title is required and cannot be empty")

        for name in ("price_min", "price_max"):
            value = getattr(self, name)
            if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
                raise ValueError(f"{name} must be a non-negative integer")

        if (
            self.price_min is not None
            and self.price_max is not None
            and self.price_min > self.price_max
        ):
            raise ValueError("price_min cannot exceed price_max")

        object.__setattr__(self, "agent_email", self.agent_email.strip().lower())

    @property
    def owner_email(self) -> str:
        return self.agent_email

    @property
    def is_verified(self) -> bool:
        return self.verification_status == VerificationStatus.VERIFIED

    def to_dict(self) -> dict:
        """Convert property to dictionary for serialisation."""
        return {
            "property_id": self.property_id,
            "agent_email": self.agent_email,
            "agent_name": self.agent_name,
            "title": self.title,
            "location": self.location,
            "description": self.description,
            "image_url": self.image_url,
            "price_min": self.price_min,
            "price_max": self.price_max,
            "verification_status": self.verification_status.value,
            "is_advertised": self.is_advertised,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Property":
        """Create property from dictionary."""
        return cls(
            property_id=data["property_id"],
            agent_email=data["agent_email"],
            title=data["title"],
            location=data.get("location"),
            description=data.get("description"),
            image_url=data.get("image_url"),
            agent_name=data.get("agent_name"),
            price_min=data.get("price_min"),
            price_max=data.get("price_max"),
            verification_status=VerificationStatus(
                data.get("verification_status", VerificationStatus.PENDING.value)
            ),
            is_advertised=bool(data.get("is_advertised", False)),
            created_at=parse_timestamp(data.get("created_at")) or utcnow(),
            updated_at=parse_timestamp(data.get("updated_at")),
        )


def editable_changes(fields: dict[str, Any]) -> dict[str, Any]:
    """Keep only the descriptive fields a field update may change."""
    return {key: value for key, value in fields.items() if key in EDITABLE_FIELDS}


# =============================================================================
# Reports
# =============================================================================


@dataclass(frozen=True)
class PropertyReport:
    """A moderation flag raised against a listing by any signed-in user."""

    report_id: str
    property_id: str
    reporter_email: str
    description: str
    reporter_name: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not self.description or not self.description.strip():
            raise ValueError("report description is required")

    def to_dict(self) -> dict:
        return {
            "report_id": self.report_id,
            "property_id": self.property_id,
            "reporter_name": self.reporter_name,
            "reporter_email": self.reporter_email,
            "description": self.description,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PropertyReport":
        return cls(
            report_id=data["report_id"],
            property_id=data["property_id"],
            reporter_email=data["reporter_email"],
            description=data["description"],
            reporter_name=data.get("reporter_name"),
            created_at=parse_timestamp(data.get("created_at")) or utcnow(),
        )
