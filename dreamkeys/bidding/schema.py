"""
Bid Schema - Offers Against Listings

A Bid references its Property by an opaque property_id and copies the
listing's agent email and title at creation time. Later edits to the
listing never reach existing bids, and deleting the listing leaves the bid
in place with a dangling reference.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Final, Optional

from dreamkeys.listings.schema import Property
from dreamkeys.storage import generate_id, parse_timestamp, utcnow


# =============================================================================
# Enums
# =============================================================================


class BidStatus(Enum):
    """Acceptance state of an offer."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


BID_ID_PREFIX: Final[str] = "BID"


def generate_bid_id() -> str:
    return generate_id(BID_ID_PREFIX)


# =============================================================================
# Bid
# =============================================================================


@dataclass(frozen=True)
class Bid:
    """An offer by a buyer. buyer_email never changes after creation."""

    bid_id: str
    property_id: str
    buyer_email: str
    agent_email: str
    offer_amount: int
    property_title: Optional[str] = None
    buyer_name: Optional[str] = None
    buying_date: Optional[str] = None
    status: BidStatus = BidStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    decided_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Validate required fields at construction."""
        if not self.bid_id:
            raise ValueError("bid_id is required")
        if not self.property_id:
            raise ValueError("property_id is required")
        if not self.buyer_email:
            raise ValueError("buyer_email is required")
        if (
            isinstance(self.offer_amount, bool)
            or not isinstance(self.offer_amount, int)
            or self.offer_amount <= 0
        ):
            raise ValueError("offer_amount must be a positive integer")

    @property
    def owner_email(self) -> str:
        return self.buyer_email

    @property
    def is_pending(self) -> bool:
        return self.status == BidStatus.PENDING

    def to_dict(self) -> dict:
        return {
            "bid_id": self.bid_id,
            "property_id": self.property_id,
            "property_title": self.property_title,
            "agent_email": self.agent_email,
            "buyer_email": self.buyer_email,
            "buyer_name": self.buyer_name,
            "offer_amount": self.offer_amount,
            "buying_date": self.buying_date,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "decided_at": self.decided_at.isoformat() if self.decided_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Bid":
        return cls(
            bid_id=data["bid_id"],
            property_id=data["property_id"],
            buyer_email=data["buyer_email"],
            agent_email=data["agent_email"],
            offer_amount=data["offer_amount"],
            property_title=data.get("property_title"),
            buyer_name=data.get("buyer_name"),
            buying_date=data.get("buying_date"),
            status=BidStatus(data.get("status", BidStatus.PENDING.value)),
            created_at=parse_timestamp(data.get("created_at")) or utcnow(),
            decided_at=parse_timestamp(data.get("decided_at")),
        )


# =============================================================================
# Joined View
# =============================================================================


@dataclass(frozen=True)
class BidView:
    """
    A bid joined with the current state of its listing.

    listing is None when the property has since been deleted; the view is
    then partial and carries only the bid's own fields.
    """

    bid: Bid
    listing: Optional[Property] = None

    @property
    def is_partial(self) -> bool:
        return self.listing is None

    def _base(self) -> dict:
        data: dict = {}
        if self.listing is not None:
            data.update(self.listing.to_dict())
        data.update(
            {
                "bid_id": self.bid.bid_id,
                "property_id": self.bid.property_id,
                "property_title": self.bid.property_title,
                "offer_amount": self.bid.offer_amount,
                "offer_status": self.bid.status.value,
                "property_found": self.listing is not None,
            }
        )
        return data

    def to_buyer_dict(self) -> dict:
        """Shape returned to the buyer."""
        return self._base()

    def to_agent_dict(self) -> dict:
        """Shape returned to the listing agent; includes buyer details."""
        data = self._base()
        data.update(
            {
                "buying_date": self.bid.buying_date,
                "buyer_name": self.bid.buyer_name,
                "buyer_email": self.bid.buyer_email,
            }
        )
        return data
