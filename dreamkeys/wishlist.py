"""
Wishlist - Saved Listings per User

An entry is a snapshot of the listing taken when it was saved, plus the
owner's email and the time it was added. Rows belong to the token subject:
entries of other users are indistinguishable from missing ones.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Final, Optional

from dreamkeys.access.guards import AccessPolicy, authenticated
from dreamkeys.errors import InvalidArgumentError, NotFoundError
from dreamkeys.listings.lifecycle import PropertyLifecycleManager
from dreamkeys.storage import (
    RecordCollection,
    generate_id,
    is_valid_id,
    parse_timestamp,
    utcnow,
)


logger = logging.getLogger(__name__)

WISHLIST_ID_PREFIX: Final[str] = "WISH"


# =============================================================================
# Data Model
# =============================================================================


@dataclass(frozen=True)
class WishlistEntry:
    """A listing saved by a user."""

    entry_id: str
    user_email: str
    property_id: str
    property_snapshot: dict = field(default_factory=dict)
    added_at: datetime = field(default_factory=utcnow)

    @property
    def owner_email(self) -> str:
        return self.user_email

    def to_dict(self) -> dict:
        data = dict(self.property_snapshot)
        data.update(
            {
                "entry_id": self.entry_id,
                "user_email": self.user_email,
                "property_id": self.property_id,
                "added_at": self.added_at.isoformat(),
            }
        )
        return data

    def to_record(self) -> dict:
        return {
            "entry_id": self.entry_id,
            "user_email": self.user_email,
            "property_id": self.property_id,
            "property_snapshot": self.property_snapshot,
            "added_at": self.added_at.isoformat(),
        }

    @classmethod
    def from_record(cls, data: dict) -> "WishlistEntry":
        return cls(
            entry_id=data["entry_id"],
            user_email=data["user_email"],
            property_id=data["property_id"],
            property_snapshot=data.get("property_snapshot", {}),
            added_at=parse_timestamp(data.get("added_at")) or utcnow(),
        )


# =============================================================================
# Repository
# =============================================================================


class WishlistRepository(RecordCollection[WishlistEntry]):
    """Wishlist entries keyed by entry_id."""

    collection_name = "wishlist"

    def key_of(self, record: WishlistEntry) -> str:
        return record.entry_id

    def to_record(self, record: WishlistEntry) -> dict:
        return record.to_record()

    def from_record(self, data: dict) -> WishlistEntry:
        return WishlistEntry.from_record(data)

    def list_by_user(self, user_email: str) -> list[WishlistEntry]:
        email = user_email.strip().lower()
        return sorted(
            self.find(lambda e: e.user_email == email),
            key=lambda e: e.added_at,
        )


# =============================================================================
# Service
# =============================================================================


class WishlistService:
    """Saves, lists and removes a caller's wishlist entries."""

    def __init__(
        self,
        entries: WishlistRepository,
        listings: PropertyLifecycleManager,
        policy: AccessPolicy,
    ):
        self._entries = entries
        self._listings = listings
        self._policy = policy

    def add(self, token: Optional[str], property_id: str) -> WishlistEntry:
        """Save a snapshot of a listing to the caller's wishlist."""
        claims = self._policy.enforce(token, authenticated(), action="add_wishlist")
        listing = self._listings.get(property_id)

        snapshot = listing.to_dict()
        snapshot.pop("property_id", None)

        entry = WishlistEntry(
            entry_id=generate_id(WISHLIST_ID_PREFIX),
            user_email=claims.subject_email,
            property_id=listing.property_id,
            property_snapshot=snapshot,
        )
        self._entries.put(entry)
        logger.info("%s saved %s to wishlist", claims.subject_email, property_id)
        return entry

    def list_entries(self, token: Optional[str]) -> list[WishlistEntry]:
        """The caller's own entries."""
        claims = self._policy.enforce(token, authenticated(), action="list_wishlist")
        return self._entries.list_by_user(claims.subject_email)

    def get(self, token: Optional[str], entry_id: str) -> WishlistEntry:
        """
        Get one of the caller's entries.

        Raises:
            NotFoundError: No such entry, or it belongs to someone else
        """
        claims = self._policy.enforce(token, authenticated(), action="get_wishlist")
        if not is_valid_id(entry_id, WISHLIST_ID_PREFIX):
            raise InvalidArgumentError("Invalid wishlist ID")

        entry = self._entries.get(entry_id)
        if not entry or entry.user_email != claims.subject_email:
            raise NotFoundError("Property not found in wishlist")
        return entry

    def remove(self, token: Optional[str], entry_id: str) -> WishlistEntry:
        """Remove one of the caller's entries."""
        entry = self.get(token, entry_id)
        self._entries.remove(entry.entry_id)
        logger.info("%s removed %s from wishlist", entry.user_email, entry.property_id)
        return entry
