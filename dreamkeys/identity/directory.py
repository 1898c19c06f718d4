"""
Role Directory - Current Role and Standing for Every Identity

Backed by the user record store. Exactly one record exists per email;
emails are normalised to lower case before every lookup.

The directory is the single source of truth for authorization: guards ask
it for the subject's *current* role and standing on every evaluation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Final, Optional

from dreamkeys.storage import (
    RecordCollection,
    generate_id,
    parse_timestamp,
    utcnow,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Enums
# =============================================================================


class Role(Enum):
    """Fixed set of marketplace roles, lowest privilege first."""

    USER = "user"
    AGENT = "agent"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        return ROLE_RANKS[self]

    def at_least(self, other: "Role") -> bool:
        return self.rank >= other.rank


ROLE_RANKS: Final[dict[Role, int]] = {
    Role.USER: 0,
    Role.AGENT: 1,
    Role.ADMIN: 2,
}

USER_ID_PREFIX: Final[str] = "USR"


def normalise_email(email: str) -> str:
    return email.strip().lower()


# =============================================================================
# Data Model
# =============================================================================


@dataclass(frozen=True)
class UserRecord:
    """
    A registered identity.

    role is changed only by an admin; is_fraud only ever goes False -> True.
    """

    user_id: str
    email: str
    role: Role = Role.USER
    name: Optional[str] = None
    photo_url: Optional[str] = None
    is_fraud: bool = False
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if not self.user_id:
            raise ValueError("user_id is required")
        if not self.email or "@" not in self.email:
            raise ValueError(f"Invalid email: {self.email!r}")
        object.__setattr__(self, "email", normalise_email(self.email))

    @property
    def is_in_good_standing(self) -> bool:
        return not self.is_fraud

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "name": self.name,
            "photo_url": self.photo_url,
            "role": self.role.value,
            "is_fraud": self.is_fraud,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserRecord":
        return cls(
            user_id=data["user_id"],
            email=data["email"],
            role=Role(data.get("role", Role.USER.value)),
            name=data.get("name"),
            photo_url=data.get("photo_url"),
            is_fraud=bool(data.get("is_fraud", False)),
            created_at=parse_timestamp(data.get("created_at")) or utcnow(),
        )


# =============================================================================
# Repository
# =============================================================================


class UserRepository(RecordCollection[UserRecord]):
    """User records keyed by user_id, with a unique email index."""

    collection_name = "users"

    def key_of(self, record: UserRecord) -> str:
        return record.user_id

    def to_record(self, record: UserRecord) -> dict:
        return record.to_dict()

    def from_record(self, data: dict) -> UserRecord:
        return UserRecord.from_dict(data)

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        """Get a user by email (case-insensitive)."""
        email = normalise_email(email)
        for record in self._records.values():
            if record.email == email:
                return record
        return None


# =============================================================================
# Directory
# =============================================================================


class RoleDirectory:
    """Resolves identities to their current role and standing."""

    def __init__(self, users: UserRepository):
        self._users = users

    @property
    def users(self) -> UserRepository:
        return self._users

    def lookup(self, email: str) -> Optional[UserRecord]:
        """Get the record for an email, or None if not registered."""
        if not email:
            return None
        return self._users.get_by_email(email)

    def get(self, user_id: str) -> Optional[UserRecord]:
        return self._users.get(user_id)

    def current_role(self, email: str) -> Role:
        """Current role of an identity; unregistered identities are plain users."""
        record = self.lookup(email)
        return record.role if record else Role.USER

    def is_in_good_standing(self, email: str) -> bool:
        """False only for identities flagged as fraud."""
        record = self.lookup(email)
        return record.is_in_good_standing if record else True

    def register(
        self,
        email: str,
        name: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> tuple[UserRecord, bool]:
        """
        Register an identity on first sign-in.

        New identities always start as plain users, whatever the caller
        claims.

        Returns:
            (record, created) - created is False when the email already exists

        Raises:
            ValueError: If email is malformed
        """
        with self._users.lock:
            existing = self.lookup(email)
            if existing:
                return existing, False

            record = UserRecord(
                user_id=generate_id(USER_ID_PREFIX),
                email=email,
                name=name,
                photo_url=photo_url,
            )
            self._users.put(record)

        logger.info("Registered user %s as %s", record.user_id, record.role.value)
        return record, True

    def assign_role(self, user_id: str, role: Role) -> Optional[UserRecord]:
        """Replace a user's role. Returns None if the user does not exist."""
        with self._users.lock:
            record = self._users.get(user_id)
            if not record:
                return None
            return self._users.put(replace(record, role=role))

    def flag_fraud(self, user_id: str) -> Optional[UserRecord]:
        """Flag a user as fraud. There is no inverse operation."""
        with self._users.lock:
            record = self._users.get(user_id)
            if not record:
                return None
            if record.is_fraud:
                return record
            return self._users.put(replace(record, is_fraud=True))

    def remove(self, user_id: str) -> Optional[UserRecord]:
        """Remove a user. Returns the removed record, or None if absent."""
        with self._users.lock:
            record = self._users.get(user_id)
            if not record:
                return None
            self._users.remove(user_id)
        return record
