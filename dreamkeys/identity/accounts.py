"""
Account Transitions - Admin-Gated Changes to Identities

Registration is open; every other change to a user record (role, fraud flag,
removal) requires the caller's current directory role to be admin.
"""

from __future__ import annotations

import logging
from typing import Optional

from dreamkeys.access.guards import AccessPolicy
from dreamkeys.errors import InvalidArgumentError, NotFoundError
from dreamkeys.identity.directory import USER_ID_PREFIX, Role, RoleDirectory, UserRecord
from dreamkeys.storage import is_valid_id


logger = logging.getLogger(__name__)


def parse_role(value: Optional[str]) -> Role:
    """Parse a role name, raising InvalidArgumentError when unknown."""
    if not value:
        raise InvalidArgumentError("Role is required")
    try:
        return Role(value.strip().lower())
    except ValueError:
        raise InvalidArgumentError(f"Invalid role: {value}")


class AccountManager:
    """Registration and admin-gated account transitions."""

    def __init__(self, directory: RoleDirectory, policy: AccessPolicy):
        self._directory = directory
        self._policy = policy

    def register(
        self,
        email: str,
        name: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> tuple[UserRecord, bool]:
        """Register an identity; returns (record, created)."""
        try:
            return self._directory.register(email, name=name, photo_url=photo_url)
        except ValueError as e:
            raise InvalidArgumentError(str(e))

    def role_of(self, email: str) -> Role:
        return self._directory.current_role(email)

    def list_users(self, token: Optional[str]) -> list[UserRecord]:
        """All registered identities (admin only)."""
        self._policy.enforce(token, self._policy.admin_only(), action="list_users")
        return sorted(self._directory.users.list_all(), key=lambda u: u.created_at)

    def lookup(self, token: Optional[str], email: str) -> UserRecord:
        """A single identity by email, visible to itself and to admins."""
        self._policy.enforce(token, self._policy.self_or_admin(email), action="lookup_user")
        record = self._directory.lookup(email)
        if not record:
            raise NotFoundError("User not found")
        return record

    def get_user(self, token: Optional[str], user_id: str) -> UserRecord:
        """A single identity by ID (admin only)."""
        self._policy.enforce(token, self._policy.admin_only(), action="get_user")
        return self._require_user(user_id)

    def _require_user(self, user_id: str) -> UserRecord:
        if not is_valid_id(user_id, USER_ID_PREFIX):
            raise InvalidArgumentError("Invalid user ID.")
        record = self._directory.get(user_id)
        if not record:
            raise NotFoundError("User not found")
        return record

    def set_role(self, token: Optional[str], user_id: str, role: Optional[str]) -> UserRecord:
        """Change a user's role (admin only)."""
        claims = self._policy.enforce(token, self._policy.admin_only(), action="set_role")
        new_role = parse_role(role)
        self._require_user(user_id)

        record = self._directory.assign_role(user_id, new_role)
        logger.info("%s set role of %s to %s", claims.subject_email, user_id, new_role.value)
        return record

    def mark_fraud(self, token: Optional[str], user_id: str) -> UserRecord:
        """Flag a user as fraud (admin only). Idempotent, irreversible."""
        claims = self._policy.enforce(token, self._policy.admin_only(), action="mark_fraud")
        self._require_user(user_id)

        record = self._directory.flag_fraud(user_id)
        logger.info("%s flagged %s as fraud", claims.subject_email, user_id)
        return record

    def delete_user(self, token: Optional[str], user_id: str) -> UserRecord:
        """
        Remove a user (admin only).

        Returns the removed record so the caller can cascade, e.g. remove
        a deleted agent's listings.
        """
        claims = self._policy.enforce(token, self._policy.admin_only(), action="delete_user")
        self._require_user(user_id)

        record = self._directory.remove(user_id)
        if not record:
            raise NotFoundError("User not found")
        logger.info("%s deleted user %s (%s)", claims.subject_email, user_id, record.role.value)
        return record
