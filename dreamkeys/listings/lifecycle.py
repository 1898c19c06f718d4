"""
Property Lifecycle Manager - Verification and Advertising State Machine

States: verification_status in {pending, verified, rejected} crossed with
is_advertised. Every listing starts pending and not advertised.

Transitions and their guards:
- create:              authenticated, agent (or above), in good standing
- update:              owner or admin, descriptive fields only
- verify:              admin; unconditional unless expected_status is given
- set_advertised:      admin; True stamps updated_at, False does not
- delete:              owner or admin
- delete_all_by_agent: admin
- report:              any authenticated caller, state untouched

Order of checks: authentication, then identifier format, then lookup,
then role/ownership. An unauthenticated caller never learns whether an
identifier exists.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Optional

from dreamkeys.access.guards import (
    AccessPolicy,
    all_of,
    authenticated,
    in_good_standing,
    role_at_least,
)
from dreamkeys.errors import ConflictError, InvalidArgumentError, NotFoundError
from dreamkeys.identity.directory import Role
from dreamkeys.listings.repository import PropertyRepository, ReportRepository
from dreamkeys.listings.schema import (
    PROPERTY_ID_PREFIX,
    VERIFICATION_OUTCOMES,
    Property,
    PropertyReport,
    VerificationStatus,
    editable_changes,
    generate_property_id,
    generate_report_id,
)
from dreamkeys.storage import is_valid_id, utcnow


logger = logging.getLogger(__name__)


def parse_verification_status(value: Any) -> VerificationStatus:
    """Parse a status name, raising InvalidArgumentError when unknown."""
    if isinstance(value, VerificationStatus):
        return value
    try:
        return VerificationStatus(str(value).strip().lower())
    except ValueError:
        raise InvalidArgumentError("Invalid verification status")


class PropertyLifecycleManager:
    """Enforces the listing state machine behind access guards."""

    def __init__(
        self,
        properties: PropertyRepository,
        reports: ReportRepository,
        policy: AccessPolicy,
        advertise_requires_verified: bool = False,
    ):
        self._properties = properties
        self._reports = reports
        self._policy = policy
        self._advertise_requires_verified = advertise_requires_verified

    # =========================================================================
    # Lookups
    # =========================================================================

    def get(self, property_id: str) -> Property:
        """
        Get a property by ID.

        Raises:
            InvalidArgumentError: Malformed ID
            NotFoundError: No such property
        """
        if not is_valid_id(property_id, PROPERTY_ID_PREFIX):
            raise InvalidArgumentError("Invalid property ID")
        prop = self._properties.get(property_id)
        if not prop:
            raise NotFoundError("Property not found")
        return prop

    def find(self, property_id: str) -> Optional[Property]:
        """Resolve a stored reference; a dangling one yields None."""
        return self._properties.get(property_id)

    def list_properties(
        self,
        agent_email: Optional[str] = None,
        status: Any = None,
    ) -> list[Property]:
        """List properties, optionally only one agent's and/or one status."""
        if agent_email:
            properties = self._properties.list_by_agent(agent_email)
        else:
            properties = self._properties.list_all()
        if status is not None:
            wanted = parse_verification_status(status)
            properties = [p for p in properties if p.verification_status == wanted]
        return properties

    def list_advertised(self) -> list[Property]:
        return self._properties.list_advertised()

    def _authenticate(self, token: Optional[str], action: str) -> None:
        self._policy.enforce(token, authenticated(), action=action)

    # =========================================================================
    # Transitions
    # =========================================================================

    def create(self, token: Optional[str], fields: dict[str, Any]) -> Property:
        """
        Create a listing owned by the calling agent.

        The owner is always the token subject; owner, status and advertising
        fields in the input are ignored.
        """
        directory = self._policy.directory
        guard = all_of(
            authenticated(),
            role_at_least(directory, Role.AGENT),
            in_good_standing(directory),
        )
        claims = self._policy.enforce(token, guard, action="create_property")

        changes = editable_changes(fields)
        if not changes.get("agent_name"):
            record = directory.lookup(claims.subject_email)
            if record and record.name:
                changes["agent_name"] = record.name

        try:
            prop = Property(
                property_id=generate_property_id(),
                agent_email=claims.subject_email,
                **changes,
            )
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(str(e))

        self._properties.put(prop)
        logger.info("Property %s created by %s", prop.property_id, prop.agent_email)
        return prop

    def update(self, token: Optional[str], property_id: str, fields: dict[str, Any]) -> Property:
        """Edit descriptive fields (owner or admin)."""
        self._authenticate(token, "update_property")

        with self._properties.lock:
            prop = self.get(property_id)
            claims = self._policy.enforce(
                token, self._policy.owner_or_admin(), resource=prop, action="update_property"
            )

            changes = editable_changes(fields)
            if not changes:
                raise InvalidArgumentError("No editable fields supplied")

            try:
                updated = replace(prop, updated_at=utcnow(), **changes)
            except (TypeError, ValueError) as e:
                raise InvalidArgumentError(str(e))

            self._properties.put(updated)

        logger.info(
            "Property %s updated by %s: %s",
            property_id,
            claims.subject_email,
            sorted(changes),
        )
        return updated

    def verify(
        self,
        token: Optional[str],
        property_id: str,
        outcome: Any,
        expected_status: Any = None,
    ) -> Property:
        """
        Set the verification outcome (admin only).

        Last write wins. Re-verifying an already decided listing is allowed
        and stamps updated_at again. When expected_status is given the write
        only happens if the current status matches it.

        Raises:
            InvalidArgumentError: Outcome is not verified/rejected
            ConflictError: Current status differs from expected_status
        """
        claims = self._policy.enforce(token, self._policy.admin_only(), action="verify_property")

        status = parse_verification_status(outcome)
        if status not in VERIFICATION_OUTCOMES:
            raise InvalidArgumentError("Invalid verification status")
        expected = parse_verification_status(expected_status) if expected_status is not None else None

        with self._properties.lock:
            prop = self.get(property_id)
            if expected is not None and prop.verification_status != expected:
                raise ConflictError(
                    f"Property is {prop.verification_status.value}, expected {expected.value}"
                )
            updated = replace(prop, verification_status=status, updated_at=utcnow())
            self._properties.put(updated)

        logger.info(
            "Property %s %s -> %s by %s",
            property_id,
            prop.verification_status.value,
            status.value,
            claims.subject_email,
        )
        return updated

    def set_advertised(self, token: Optional[str], property_id: str, advertised: bool) -> Property:
        """
        Turn advertising on or off (admin only).

        Turning it on stamps updated_at; turning it off leaves the stamp.
        """
        claims = self._policy.enforce(token, self._policy.admin_only(), action="set_advertised")

        with self._properties.lock:
            prop = self.get(property_id)

            if advertised and not prop.is_verified:
                if self._advertise_requires_verified:
                    raise ConflictError("Only verified properties can be advertised")
                logger.warning(
                    "Advertising property %s while %s",
                    property_id,
                    prop.verification_status.value,
                )

            if advertised:
                updated = replace(prop, is_advertised=True, updated_at=utcnow())
            else:
                updated = replace(prop, is_advertised=False)
            self._properties.put(updated)

        logger.info(
            "Property %s advertised=%s by %s",
            property_id,
            advertised,
            claims.subject_email,
        )
        return updated

    def delete(self, token: Optional[str], property_id: str) -> Property:
        """Remove a listing (owner or admin). Bids referencing it are kept."""
        self._authenticate(token, "delete_property")
        prop = self.get(property_id)
        claims = self._policy.enforce(
            token, self._policy.owner_or_admin(), resource=prop, action="delete_property"
        )

        if not self._properties.remove(property_id):
            raise NotFoundError("Property not found")

        logger.info("Property %s deleted by %s", property_id, claims.subject_email)
        return prop

    def delete_all_by_agent(self, token: Optional[str], agent_email: str) -> int:
        """Remove every listing of an agent (admin only). Returns the count."""
        claims = self._policy.enforce(
            token, self._policy.admin_only(), action="delete_agent_properties"
        )
        if not agent_email or not agent_email.strip():
            raise InvalidArgumentError("Agent email is required")

        removed = self._properties.remove_by_agent(agent_email)
        logger.info(
            "%d properties of %s deleted by %s",
            removed,
            agent_email,
            claims.subject_email,
        )
        return removed

    # =========================================================================
    # Moderation
    # =========================================================================

    def report(
        self,
        token: Optional[str],
        property_id: str,
        description: str,
        reporter_name: Optional[str] = None,
    ) -> PropertyReport:
        """
        Flag a listing for moderation.

        Any authenticated caller may report; the verification status is
        not changed.
        """
        claims = self._policy.enforce(token, authenticated(), action="report_property")
        prop = self.get(property_id)

        try:
            report = PropertyReport(
                report_id=generate_report_id(),
                property_id=prop.property_id,
                reporter_email=claims.subject_email,
                reporter_name=reporter_name,
                description=description,
            )
        except ValueError as e:
            raise InvalidArgumentError(str(e))

        self._reports.put(report)
        logger.info("Property %s reported by %s", property_id, claims.subject_email)
        return report

    def list_reports(self, token: Optional[str], property_id: Optional[str] = None) -> list[PropertyReport]:
        """List moderation reports (admin only)."""
        self._policy.enforce(token, self._policy.admin_only(), action="list_reports")
        if property_id:
            return self._reports.list_for_property(property_id)
        return self._reports.list_all()
