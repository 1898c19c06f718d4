"""
Access Policy Evaluator - Composable Guards for State Transitions

A guard is a pure predicate over the verified claims (or None when the
request is unauthenticated) and a RequestContext holding the resource
under consideration. It returns Allow or Deny(reason, error_code).

Guards compose with all_of (short-circuits on the first denial) and
any_of (short-circuits on the first allow). Role and standing are always
re-resolved from the Role Directory; the role embedded in a token is
ignored.

Typical compositions:
- admin-only:        all_of(authenticated(), role_at_least(d, Role.ADMIN))
- owner or admin:    all_of(authenticated(),
                            any_of(role_at_least(d, Role.ADMIN), owns()))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Final, Optional, Union

from dreamkeys.errors import (
    FORBIDDEN_MESSAGE,
    UNAUTHORIZED_MESSAGE,
    ForbiddenError,
    UnauthorizedError,
)
from dreamkeys.identity.directory import Role, RoleDirectory
from dreamkeys.identity.tokens import Claims, TokenService, TokenVerificationFailure


logger = logging.getLogger(__name__)


UNAUTHORIZED: Final[str] = "UNAUTHORIZED"
FORBIDDEN: Final[str] = "FORBIDDEN"


# =============================================================================
# Guard Results
# =============================================================================


@dataclass(frozen=True)
class Allow:
    """Returned when a guard passes."""


@dataclass(frozen=True)
class Deny:
    """Returned when a guard fails."""

    reason: str
    error_code: str  # UNAUTHORIZED, FORBIDDEN


GuardResult = Union[Allow, Deny]

ALLOW: Final[Allow] = Allow()


@dataclass(frozen=True)
class RequestContext:
    """What a guard may inspect besides the claims."""

    resource: Any = None
    auth_failure: Optional[TokenVerificationFailure] = None


Guard = Callable[[Optional[Claims], RequestContext], GuardResult]


# =============================================================================
# Primitive Guards
# =============================================================================


def authenticated() -> Guard:
    """Require verified claims."""

    def guard(claims: Optional[Claims], context: RequestContext) -> GuardResult:
        if claims is None:
            reason = context.auth_failure.reason if context.auth_failure else "Identity token is required"
            return Deny(reason=reason, error_code=UNAUTHORIZED)
        return ALLOW

    return guard


def role_at_least(directory: RoleDirectory, role: Role) -> Guard:
    """Require the subject's current directory role to rank at or above role."""

    def guard(claims: Optional[Claims], context: RequestContext) -> GuardResult:
        if claims is None:
            return Deny(reason="Identity token is required", error_code=UNAUTHORIZED)
        current = directory.current_role(claims.subject_email)
        if not current.at_least(role):
            return Deny(
                reason=f"Requires role {role.value}, subject is {current.value}",
                error_code=FORBIDDEN,
            )
        return ALLOW

    return guard


def owns(attribute: str = "owner_email") -> Guard:
    """Require the resource's owner field to equal the subject."""

    def guard(claims: Optional[Claims], context: RequestContext) -> GuardResult:
        if claims is None:
            return Deny(reason="Identity token is required", error_code=UNAUTHORIZED)
        owner = getattr(context.resource, attribute, None)
        if not owner or owner.lower() != claims.subject_email.lower():
            return Deny(reason=f"Subject does not own resource ({attribute})", error_code=FORBIDDEN)
        return ALLOW

    return guard


def is_subject(email: Optional[str]) -> Guard:
    """Require the subject to be the given identity."""

    def guard(claims: Optional[Claims], context: RequestContext) -> GuardResult:
        if claims is None:
            return Deny(reason="Identity token is required", error_code=UNAUTHORIZED)
        if not email or email.strip().lower() != claims.subject_email.lower():
            return Deny(reason="Subject is not the requested identity", error_code=FORBIDDEN)
        return ALLOW

    return guard


def in_good_standing(directory: RoleDirectory) -> Guard:
    """Require the subject not to be flagged as fraud."""

    def guard(claims: Optional[Claims], context: RequestContext) -> GuardResult:
        if claims is None:
            return Deny(reason="Identity token is required", error_code=UNAUTHORIZED)
        if not directory.is_in_good_standing(claims.subject_email):
            return Deny(reason="Subject is flagged as fraud", error_code=FORBIDDEN)
        return ALLOW

    return guard


# =============================================================================
# Combinators
# =============================================================================


def all_of(*guards: Guard) -> Guard:
    """Pass only if every guard passes; the first denial is returned."""

    def guard(claims: Optional[Claims], context: RequestContext) -> GuardResult:
        for inner in guards:
            result = inner(claims, context)
            if isinstance(result, Deny):
                return result
        return ALLOW

    return guard


def any_of(*guards: Guard) -> Guard:
    """Pass if any guard passes; otherwise the last denial is returned."""
    if not guards:
        raise ValueError("any_of requires at least one guard")

    def guard(claims: Optional[Claims], context: RequestContext) -> GuardResult:
        denial: Optional[Deny] = None
        for inner in guards:
            result = inner(claims, context)
            if isinstance(result, Allow):
                return result
            denial = result
        return denial

    return guard


# =============================================================================
# Policy
# =============================================================================


class AccessPolicy:
    """
    Verifies identity tokens and enforces guards.

    This is the only place a token becomes Claims, so every lifecycle
    operation goes through enforce().
    """

    def __init__(self, tokens: TokenService, directory: RoleDirectory):
        self._tokens = tokens
        self._directory = directory

    @property
    def directory(self) -> RoleDirectory:
        return self._directory

    @property
    def tokens(self) -> TokenService:
        return self._tokens

    # -------------------------------------------------------------------------
    # Guard factories bound to this policy's directory
    # -------------------------------------------------------------------------

    def admin_only(self) -> Guard:
        return all_of(authenticated(), role_at_least(self._directory, Role.ADMIN))

    def owner_or_admin(self, attribute: str = "owner_email") -> Guard:
        return all_of(
            authenticated(),
            any_of(role_at_least(self._directory, Role.ADMIN), owns(attribute)),
        )

    def self_or_admin(self, email: Optional[str]) -> Guard:
        return all_of(
            authenticated(),
            any_of(role_at_least(self._directory, Role.ADMIN), is_subject(email)),
        )

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def authenticate(self, token: Optional[str]) -> tuple[Optional[Claims], RequestContext]:
        """Verify a token, returning claims (or None) and a base context."""
        result = self._tokens.verify(token)
        if isinstance(result, TokenVerificationFailure):
            return None, RequestContext(auth_failure=result)
        return result, RequestContext()

    def evaluate(
        self,
        token: Optional[str],
        guard: Guard,
        resource: Any = None,
    ) -> tuple[Optional[Claims], GuardResult]:
        """Verify the token and evaluate guard without raising."""
        claims, context = self.authenticate(token)
        context = RequestContext(resource=resource, auth_failure=context.auth_failure)
        return claims, guard(claims, context)

    def enforce(
        self,
        token: Optional[str],
        guard: Guard,
        resource: Any = None,
        action: str = "operation",
    ) -> Claims:
        """
        Verify the token and evaluate guard.

        Returns:
            The verified claims

        Raises:
            UnauthorizedError: No token, or token invalid/expired
            ForbiddenError: Authenticated but denied by role, standing or ownership
        """
        claims, result = self.evaluate(token, guard, resource)

        if isinstance(result, Deny):
            subject = claims.subject_email if claims else None
            logger.warning(
                "Denied %s for %s: %s (%s)",
                action,
                subject or "anonymous",
                result.reason,
                result.error_code,
            )
            if result.error_code == UNAUTHORIZED:
                raise UnauthorizedError(UNAUTHORIZED_MESSAGE)
            raise ForbiddenError(FORBIDDEN_MESSAGE)

        return claims
