"""
Access Policy - Guards Gating Every State Transition
"""

from dreamkeys.access.guards import (
    AccessPolicy,
    Allow,
    Deny,
    Guard,
    GuardResult,
    RequestContext,
    authenticated,
    role_at_least,
    owns,
    is_subject,
    in_good_standing,
    all_of,
    any_of,
    UNAUTHORIZED,
    FORBIDDEN,
)

__all__ = [
    "AccessPolicy",
    "Allow",
    "Deny",
    "Guard",
    "GuardResult",
    "RequestContext",
    "authenticated",
    "role_at_least",
    "owns",
    "is_subject",
    "in_good_standing",
    "all_of",
    "any_of",
    "UNAUTHORIZED",
    "FORBIDDEN",
]
