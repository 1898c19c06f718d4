"""
Identity - Tokens, Role Directory and Account Transitions
"""

from dreamkeys.identity.tokens import (
    Claims,
    TokenService,
    TokenVerificationFailure,
    TokenVerificationResult,
    DEFAULT_TOKEN_TTL_SECONDS,
    TOKEN_ALGORITHM,
)
from dreamkeys.identity.directory import (
    Role,
    RoleDirectory,
    UserRecord,
    UserRepository,
    USER_ID_PREFIX,
    normalise_email,
)

__all__ = [
    # Tokens
    "Claims",
    "TokenService",
    "TokenVerificationFailure",
    "TokenVerificationResult",
    "DEFAULT_TOKEN_TTL_SECONDS",
    "TOKEN_ALGORITHM",
    # Directory
    "Role",
    "RoleDirectory",
    "UserRecord",
    "UserRepository",
    "USER_ID_PREFIX",
    "normalise_email",
]
