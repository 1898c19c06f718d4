"""
Identity Token Service - Signed, Time-Bounded Identity Assertions

Issues HS256 JWTs that carry the subject email and an optional informational
role. Verification is stateless: it checks signature, encoding and expiry and
returns the embedded claims unmodified.

The embedded role is never trusted for authorization. Guards re-resolve the
role from the Role Directory on every evaluation, so a role change takes
effect immediately even for tokens issued before it.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Final, Optional, Union

import jwt

from dreamkeys.storage import utcnow


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

TOKEN_ALGORITHM: Final[str] = "HS256"

# Tokens expire one hour after issuance
DEFAULT_TOKEN_TTL_SECONDS: Final[int] = 3600

SUBJECT_CLAIM: Final[str] = "email"
ROLE_CLAIM: Final[str] = "role"


# =============================================================================
# Verification Results
# =============================================================================


@dataclass(frozen=True)
class Claims:
    """Verified payload of an identity token."""

    subject_email: str
    issued_at: datetime
    expires_at: datetime
    embedded_role: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "email": self.subject_email,
            "role": self.embedded_role,
            "issued_at": self.issued_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }


@dataclass(frozen=True)
class TokenVerificationFailure:
    """Returned when a token cannot be verified."""

    reason: str
    error_code: str  # INVALID, EXPIRED


TokenVerificationResult = Union[Claims, TokenVerificationFailure]


# =============================================================================
# Service
# =============================================================================


class TokenService:
    """Issues and verifies identity tokens with a shared secret."""

    def __init__(
        self,
        secret: Optional[str] = None,
        ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
    ):
        if not secret:
            # Ephemeral secret: tokens won't survive a restart
            logger.warning("No token secret configured, using an ephemeral secret")
            secret = secrets.token_hex(32)
        self._secret = secret
        self._ttl = timedelta(seconds=ttl_seconds)

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, subject_email: str, role: Optional[str] = None) -> str:
        """
        Issue a signed token for a subject.

        Args:
            subject_email: Email of the identity the token asserts
            role: Optional role to embed (informational only)

        Returns:
            Encoded token string

        Raises:
            ValueError: If subject_email is empty
        """
        if not subject_email or not subject_email.strip():
            raise ValueError("subject_email is required")

        now = utcnow()
        payload = {
            SUBJECT_CLAIM: subject_email.strip().lower(),
            "iat": now,
            "exp": now + self._ttl,
        }
        if role:
            payload[ROLE_CLAIM] = role

        return jwt.encode(payload, self._secret, algorithm=TOKEN_ALGORITHM)

    def verify(self, token: Optional[str]) -> TokenVerificationResult:
        """
        Verify a token and return its claims.

        Returns:
            Claims if the token is valid, TokenVerificationFailure otherwise
        """
        if not token:
            return TokenVerificationFailure(
                reason="Identity token is required",
                error_code="INVALID",
            )

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[TOKEN_ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            return TokenVerificationFailure(
                reason="Identity token has expired",
                error_code="EXPIRED",
            )
        except jwt.InvalidTokenError:
            return TokenVerificationFailure(
                reason="Identity token is invalid",
                error_code="INVALID",
            )

        subject = payload.get(SUBJECT_CLAIM)
        if not isinstance(subject, str) or not subject:
            return TokenVerificationFailure(
                reason="Identity token has no subject",
                error_code="INVALID",
            )

        role = payload.get(ROLE_CLAIM)
        return Claims(
            subject_email=subject,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            embedded_role=role if isinstance(role, str) else None,
        )
