"""
Request Authentication - Bearer Token Extraction and Component Access

The HTTP layer never decides who may do what. It only:
- pulls the raw token out of the Authorization header
- hands it to the marketplace managers, which verify and enforce

A missing or malformed header yields None; the managers turn that into
401 "unauthorized access".
"""

from __future__ import annotations

from typing import Final, Optional

from fastapi import Request

from dreamkeys.container import Marketplace


AUTHORIZATION_HEADER: Final[str] = "authorization"
BEARER_SCHEME: Final[str] = "bearer"


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Get the token from an "Authorization: Bearer <token>" header value.

    Returns None when the header is absent or has no token part.
    """
    if not authorization:
        return None

    parts = authorization.strip().split(" ")
    if len(parts) < 2 or parts[0].lower() != BEARER_SCHEME:
        return None

    token = parts[1].strip()
    return token or None


def get_token(request: Request) -> Optional[str]:
    """Dependency returning the caller's raw bearer token, if any."""
    return extract_bearer_token(request.headers.get(AUTHORIZATION_HEADER))


def get_marketplace(request: Request) -> Marketplace:
    """Dependency returning the marketplace wired into this app."""
    return request.app.state.marketplace
