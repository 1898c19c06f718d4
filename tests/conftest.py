"""
Shared fixtures for marketplace tests.

Every test gets a fresh in-memory marketplace; identities are registered
in its Role Directory and handed back as signed tokens.
"""

from __future__ import annotations

from typing import Callable, Optional

import pytest

from dreamkeys import Role, build_marketplace


@pytest.fixture
def marketplace():
    """A fresh, in-memory marketplace."""
    return build_marketplace()


@pytest.fixture
def identity(marketplace) -> Callable[..., str]:
    """
    Factory: register an email with a role and return a token for it.

    Usage: token = identity("agent@example.com", Role.AGENT, name="Ann")
    """

    def make(email: str, role: Role = Role.USER, name: Optional[str] = None) -> str:
        record, _ = marketplace.directory.register(email, name=name)
        if record.role != role:
            marketplace.directory.assign_role(record.user_id, role)
        return marketplace.tokens.issue(email)

    return make


@pytest.fixture
def admin_token(identity):
    return identity("admin@dreamkeys.com", Role.ADMIN, name="Site Admin")


@pytest.fixture
def agent_token(identity):
    return identity("agent@dreamkeys.com", Role.AGENT, name="Alice Agent")


@pytest.fixture
def other_agent_token(identity):
    return identity("other.agent@dreamkeys.com", Role.AGENT, name="Oscar Other")


@pytest.fixture
def buyer_token(identity):
    return identity("buyer@example.com", Role.USER, name="Bob Buyer")


@pytest.fixture
def listing(marketplace, agent_token):
    """A pending listing owned by agent@dreamkeys.com."""
    return marketplace.properties.create(
        agent_token,
        {
            "title": "Riverside Cottage",
            "location": "Oxford",
            "description": "Two-bed cottage on the Thames",
            "image_url": "https://img.example.com/cottage.jpg",
            "price_min": 350000,
            "price_max": 400000,
        },
    )
