"""
Identity Routes - Token Issuance and User Accounts

Routes:
- POST   /jwt                 - Sign an identity token for an email
- POST   /users               - Register on first sign-in (always role user)
- GET    /users               - List users (admin) or look one up (?email=)
- GET    /users/role          - Current role for ?email= (user when unknown)
- PATCH  /users/{id}/role     - Change role (admin)
- PATCH  /users/{id}/fraud    - Flag as fraud (admin)
- DELETE /users/{id}          - Remove user; an agent's listings go too (admin)
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from dreamkeys.container import Marketplace
from dreamkeys.errors import InvalidArgumentError
from dreamkeys.identity.directory import Role
from web.auth import get_marketplace, get_token


logger = logging.getLogger(__name__)


# =============================================================================
# Router Setup
# =============================================================================

router = APIRouter(tags=["identity"])


# =============================================================================
# Request Models
# =============================================================================


class TokenRequest(BaseModel):
    """Only the email is signed; anything else in the body is dropped."""

    email: str


class RegisterRequest(BaseModel):
    email: str
    name: Optional[str] = None
    photo_url: Optional[str] = None


class RoleChangeRequest(BaseModel):
    role: Optional[str] = None


# =============================================================================
# Tokens
# =============================================================================


@router.post("/jwt")
def issue_token(
    body: TokenRequest,
    marketplace: Marketplace = Depends(get_marketplace),
):
    """Sign a one-hour identity token for the given email."""
    try:
        token = marketplace.tokens.issue(body.email)
    except ValueError as e:
        raise InvalidArgumentError(str(e))
    return {"token": token}


# =============================================================================
# Users
# =============================================================================


@router.post("/users")
def register_user(
    body: RegisterRequest,
    marketplace: Marketplace = Depends(get_marketplace),
):
    """Register an identity. Existing emails are returned unchanged."""
    record, created = marketplace.accounts.register(
        body.email, name=body.name, photo_url=body.photo_url
    )
    if not created:
        return {
            "message": "User already exists",
            "inserted_id": None,
            "user": record.to_dict(),
        }
    return {
        "message": "User created successfully",
        "inserted_id": record.user_id,
        "user": record.to_dict(),
    }


@router.get("/users")
def get_users(
    email: Optional[str] = Query(None, description="Look up a single user"),
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    """Without ?email= list every user (admin); with it, return that user."""
    if email:
        record = marketplace.accounts.lookup(token, email)
        return {"message": "User found", "user": record.to_dict()}

    users = marketplace.accounts.list_users(token)
    return {
        "message": f"{len(users)} users",
        "users": [u.to_dict() for u in users],
    }


@router.get("/users/role")
def get_user_role(
    email: str = Query(..., description="Identity to resolve"),
    marketplace: Marketplace = Depends(get_marketplace),
):
    """Current role of an identity; unregistered identities are users."""
    role: Role = marketplace.accounts.role_of(email)
    return {"role": role.value}


@router.patch("/users/{user_id}/role")
def change_user_role(
    user_id: str,
    body: RoleChangeRequest,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    record = marketplace.accounts.set_role(token, user_id, body.role)
    return {"message": "User role updated successfully", "user": record.to_dict()}


@router.patch("/users/{user_id}/fraud")
def mark_user_fraud(
    user_id: str,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    record = marketplace.accounts.mark_fraud(token, user_id)
    return {"message": "User marked as fraud", "user": record.to_dict()}


@router.delete("/users/{user_id}")
def delete_user(
    user_id: str,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    """
    Remove a user.

    When the user is an agent, their listings are removed first, so a
    failed listing purge leaves the account in place. Bids on those
    listings stay and show up as partial records.
    """
    target = marketplace.accounts.get_user(token, user_id)

    removed_properties = 0
    if target.role == Role.AGENT:
        removed_properties = marketplace.properties.delete_all_by_agent(token, target.email)
        logger.info("Removed %d listings of agent %s before deletion", removed_properties, user_id)

    record = marketplace.accounts.delete_user(token, user_id)

    return {
        "message": "User deleted successfully",
        "user_id": record.user_id,
        "removed_properties": removed_properties,
    }
