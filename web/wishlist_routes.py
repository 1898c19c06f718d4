"""
Wishlist Routes - Per-User Saved Listings

Every route requires an identity token; callers only ever see their own
entries, and someone else's entry is reported as not found.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from dreamkeys.container import Marketplace
from web.auth import get_marketplace, get_token


router = APIRouter(prefix="/wishlist", tags=["wishlist"])


class WishlistAddRequest(BaseModel):
    property_id: str


@router.post("")
def add_to_wishlist(
    body: WishlistAddRequest,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    entry = marketplace.wishlist.add(token, body.property_id)
    return {
        "message": "Property added to wishlist",
        "inserted_id": entry.entry_id,
        "entry": entry.to_dict(),
    }


@router.get("")
def list_wishlist(
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    entries = marketplace.wishlist.list_entries(token)
    return {
        "message": f"{len(entries)} saved properties",
        "entries": [e.to_dict() for e in entries],
    }


@router.get("/{entry_id}")
def get_wishlist_entry(
    entry_id: str,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    entry = marketplace.wishlist.get(token, entry_id)
    return {"message": "Wishlist entry found", "entry": entry.to_dict()}


@router.delete("/{entry_id}")
def remove_wishlist_entry(
    entry_id: str,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    entry = marketplace.wishlist.remove(token, entry_id)
    return {"message": "Property removed from wishlist", "entry_id": entry.entry_id}
