"""
Bid Routes - Offers on Listings

Routes:
- POST  /bids                 - Place an offer; the buyer is the token subject
- GET   /bids/{email}         - Offers placed by a buyer (self/admin)
- GET   /agentBids/{email}    - Offers received by an agent (self/admin)
- GET   /get-bid/{id}         - Single offer (buyer, listing agent, admin)
- PATCH /bids/{id}/accept     - Accept a pending offer (listing agent/admin)
- PATCH /bids/{id}/reject     - Reject a pending offer (listing agent/admin)
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from dreamkeys.container import Marketplace
from web.auth import get_marketplace, get_token


router = APIRouter(tags=["bids"])


class BidRequest(BaseModel):
    """
    Offer body.

    A buyer_email sent by the client is not a field here and is dropped;
    the buyer always comes from the identity token.
    """

    property_id: str
    offer_amount: int
    buying_date: Optional[str] = None
    buyer_name: Optional[str] = None


@router.post("/bids")
def place_bid(
    body: BidRequest,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    bid = marketplace.bids.create(
        token,
        body.property_id,
        body.offer_amount,
        buying_date=body.buying_date,
        buyer_name=body.buyer_name,
    )
    return {
        "message": "Bid placed successfully",
        "inserted_id": bid.bid_id,
        "bid": bid.to_dict(),
    }


@router.get("/bids/{email}")
def list_buyer_bids(
    email: str,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    views = marketplace.bids.list_for_buyer(token, email)
    return {
        "message": f"{len(views)} bids",
        "bids": [v.to_buyer_dict() for v in views],
    }


@router.get("/agentBids/{email}")
def list_agent_bids(
    email: str,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    views = marketplace.bids.list_for_agent(token, email)
    return {
        "message": f"{len(views)} bids",
        "bids": [v.to_agent_dict() for v in views],
    }


@router.get("/get-bid/{bid_id}")
def get_bid(
    bid_id: str,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    view = marketplace.bids.view(token, bid_id)
    return {"message": "Bid found", "bid": view.to_agent_dict()}


@router.patch("/bids/{bid_id}/accept")
def accept_bid(
    bid_id: str,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    bid = marketplace.bids.accept(token, bid_id)
    return {"message": "Bid accepted", "bid": bid.to_dict()}


@router.patch("/bids/{bid_id}/reject")
def reject_bid(
    bid_id: str,
    token: Optional[str] = Depends(get_token),
    marketplace: Marketplace = Depends(get_marketplace),
):
    bid = marketplace.bids.reject(token, bid_id)
    return {"message": "Bid rejected", "bid": bid.to_dict()}
