"""
Bid Lifecycle Manager - Pending / Accepted / Rejected State Machine

- create:          any authenticated caller; buyer is the token subject
- accept / reject: admin, or the listing agent the bid was placed with;
                   only from pending, decided bids are final
- view:            the buyer, the listing agent, or an admin
- list_for_buyer / list_for_agent: the identity itself, or an admin

Listings are joined lazily by property_id. A listing deleted after the
bid was placed produces a partial view, not an error.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from dreamkeys.access.guards import (
    AccessPolicy,
    all_of,
    any_of,
    authenticated,
    owns,
    role_at_least,
)
from dreamkeys.bidding.repository import BidRepository
from dreamkeys.bidding.schema import BID_ID_PREFIX, Bid, BidStatus, BidView, generate_bid_id
from dreamkeys.errors import ConflictError, InvalidArgumentError, NotFoundError
from dreamkeys.identity.directory import Role
from dreamkeys.listings.lifecycle import PropertyLifecycleManager
from dreamkeys.storage import is_valid_id, utcnow


logger = logging.getLogger(__name__)


class BidLifecycleManager:
    """Creates offers and applies accept/reject decisions."""

    def __init__(
        self,
        bids: BidRepository,
        listings: PropertyLifecycleManager,
        policy: AccessPolicy,
    ):
        self._bids = bids
        self._listings = listings
        self._policy = policy

    def get(self, bid_id: str) -> Bid:
        """
        Get a bid by ID.

        Raises:
            InvalidArgumentError: Malformed ID
            NotFoundError: No such bid
        """
        if not is_valid_id(bid_id, BID_ID_PREFIX):
            raise InvalidArgumentError("Invalid bid ID")
        bid = self._bids.get(bid_id)
        if not bid:
            raise NotFoundError("Bid not found")
        return bid

    # =========================================================================
    # Transitions
    # =========================================================================

    def create(
        self,
        token: Optional[str],
        property_id: str,
        offer_amount: int,
        buying_date: Optional[str] = None,
        buyer_name: Optional[str] = None,
    ) -> Bid:
        """
        Place an offer on an existing listing.

        The buyer is always the token subject. Agent email and title are
        copied from the listing as it is now.
        """
        claims = self._policy.enforce(token, authenticated(), action="create_bid")
        listing = self._listings.get(property_id)

        try:
            bid = Bid(
                bid_id=generate_bid_id(),
                property_id=listing.property_id,
                buyer_email=claims.subject_email,
                agent_email=listing.agent_email,
                property_title=listing.title,
                offer_amount=offer_amount,
                buyer_name=buyer_name,
                buying_date=buying_date,
            )
        except ValueError as e:
            raise InvalidArgumentError(str(e))

        self._bids.put(bid)
        logger.info(
            "Bid %s on %s placed by %s",
            bid.bid_id,
            bid.property_id,
            bid.buyer_email,
        )
        return bid

    def _decide(self, token: Optional[str], bid_id: str, outcome: BidStatus) -> Bid:
        self._policy.enforce(token, authenticated(), action=f"{outcome.value}_bid")
        bid = self.get(bid_id)

        directory = self._policy.directory
        guard = all_of(
            authenticated(),
            any_of(
                role_at_least(directory, Role.ADMIN),
                all_of(role_at_least(directory, Role.AGENT), owns("agent_email")),
            ),
        )
        claims = self._policy.enforce(token, guard, resource=bid, action=f"{outcome.value}_bid")

        with self._bids.lock:
            current = self.get(bid_id)
            if not current.is_pending:
                raise ConflictError(f"Bid is already {current.status.value}")
            decided = replace(current, status=outcome, decided_at=utcnow())
            self._bids.put(decided)

        logger.info("Bid %s %s by %s", bid_id, outcome.value, claims.subject_email)
        return decided

    def accept(self, token: Optional[str], bid_id: str) -> Bid:
        """Accept a pending offer (admin or listing agent)."""
        return self._decide(token, bid_id, BidStatus.ACCEPTED)

    def reject(self, token: Optional[str], bid_id: str) -> Bid:
        """Reject a pending offer (admin or listing agent)."""
        return self._decide(token, bid_id, BidStatus.REJECTED)

    # =========================================================================
    # Joined Listings
    # =========================================================================

    def _join(self, bids: list[Bid]) -> list[BidView]:
        return [BidView(bid=bid, listing=self._listings.find(bid.property_id)) for bid in bids]

    def view(self, token: Optional[str], bid_id: str) -> BidView:
        """A single bid, visible to its buyer, its listing agent and admins."""
        self._policy.enforce(token, authenticated(), action="view_bid")
        bid = self.get(bid_id)

        guard = all_of(
            authenticated(),
            any_of(
                role_at_least(self._policy.directory, Role.ADMIN),
                owns("buyer_email"),
                owns("agent_email"),
            ),
        )
        self._policy.enforce(token, guard, resource=bid, action="view_bid")
        return self._join([bid])[0]

    def list_for_buyer(self, token: Optional[str], buyer_email: str) -> list[BidView]:
        """Bids placed by a buyer, each joined with its current listing."""
        self._policy.enforce(
            token, self._policy.self_or_admin(buyer_email), action="list_buyer_bids"
        )
        return self._join(self._bids.list_by_buyer(buyer_email))

    def list_for_agent(self, token: Optional[str], agent_email: str) -> list[BidView]:
        """Bids received by an agent, each joined with its current listing."""
        self._policy.enforce(
            token, self._policy.self_or_admin(agent_email), action="list_agent_bids"
        )
        return self._join(self._bids.list_by_agent(agent_email))
