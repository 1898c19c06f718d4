"""
Tests for the Bid Lifecycle Manager

Tests covering:
1. Buyer identity always comes from the token
2. Offers require an existing listing and a positive amount
3. Accept / reject only from pending, by the listing agent or an admin
4. Joined listings survive property deletion as partial records
"""

from __future__ import annotations

import pytest

from dreamkeys import (
    Bid,
    BidStatus,
    ConflictError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
    UnauthorizedError,
)


@pytest.fixture
def bid(marketplace, buyer_token, listing):
    return marketplace.bids.create(
        buyer_token,
        listing.property_id,
        375000,
        buying_date="2026-06-01",
        buyer_name="Bob Buyer",
    )


# =============================================================================
# Placing Offers
# =============================================================================


class TestCreate:
    """Tests for create."""

    def test_bid_is_pending(self, bid):
        assert bid.status == BidStatus.PENDING
        assert bid.decided_at is None

    def test_buyer_email_comes_from_token(self, bid):
        assert bid.buyer_email == "buyer@example.com"

    def test_listing_details_are_snapshotted(self, bid, listing):
        assert bid.agent_email == listing.agent_email
        assert bid.property_title == "Riverside Cottage"

    def test_later_listing_edits_leave_snapshot_alone(
        self, marketplace, agent_token, buyer_token, bid, listing
    ):
        marketplace.properties.update(agent_token, listing.property_id, {"title": "New"})

        assert marketplace.bids.get(bid.bid_id).property_title == "Riverside Cottage"
        views = marketplace.bids.list_for_buyer(buyer_token, "buyer@example.com")
        row = views[0].to_buyer_dict()
        assert row["title"] == "New"
        assert row["property_title"] == "Riverside Cottage"

    def test_anonymous_cannot_bid(self, marketplace, listing):
        with pytest.raises(UnauthorizedError):
            marketplace.bids.create(None, listing.property_id, 100)

    def test_unknown_listing(self, marketplace, buyer_token):
        with pytest.raises(NotFoundError):
            marketplace.bids.create(buyer_token, "PROP-000000000000", 100)

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_amount_is_invalid(self, marketplace, buyer_token, listing, amount):
        with pytest.raises(InvalidArgumentError):
            marketplace.bids.create(buyer_token, listing.property_id, amount)

    def test_bid_round_trips_through_dict(self, bid):
        assert Bid.from_dict(bid.to_dict()) == bid


class TestGet:
    """Tests for get / view."""

    def test_get_malformed_id(self, marketplace):
        with pytest.raises(InvalidArgumentError):
            marketplace.bids.get("BID-xyz")

    def test_get_unknown(self, marketplace):
        with pytest.raises(NotFoundError):
            marketplace.bids.get("BID-000000000000")

    def test_view_by_buyer_agent_and_admin(self, marketplace, bid, buyer_token, agent_token, admin_token):
        for token in (buyer_token, agent_token, admin_token):
            assert marketplace.bids.view(token, bid.bid_id).bid.bid_id == bid.bid_id

    def test_view_by_stranger_forbidden(self, marketplace, bid, other_agent_token):
        with pytest.raises(ForbiddenError):
            marketplace.bids.view(other_agent_token, bid.bid_id)


# =============================================================================
# Decisions
# =============================================================================


class TestDecisions:
    """Tests for accept / reject."""

    def test_listing_agent_accepts(self, marketplace, agent_token, bid):
        accepted = marketplace.bids.accept(agent_token, bid.bid_id)

        assert accepted.status == BidStatus.ACCEPTED
        assert accepted.decided_at is not None

    def test_admin_rejects(self, marketplace, admin_token, bid):
        rejected = marketplace.bids.reject(admin_token, bid.bid_id)

        assert rejected.status == BidStatus.REJECTED

    def test_other_agent_cannot_decide(self, marketplace, other_agent_token, bid):
        with pytest.raises(ForbiddenError):
            marketplace.bids.accept(other_agent_token, bid.bid_id)

    def test_buyer_cannot_accept_own_bid(self, marketplace, buyer_token, bid):
        with pytest.raises(ForbiddenError):
            marketplace.bids.accept(buyer_token, bid.bid_id)

    def test_decided_bid_is_final(self, marketplace, agent_token, bid):
        marketplace.bids.accept(agent_token, bid.bid_id)

        with pytest.raises(ConflictError):
            marketplace.bids.reject(agent_token, bid.bid_id)
        assert marketplace.bids.get(bid.bid_id).status == BidStatus.ACCEPTED

    def test_accepting_one_bid_leaves_others_pending(self, marketplace, agent_token, identity, listing, bid):
        rival = identity("rival@example.com")
        other = marketplace.bids.create(rival, listing.property_id, 380000)

        marketplace.bids.accept(agent_token, bid.bid_id)

        assert marketplace.bids.get(other.bid_id).status == BidStatus.PENDING


# =============================================================================
# Listings Joined With Bids
# =============================================================================


class TestJoinedListings:
    """Tests for list_for_buyer / list_for_agent."""

    def test_buyer_sees_own_bids(self, marketplace, buyer_token, bid):
        views = marketplace.bids.list_for_buyer(buyer_token, "buyer@example.com")

        assert [v.bid.bid_id for v in views] == [bid.bid_id]
        data = views[0].to_buyer_dict()
        assert data["offer_amount"] == 375000
        assert data["offer_status"] == "pending"
        assert data["title"] == "Riverside Cottage"
        assert "buyer_email" not in data

    def test_agent_view_includes_buyer_details(self, marketplace, agent_token, bid):
        views = marketplace.bids.list_for_agent(agent_token, "agent@dreamkeys.com")
        data = views[0].to_agent_dict()

        assert data["buyer_email"] == "buyer@example.com"
        assert data["buyer_name"] == "Bob Buyer"
        assert data["buying_date"] == "2026-06-01"

    def test_cannot_list_someone_elses_bids(self, marketplace, other_agent_token, bid):
        with pytest.raises(ForbiddenError):
            marketplace.bids.list_for_buyer(other_agent_token, "buyer@example.com")

    def test_admin_lists_any_buyer(self, marketplace, admin_token, bid):
        assert len(marketplace.bids.list_for_buyer(admin_token, "buyer@example.com")) == 1

    def test_deleted_listing_yields_partial_record(self, marketplace, agent_token, buyer_token, listing, bid):
        marketplace.properties.delete(agent_token, listing.property_id)

        views = marketplace.bids.list_for_buyer(buyer_token, "buyer@example.com")

        assert len(views) == 1
        assert views[0].is_partial
        data = views[0].to_buyer_dict()
        assert data["property_found"] is False
        assert data["property_title"] == "Riverside Cottage"
        assert data["offer_amount"] == 375000
        assert "title" not in data

    def test_bids_survive_agent_purge(self, marketplace, admin_token, agent_token, bid):
        marketplace.properties.delete_all_by_agent(admin_token, "agent@dreamkeys.com")

        views = marketplace.bids.list_for_agent(agent_token, "agent@dreamkeys.com")
        assert [v.is_partial for v in views] == [True]
