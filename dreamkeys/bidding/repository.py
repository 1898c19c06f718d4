"""
Bid Repository - Storage for Offers
"""

from __future__ import annotations

from dreamkeys.bidding.schema import Bid
from dreamkeys.storage import RecordCollection


class BidRepository(RecordCollection[Bid]):
    """Bids keyed by bid_id."""

    collection_name = "bids"

    def key_of(self, record: Bid) -> str:
        return record.bid_id

    def to_record(self, record: Bid) -> dict:
        return record.to_dict()

    def from_record(self, data: dict) -> Bid:
        return Bid.from_dict(data)

    def list_by_buyer(self, buyer_email: str) -> list[Bid]:
        email = buyer_email.strip().lower()
        return sorted(
            self.find(lambda b: b.buyer_email == email),
            key=lambda b: b.created_at,
        )

    def list_by_agent(self, agent_email: str) -> list[Bid]:
        email = agent_email.strip().lower()
        return sorted(
            self.find(lambda b: b.agent_email == email),
            key=lambda b: b.created_at,
        )

