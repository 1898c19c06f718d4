"""
Bidding - Offers and their Acceptance Lifecycle
"""

from dreamkeys.bidding.schema import (
    Bid,
    BidStatus,
    BidView,
    BID_ID_PREFIX,
    generate_bid_id,
)
from dreamkeys.bidding.repository import BidRepository
from dreamkeys.bidding.lifecycle import BidLifecycleManager

__all__ = [
    "Bid",
    "BidStatus",
    "BidView",
    "BID_ID_PREFIX",
    "generate_bid_id",
    "BidRepository",
    "BidLifecycleManager",
]
