"""
Marketplace wiring - one object holding every collection and manager.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from dreamkeys.access.guards import AccessPolicy
from dreamkeys.bidding.lifecycle import BidLifecycleManager
from dreamkeys.bidding.repository import BidRepository
from dreamkeys.identity.accounts import AccountManager
from dreamkeys.identity.directory import RoleDirectory, UserRepository
from dreamkeys.identity.tokens import DEFAULT_TOKEN_TTL_SECONDS, TokenService
from dreamkeys.listings.lifecycle import PropertyLifecycleManager
from dreamkeys.listings.repository import PropertyRepository, ReportRepository
from dreamkeys.storage import DEFAULT_RETRY_BACKOFF_SECONDS
from dreamkeys.wishlist import WishlistRepository, WishlistService

if TYPE_CHECKING:
    from utils.config import Config


@dataclass
class Marketplace:
    """All components of the authorization and lifecycle engine."""

    tokens: TokenService
    directory: RoleDirectory
    policy: AccessPolicy
    accounts: AccountManager
    properties: PropertyLifecycleManager
    bids: BidLifecycleManager
    wishlist: WishlistService


def build_marketplace(config: Optional["Config"] = None) -> Marketplace:
    """
    Wire the marketplace from configuration.

    Without a config everything lives in memory with an ephemeral token
    secret, which is what tests want.
    """
    if config is None:
        secret = None
        ttl = DEFAULT_TOKEN_TTL_SECONDS
        backoff = DEFAULT_RETRY_BACKOFF_SECONDS
        advertise_requires_verified = False

        def persist_path(collection: str) -> Optional[str]:
            return None

    else:
        secret = config.token_secret
        ttl = config.token_ttl_seconds
        backoff = config.storage_retry_backoff
        advertise_requires_verified = config.advertise_requires_verified
        persist_path = config.persist_path

    users = UserRepository(persist_path("users"), retry_backoff=backoff)
    properties = PropertyRepository(persist_path("properties"), retry_backoff=backoff)
    reports = ReportRepository(persist_path("reports"), retry_backoff=backoff)
    bids = BidRepository(persist_path("bids"), retry_backoff=backoff)
    wishlist = WishlistRepository(persist_path("wishlist"), retry_backoff=backoff)

    tokens = TokenService(secret=secret, ttl_seconds=ttl)
    directory = RoleDirectory(users)
    policy = AccessPolicy(tokens, directory)

    listings = PropertyLifecycleManager(
        properties,
        reports,
        policy,
        advertise_requires_verified=advertise_requires_verified,
    )

    return Marketplace(
        tokens=tokens,
        directory=directory,
        policy=policy,
        accounts=AccountManager(directory, policy),
        properties=listings,
        bids=BidLifecycleManager(bids, listings, policy),
        wishlist=WishlistService(wishlist, listings, policy),
    )
