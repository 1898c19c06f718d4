"""
DreamKeys Marketplace - Authorization and Resource-Lifecycle Engine

Agents list properties, buyers bid on them and save favourites, and
administrators moderate listings and users. This package holds the core:

1. Identity tokens (signed, one-hour assertions of an email)
2. Role Directory (current role and fraud standing per identity)
3. Access guards (authenticated, role, ownership, standing)
4. Property lifecycle (pending / verified / rejected, advertised flag)
5. Bid lifecycle (pending / accepted / rejected)
6. Wishlist (per-user listing snapshots)

The HTTP layer lives in web/ and only translates requests into calls here.
"""

from dreamkeys.errors import (
    MarketplaceError,
    UnauthorizedError,
    ForbiddenError,
    NotFoundError,
    InvalidArgumentError,
    ConflictError,
    InternalError,
)
from dreamkeys.identity import (
    Claims,
    TokenService,
    TokenVerificationFailure,
    Role,
    RoleDirectory,
    UserRecord,
)
from dreamkeys.access import (
    AccessPolicy,
    Allow,
    Deny,
    RequestContext,
)
from dreamkeys.listings import (
    Property,
    PropertyReport,
    VerificationStatus,
    PropertyLifecycleManager,
)
from dreamkeys.bidding import (
    Bid,
    BidStatus,
    BidView,
    BidLifecycleManager,
)
from dreamkeys.wishlist import WishlistEntry, WishlistService
from dreamkeys.container import Marketplace, build_marketplace

__all__ = [
    # Errors
    "MarketplaceError",
    "UnauthorizedError",
    "ForbiddenError",
    "NotFoundError",
    "InvalidArgumentError",
    "ConflictError",
    "InternalError",
    # Identity
    "Claims",
    "TokenService",
    "TokenVerificationFailure",
    "Role",
    "RoleDirectory",
    "UserRecord",
    # Access
    "AccessPolicy",
    "Allow",
    "Deny",
    "RequestContext",
    # Listings
    "Property",
    "PropertyReport",
    "VerificationStatus",
    "PropertyLifecycleManager",
    # Bidding
    "Bid",
    "BidStatus",
    "BidView",
    "BidLifecycleManager",
    # Wishlist
    "WishlistEntry",
    "WishlistService",
    # Wiring
    "Marketplace",
    "build_marketplace",
]
