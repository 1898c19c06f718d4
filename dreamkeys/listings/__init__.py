"""
Listings - Properties, Reports and their Lifecycle
"""

from dreamkeys.listings.schema import (
    Property,
    PropertyReport,
    VerificationStatus,
    VERIFICATION_OUTCOMES,
    EDITABLE_FIELDS,
    PROPERTY_ID_PREFIX,
    REPORT_ID_PREFIX,
    generate_property_id,
)
from dreamkeys.listings.repository import (
    PropertyRepository,
    ReportRepository,
)
from dreamkeys.listings.lifecycle import (
    PropertyLifecycleManager,
    parse_verification_status,
)

__all__ = [
    # Schema
    "Property",
    "PropertyReport",
    "VerificationStatus",
    "VERIFICATION_OUTCOMES",
    "EDITABLE_FIELDS",
    "PROPERTY_ID_PREFIX",
    "REPORT_ID_PREFIX",
    "generate_property_id",
    # Repository
    "PropertyRepository",
    "ReportRepository",
    # Lifecycle
    "PropertyLifecycleManager",
    "parse_verification_status",
]
