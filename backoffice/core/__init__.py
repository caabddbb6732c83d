"""
Core module exports.
"""
from .enums import (
    ListingStatus,
    LISTING_TRANSITIONS,
    AdminStatus,
    AppSection,
    ActivitySection,
    ActivityAction,
)

from .exceptions import (
    BaseServiceError,
    ValidationError,
    DatabaseError,
    ListingServiceError,
    ListingNotFoundError,
    InvalidTransitionError,
    ListingConflictError,
    CatalogServiceError,
    ReferenceNotFoundError,
    ReferenceInUseError,
    AdminServiceError,
    AdminNotFoundError,
    AdminProvisioningError,
    AuthError,
    NotAuthenticatedError,
    NotAuthorizedError,
    SectionAccessDeniedError,
)
