class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    pass

class ValidationError(BaseServiceError):
    """Raised when data validation fails before anything is written."""
    pass

class DatabaseError(BaseServiceError):
    """Exception raised for database-related errors."""
    pass

class ListingServiceError(BaseServiceError):
    """Base exception for listing pipeline errors."""
    pass

class ListingNotFoundError(ListingServiceError):
    """Raised when a listing is not found (or not in the expected view)."""
    pass

class InvalidTransitionError(ListingServiceError):
    """Raised when a status change is not an edge of the pipeline."""

    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move listing from '{current.value}' to '{target.value}'")

class ListingConflictError(ListingServiceError):
    """Raised when a listing changed underneath the caller."""
    pass

class CatalogServiceError(BaseServiceError):
    """Base exception for category and brand errors."""
    pass

class ReferenceNotFoundError(CatalogServiceError):
    """Raised when a category, brand or admin reference does not resolve."""
    pass

class ReferenceInUseError(CatalogServiceError):
    """Raised when deleting a category or brand that listings still point at."""

    def __init__(self, message: str, listing_count: int):
        self.listing_count = listing_count
        super().__init__(message)

class AdminServiceError(BaseServiceError):
    """Base exception for admin management errors."""
    pass

class AdminNotFoundError(AdminServiceError):
    """Raised when an admin is not found."""
    pass

class AdminProvisioningError(AdminServiceError):
    """Raised when a new admin account cannot be created."""
    pass

class AuthError(BaseServiceError):
    """Base exception for authentication and authorization failures."""
    pass

class NotAuthenticatedError(AuthError):
    """No usable session."""
    pass

class NotAuthorizedError(AuthError):
    """Session is valid but the identity is not an (active) admin."""
    pass

class SectionAccessDeniedError(NotAuthorizedError):
    """Admin is denied the requested section."""

    def __init__(self, section):
        self.section = section
        super().__init__(f"Access to section '{section.value}' is denied")
