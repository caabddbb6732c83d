"""
Shared enums and constants used across the application.
"""

from enum import Enum
from typing import Dict, FrozenSet


class ListingStatus(str, Enum):
    """Pipeline stage of a listing, stored in listings.status"""
    CPV = "cpv"              # Created, pending validation
    ASSIGN = "assign"        # Validated, waiting for an operator
    WORKLIST = "worklist"    # Assigned to an operator
    NR = "nr"                # Needs review
    PR = "pr"                # Passed review, ready to publish
    NP = "np"                # Not passed
    PUBLISHED = "published"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @property
    def allowed_targets(self) -> FrozenSet["ListingStatus"]:
        return LISTING_TRANSITIONS[self]

    def can_transition_to(self, target: "ListingStatus") -> bool:
        return target in LISTING_TRANSITIONS[self]


_STATUS_LABELS = {
    ListingStatus.CPV: "CPV",
    ListingStatus.ASSIGN: "Assign",
    ListingStatus.WORKLIST: "Worklist",
    ListingStatus.NR: "NR",
    ListingStatus.PR: "PR",
    ListingStatus.NP: "NP",
    ListingStatus.PUBLISHED: "Published",
}

# The complete edge set of the pipeline. np -> nr is the only backward edge.
LISTING_TRANSITIONS: Dict[ListingStatus, FrozenSet[ListingStatus]] = {
    ListingStatus.CPV: frozenset({ListingStatus.ASSIGN}),
    ListingStatus.ASSIGN: frozenset({ListingStatus.WORKLIST}),
    ListingStatus.WORKLIST: frozenset({ListingStatus.NR}),
    ListingStatus.NR: frozenset({ListingStatus.PR, ListingStatus.NP}),
    ListingStatus.NP: frozenset({ListingStatus.NR}),
    ListingStatus.PR: frozenset({ListingStatus.PUBLISHED}),
    ListingStatus.PUBLISHED: frozenset(),
}

# Status a new listing is created in
INITIAL_LISTING_STATUS = ListingStatus.CPV


class AdminStatus(str, Enum):
    ACTIVE = "active"
    FROZEN = "frozen"

    def toggled(self) -> "AdminStatus":
        return AdminStatus.FROZEN if self is AdminStatus.ACTIVE else AdminStatus.ACTIVE


class AppSection(str, Enum):
    """Named sections an admin can be allowed into or kept out of"""
    DASHBOARD = "Dashboard"
    CREATE_NEW = "Create New"
    WORKLIST = "Worklist"
    ASSIGN = "Assign"
    CPV = "CPV"
    NR = "NR"
    NP = "NP"
    PR = "PR"
    DRAFT = "Draft"
    DELETED_LISTINGS = "Deleted Listings"
    DATA_BLOCK = "Data Block"
    TREND_ANALYSIS = "Trend Analysis"
    ADMIN_PRIVILEGES = "Admin Privileges"


class ActivitySection(str, Enum):
    """Section tag written with admin activity entries"""
    CREATE_LISTING = "create_listing"
    ASSIGN = "assign"
    NR = "nr"
    NP = "np"
    PR = "pr"
    ADMIN_PRIVILEGES = "admin_privileges"


class ActivityAction(str, Enum):
    LISTING_CREATED = "LISTING_CREATED"
    LISTING_ASSIGNED = "LISTING_ASSIGNED"
    LISTING_PASSED = "LISTING_PASSED"
    LISTING_REJECTED = "LISTING_REJECTED"
    LISTINGS_PUBLISHED = "LISTINGS_PUBLISHED"
    ADMIN_CREATED = "ADMIN_CREATED"
    PERMISSIONS_UPDATED = "PERMISSIONS_UPDATED"
