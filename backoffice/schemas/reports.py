"""
Schemas for the dashboard, data block and trend analysis views.
"""

from typing import Dict, List, Optional

from backoffice.core.enums import ListingStatus
from backoffice.schemas.admin import WorkloadEntry
from backoffice.schemas.base import BaseSchema
from backoffice.schemas.catalog import CatalogEntryStats
from backoffice.schemas.listing import ListingRead


class DashboardStats(BaseSchema):
    listed: int
    categories: int
    status_counts: Dict[ListingStatus, int]
    workloads: List[WorkloadEntry]
    selected_admin: Optional[str] = None


class DataBlockStats(BaseSchema):
    categories: List[CatalogEntryStats]
    brands: List[CatalogEntryStats]


class SearchResults(BaseSchema):
    query: str
    count: int
    listings: List[ListingRead]


class TrendResult(BaseSchema):
    query: str
    found: bool
    listing: Optional[ListingRead] = None
