"""
Request and response schemas.
"""
from .listing import ListingCreate, ListingDetails, ListingAssign, PublishRequest, ListingRead, StageView
from .catalog import CatalogEntryCreate, CatalogEntryRead, CatalogEntryStats, CatalogDeleteResult
from .admin import AdminRead, AdminCreate, AdminCreated, PermissionMap, PermissionUpdate, WorkloadEntry
from .auth import LoginRequest, LoginResponse, SessionInfo
