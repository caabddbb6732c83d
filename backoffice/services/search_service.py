# backoffice/services/search_service.py
"""
Read-only lookups behind the Data Block and Trend Analysis sections.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.models.listing import Listing
from backoffice.services.catalog_service import CatalogService
from backoffice.services.listing_service import ListingService

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 100


class SearchService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.listings = ListingService(db)
        self.catalog = CatalogService(db)

    async def search_listings(self, term: str, limit: int = SEARCH_LIMIT) -> List[Listing]:
        results = await self.listings.search(term, limit=limit)
        logger.debug(f"Search '{term}' matched {len(results)} listing(s)")
        return results

    async def trend_lookup(self, term: str) -> Optional[Listing]:
        return await self.listings.find_by_product_name(term)

    async def catalog_stats(self) -> Dict[str, List[Dict[str, Any]]]:
        categories = await self.catalog.category_stats()
        brands = await self.catalog.brand_stats()
        return {
            "categories": [{"id": c.id, "name": c.name, "listing_count": n} for c, n in categories],
            "brands": [{"id": b.id, "name": b.name, "listing_count": n} for b, n in brands],
        }
