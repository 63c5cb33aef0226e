from __future__ import annotations
# buyictbot/scrapers/__init__.py

from .errors import ScrapeError, NavigationError, ExtractionError, PersistenceError
from .models import Criterion, LabelValue, OpportunityDetail, OpportunitySummary, RunSnapshot
from .session import PageSessionManager, Session
from .listing_scraper import ListingPaginator, parse_listing_cards
from .detail_scraper import DetailExtractor, parse_detail

__all__ = [
    "ScrapeError",
    "NavigationError",
    "ExtractionError",
    "PersistenceError",
    "Criterion",
    "LabelValue",
    "OpportunityDetail",
    "OpportunitySummary",
    "RunSnapshot",
    "PageSessionManager",
    "Session",
    "ListingPaginator",
    "parse_listing_cards",
    "DetailExtractor",
    "parse_detail",
]
